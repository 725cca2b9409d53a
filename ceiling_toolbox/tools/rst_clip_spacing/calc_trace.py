from __future__ import annotations

import hashlib
import json
import math
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional


@dataclass(frozen=True)
class TraceMeta:
    tool_id: str
    tool_version: str
    report_version: str
    timestamp: str
    units_system: str
    input_hash: str
    basis: Optional[str] = None


@dataclass(frozen=True)
class TraceInput:
    id: str
    label: str
    value: Any
    units: str
    source: str  # user/default


@dataclass(frozen=True)
class Assumption:
    id: str
    text: str


@dataclass(frozen=True)
class CalcVar:
    symbol: str
    description: str
    value: Any
    units: str


@dataclass(frozen=True)
class CheckResult:
    label: str
    demand: float
    capacity: float
    ratio: float
    pass_fail: str


@dataclass
class CalcStep:
    id: str
    section: str
    title: str
    output_symbol: str
    equation: str
    substitution: str
    variables: List[CalcVar]
    value: float
    value_rounded: float
    decimals: int
    units: str
    checks: List[CheckResult] = field(default_factory=list)


@dataclass
class CalcTrace:
    """Reproducible record of one calculation run.

    Reports and exports are rendered from this object only.
    """

    meta: TraceMeta
    inputs: List[TraceInput] = field(default_factory=list)
    assumptions: List[Assumption] = field(default_factory=list)
    steps: List[CalcStep] = field(default_factory=list)
    tables: Dict[str, Any] = field(default_factory=dict)
    summary: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def new(
        cls,
        *,
        tool_id: str,
        tool_version: str,
        inputs: Dict[str, Any],
        defaults: Optional[Dict[str, Any]] = None,
        units_system: str = "US",
        report_version: str = "1.0",
        input_hash: Optional[str] = None,
        basis: Optional[str] = None,
        input_labels: Optional[Dict[str, str]] = None,
    ) -> "CalcTrace":
        """Start a trace. Inputs equal to `defaults` are tagged source='default'."""
        meta = TraceMeta(
            tool_id=str(tool_id),
            tool_version=str(tool_version),
            report_version=str(report_version),
            timestamp=datetime.now().isoformat(timespec="seconds"),
            units_system=str(units_system),
            input_hash=str(input_hash or compute_input_hash(inputs)),
            basis=basis,
        )
        dflt = defaults or {}
        lbl = input_labels or {}
        trace_inputs = [
            TraceInput(
                id=k,
                label=lbl.get(k, k.replace("_", " ")),
                value=inputs[k],
                units=infer_units(k),
                source="default" if k in dflt and dflt[k] == inputs[k] else "user",
            )
            for k in sorted(inputs)
        ]
        return cls(meta=meta, inputs=trace_inputs)

    def step(self, step_id: str) -> CalcStep:
        for s in self.steps:
            if s.id == step_id:
                return s
        raise KeyError(step_id)

    def to_dict(self) -> Dict[str, Any]:
        return json_safe(asdict(self))


def json_safe(obj: Any) -> Any:
    if isinstance(obj, float):
        return obj if math.isfinite(obj) else None
    if isinstance(obj, dict):
        return {k: json_safe(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [json_safe(v) for v in obj]
    return obj


def dump_trace_json(trace: CalcTrace, path: Path) -> None:
    path.write_text(json.dumps(trace.to_dict(), indent=2, sort_keys=True, default=str), encoding="utf-8")


_UNIT_SUFFIXES = (
    ("_ft2", "ft^2"),
    ("_in2", "in^2"),
    ("_in", "in"),
    ("_psf", "psf"),
    ("_lb", "lb"),
    ("_count", "ea"),
    ("_layers", "ea"),
)


def infer_units(key: str) -> str:
    for suffix, units in _UNIT_SUFFIXES:
        if key.endswith(suffix):
            return units
    return "-"


def _normalize(v: Any) -> Any:
    if isinstance(v, float):
        # stable float repr keeps the hash identical across platforms
        return float(f"{v:.12g}")
    if isinstance(v, (list, tuple)):
        return [_normalize(x) for x in v]
    return v


def compute_input_hash(inputs: Dict[str, Any]) -> str:
    """Deterministic 12-char hash of normalized, key-sorted inputs."""
    norm = {k: _normalize(inputs[k]) for k in sorted(inputs)}
    payload = json.dumps(norm, sort_keys=True, separators=(",", ":"), ensure_ascii=True)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:12]


def _fmt(value: Any, units: str) -> str:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return str(value)
    return f"{value:g} {units}" if units and units != "-" else f"{value:g}"


def compute_step(
    trace: CalcTrace,
    *,
    id: str,
    section: str,
    title: str,
    output_symbol: str,
    equation: str,
    variables: List[Dict[str, Any]],
    compute_fn: Callable[[], float],
    units: str,
    decimals: int = 2,
    checks_builder: Optional[Callable[[float], List[Dict[str, Any]]]] = None,
) -> float:
    """Evaluate one step, append it to the trace and return the unrounded value.

    Rounding is for display only; downstream steps use the unrounded value.
    """
    if not id or not section or not title:
        raise ValueError("compute_step requires non-empty id/section/title.")

    var_objs: List[CalcVar] = []
    for v in variables:
        missing = [k for k in ("symbol", "description", "value", "units") if k not in v]
        if missing:
            raise ValueError(f"Variable missing {missing} in step {id}.")
        var_objs.append(CalcVar(symbol=str(v["symbol"]), description=str(v["description"]), value=v["value"], units=str(v["units"])))

    value = float(compute_fn())
    rounded = round(value, decimals) if math.isfinite(value) else value

    # longest symbols first so "q_base" is not clobbered by "q"
    substitution = equation.split("=", 1)[-1]
    for v in sorted(var_objs, key=lambda x: len(x.symbol), reverse=True):
        substitution = substitution.replace(v.symbol, _fmt(v.value, v.units))

    checks = [
        CheckResult(
            label=str(c["label"]),
            demand=float(c["demand"]),
            capacity=float(c["capacity"]),
            ratio=float(c["ratio"]),
            pass_fail=str(c["pass_fail"]),
        )
        for c in (checks_builder(value) if checks_builder else [])
    ]

    trace.steps.append(
        CalcStep(
            id=id,
            section=section,
            title=title,
            output_symbol=output_symbol,
            equation=equation,
            substitution=f"{output_symbol} = {substitution.strip()} = {_fmt(rounded, units)}",
            variables=var_objs,
            value=value,
            value_rounded=rounded,
            decimals=decimals,
            units=units,
            checks=checks,
        )
    )
    return value
