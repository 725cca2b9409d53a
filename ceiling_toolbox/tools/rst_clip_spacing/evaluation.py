from __future__ import annotations

import math
from typing import Any, Dict, List

from ceiling_toolbox.blocks.capacity import demand_passes

from .calc_trace import CalcTrace, compute_step
from .constants import CLIPS_PER_CLOUD, IN2_PER_FT2, MIN_TRIB_AREA_FT2
from .engine import SpacingResult
from .models import MountMode, RstClipInputs


def _check(label: str, demand: float, capacity: float) -> List[Dict[str, Any]]:
    ok = demand_passes(demand, capacity)
    return [
        {
            "label": label,
            "demand": demand,
            "capacity": capacity,
            "ratio": demand / capacity,
            "pass_fail": "PASS" if ok else "FAIL",
        }
    ]


def trace_loads(trace: CalcTrace, inputs: RstClipInputs, result: SpacingResult) -> None:
    q_osb = inputs.osb_psf if inputs.include_osb else 0.0
    compute_step(
        trace,
        id="L1",
        section="Loads",
        title="Base assembly load",
        output_symbol="q_base",
        equation="q_base = q_osb + n_dw * q_dw + q_ins",
        variables=[
            {"symbol": "q_osb", "description": "OSB layer (0 if omitted)", "value": q_osb, "units": "psf"},
            {"symbol": "n_dw", "description": "Drywall layers", "value": inputs.drywall_layers, "units": "-"},
            {"symbol": "q_dw", "description": "Drywall weight per layer", "value": inputs.drywall_psf, "units": "psf"},
            {"symbol": "q_ins", "description": "Insulation allowance", "value": inputs.insulation_psf, "units": "psf"},
        ],
        compute_fn=lambda: result.base_assembly_psf,
        units="psf",
    )

    if inputs.mount_mode == MountMode.DISTRIBUTED and inputs.area_ft2 > 0.0:
        equation = "q_cloud = W_cloud / A_ceil"
        variables = [
            {"symbol": "W_cloud", "description": "Total cloud weight", "value": result.cloud_weight_lb, "units": "lb"},
            {"symbol": "A_ceil", "description": "Ceiling area", "value": inputs.area_ft2, "units": "ft^2"},
        ]
    else:
        # dedicated clips, or no area to spread over
        equation = "q_cloud = 0"
        variables = []
    compute_step(
        trace,
        id="L2",
        section="Loads",
        title="Cloud average load",
        output_symbol="q_cloud",
        equation=equation,
        variables=variables,
        compute_fn=lambda: result.cloud_avg_psf,
        units="psf",
    )

    compute_step(
        trace,
        id="L3",
        section="Loads",
        title="Total grid load",
        output_symbol="q_grid",
        equation="q_grid = q_base + q_cloud + q_misc",
        variables=[
            {"symbol": "q_base", "description": "Base assembly load", "value": round(result.base_assembly_psf, 4), "units": "psf"},
            {"symbol": "q_cloud", "description": "Cloud average load", "value": round(result.cloud_avg_psf, 4), "units": "psf"},
            {"symbol": "q_misc", "description": "Misc distributed load", "value": result.misc_psf, "units": "psf"},
        ],
        compute_fn=lambda: result.grid_psf,
        units="psf",
    )

    if result.grid_psf > 0.0:
        compute_step(
            trace,
            id="L4",
            section="Loads",
            title="Max tributary area per clip",
            output_symbol="A_max",
            equation="A_max = P_cap / q_grid",
            variables=[
                {"symbol": "P_cap", "description": "Clip capacity", "value": result.capacity_lb, "units": "lb"},
                {"symbol": "q_grid", "description": "Total grid load", "value": round(result.grid_psf, 4), "units": "psf"},
            ],
            compute_fn=lambda: result.max_area_per_clip_ft2,
            units="ft^2",
        )


def trace_recommendation(trace: CalcTrace, inputs: RstClipInputs, result: SpacingResult) -> None:
    rec = result.recommendation
    if rec is None:
        return

    compute_step(
        trace,
        id="S1",
        section="Spacing",
        title="Tributary area per clip",
        output_symbol="A_trib",
        equation=f"A_trib = s_ch * s_cl / {IN2_PER_FT2:g}",
        variables=[
            {"symbol": "s_ch", "description": "Channel spacing", "value": rec.channel_in, "units": "in"},
            {"symbol": "s_cl", "description": "Clip spacing", "value": rec.clip_in, "units": "in"},
        ],
        compute_fn=lambda: rec.trib_area_ft2,
        units="ft^2",
    )
    compute_step(
        trace,
        id="S2",
        section="Spacing",
        title="Load per clip",
        output_symbol="P_clip",
        equation="P_clip = A_trib * q_grid",
        variables=[
            {"symbol": "A_trib", "description": "Tributary area per clip", "value": round(rec.trib_area_ft2, 4), "units": "ft^2"},
            {"symbol": "q_grid", "description": "Total grid load", "value": round(result.grid_psf, 4), "units": "psf"},
        ],
        compute_fn=lambda: rec.load_per_clip_lb,
        units="lb",
        checks_builder=lambda p: _check("Clip load vs capacity", p, result.capacity_lb),
    )

    if inputs.area_ft2 > 0.0:
        compute_step(
            trace,
            id="C1",
            section="Clip count",
            title="Estimated clips on grid",
            output_symbol="N_grid",
            equation="N_grid = ceil(A_ceil / A_trib)",
            variables=[
                {"symbol": "A_ceil", "description": "Ceiling area", "value": inputs.area_ft2, "units": "ft^2"},
                {"symbol": "A_trib", "description": "Tributary area per clip", "value": round(rec.trib_area_ft2, 4), "units": "ft^2"},
            ],
            compute_fn=lambda: math.ceil(inputs.area_ft2 / max(rec.trib_area_ft2, MIN_TRIB_AREA_FT2)),
            units="ea",
            decimals=0,
        )


def trace_dedicated(trace: CalcTrace, result: SpacingResult) -> None:
    for i, row in enumerate(result.dedicated_checks, start=1):
        weight_lb = row.per_clip_lb * CLIPS_PER_CLOUD
        compute_step(
            trace,
            id=f"D{i}",
            section="Dedicated cloud clips",
            title=f"Load per clip, {row.label}",
            output_symbol="P_ded",
            equation=f"P_ded = W_unit / {CLIPS_PER_CLOUD}",
            variables=[{"symbol": "W_unit", "description": "Cloud unit weight", "value": weight_lb, "units": "lb"}],
            compute_fn=lambda w=weight_lb: w / CLIPS_PER_CLOUD,
            units="lb",
            checks_builder=lambda p: _check("Dedicated clip load vs capacity", p, result.capacity_lb),
        )


def trace_evaluation(trace: CalcTrace, inputs: RstClipInputs, result: SpacingResult) -> None:
    """Record the governing calculation steps and result tables for the report."""
    trace_loads(trace, inputs, result)
    trace_recommendation(trace, inputs, result)
    trace_dedicated(trace, result)

    trace.tables["combos"] = [
        {**c.as_dict(), "spacing_product_in2": c.spacing_product_in2, "recommended": c is result.recommendation}
        for c in result.combos
    ]
    trace.tables["dedicated_checks"] = [
        {
            "label": r.label,
            "per_clip_lb": r.per_clip_lb,
            "passes": r.passes,
            "safety_factor": r.safety_factor,
        }
        for r in result.dedicated_checks
    ]
    trace.tables["fastening"] = {
        "grid_clips": result.fastening.grid_clips,
        "dedicated_clips": result.fastening.dedicated_clips,
        "total_clips": result.fastening.total_clips,
    }
