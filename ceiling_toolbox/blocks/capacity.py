from __future__ import annotations

import math


def demand_passes(demand: float, capacity: float) -> bool:
    """ASD-style check: a finite demand at or below capacity passes.

    Negative demand passes (no floor is applied to computed loads).
    """
    return math.isfinite(demand) and demand <= capacity


def safety_factor(capacity: float, demand: float) -> float:
    """capacity / demand for a finite positive demand, else +inf."""
    if math.isfinite(demand) and demand > 0.0:
        return capacity / demand
    return math.inf


def round2(x: float) -> float:
    return round(float(x), 2)


def fmt2(x: float, missing: str = "-") -> str:
    """Two-decimal display value; non-finite values render as `missing`."""
    if not math.isfinite(x):
        return missing
    return f"{round2(x):.2f}"
