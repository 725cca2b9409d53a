"""
Calculation pipeline for the RST clip spacing tool.

    compose_grid_load -> enumerate_combinations -> select_recommendation
                                                 -> account_fasteners / check_dedicated_classes

Every stage is a pure function of its inputs; evaluate() re-runs the whole
pipeline for one validated input bundle and never keeps state between calls.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .accounting import DedicatedClassCheck, FasteningSummary, account_fasteners, check_dedicated_classes
from .calc_trace import json_safe
from .combos import Combo, enumerate_combinations
from .constants import CLIP_CAPACITY_LB
from .loads import (
    base_assembly_psf,
    cloud_avg_psf,
    compose_grid_load,
    max_area_per_clip_ft2,
    max_spacing_product_in2,
    total_cloud_weight_lb,
)
from .models import MountMode, RstClipInputs
from .solver import select_recommendation, solve_spacing

__all__ = [
    "Combo",
    "DedicatedClassCheck",
    "FasteningSummary",
    "SpacingResult",
    "account_fasteners",
    "check_dedicated_classes",
    "compose_grid_load",
    "enumerate_combinations",
    "evaluate",
    "select_recommendation",
]


@dataclass(frozen=True)
class SpacingResult:
    base_assembly_psf: float
    misc_psf: float
    cloud_weight_lb: float
    cloud_avg_psf: float
    grid_psf: float
    capacity_lb: float
    max_area_per_clip_ft2: float
    max_spacing_product_in2: float
    combos: Tuple[Combo, ...]
    recommendation: Optional[Combo]
    message: str
    fastening: FasteningSummary
    dedicated_checks: Tuple[DedicatedClassCheck, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe view: non-finite floats become None."""
        return json_safe(asdict(self))


def evaluate(inputs: RstClipInputs, capacity_lb: float = CLIP_CAPACITY_LB) -> SpacingResult:
    assembly = inputs.assembly()
    clouds = inputs.clouds()
    mode = inputs.mount_mode
    area = float(inputs.area_ft2)

    cloud_w = total_cloud_weight_lb(clouds)
    grid_psf = compose_grid_load(assembly, clouds, mode, area, inputs.misc_psf)

    solve = solve_spacing(grid_psf, inputs.constraints(), capacity_lb)
    fastening = account_fasteners(solve.recommendation, area, mode, clouds)

    dedicated: List[DedicatedClassCheck] = []
    if mode == MountMode.DEDICATED:
        dedicated = check_dedicated_classes(capacity_lb)

    return SpacingResult(
        base_assembly_psf=base_assembly_psf(assembly),
        misc_psf=float(inputs.misc_psf),
        cloud_weight_lb=cloud_w,
        cloud_avg_psf=cloud_avg_psf(mode, area, cloud_w),
        grid_psf=grid_psf,
        capacity_lb=float(capacity_lb),
        max_area_per_clip_ft2=max_area_per_clip_ft2(grid_psf, capacity_lb),
        max_spacing_product_in2=max_spacing_product_in2(grid_psf, capacity_lb),
        combos=solve.combos,
        recommendation=solve.recommendation,
        message=solve.message,
        fastening=fastening,
        dedicated_checks=tuple(dedicated),
    )
