from __future__ import annotations

import math
from typing import Optional

from .constants import CLIP_CAPACITY_LB, IN2_PER_FT2
from .models import AssemblyConfig, CloudInventory, MountMode


def base_assembly_psf(assembly: AssemblyConfig) -> float:
    """
    Dead load of the ceiling build-up:
      q_base = q_osb (if included) + n_dw * q_dw + q_insul
    """
    osb = assembly.board_psf if assembly.include_board_layer else 0.0
    gyp = assembly.finish_layer_count * assembly.finish_layer_psf
    return float(osb + gyp + assembly.insulation_psf)


def cloud_avg_psf(mode: MountMode, area_ft2: float, cloud_weight_lb: float) -> float:
    """Cloud weight smeared over the ceiling area. Zero unless distributed over a positive area."""
    if mode == MountMode.DISTRIBUTED and area_ft2 > 0.0:
        return float(cloud_weight_lb) / float(area_ft2)
    return 0.0


def total_cloud_weight_lb(clouds: CloudInventory) -> float:
    return clouds.total_weight_lb()


def compose_grid_load(
    assembly: AssemblyConfig,
    clouds: CloudInventory,
    mode: MountMode,
    area_ft2: float,
    misc_psf: Optional[float] = None,
) -> float:
    """
    Uniform load carried by the clip grid (psf):
      q_grid = q_base + q_cloud + q_misc

    `misc_psf` defaults to the assembly's own misc allowance.
    """
    misc = assembly.misc_psf if misc_psf is None else float(misc_psf)
    q_cloud = cloud_avg_psf(mode, area_ft2, total_cloud_weight_lb(clouds))
    return base_assembly_psf(assembly) + q_cloud + misc


def max_area_per_clip_ft2(grid_psf: float, capacity_lb: float = CLIP_CAPACITY_LB) -> float:
    """Largest tributary area one clip can carry; +inf when the grid is unloaded."""
    return capacity_lb / grid_psf if grid_psf > 0.0 else math.inf


def max_spacing_product_in2(grid_psf: float, capacity_lb: float = CLIP_CAPACITY_LB) -> float:
    return max_area_per_clip_ft2(grid_psf, capacity_lb) * IN2_PER_FT2
