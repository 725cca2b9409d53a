from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional

from ceiling_toolbox.blocks.capacity import safety_factor

from .combos import Combo
from .constants import CLIP_CAPACITY_LB, CLIPS_PER_CLOUD, CLOUD_CLASSES, MIN_TRIB_AREA_FT2
from .models import CloudInventory, MountMode


@dataclass(frozen=True)
class FasteningSummary:
    grid_clips: int
    dedicated_clips: int
    total_clips: int


@dataclass(frozen=True)
class DedicatedClassCheck:
    label: str
    per_clip_lb: float
    passes: bool
    safety_factor: float


def grid_clip_count(recommendation: Optional[Combo], area_ft2: float) -> int:
    if recommendation is None or area_ft2 <= 0.0:
        return 0
    return int(math.ceil(area_ft2 / max(recommendation.trib_area_ft2, MIN_TRIB_AREA_FT2)))


def dedicated_clip_count(mode: MountMode, clouds: CloudInventory) -> int:
    if mode != MountMode.DEDICATED:
        return 0
    return CLIPS_PER_CLOUD * clouds.total_units()


def account_fasteners(
    recommendation: Optional[Combo],
    area_ft2: float,
    mode: MountMode,
    clouds: CloudInventory,
) -> FasteningSummary:
    grid = grid_clip_count(recommendation, area_ft2)
    dedicated = dedicated_clip_count(mode, clouds)
    return FasteningSummary(grid_clips=grid, dedicated_clips=dedicated, total_clips=grid + dedicated)


def check_dedicated_classes(capacity_lb: float = CLIP_CAPACITY_LB) -> List[DedicatedClassCheck]:
    """
    Per weight class, not per cloud: each class is assumed to hang from
    CLIPS_PER_CLOUD clips sharing its weight equally.
    """
    rows: List[DedicatedClassCheck] = []
    for label, weight_lb in CLOUD_CLASSES:
        load = weight_lb / CLIPS_PER_CLOUD
        rows.append(
            DedicatedClassCheck(
                label=f"{label} ({weight_lb:g} lb)",
                per_clip_lb=load,
                passes=load <= capacity_lb,
                safety_factor=safety_factor(capacity_lb, load),
            )
        )
    return rows
