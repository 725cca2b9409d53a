from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .combos import Combo, enumerate_combinations
from .constants import CLIP_CAPACITY_LB
from .models import SpacingConstraints

NO_PASSING_MESSAGE = "No passing spacing combination with current constraints."


@dataclass(frozen=True)
class SolveOutcome:
    combos: Tuple[Combo, ...]
    recommendation: Optional[Combo]
    feasible: bool
    message: str


def select_recommendation(combos: Sequence[Combo]) -> Optional[Combo]:
    """First passing combo in the given order (callers pass widest-first). Does not re-sort."""
    for c in combos:
        if c.passes:
            return c
    return None


def solve_spacing(
    grid_psf: float,
    constraints: SpacingConstraints,
    capacity_lb: float = CLIP_CAPACITY_LB,
) -> SolveOutcome:
    """
    Enumerate channel/clip pairs widest-first and return the first that passes
    (first passing = widest passing).
    """
    combos = tuple(enumerate_combinations(grid_psf, constraints, capacity_lb))
    rec = select_recommendation(combos)
    if rec is None:
        return SolveOutcome(combos=combos, recommendation=None, feasible=False, message=NO_PASSING_MESSAGE)
    return SolveOutcome(
        combos=combos,
        recommendation=rec,
        feasible=True,
        message=f'Channels: {rec.channel_in:g}" OC, Clips: {rec.clip_in:g}" OC',
    )
