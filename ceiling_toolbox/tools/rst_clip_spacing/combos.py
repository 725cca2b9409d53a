from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List

from ceiling_toolbox.blocks.capacity import demand_passes, safety_factor

from .constants import CLIP_CAPACITY_LB, IN2_PER_FT2
from .models import SpacingConstraints


@dataclass(frozen=True)
class Combo:
    channel_in: float
    clip_in: float
    trib_area_ft2: float
    load_per_clip_lb: float
    passes: bool
    safety_factor: float

    @property
    def spacing_product_in2(self) -> float:
        return self.channel_in * self.clip_in

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _unique_ascending(values: Iterable[float]) -> List[float]:
    return sorted({float(v) for v in values})


def channel_candidates(constraints: SpacingConstraints) -> List[float]:
    return _unique_ascending(constraints.channel_spacings_in)


def clip_candidates(constraints: SpacingConstraints) -> List[float]:
    if constraints.constrain_to_structure:
        return [float(constraints.structure_spacing_in)]
    return _unique_ascending(constraints.clip_spacings_in)


def evaluate_combo(channel_in: float, clip_in: float, grid_psf: float, capacity_lb: float = CLIP_CAPACITY_LB) -> Combo:
    """
    One channel/clip pair:
      A_trib = s_ch * s_cl / 144   (ft^2)
      P_clip = A_trib * q_grid     (lb)
    """
    trib = (channel_in * clip_in) / IN2_PER_FT2
    load = trib * grid_psf
    return Combo(
        channel_in=float(channel_in),
        clip_in=float(clip_in),
        trib_area_ft2=float(trib),
        load_per_clip_lb=float(load),
        passes=demand_passes(load, capacity_lb),
        safety_factor=safety_factor(capacity_lb, load),
    )


def enumerate_combinations(
    grid_psf: float,
    constraints: SpacingConstraints,
    capacity_lb: float = CLIP_CAPACITY_LB,
) -> List[Combo]:
    """
    Full channel x clip cross product, widest first.

    Ordering is by spacing product, descending. Python's sort is stable, so pairs
    with equal products keep construction order (ascending channel, then ascending clip).
    Failing and non-finite combos are kept in the list.
    """
    out = [
        evaluate_combo(ch, cl, grid_psf, capacity_lb)
        for ch in channel_candidates(constraints)
        for cl in clip_candidates(constraints)
    ]
    out.sort(key=lambda c: c.spacing_product_in2, reverse=True)
    return out
