from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import CHANNEL_SPACING_CHOICES_IN, CLIP_SPACING_CHOICES_IN, CLOUD_CLASSES


class MountMode(str, Enum):
    DISTRIBUTED = "distributed"  # cloud weight spread over the ceiling as an average psf
    DEDICATED = "dedicated"      # each cloud hangs from its own clips, bypassing the grid


@dataclass(frozen=True)
class AssemblyConfig:
    """Distributed ceiling assembly loads (psf)."""

    include_board_layer: bool = True
    board_psf: float = 2.7
    finish_layer_count: int = 2
    finish_layer_psf: float = 2.5
    insulation_psf: float = 0.2
    misc_psf: float = 0.0


@dataclass(frozen=True)
class CloudInventory:
    """Cloud counts per weight class, in CLOUD_CLASSES order."""

    c4x1: int = 0
    c4x2: int = 0
    c4x3: int = 0
    c4x4: int = 0

    def counts(self) -> Tuple[int, int, int, int]:
        return (self.c4x1, self.c4x2, self.c4x3, self.c4x4)

    def total_units(self) -> int:
        return sum(self.counts())

    def total_weight_lb(self) -> float:
        return float(sum(n * w for n, (_, w) in zip(self.counts(), CLOUD_CLASSES)))


@dataclass(frozen=True)
class SpacingConstraints:
    channel_spacings_in: Tuple[float, ...] = CHANNEL_SPACING_CHOICES_IN
    clip_spacings_in: Tuple[float, ...] = CLIP_SPACING_CHOICES_IN
    constrain_to_structure: bool = False
    structure_spacing_in: float = 48.0


class RstClipInputs(BaseModel):
    """
    Inputs for the RST clip / furring channel spacing calculator.

    Workflow:
      1) Describe the ceiling assembly (board layer, drywall layers, insulation, misc).
      2) Enter cloud counts and choose how clouds are hung (distributed vs dedicated clips).
      3) Pick the channel and clip spacings you are willing to build.
      4) Tool enumerates every channel x clip pair, checks load per clip against the
         36 lb clip rating and recommends the widest passing pair.

    Clip spacing can be locked to the framing spacing when clips must land on
    structure (no blocking).
    """

    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    # --- Assembly
    area_ft2: float = Field(400.0, ge=0.0, description="Ceiling area (ft^2).")
    include_osb: bool = Field(True, description="Include a 23/32 OSB layer.")
    osb_psf: float = Field(2.7, ge=0.0, description="OSB weight (psf).")
    drywall_layers: int = Field(2, ge=0, description="Number of 5/8 drywall layers.")
    drywall_psf: float = Field(2.5, ge=0.0, description="Drywall weight per layer (psf).")
    insulation_psf: float = Field(0.2, ge=0.0, description="Insulation allowance (psf).")
    misc_psf: float = Field(
        0.0, ge=0.0, description="Misc distributed load: lights, speakers, cabling, etc. (psf)."
    )

    # --- Clouds
    mount_mode: MountMode = Field(MountMode.DISTRIBUTED, description="How clouds are hung.")
    cloud_4x1_count: int = Field(0, ge=0, description="Number of 4x1 clouds (15 lb each).")
    cloud_4x2_count: int = Field(0, ge=0, description="Number of 4x2 clouds (30 lb each).")
    cloud_4x3_count: int = Field(0, ge=0, description="Number of 4x3 clouds (45 lb each).")
    cloud_4x4_count: int = Field(0, ge=0, description="Number of 4x4 clouds (60 lb each).")

    # --- Spacing options
    channel_spacings_in: List[float] = Field(
        default_factory=lambda: list(CHANNEL_SPACING_CHOICES_IN),
        description="Allowed furring channel spacings (in OC).",
    )
    clip_spacings_in: List[float] = Field(
        default_factory=lambda: list(CLIP_SPACING_CHOICES_IN),
        description="Allowed clip spacings along the channel (in OC).",
    )
    constrain_to_structure: bool = Field(
        False, description="Clips must land on structure (no blocking); clip spacing = structure spacing."
    )
    structure_spacing_in: float = Field(48.0, gt=0.0, description="Framing spacing (in OC).")

    @field_validator("channel_spacings_in", "clip_spacings_in")
    @classmethod
    def _positive_spacings(cls, v: List[float]) -> List[float]:
        for s in v:
            if s <= 0.0:
                raise ValueError("spacings must be > 0.")
        return v

    def assembly(self) -> AssemblyConfig:
        return AssemblyConfig(
            include_board_layer=self.include_osb,
            board_psf=self.osb_psf,
            finish_layer_count=self.drywall_layers,
            finish_layer_psf=self.drywall_psf,
            insulation_psf=self.insulation_psf,
            misc_psf=self.misc_psf,
        )

    def clouds(self) -> CloudInventory:
        return CloudInventory(
            c4x1=self.cloud_4x1_count,
            c4x2=self.cloud_4x2_count,
            c4x3=self.cloud_4x3_count,
            c4x4=self.cloud_4x4_count,
        )

    def constraints(self) -> SpacingConstraints:
        return SpacingConstraints(
            channel_spacings_in=tuple(self.channel_spacings_in),
            clip_spacings_in=tuple(self.clip_spacings_in),
            constrain_to_structure=self.constrain_to_structure,
            structure_spacing_in=self.structure_spacing_in,
        )
