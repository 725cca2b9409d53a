from __future__ import annotations

from typing import Tuple

DEFAULT_UNITS_SYSTEM = "US"

# Rated working load of one isolation clip (lb). Part of the tool contract, not configuration.
CLIP_CAPACITY_LB = 36.0

# Dedicated (non-distributed) cloud mounting: clips per cloud unit
CLIPS_PER_CLOUD = 4

IN2_PER_FT2 = 144.0

# Cloud weight classes: (label, unit weight lb), in display order
CLOUD_CLASSES: Tuple[Tuple[str, float], ...] = (
    ("4x1", 15.0),
    ("4x2", 30.0),
    ("4x3", 45.0),
    ("4x4", 60.0),
)

# Guards the grid clip estimate against a tributary area that underflows to zero (ft^2)
MIN_TRIB_AREA_FT2 = 1e-6

# Spacing choices offered by the calculator (in)
CHANNEL_SPACING_CHOICES_IN = (12.0, 16.0, 24.0)
CLIP_SPACING_CHOICES_IN = (24.0, 32.0, 40.0, 48.0)
