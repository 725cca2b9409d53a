from __future__ import annotations

import hashlib
import os
import time
from datetime import datetime
from pathlib import Path
from typing import Optional

from ceiling_toolbox.core.paths import tool_runs_dir

TOOL_ID = "rst_clip_spacing"


def create_run_dir(tool_id: str = TOOL_ID, input_hash: Optional[str] = None) -> Path:
    """Create a fresh run directory.

    Location:
      %LOCALAPPDATA%\\CeilingToolbox\\<tool_id>\\runs\\YYYYMMDD_HHMMSS_<short_hash>\\

    The suffix combines the input hash with a per-process random part so two
    runs in the same second never collide.
    """
    root = tool_runs_dir(tool_id)
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")

    seed = f"{ts}:{os.getpid()}:{time.time_ns()}"
    rand = hashlib.sha256(seed.encode("utf-8")).hexdigest()[:8]
    short = f"{input_hash[:6]}{rand[:2]}" if input_hash else rand

    run_dir = root / f"{ts}_{short}"
    run_dir.mkdir(parents=True, exist_ok=False)
    return run_dir
