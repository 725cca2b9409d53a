from __future__ import annotations
import os
from pathlib import Path

APP_NAME = "CeilingToolbox"

def user_data_dir() -> Path:
    """
    Writable location for logs/run packages/settings. Never the installed package folder.
    Windows default: %LOCALAPPDATA%\\CeilingToolbox\\
    """
    base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA") or str(Path.home())
    p = Path(base) / APP_NAME
    p.mkdir(parents=True, exist_ok=True)
    return p

def logs_dir() -> Path:
    p = user_data_dir() / "logs"
    p.mkdir(parents=True, exist_ok=True)
    return p

def tool_runs_dir(tool_id: str) -> Path:
    p = user_data_dir() / tool_id / "runs"
    p.mkdir(parents=True, exist_ok=True)
    return p

def settings_path() -> Path:
    return user_data_dir() / "settings.json"
