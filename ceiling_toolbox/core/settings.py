from __future__ import annotations

import json
from typing import Any, Dict, List

from loguru import logger

from ceiling_toolbox.core.paths import settings_path

MAX_RECENT_TOOLS = 10


def load_settings() -> Dict[str, Any]:
    p = settings_path()
    if not p.exists():
        return {}
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning(f"Ignoring unreadable settings file {p}: {e}")
        return {}
    return data if isinstance(data, dict) else {}


def save_settings(data: Dict[str, Any]) -> None:
    p = settings_path()
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(data, indent=2), encoding="utf-8")


def tool_defaults(tool_id: str) -> Dict[str, Any]:
    """Per-tool input overrides stored under `tool_defaults.<tool_id>`."""
    all_defaults = load_settings().get("tool_defaults", {})
    if not isinstance(all_defaults, dict):
        return {}
    overrides = all_defaults.get(tool_id, {})
    return dict(overrides) if isinstance(overrides, dict) else {}


def note_recent(tool_id: str) -> List[str]:
    settings = load_settings()
    recents = settings.get("recent_tools", [])
    if not isinstance(recents, list):
        recents = []
    # Move to front, unique, cap length
    recents = [x for x in recents if str(x) != tool_id]
    recents.insert(0, tool_id)
    recents = recents[:MAX_RECENT_TOOLS]
    settings["recent_tools"] = recents
    save_settings(settings)
    return recents
