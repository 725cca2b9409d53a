"""RST clip spacing tool plugin for Ceiling Toolbox.

Exports:
  - TOOL: an instance of RstClipSpacingTool
"""
from __future__ import annotations

from .tool import TOOL, RstClipSpacingTool

__all__ = ["TOOL", "RstClipSpacingTool"]
