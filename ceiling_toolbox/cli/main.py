from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Type

from loguru import logger
from pydantic import BaseModel

from ceiling_toolbox.core.loader import tools_by_id
from ceiling_toolbox.core.logging import configure_logging
from ceiling_toolbox.core.schema_utils import validate_inputs
from ceiling_toolbox.core.settings import note_recent, tool_defaults

EXIT_OK = 0
EXIT_FAILED = 2


def _parse_value(text: str) -> Any:
    """`--set` values are JSON when they parse as JSON (numbers, bools, lists), else plain strings."""
    try:
        return json.loads(text)
    except ValueError:
        return text


def _parse_overrides(pairs: Sequence[str]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Expected key=value, got {pair!r}")
        out[key.strip()] = _parse_value(value.strip())
    return out


def collect_inputs(tool: Any, inputs_file: Optional[Path], overrides: Sequence[str]) -> Dict[str, Any]:
    """Tool defaults <- settings tool_defaults <- inputs file <- --set overrides."""
    raw: Dict[str, Any] = dict(tool.default_inputs())
    raw.update(tool_defaults(tool.meta.id))
    if inputs_file is not None:
        data = json.loads(inputs_file.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"{inputs_file} must contain a JSON object")
        raw.update(data)
    raw.update(_parse_overrides(overrides))
    return raw


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def cmd_list(_args: argparse.Namespace) -> int:
    for t in tools_by_id().values():
        print(f"{t.meta.id:<24} {t.meta.category:<20} {t.meta.name} v{t.meta.version}")
    return EXIT_OK


def cmd_defaults(args: argparse.Namespace) -> int:
    tool = tools_by_id().get(args.tool_id)
    if tool is None:
        logger.error(f"Unknown tool: {args.tool_id}")
        return EXIT_FAILED
    _print_json(tool.default_inputs())
    return EXIT_OK


def cmd_run(args: argparse.Namespace) -> int:
    tool = tools_by_id().get(args.tool_id)
    if tool is None:
        logger.error(f"Unknown tool: {args.tool_id}")
        return EXIT_FAILED

    try:
        raw = collect_inputs(tool, args.inputs, args.set or [])
    except (OSError, ValueError) as e:
        logger.error(f"Could not read inputs: {e}")
        return EXIT_FAILED

    model: Optional[Type[BaseModel]] = getattr(tool, "InputModel", None)
    validated, err = validate_inputs(model, raw)
    if err:
        logger.error(f"Input validation error:\n{err}")
        return EXIT_FAILED

    note_recent(tool.meta.id)
    if args.no_export and hasattr(tool, "calculate"):
        out = tool.calculate(validated)
    else:
        out = tool.run(validated)

    _print_json(out)
    if not out.get("ok", False):
        logger.error(f"Tool {tool.meta.id} failed: {out.get('error', 'unknown error')}")
        return EXIT_FAILED
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="ceiling-toolbox", description="Ceiling Toolbox command line host")
    ap.add_argument("--log-level", default="INFO", help="Console log level (default INFO).")
    sub = ap.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="List available tools.")
    p_list.set_defaults(func=cmd_list)

    p_def = sub.add_parser("defaults", help="Print a tool's default inputs as JSON.")
    p_def.add_argument("tool_id")
    p_def.set_defaults(func=cmd_defaults)

    p_run = sub.add_parser("run", help="Validate inputs and run a tool.")
    p_run.add_argument("tool_id")
    p_run.add_argument("--inputs", type=Path, default=None, help="JSON file with input values.")
    p_run.add_argument("--set", action="append", metavar="KEY=VALUE", help="Override one input (repeatable).")
    p_run.add_argument("--no-export", action="store_true", help="Compute only; do not write a run package.")
    p_run.set_defaults(func=cmd_run)
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    return int(args.func(args))


if __name__ == "__main__":
    sys.exit(main())
