"""CLI shell: rank the dimension columns of a saved query result."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

from common.config import config_to_dict, load_ranking_config, update_setting
from common.errors import BackendError, ErrorCode
from common.models import Column, RankingConfiguration
from core.ranking import compute_ranked_headers


def load_query_result(path: Path, table: Optional[str] = None) -> Tuple[List[Column], List[List[Any]]]:
    """Read an Application Insights query response and return one table's columns and rows."""

    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except FileNotFoundError as exc:
        raise BackendError(ErrorCode.INPUT_ERROR, f"Result file '{path}' not found") from exc
    except json.JSONDecodeError as exc:
        raise BackendError(ErrorCode.INPUT_ERROR, f"Result file '{path}' is not valid JSON: {exc}") from exc

    tables = payload.get("tables") if isinstance(payload, dict) else None
    if not isinstance(tables, list) or not tables:
        raise BackendError(ErrorCode.INPUT_ERROR, f"Result file '{path}' has no tables")

    selected = tables[0]
    if table:
        matches = [t for t in tables if isinstance(t, dict) and str(t.get("name", "")).lower() == table.lower()]
        if not matches:
            raise BackendError(ErrorCode.INPUT_ERROR, f"Table '{table}' not found in {path}")
        selected = matches[0]
    if not isinstance(selected, dict):
        raise BackendError(ErrorCode.INPUT_ERROR, f"Table entries in {path} must be objects")

    columns = [
        Column(name=str(col.get("name", "")), type=str(col.get("type", "")))
        for col in selected.get("columns") or []
        if isinstance(col, dict)
    ]
    rows = [row for row in selected.get("rows") or [] if isinstance(row, list)]
    return columns, rows


def resolve_config(args: argparse.Namespace) -> RankingConfiguration:
    config_path = Path(args.config) if args.config else None
    config = load_ranking_config(config_path=config_path)
    for assignment in args.settings or []:
        name, sep, value = assignment.partition("=")
        if not sep:
            raise BackendError(ErrorCode.CONFIG_ERROR, f"--set expects NAME=VALUE, got '{assignment}'")
        config = update_setting(config, name, value)
    return config


def command_rank(args: argparse.Namespace) -> None:
    config = resolve_config(args)
    columns, rows = load_query_result(Path(args.result), args.table)
    headers = compute_ranked_headers(columns, rows, config)
    if args.json:
        print(json.dumps(headers))
        return
    for header in headers:
        print(header)


def command_config(args: argparse.Namespace) -> None:
    config = resolve_config(args)
    print(json.dumps(config_to_dict(config), indent=2))


def _add_config_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", help="Path to settings JSON (default: config/defaults.json)")
    parser.add_argument(
        "--set",
        dest="settings",
        action="append",
        metavar="NAME=VALUE",
        help="Override one ranking setting, e.g. --set pinned=eventId,alObjectId",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Telemetry dimension column ranking")
    parser.add_argument("--verbose", action="store_true", help="Log ranking diagnostics to stderr")
    subparsers = parser.add_subparsers(dest="command")

    rank = subparsers.add_parser("rank", help="Print ranked headers for a saved query result")
    rank.add_argument("result", help="Query response JSON with a 'tables' array")
    rank.add_argument("--table", help="Table name to rank (default: first table)")
    rank.add_argument("--json", action="store_true", help="Print headers as a JSON array")
    _add_config_arguments(rank)
    rank.set_defaults(func=command_rank)

    config = subparsers.add_parser("config", help="Show resolved ranking settings")
    _add_config_arguments(config)
    config.set_defaults(func=command_config)

    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return
    configure_logging(args.verbose)
    try:
        args.func(args)
    except BackendError as exc:
        raise SystemExit(str(exc)) from exc


if __name__ == "__main__":
    main()
