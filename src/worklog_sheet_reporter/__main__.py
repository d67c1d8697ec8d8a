"""Entry point for ``python -m worklog_sheet_reporter``."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from worklog_sheet_reporter.services.config_manager import ConfigManager

logger = logging.getLogger("worklog_sheet_reporter")


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="worklog-sheet-reporter",
        description=(
            "Summarize last month's worklogs per day, from a CSV export or "
            "from Jira, and append them to a spreadsheet."
        ),
    )
    parser.add_argument(
        "-f", "--file",
        metavar="PATH",
        help="Read worklogs from this CSV export instead of Jira.",
    )
    parser.add_argument(
        "-w", "--write",
        action="store_true",
        help="Append the rows and a totals row to the spreadsheet.",
    )
    parser.add_argument(
        "-p", "--print",
        dest="print_rows",
        action="store_true",
        help="Print the rows to the console.",
    )
    parser.add_argument("--spreadsheet", metavar="PATH", help="Destination .xlsx file.")
    parser.add_argument("--sheet", metavar="NAME", help="Destination sheet name.")
    parser.add_argument(
        "--reference-date",
        type=date.fromisoformat,
        metavar="YYYY-MM-DD",
        help="Report on the month before this date (default: today).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")

    config_group = parser.add_argument_group("configuration")
    config_group.add_argument(
        "--set",
        dest="settings",
        action="append",
        default=[],
        type=_key_value,
        metavar="KEY=VALUE",
        help="Store a setting in the config file and exit (repeatable).",
    )
    config_group.add_argument(
        "--reset-config",
        action="store_true",
        help="Restore the stored settings to their defaults and exit.",
    )
    config_group.add_argument(
        "--show-config",
        action="store_true",
        help="Print the effective settings as JSON and exit.",
    )

    args = parser.parse_args(argv)
    from worklog_sheet_reporter.services.config_manager import DEFAULTS

    for key, _ in args.settings:
        if key not in DEFAULTS:
            parser.error(f"unknown setting {key!r}; choose from {', '.join(DEFAULTS)}")
    return args


def _key_value(text: str) -> tuple[str, str]:
    key, sep, value = text.partition("=")
    if not sep or not key.strip():
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got {text!r}")
    return key.strip(), value.strip()


def _configure(config: ConfigManager, args: argparse.Namespace) -> None:
    """Apply ``--reset-config`` / ``--set`` and print ``--show-config``."""
    from worklog_sheet_reporter.services.config_manager import DEFAULTS

    if args.reset_config:
        config.reset()
    for key, value in args.settings:
        config.set(key, int(value) if isinstance(DEFAULTS[key], int) else value)
        logger.info("Saved %s", key)
    if args.show_config:
        print(json.dumps(config.data, indent=2, ensure_ascii=False, default=str))


def main(argv: list[str] | None = None) -> int:
    """Run one report and return the process exit code."""
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    from worklog_sheet_reporter.core.errors import WorklogReportError
    from worklog_sheet_reporter.report import (
        build_source,
        collect_rows,
        format_rows,
        write_report,
    )
    from worklog_sheet_reporter.services.config_manager import ConfigManager
    from worklog_sheet_reporter.services.spreadsheet import SpreadsheetDestination

    config = ConfigManager()
    if args.settings or args.reset_config or args.show_config:
        try:
            _configure(config, args)
        except ValueError as exc:
            logger.error("config stage failed: %s", exc)
            return 1
        return 0

    if args.spreadsheet:
        config.override("spreadsheet_path", args.spreadsheet)
    if args.sheet:
        config.override("sheet_name", args.sheet)

    try:
        source = build_source(config, args.file, args.reference_date or date.today())
        rows = collect_rows(source)
        if args.write:
            destination = SpreadsheetDestination(
                config.get("spreadsheet_path"), config.get("sheet_name")
            )
            rows = write_report(rows, destination)
    except WorklogReportError as exc:
        logger.error("%s stage failed: %s", exc.stage, exc)
        return 1

    if args.print_rows:
        print(format_rows(rows))
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
