"""Worklog source backed by a CSV time-tracking export."""

from __future__ import annotations

import csv
import logging
import math
import re
from datetime import date
from pathlib import Path
from typing import IO

from worklog_sheet_reporter.core.data_models import RawWorklogEntry
from worklog_sheet_reporter.core.errors import WorklogParseError
from worklog_sheet_reporter.core.sources import WorklogSource

logger = logging.getLogger(__name__)

COL_PROJECT = "Project Name"
COL_SUMMARY = "Summary"
COL_HOURS = "Hr. Spent"
COL_LOGGED_AT = "Log Date & Time"
COL_TICKET = "Ticket No"

REQUIRED_COLUMNS = (COL_PROJECT, COL_SUMMARY, COL_HOURS, COL_LOGGED_AT, COL_TICKET)

_MONTHS_ABBR = [
    "jan", "feb", "mar", "apr", "may", "jun",
    "jul", "aug", "sep", "oct", "nov", "dec",
]


_LOG_DAY_RE = re.compile(r"(\d{1,2})-([A-Za-z]{3})-(\d{4})", re.ASCII)
_HOURS_RE = re.compile(r"\d+(?:\.\d*)?|\.\d+", re.ASCII)


def parse_log_day(value: str) -> date:
    """Parse the date part of a ``DD-Mon-YYYY HH:MM`` cell.

    Month abbreviations are matched in English regardless of the system
    locale.  The year must have exactly four digits.

    Raises:
        ValueError: If the first token is not a valid ``DD-Mon-YYYY`` date.
    """
    tokens = value.split()
    if not tokens:
        raise ValueError("empty date")
    match = _LOG_DAY_RE.fullmatch(tokens[0])
    if match is None:
        raise ValueError(f"expected DD-Mon-YYYY, got {tokens[0]!r}")
    day, month, year = match.groups()
    try:
        month_number = _MONTHS_ABBR.index(month.lower()) + 1
    except ValueError:
        raise ValueError(f"unknown month {month!r}") from None
    return date(int(year), month_number, int(day))


def parse_hours(value: str) -> float:
    """Parse an ``Hr. Spent`` cell holding a plain decimal such as ``1.5``."""
    text = value.strip()
    if not _HOURS_RE.fullmatch(text):
        raise ValueError(f"expected a decimal number of hours, got {value!r}")
    hours = float(text)
    if not math.isfinite(hours):
        raise ValueError(f"hours must be finite, got {value!r}")
    return hours


class CsvWorklogSource(WorklogSource):
    """Read worklogs from a comma-delimited export with a header row.

    The export is assumed to belong to a single person, so no author
    filtering is applied.
    """

    def __init__(self, source: str | Path | IO[str]) -> None:
        self._source = source

    def normalize(self) -> list[RawWorklogEntry]:
        if isinstance(self._source, (str, Path)):
            path = Path(self._source)
            logger.info("Reading worklogs from %s", path)
            try:
                with open(path, encoding="utf-8-sig", newline="") as fh:
                    return self._parse(fh)
            except OSError as exc:
                raise WorklogParseError(f"Cannot read {path}: {exc}") from exc
        return self._parse(self._source)

    # -- internals ------------------------------------------------------------

    def _parse(self, stream: IO[str]) -> list[RawWorklogEntry]:
        reader = csv.DictReader(stream)
        missing = [c for c in REQUIRED_COLUMNS if c not in (reader.fieldnames or [])]
        if missing:
            raise WorklogParseError(
                f"CSV is missing required column(s): {', '.join(missing)}"
            )

        entries: list[RawWorklogEntry] = []
        for row in reader:
            entries.append(self._entry(row, reader.line_num))

        logger.info("Parsed %d worklog rows from CSV", len(entries))
        return entries

    @staticmethod
    def _entry(row: dict[str, str | None], line: int) -> RawWorklogEntry:
        logged_at = row.get(COL_LOGGED_AT) or ""
        try:
            day = parse_log_day(logged_at)
        except ValueError as exc:
            raise WorklogParseError(
                f"Line {line}: invalid {COL_LOGGED_AT!r} value {logged_at!r} ({exc})"
            ) from exc

        spent = row.get(COL_HOURS) or ""
        try:
            hours = parse_hours(spent)
        except ValueError as exc:
            raise WorklogParseError(
                f"Line {line}: invalid {COL_HOURS!r} value {spent!r}"
            ) from exc

        return RawWorklogEntry(
            project_name=row.get(COL_PROJECT) or "",
            ticket_key=row.get(COL_TICKET) or "",
            summary=row.get(COL_SUMMARY) or "",
            day=day,
            hours=hours,
        )
