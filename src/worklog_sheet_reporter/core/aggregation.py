"""Per-day bucketing, task deduplication and summary-row construction."""

from __future__ import annotations

import logging
from functools import reduce
from types import MappingProxyType
from typing import Iterable, Mapping

from worklog_sheet_reporter.core.data_models import DayBucket, RawWorklogEntry, SummaryRow
from worklog_sheet_reporter.core.period import month_name, parse_display_day

logger = logging.getLogger(__name__)

HOURS_PER_DAY = 24
TOTALS_COLUMN = "C"


def add_entry(bucket: DayBucket, entry: RawWorklogEntry) -> DayBucket:
    """Return a new bucket with *entry*'s hours added to its task.

    A task seen for the first time is appended after the existing ones.
    """
    identity = entry.task_identity
    tasks = dict(bucket.tasks)
    tasks[identity] = tasks.get(identity, 0.0) + entry.hours
    return DayBucket(day=bucket.day, tasks=MappingProxyType(tasks))


def _fold(
    buckets: Mapping[str, DayBucket], entry: RawWorklogEntry
) -> Mapping[str, DayBucket]:
    key = entry.display_day
    current = buckets.get(key, DayBucket(day=key))
    return {**buckets, key: add_entry(current, entry)}


def bucket_by_day(entries: Iterable[RawWorklogEntry]) -> dict[str, DayBucket]:
    """Group entries by display day, summing hours per task within each day.

    Buckets keep the order in which their day was first seen.
    """
    buckets = dict(reduce(_fold, entries, {}))
    logger.debug("Bucketed entries into %d day(s)", len(buckets))
    return buckets


def build_summary_row(bucket: DayBucket) -> SummaryRow:
    """Convert one day bucket into its output row."""
    return SummaryRow(
        day=bucket.day,
        activity="\n".join(bucket.tasks),
        hours_fraction=bucket.total_hours / HOURS_PER_DAY,
    )


def build_summary_rows(buckets: Mapping[str, DayBucket]) -> list[SummaryRow]:
    """Build one row per bucket, sorted by day ascending."""
    rows = [build_summary_row(b) for b in buckets.values()]
    return sorted(rows, key=lambda row: parse_display_day(row.day))


def summarize(entries: Iterable[RawWorklogEntry]) -> list[SummaryRow]:
    """Reduce normalized entries to the sorted per-day summary rows."""
    rows = build_summary_rows(bucket_by_day(entries))
    logger.info("Built %d summary row(s)", len(rows))
    return rows


def totals_row(
    rows: list[SummaryRow], first_row_number: int, column: str = TOTALS_COLUMN
) -> SummaryRow | None:
    """Return the month totals row for *rows*, or None when there are none.

    *first_row_number* is the 1-based sheet row that will hold ``rows[0]``.
    The total is left to the spreadsheet as a ``SUM`` formula so that later
    manual edits are reflected.
    """
    if not rows:
        return None
    if first_row_number < 1:
        raise ValueError(f"Row numbers are 1-based, got {first_row_number}")
    last_row_number = first_row_number + len(rows) - 1
    month = month_name(parse_display_day(rows[0].day).month)
    return SummaryRow(
        day=f"Total {month}:",
        activity="",
        hours_fraction=f"=SUM({column}{first_row_number}:{column}{last_row_number})",
    )


def with_totals_row(rows: list[SummaryRow], first_row_number: int) -> list[SummaryRow]:
    """Return *rows* followed by their totals row (unchanged when empty)."""
    total = totals_row(rows, first_row_number)
    if total is None:
        return list(rows)
    return [*rows, total]
