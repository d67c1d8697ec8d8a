"""Wire sources, aggregation and destination together for one report run."""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

from worklog_sheet_reporter.core.aggregation import summarize, with_totals_row
from worklog_sheet_reporter.core.csv_source import CsvWorklogSource
from worklog_sheet_reporter.core.data_models import SHEET_HEADERS, SummaryRow
from worklog_sheet_reporter.core.errors import ConfigurationError
from worklog_sheet_reporter.core.jira_client import JiraClient
from worklog_sheet_reporter.core.jira_source import JiraWorklogSource
from worklog_sheet_reporter.core.period import ReportPeriod, resolve_timezone
from worklog_sheet_reporter.core.sources import WorklogSource
from worklog_sheet_reporter.services.auth_manager import AuthManager
from worklog_sheet_reporter.services.config_manager import ConfigManager
from worklog_sheet_reporter.services.spreadsheet import SpreadsheetDestination

logger = logging.getLogger(__name__)


def report_period(config: ConfigManager, reference: date) -> ReportPeriod:
    """Return the previous-month period relative to *reference*."""
    try:
        tz = resolve_timezone(config.get("timezone"))
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc
    return ReportPeriod.previous_month(reference, tz)


def build_source(
    config: ConfigManager,
    file_path: str | Path | None,
    reference: date,
    auth: AuthManager | None = None,
    client: JiraClient | None = None,
) -> WorklogSource:
    """Pick the CSV source when a file is given, the Jira source otherwise."""
    if file_path is not None:
        return CsvWorklogSource(file_path)

    auth = auth or AuthManager(config)
    if not auth.account_id:
        raise ConfigurationError("JIRA_ACCOUNT_ID must be configured to read worklogs from Jira")
    if client is None:
        client = JiraClient(auth, timeout=float(config.get("request_timeout", 30)))
    if not client.connected:
        client.connect_from_config()
    return JiraWorklogSource(
        client,
        auth.account_id,
        report_period(config, reference),
        max_workers=int(config.get("max_workers", 8)),
    )


def collect_rows(source: WorklogSource) -> list[SummaryRow]:
    """Normalize *source* and reduce it to sorted per-day rows."""
    return summarize(source.normalize())


def write_report(
    rows: list[SummaryRow], destination: SpreadsheetDestination
) -> list[SummaryRow]:
    """Append *rows* and their totals row to *destination*.

    Returns the rows as written, totals row included.  An empty report
    leaves the workbook untouched.
    """
    if not rows:
        logger.info("No worklogs to write")
        return []
    destination.open()
    first_row = destination.next_row_number()
    written = with_totals_row(rows, first_row)
    destination.append_rows(written)
    destination.save()
    logger.info(
        "Wrote %d day(s) plus totals to %s starting at row %d",
        len(rows), destination.path, first_row,
    )
    return written


def format_hours(fraction: float | str) -> str:
    """Render a fraction of a day as ``H:MM`` (formulas are shown verbatim)."""
    if isinstance(fraction, str):
        return fraction
    minutes = round(fraction * 24 * 60)
    return f"{minutes // 60}:{minutes % 60:02d}"


def format_rows(rows: list[SummaryRow]) -> str:
    """Render rows for the console."""
    if not rows:
        return "No worklogs found."
    hours_h = SHEET_HEADERS[-1]
    blocks = []
    for row in rows:
        lines = []
        for header, value in row.as_record().items():
            if header == hours_h and not isinstance(value, str):
                value = f"{format_hours(value)} ({value:.6f})"
            elif header == hours_h:
                value = format_hours(value)
            text = str(value).replace("\n", "\n" + " " * (len(header) + 2))
            lines.append(f"{header}: {text}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)
