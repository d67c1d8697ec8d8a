"""Exception hierarchy for worklog report runs."""

from __future__ import annotations


class WorklogReportError(Exception):
    """Base class for failures that abort a report run.

    ``stage`` names the pipeline step that failed so the CLI can report it.
    """

    stage = "report"


class WorklogParseError(WorklogReportError):
    """Source data is malformed (missing column, bad date, bad hours)."""

    stage = "parse"


class TrackerUnavailableError(WorklogReportError):
    """The Jira API could not be reached or answered with an error."""

    stage = "fetch"


class DestinationError(WorklogReportError):
    """The destination workbook could not be read or written."""

    stage = "write"


class ConfigurationError(WorklogReportError):
    """Required settings or credentials are missing."""

    stage = "config"
