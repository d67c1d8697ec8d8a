"""Data models for Worklog Sheet Reporter."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType
from typing import Mapping

# Column headers of the destination sheet, in column order (A, B, C).
SHEET_HEADERS = ("Dia", "Atividade", "Horas trabalhadas")

DISPLAY_DATE_FORMAT = "%d/%m/%Y"


def task_identity(project_name: str, ticket_key: str, summary: str) -> str:
    """Build the key that identifies one task for reporting purposes."""
    return f"{project_name}:[{ticket_key}] {summary}"


@dataclass(frozen=True)
class RawWorklogEntry:
    """A single worklog, already normalized from its source."""

    project_name: str
    ticket_key: str
    summary: str
    day: date
    hours: float
    author_id: str | None = None  # only set for entries fetched from Jira

    @property
    def task_identity(self) -> str:
        return task_identity(self.project_name, self.ticket_key, self.summary)

    @property
    def display_day(self) -> str:
        return self.day.strftime(DISPLAY_DATE_FORMAT)


@dataclass(frozen=True)
class DayBucket:
    """All tasks worked on during one day with their accumulated hours.

    ``tasks`` keeps first-seen order and is read-only; adding an entry
    produces a new bucket (see :func:`aggregation.add_entry`).
    """

    day: str
    tasks: Mapping[str, float] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @property
    def total_hours(self) -> float:
        return sum(self.tasks.values())


@dataclass(frozen=True)
class SummaryRow:
    """One output row of the destination sheet.

    ``hours_fraction`` is a fraction of a 24-hour day for data rows and a
    spreadsheet formula string for the totals row.
    """

    day: str
    activity: str
    hours_fraction: float | str

    def as_record(self) -> dict[str, float | str]:
        """Return the row keyed by the sheet headers."""
        return dict(zip(SHEET_HEADERS, self.as_values()))

    def as_values(self) -> tuple[str, str, float | str]:
        return (self.day, self.activity, self.hours_fraction)
