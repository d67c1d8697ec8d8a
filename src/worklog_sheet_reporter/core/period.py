"""Report period, display-date and month-name helpers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo

from dateutil import tz as dateutil_tz

from worklog_sheet_reporter.core.data_models import DISPLAY_DATE_FORMAT

logger = logging.getLogger(__name__)

_MONTHS_PT = [
    "Janeiro", "Fevereiro", "Março", "Abril", "Maio", "Junho",
    "Julho", "Agosto", "Setembro", "Outubro", "Novembro", "Dezembro",
]


def month_name(month: int) -> str:
    """Return the Portuguese name of *month* (1-12)."""
    if not 1 <= month <= 12:
        raise ValueError(f"Month out of range: {month}")
    return _MONTHS_PT[month - 1]


def parse_display_day(value: str) -> date:
    """Parse a ``DD/MM/YYYY`` display string back into a date."""
    return datetime.strptime(value, DISPLAY_DATE_FORMAT).date()


def resolve_timezone(name: str | None) -> tzinfo:
    """Return the tzinfo for an IANA *name*, or the system zone when empty."""
    if not name:
        return dateutil_tz.tzlocal()
    zone = dateutil_tz.gettz(name)
    if zone is None:
        raise ValueError(f"Unknown timezone: {name}")
    return zone


@dataclass(frozen=True)
class ReportPeriod:
    """A half-open range of calendar days ``[start, end)`` in one timezone."""

    start: date
    end: date
    tz: tzinfo

    @classmethod
    def previous_month(
        cls, reference: date, tz: tzinfo | None = None
    ) -> ReportPeriod:
        """Return the whole calendar month preceding *reference*'s month."""
        end = reference.replace(day=1)
        start = (end - timedelta(days=1)).replace(day=1)
        period = cls(start=start, end=end, tz=tz or dateutil_tz.tzlocal())
        logger.debug("Report period for %s: %s → %s", reference, start, end)
        return period

    def contains(self, day: date) -> bool:
        return self.start <= day < self.end

    @property
    def last_day(self) -> date:
        return self.end - timedelta(days=1)

    @property
    def start_instant(self) -> datetime:
        return datetime.combine(self.start, time.min, tzinfo=self.tz)

    @property
    def end_instant(self) -> datetime:
        return datetime.combine(self.end, time.min, tzinfo=self.tz)

    def as_epoch_millis(self) -> tuple[int, int]:
        """Return the period bounds as UNIX timestamps in milliseconds."""
        return (
            int(self.start_instant.timestamp() * 1000),
            int(self.end_instant.timestamp() * 1000),
        )

    def local_day(self, instant: datetime) -> date:
        """Return the calendar day of *instant* in the period's timezone."""
        return instant.astimezone(self.tz).date()
