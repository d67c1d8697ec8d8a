"""Common interface for the places worklogs can be read from."""

from __future__ import annotations

from abc import ABC, abstractmethod

from worklog_sheet_reporter.core.data_models import RawWorklogEntry


class WorklogSource(ABC):
    """A source of worklog entries for one report run.

    Implementations convert their native records into
    :class:`RawWorklogEntry` values; everything downstream depends only on
    this interface.
    """

    @abstractmethod
    def normalize(self) -> list[RawWorklogEntry]:
        """Return every entry that belongs in the report.

        Raises:
            WorklogReportError: If the source cannot be read or is malformed.
        """
