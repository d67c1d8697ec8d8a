"""Append-only access to the destination workbook via openpyxl."""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path
from typing import Iterable

from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.worksheet.worksheet import Worksheet

from worklog_sheet_reporter.core.data_models import SHEET_HEADERS, SummaryRow
from worklog_sheet_reporter.core.errors import DestinationError

logger = logging.getLogger(__name__)


class SpreadsheetDestination:
    """A worksheet that summary rows are appended to.

    The workbook and the sheet are created on first use. An empty sheet
    gets the header row before any data so that data rows start at row 2.
    """

    def __init__(self, path: str | Path, sheet_name: str) -> None:
        self._path = Path(path)
        self._sheet_name = sheet_name
        self._workbook: Workbook | None = None
        self._sheet: Worksheet | None = None

    @property
    def path(self) -> Path:
        return self._path

    def open(self) -> None:
        """Load (or create) the workbook and target sheet."""
        if self._path.exists():
            logger.debug("Loading workbook %s", self._path)
            try:
                wb = load_workbook(self._path)
            except (InvalidFileException, zipfile.BadZipFile, OSError, KeyError) as exc:
                raise DestinationError(f"Cannot open workbook {self._path}: {exc}") from exc
        else:
            logger.info("Creating workbook %s", self._path)
            wb = Workbook()
            wb.active.title = self._sheet_name

        if self._sheet_name in wb.sheetnames:
            ws = wb[self._sheet_name]
        else:
            logger.info("Creating sheet %r in %s", self._sheet_name, self._path)
            ws = wb.create_sheet(self._sheet_name)

        if _is_empty(ws):
            for col_idx, header in enumerate(SHEET_HEADERS, start=1):
                ws.cell(row=1, column=col_idx, value=header)

        self._workbook = wb
        self._sheet = ws

    def next_row_number(self) -> int:
        """Return the 1-based number of the next row that ``append_rows`` fills."""
        return self._require_sheet().max_row + 1

    def append_rows(self, rows: Iterable[SummaryRow]) -> int:
        """Append *rows* below the existing content; return how many were added."""
        ws = self._require_sheet()
        count = 0
        for row in rows:
            ws.append(list(row.as_values()))
            count += 1
        logger.debug("Appended %d row(s) to %r", count, self._sheet_name)
        return count

    def save(self) -> None:
        if self._workbook is None:
            raise DestinationError("Workbook not opened; call open() first")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._workbook.save(self._path)
        except OSError as exc:
            raise DestinationError(f"Cannot save workbook {self._path}: {exc}") from exc
        logger.info("Saved %s", self._path)

    # -- internals ------------------------------------------------------------

    def _require_sheet(self) -> Worksheet:
        if self._sheet is None:
            raise DestinationError("Workbook not opened; call open() first")
        return self._sheet


def _is_empty(ws: Worksheet) -> bool:
    return ws.max_row == 1 and all(cell.value is None for cell in ws[1])
