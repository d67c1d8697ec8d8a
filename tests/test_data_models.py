"""Tests for worklog_sheet_reporter.core.data_models."""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from datetime import date

import pytest

from worklog_sheet_reporter.core.data_models import (
    SHEET_HEADERS,
    DayBucket,
    RawWorklogEntry,
    SummaryRow,
    task_identity,
)


class TestTaskIdentity:
    """Verify the project:[ticket] summary key."""

    def test_format(self) -> None:
        assert task_identity("A", "1", "x") == "A:[1] x"

    def test_entry_property_matches_function(self) -> None:
        entry = RawWorklogEntry(
            project_name="Billing", ticket_key="BIL-7", summary="Fix invoices",
            day=date(2024, 1, 3), hours=1.5,
        )
        assert entry.task_identity == "Billing:[BIL-7] Fix invoices"


class TestRawWorklogEntry:
    """Verify RawWorklogEntry fields."""

    def test_display_day_is_zero_padded(self) -> None:
        entry = RawWorklogEntry("A", "1", "x", date(2024, 3, 5), 2.0)
        assert entry.display_day == "05/03/2024"

    def test_author_defaults_to_none(self) -> None:
        entry = RawWorklogEntry("A", "1", "x", date(2024, 3, 5), 2.0)
        assert entry.author_id is None

    def test_frozen(self) -> None:
        entry = RawWorklogEntry("A", "1", "x", date(2024, 3, 5), 2.0)
        with pytest.raises(FrozenInstanceError):
            entry.hours = 3.0  # type: ignore[misc]


class TestDayBucket:
    """Verify DayBucket defaults and totals."""

    def test_empty_bucket(self) -> None:
        bucket = DayBucket(day="01/01/2024")
        assert dict(bucket.tasks) == {}
        assert bucket.total_hours == 0

    def test_total_hours(self) -> None:
        bucket = DayBucket(day="01/01/2024", tasks={"A:[1] x": 2.0, "A:[2] y": 1.5})
        assert bucket.total_hours == pytest.approx(3.5)

    def test_default_tasks_read_only(self) -> None:
        bucket = DayBucket(day="01/01/2024")
        with pytest.raises(TypeError):
            bucket.tasks["A:[1] x"] = 1.0  # type: ignore[index]


class TestSummaryRow:
    """Verify SummaryRow record conversion."""

    def test_as_record_uses_sheet_headers(self) -> None:
        row = SummaryRow(day="01/01/2024", activity="A:[1] x", hours_fraction=0.25)
        assert row.as_record() == {
            "Dia": "01/01/2024",
            "Atividade": "A:[1] x",
            "Horas trabalhadas": 0.25,
        }

    def test_headers_order(self) -> None:
        assert SHEET_HEADERS == ("Dia", "Atividade", "Horas trabalhadas")

    def test_as_values(self) -> None:
        row = SummaryRow(day="Total Janeiro:", activity="", hours_fraction="=SUM(C2:C3)")
        assert row.as_values() == ("Total Janeiro:", "", "=SUM(C2:C3)")
