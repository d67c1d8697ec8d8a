"""Worklog source backed by the Jira Cloud REST API."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any

from dateutil.parser import parse as dt_parse

from worklog_sheet_reporter.core.data_models import RawWorklogEntry
from worklog_sheet_reporter.core.errors import WorklogParseError
from worklog_sheet_reporter.core.jira_client import JiraClient
from worklog_sheet_reporter.core.period import ReportPeriod
from worklog_sheet_reporter.core.sources import WorklogSource

logger = logging.getLogger(__name__)

_SECONDS_PER_HOUR = 3600


def has_worklog_overflow(issue: dict[str, Any]) -> bool:
    """Return True when the search result truncated the issue's worklogs."""
    worklog = issue.get("fields", {}).get("worklog") or {}
    return worklog.get("total", 0) > worklog.get("maxResults", 0)


class JiraWorklogSource(WorklogSource):
    """Read one account's worklogs for a report period from Jira.

    Issues whose embedded worklog list was truncated by the search are
    re-fetched individually; those requests run concurrently and all of
    them must succeed.
    """

    def __init__(
        self,
        client: JiraClient,
        account_id: str,
        period: ReportPeriod,
        max_workers: int = 8,
    ) -> None:
        self._client = client
        self._account_id = account_id
        self._period = period
        self._max_workers = max_workers

    def normalize(self) -> list[RawWorklogEntry]:
        issues = self._client.search_worklog_issues(self._account_id, self._period)
        overflow = [i for i in issues if has_worklog_overflow(i)]
        inline = [i for i in issues if not has_worklog_overflow(i)]
        if overflow:
            logger.info("%d issue(s) have truncated worklogs, re-fetching", len(overflow))

        pairs: list[tuple[dict[str, Any], list[dict[str, Any]]]] = [
            (issue, (issue.get("fields", {}).get("worklog") or {}).get("worklogs") or [])
            for issue in inline
        ]
        pairs.extend(zip(overflow, self._fetch_overflow(overflow)))

        entries: list[RawWorklogEntry] = []
        skipped_author = skipped_period = 0
        for issue, worklogs in pairs:
            for worklog in worklogs:
                author_id = (worklog.get("author") or {}).get("accountId")
                if author_id != self._account_id:
                    skipped_author += 1
                    continue
                entry = self._entry(issue, worklog, author_id)
                if not self._period.contains(entry.day):
                    skipped_period += 1
                    continue
                entries.append(entry)

        logger.info(
            "Collected %d worklogs (skipped %d by author, %d outside %s..%s)",
            len(entries), skipped_author, skipped_period,
            self._period.start, self._period.last_day,
        )
        return entries

    # -- internals ------------------------------------------------------------

    def _fetch_overflow(
        self, issues: list[dict[str, Any]]
    ) -> list[list[dict[str, Any]]]:
        if not issues:
            return []
        workers = max(1, min(self._max_workers, len(issues)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [
                pool.submit(self._client.fetch_issue_worklogs, issue["key"], self._period)
                for issue in issues
            ]
            # result() re-raises the first failure and aborts the whole run
            return [f.result() for f in futures]

    def _entry(
        self, issue: dict[str, Any], worklog: dict[str, Any], author_id: str
    ) -> RawWorklogEntry:
        fields = issue.get("fields", {})
        key = issue.get("key", "")
        started = self._parse_started(worklog.get("started"), key)
        seconds = worklog.get("timeSpentSeconds", 0) or 0
        return RawWorklogEntry(
            project_name=(fields.get("project") or {}).get("name", ""),
            ticket_key=key,
            summary=fields.get("summary", ""),
            day=self._period.local_day(started),
            hours=seconds / _SECONDS_PER_HOUR,
            author_id=author_id,
        )

    @staticmethod
    def _parse_started(value: Any, issue_key: str) -> datetime:
        try:
            return dt_parse(str(value))
        except (ValueError, TypeError, OverflowError) as exc:
            raise WorklogParseError(
                f"Worklog on {issue_key} has an invalid 'started' value {value!r}"
            ) from exc
