"""Jira Cloud API client using the ``jira`` library."""

from __future__ import annotations

import logging
import threading
from typing import Any

import requests
from jira import JIRA, JIRAError

from worklog_sheet_reporter.core.errors import ConfigurationError, TrackerUnavailableError
from worklog_sheet_reporter.core.period import ReportPeriod
from worklog_sheet_reporter.services.auth_manager import AuthManager

logger = logging.getLogger(__name__)

# Single-page cap for both the search and the per-issue worklog endpoints.
MAX_RESULTS = 5000
SEARCH_FIELDS = ["summary", "worklog", "project"]


def build_worklog_jql(account_id: str, period: ReportPeriod) -> str:
    """Return the JQL selecting issues with worklogs by *account_id* in *period*."""
    return (
        f'(worklogAuthor in ("{account_id}")) AND '
        f'(worklogDate >= "{period.start.isoformat()}" AND '
        f'worklogDate <= "{period.last_day.isoformat()}")'
    )


class JiraClient:
    """Thin wrapper over the Jira endpoints the worklog report needs."""

    def __init__(self, auth: AuthManager, timeout: float = 30) -> None:
        self._auth = auth
        self._timeout = timeout
        self._jira: JIRA | None = None
        self._credentials: tuple[str, str] | None = None
        self._local = threading.local()
        self._server = ""

    # -- connection -----------------------------------------------------------

    def connect_basic(self, url: str, email: str, token: str) -> None:
        """Connect to Jira with an email / API-token pair.

        A lightweight ``myself()`` call validates the credentials.

        Raises:
            TrackerUnavailableError: If Jira rejects the credentials or
                cannot be reached.
        """
        logger.debug("Connecting to Jira at %s (basic auth)", url)
        try:
            jira = JIRA(server=url, basic_auth=(email, token), timeout=self._timeout)
            me = jira.myself()
        except JIRAError as exc:
            raise TrackerUnavailableError(
                f"Jira rejected the connection to {url}: HTTP {exc.status_code} {exc.text}"
            ) from exc
        except requests.RequestException as exc:
            raise TrackerUnavailableError(f"Cannot reach Jira at {url}: {exc}") from exc

        self._jira = jira
        self._credentials = (email, token)
        self._local = threading.local()
        self._server = url.rstrip("/")
        logger.info("Connected to Jira as %s (%s)", me.get("displayName", email), url)

    def connect_from_config(self) -> None:
        """Connect using the URL, email and token known to the AuthManager."""
        url = self._auth.jira_url
        email = self._auth.jira_email
        token = self._auth.get_api_token()
        if not url or not email:
            raise ConfigurationError(
                "Jira URL and email must be configured (JIRA_ORG or JIRA_URL, JIRA_EMAIL)"
            )
        if not token:
            raise ConfigurationError("No Jira API token found (JIRA_TOKEN or keyring)")
        self.connect_basic(url, email, token)

    @property
    def connected(self) -> bool:
        """Return True when the Jira session is active."""
        return self._jira is not None

    # -- worklog fetching -----------------------------------------------------

    def search_worklog_issues(
        self, account_id: str, period: ReportPeriod
    ) -> list[dict[str, Any]]:
        """Return raw issues carrying worklogs by *account_id* within *period*.

        Each issue embeds at most one page of its worklogs; callers compare
        ``fields.worklog.total`` with ``fields.worklog.maxResults`` to detect
        truncation.
        """
        jira = self._require_connection()
        jql = build_worklog_jql(account_id, period)
        logger.debug("Searching issues: %s", jql)
        try:
            data = jira.search_issues(
                jql,
                fields=SEARCH_FIELDS,
                maxResults=MAX_RESULTS,
                json_result=True,
            )
        except JIRAError as exc:
            raise TrackerUnavailableError(
                f"Issue search failed: HTTP {exc.status_code} {exc.text}"
            ) from exc
        except requests.RequestException as exc:
            raise TrackerUnavailableError(f"Issue search failed: {exc}") from exc

        issues = data.get("issues", []) or []
        total = data.get("total", len(issues))
        if total > len(issues):
            logger.warning(
                "Search returned %d of %d issues; worklogs may be under-reported",
                len(issues), total,
            )
        logger.info("Found %d issues with worklogs in %s", len(issues), period.start)
        return issues

    def fetch_issue_worklogs(
        self, issue_key: str, period: ReportPeriod
    ) -> list[dict[str, Any]]:
        """Fetch the worklogs of one issue started within *period*."""
        self._require_connection()
        session = self._thread_session()
        started_after, started_before = period.as_epoch_millis()
        url = f"{self._server}/rest/api/2/issue/{issue_key}/worklog"
        params = {
            "maxResults": MAX_RESULTS,
            "startAt": 0,
            "startedAfter": started_after,
            "startedBefore": started_before,
        }
        logger.debug("Fetching worklogs for %s", issue_key)
        try:
            resp = session.get(url, params=params, timeout=self._timeout)
            resp.raise_for_status()
            worklogs = resp.json().get("worklogs", []) or []
        except requests.RequestException as exc:
            raise TrackerUnavailableError(
                f"Error fetching worklog for {issue_key}: {exc}"
            ) from exc
        logger.debug("Fetched %d worklogs for %s", len(worklogs), issue_key)
        return worklogs

    # -- internals ------------------------------------------------------------

    def _require_connection(self) -> JIRA:
        if self._jira is None:
            raise TrackerUnavailableError("Not connected to Jira; call connect_basic() first")
        return self._jira

    def _thread_session(self) -> requests.Session:
        """Return the calling thread's session, creating it on first use."""
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._new_session()
            self._local.session = session
        return session

    def _new_session(self) -> requests.Session:
        session = requests.Session()
        session.auth = self._credentials
        session.headers["Accept"] = "application/json"
        return session
