"""Jira connection settings and API-token lookup."""

from __future__ import annotations

import logging
import os
from typing import Mapping

import keyring
from keyring.errors import KeyringError

from worklog_sheet_reporter.services.config_manager import ConfigManager

logger = logging.getLogger(__name__)

KEYRING_SERVICE = "worklog-sheet-reporter"
KEYRING_USERNAME = "api_token"
TOKEN_ENV_VAR = "JIRA_TOKEN"


class AuthManager:
    """Expose the Jira site, account and API token for basic auth.

    Non-secret values come from :class:`ConfigManager`.  The token is read
    from ``JIRA_TOKEN`` or, failing that, from the OS keyring.
    """

    def __init__(
        self, config: ConfigManager, environ: Mapping[str, str] | None = None
    ) -> None:
        self._config = config
        self._environ = os.environ if environ is None else environ

    @property
    def jira_url(self) -> str:
        """Return the Jira base URL, derived from the org name when not set."""
        url = str(self._config.get("jira_url", "")).rstrip("/")
        if url:
            return url
        org = str(self._config.get("jira_org", ""))
        return f"https://{org}.atlassian.net" if org else ""

    @property
    def jira_email(self) -> str:
        return str(self._config.get("jira_email", ""))

    @property
    def account_id(self) -> str:
        """Return the Jira account whose worklogs are reported."""
        return str(self._config.get("jira_account_id", ""))

    def get_api_token(self) -> str | None:
        """Return the API token from the environment or the OS keyring."""
        token = self._environ.get(TOKEN_ENV_VAR)
        if token:
            logger.debug("Using API token from %s", TOKEN_ENV_VAR)
            return token
        try:
            token = keyring.get_password(KEYRING_SERVICE, KEYRING_USERNAME)
        except KeyringError as exc:
            logger.warning("Keyring lookup failed: %s", exc)
            return None
        if token:
            logger.debug("Using API token from keyring")
        return token
