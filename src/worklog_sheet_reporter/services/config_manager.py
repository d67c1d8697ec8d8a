"""JSON-based configuration persistence via platformdirs, with env overrides."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Mapping

from dotenv import find_dotenv, load_dotenv
from platformdirs import user_config_dir

logger = logging.getLogger(__name__)

APP_NAME = "worklog-sheet-reporter"
CONFIG_FILENAME = "config.json"

DEFAULTS: dict[str, Any] = {
    "jira_org": "",           # e.g. "company" for https://company.atlassian.net
    "jira_url": "",           # explicit base URL, wins over jira_org
    "jira_email": "",
    "jira_account_id": "",    # worklog author to report on
    "spreadsheet_path": "worklogs.xlsx",
    "sheet_name": "Worklogs",
    "timezone": "",           # IANA name; empty = system local
    "request_timeout": 30,
    "max_workers": 8,
}

# Environment variable → config key
ENV_OVERRIDES: dict[str, str] = {
    "JIRA_ORG": "jira_org",
    "JIRA_URL": "jira_url",
    "JIRA_EMAIL": "jira_email",
    "JIRA_ACCOUNT_ID": "jira_account_id",
    "WORKLOG_SPREADSHEET": "spreadsheet_path",
    "WORKLOG_SHEET": "sheet_name",
    "WORKLOG_TIMEZONE": "timezone",
}


class ConfigManager:
    """Read/write JSON configuration stored in the platform config directory.

    Values from the environment (and a ``.env`` file, when present) take
    precedence over the stored file but are never written back to it.
    """

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._dir = Path(user_config_dir(APP_NAME, appauthor=False))
        self._path = self._dir / CONFIG_FILENAME
        self._data: dict[str, Any] = dict(DEFAULTS)
        self._overrides: dict[str, Any] = {}
        self._load()
        if environ is None:
            load_dotenv(find_dotenv(usecwd=True))
            environ = os.environ
        self.apply_environment(environ)
        logger.debug("Config loaded from %s", self._path)

    # -- public API -----------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        """Return a config value, falling back to *default*."""
        if key in self._overrides:
            return self._overrides[key]
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set a config value and persist to disk."""
        self.update({key: value})

    def update(self, values: dict[str, Any]) -> None:
        """Bulk-update config values and persist."""
        self._data.update(values)
        for key in values:
            self._overrides.pop(key, None)
        self._save()

    def override(self, key: str, value: Any) -> None:
        """Override a value for this run only (e.g. from a CLI flag)."""
        self._overrides[key] = value

    def apply_environment(self, environ: Mapping[str, str]) -> None:
        """Apply the recognised environment variables as run overrides."""
        for env_name, key in ENV_OVERRIDES.items():
            value = environ.get(env_name)
            if value:
                logger.debug("Using %s from environment", env_name)
                self._overrides[key] = value

    def reset(self) -> None:
        """Reset all stored values to defaults and persist.

        Overrides from the environment stay in effect for this run.
        """
        logger.info("Resetting config to defaults")
        self._data = dict(DEFAULTS)
        self._save()

    @property
    def data(self) -> dict[str, Any]:
        """Return a shallow copy of the effective configuration."""
        return {**self._data, **self._overrides}

    # -- internals ------------------------------------------------------------

    def _load(self) -> None:
        if not self._path.exists():
            return
        try:
            with open(self._path, encoding="utf-8") as fh:
                stored = json.load(fh)
            if isinstance(stored, dict):
                self._data.update(stored)
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Failed to load config from %s: %s", self._path, exc)

    def _save(self) -> None:
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            with open(self._path, "w", encoding="utf-8") as fh:
                json.dump(self._data, fh, indent=2, default=str)
        except OSError as exc:
            logger.warning("Failed to save config to %s: %s", self._path, exc)
