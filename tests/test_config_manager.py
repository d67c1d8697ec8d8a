"""Tests for worklog_sheet_reporter.services.config_manager."""

from __future__ import annotations

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from worklog_sheet_reporter.services.config_manager import ConfigManager


def _make_manager(tmp_path: Path, environ: dict[str, str] | None = None) -> ConfigManager:
    """Create a ConfigManager pointing at *tmp_path* for isolation."""
    mgr = ConfigManager(environ={})
    mgr._dir = tmp_path
    mgr._path = tmp_path / "config.json"
    mgr.reset()
    if environ:
        mgr.apply_environment(environ)
    return mgr


class TestDefaults:
    """Config should ship with sensible defaults."""

    def test_spreadsheet(self, tmp_path: Path) -> None:
        mgr = _make_manager(tmp_path)
        assert mgr.get("spreadsheet_path") == "worklogs.xlsx"
        assert mgr.get("sheet_name") == "Worklogs"

    def test_jira_settings_empty(self, tmp_path: Path) -> None:
        mgr = _make_manager(tmp_path)
        assert mgr.get("jira_org") == ""
        assert mgr.get("jira_account_id") == ""

    def test_request_limits(self, tmp_path: Path) -> None:
        mgr = _make_manager(tmp_path)
        assert mgr.get("request_timeout") == 30
        assert mgr.get("max_workers") == 8

    def test_missing_key_returns_default(self, tmp_path: Path) -> None:
        mgr = _make_manager(tmp_path)
        assert mgr.get("nonexistent", "fallback") == "fallback"


class TestSetAndGet:
    """Setting values should persist and be retrievable."""

    def test_set_single(self, tmp_path: Path) -> None:
        mgr = _make_manager(tmp_path)
        mgr.set("sheet_name", "Março")
        assert mgr.get("sheet_name") == "Março"

    def test_update_bulk(self, tmp_path: Path) -> None:
        mgr = _make_manager(tmp_path)
        mgr.update({"jira_org": "acme", "jira_email": "a@b.com"})
        assert mgr.get("jira_org") == "acme"
        assert mgr.get("jira_email") == "a@b.com"

    def test_data_property_returns_copy(self, tmp_path: Path) -> None:
        mgr = _make_manager(tmp_path)
        data = mgr.data
        data["sheet_name"] = "Other"
        assert mgr.get("sheet_name") == "Worklogs"


class TestOverrides:
    """Environment and CLI values win over the stored file for one run."""

    def test_environment_overrides_file(self, tmp_path: Path) -> None:
        mgr = _make_manager(tmp_path, environ={"JIRA_ORG": "from-env", "WORKLOG_SHEET": "S"})
        assert mgr.get("jira_org") == "from-env"
        assert mgr.get("sheet_name") == "S"
        assert mgr.data["jira_org"] == "from-env"

    def test_empty_environment_value_ignored(self, tmp_path: Path) -> None:
        mgr = _make_manager(tmp_path, environ={"JIRA_ORG": ""})
        assert mgr.get("jira_org") == ""

    def test_overrides_are_not_persisted(self, tmp_path: Path) -> None:
        mgr = _make_manager(tmp_path, environ={"JIRA_EMAIL": "env@b.com"})
        mgr.override("spreadsheet_path", "cli.xlsx")
        mgr.set("jira_org", "acme")

        raw = json.loads((tmp_path / "config.json").read_text())
        assert raw["jira_email"] == ""
        assert raw["spreadsheet_path"] == "worklogs.xlsx"
        assert mgr.get("spreadsheet_path") == "cli.xlsx"

    def test_set_clears_override(self, tmp_path: Path) -> None:
        mgr = _make_manager(tmp_path)
        mgr.override("sheet_name", "Temp")
        mgr.set("sheet_name", "Saved")
        assert mgr.get("sheet_name") == "Saved"


class TestPersistence:
    """Config should persist to and load from disk."""

    def test_round_trip(self, tmp_path: Path) -> None:
        mgr = _make_manager(tmp_path)
        mgr.set("jira_org", "acme")
        mgr.set("timezone", "America/Sao_Paulo")

        mgr2 = ConfigManager(environ={})
        mgr2._dir = tmp_path
        mgr2._path = tmp_path / "config.json"
        mgr2._data = {}
        mgr2._load()
        assert mgr2.get("jira_org") == "acme"
        assert mgr2.get("timezone") == "America/Sao_Paulo"

    def test_reset_restores_defaults(self, tmp_path: Path) -> None:
        mgr = _make_manager(tmp_path)
        mgr.set("sheet_name", "Other")
        mgr.reset()
        assert mgr.get("sheet_name") == "Worklogs"

    def test_corrupt_file_does_not_crash(self, tmp_path: Path) -> None:
        config_path = tmp_path / "config.json"
        config_path.write_text("NOT JSON {{{", encoding="utf-8")

        mgr = ConfigManager(environ={})
        mgr._dir = tmp_path
        mgr._path = config_path
        mgr._data = {"sheet_name": "Worklogs"}
        mgr._load()
        assert mgr.get("sheet_name") == "Worklogs"


class TestDotenv:
    """A ``.env`` in the working directory is read when no environ is given."""

    @patch("worklog_sheet_reporter.services.config_manager.user_config_dir")
    def test_env_file_in_working_directory(
        self, mock_dir, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        mock_dir.return_value = str(tmp_path / "config")
        (tmp_path / ".env").write_text("JIRA_ORG=from-dotenv\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path)

        with patch.dict(os.environ):
            os.environ.pop("JIRA_ORG", None)
            mgr = ConfigManager()

        assert mgr.get("jira_org") == "from-dotenv"

    @patch("worklog_sheet_reporter.services.config_manager.user_config_dir")
    def test_real_environment_wins_over_env_file(
        self, mock_dir, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        mock_dir.return_value = str(tmp_path / "config")
        (tmp_path / ".env").write_text("JIRA_ORG=from-dotenv\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path)

        with patch.dict(os.environ, {"JIRA_ORG": "from-shell"}):
            mgr = ConfigManager()

        assert mgr.get("jira_org") == "from-shell"


class TestReset:
    def test_reset_keeps_environment_overrides(self, tmp_path: Path) -> None:
        mgr = _make_manager(tmp_path, environ={"JIRA_ORG": "from-env"})
        mgr.set("sheet_name", "Other")
        mgr.reset()
        assert mgr.get("sheet_name") == "Worklogs"
        assert mgr.get("jira_org") == "from-env"
