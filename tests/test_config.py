"""Tests for run option helpers and logging setup."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import pytest

from posthog_wizard.config import resolve_install_dir
from posthog_wizard.logging_setup import configure_logging


class TestResolveInstallDir:
    """Tests for ``resolve_install_dir``."""

    def test_default_is_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """No flag means the current directory."""
        monkeypatch.chdir(tmp_path)
        assert resolve_install_dir(None) == Path(os.getcwd())

    def test_relative(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Relative paths are joined to the current directory."""
        monkeypatch.chdir(tmp_path)
        assert resolve_install_dir("web") == Path(os.getcwd()) / "web"

    def test_absolute(self, tmp_path: Path) -> None:
        """Absolute paths are kept."""
        assert resolve_install_dir(str(tmp_path)) == tmp_path


class TestConfigureLogging:
    """Tests for ``configure_logging``."""

    def test_file_handler(self, tmp_path: Path) -> None:
        """Records go to the log file at INFO without debug."""
        log_file = tmp_path / "wizard.log"
        configure_logging(log_file=str(log_file))
        logging.getLogger("posthog_wizard.test").info("hello from the test")
        for handler in logging.getLogger("posthog_wizard").handlers:
            handler.flush()
        assert "hello from the test" in log_file.read_text()

    def test_reconfigure_replaces_handlers(self, tmp_path: Path) -> None:
        """Calling twice does not stack handlers."""
        configure_logging(debug=True, log_file=str(tmp_path / "a.log"))
        configure_logging(debug=True, log_file=str(tmp_path / "b.log"))
        assert len(logging.getLogger("posthog_wizard").handlers) == 2

    def test_unwritable_log_file(self, tmp_path: Path) -> None:
        """A log file that cannot be opened is skipped."""
        configure_logging(log_file=str(tmp_path / "missing" / "dir" / "x.log"))
        assert logging.getLogger("posthog_wizard").handlers == []
