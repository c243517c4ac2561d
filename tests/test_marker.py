"""Tests for the wizard marker file and rerun classification."""

from __future__ import annotations

import json
from pathlib import Path

from posthog_wizard import __version__
from posthog_wizard.constants import WIZARD_MARKER_FILENAME
from posthog_wizard.marker import (
    FRESH_INSTALL,
    MANUAL_INSTALL,
    RERUN_AFTER_SUCCESS,
    RETRY_AFTER_ERROR,
    STATUS_ERROR,
    STATUS_SUCCESS,
    classify_rerun_reason,
    read_wizard_marker,
    write_wizard_marker,
)


class TestWriteWizardMarker:
    """Tests for ``write_wizard_marker``."""

    def test_writes_expected_fields(self, tmp_path: Path) -> None:
        """The marker carries status, integration, timestamp and version."""
        write_wizard_marker(tmp_path, STATUS_SUCCESS, "nextjs")
        data = json.loads((tmp_path / WIZARD_MARKER_FILENAME).read_text())
        assert list(data)[0] == "_comment"
        assert "Safe to delete" in data["_comment"]
        assert data["status"] == "success"
        assert data["integration"] == "nextjs"
        assert data["wizardVersion"] == __version__
        assert data["completedAt"].endswith("+00:00")

    def test_write_failure_is_swallowed(self, tmp_path: Path) -> None:
        """A missing directory does not raise."""
        write_wizard_marker(tmp_path / "missing", STATUS_ERROR, "django")
        assert not (tmp_path / "missing").exists()


class TestReadWizardMarker:
    """Tests for ``read_wizard_marker``."""

    def test_round_trip(self, tmp_path: Path) -> None:
        """A written marker reads back with the same status."""
        write_wizard_marker(tmp_path, STATUS_ERROR, "flask")
        marker = read_wizard_marker(tmp_path)
        assert marker is not None
        assert marker.status == STATUS_ERROR
        assert marker.integration == "flask"

    def test_missing_file(self, tmp_path: Path) -> None:
        """No marker file reads as None."""
        assert read_wizard_marker(tmp_path) is None

    def test_malformed_json(self, tmp_path: Path) -> None:
        """Broken JSON reads as None."""
        (tmp_path / WIZARD_MARKER_FILENAME).write_text("{not json")
        assert read_wizard_marker(tmp_path) is None

    def test_missing_keys(self, tmp_path: Path) -> None:
        """JSON without the status field reads as None."""
        (tmp_path / WIZARD_MARKER_FILENAME).write_text('{"integration": "x"}')
        assert read_wizard_marker(tmp_path) is None


class TestClassifyRerunReason:
    """Tests for ``classify_rerun_reason``."""

    def test_fresh_install(self) -> None:
        """No marker and no SDK is a fresh install."""
        assert classify_rerun_reason(None, sdk_installed=False) == FRESH_INSTALL

    def test_manual_install(self) -> None:
        """No marker but the SDK present means it was installed by hand."""
        assert classify_rerun_reason(None, sdk_installed=True) == MANUAL_INSTALL

    def test_after_error_and_success(self, tmp_path: Path) -> None:
        """The previous status decides between retry and rerun."""
        write_wizard_marker(tmp_path, STATUS_ERROR, "react")
        assert classify_rerun_reason(read_wizard_marker(tmp_path), True) == RETRY_AFTER_ERROR
        write_wizard_marker(tmp_path, STATUS_SUCCESS, "react")
        assert classify_rerun_reason(read_wizard_marker(tmp_path), True) == RERUN_AFTER_SUCCESS
