"""Tests for migrating from Amplitude with fake package managers and gateway."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from posthog_wizard.config import WizardOptions
from posthog_wizard.constants import WIZARD_MARKER_FILENAME, CloudRegion
from posthog_wizard.exceptions import PackageManagerError, QueryError, UserCancelledError, WizardError
from posthog_wizard.gateway import ProjectData
from posthog_wizard.migrate import wizard as migration
from posthog_wizard.migrate.providers import AMPLITUDE, get_migration_provider
from posthog_wizard.pipeline.changes import FILTER_FILES_SCHEMA
from tests.helpers import RecordingAnalytics, ScriptedUI, write_files, write_package_json


@pytest.fixture
def package_calls(monkeypatch: pytest.MonkeyPatch) -> list[tuple[str, str, list[str]]]:
    """Record install and uninstall calls instead of running a package manager."""
    calls: list[tuple[str, str, list[str]]] = []

    def fake_install(manager: Any, packages: list[str], install_dir: Path, force_install: bool = False) -> None:
        calls.append(("install", manager.name, list(packages)))

    def fake_uninstall(manager: Any, packages: list[str], install_dir: Path) -> None:
        calls.append(("uninstall", manager.name, list(packages)))

    monkeypatch.setattr(migration, "install_packages", fake_install)
    monkeypatch.setattr(migration, "uninstall_packages", fake_uninstall)
    return calls


def _options(project_dir: Path) -> WizardOptions:
    return WizardOptions(install_dir=project_dir, ci=True, cloud_region=CloudRegion.US, api_key="phx_test")


class TestHelpers:
    """Tests for framework and package mapping."""

    def test_detect_framework(self, project_dir: Path) -> None:
        """Meta-frameworks win over React; plain Node is the fallback."""
        assert migration.detect_migration_framework(project_dir) == "node"
        write_package_json(project_dir, dependencies={"react": "18.0.0", "next": "14.0.0"})
        assert migration.detect_migration_framework(project_dir) == "nextjs"

    def test_posthog_packages(self) -> None:
        """Provider packages map to deduplicated PostHog packages."""
        assert migration.get_posthog_packages(AMPLITUDE, ["amplitude-js", "@amplitude/analytics-browser"]) == [
            "posthog-js"
        ]
        assert migration.get_posthog_packages(AMPLITUDE, ["@amplitude/analytics-node"]) == ["posthog-node"]
        assert migration.get_posthog_packages(AMPLITUDE, []) == ["posthog-js"]

    def test_installed_provider_packages(self) -> None:
        """Only provider packages present in package.json are reported."""
        package_json = {"dependencies": {"amplitude-js": "^8.0.0", "react": "18.0.0"}}
        assert migration.get_installed_provider_packages(AMPLITUDE, package_json) == [("amplitude-js", "^8.0.0")]

    def test_provider_lookup(self) -> None:
        """Unknown providers are None."""
        assert get_migration_provider("amplitude") is AMPLITUDE
        assert get_migration_provider("mixpanel") is None


class TestRunMigration:
    """End-to-end migration runs."""

    def test_migrates_files(
        self, project_dir: Path, project_data: ProjectData, package_calls: list[tuple[str, str, list[str]]]
    ) -> None:
        """Packages are swapped, flagged files rewritten and broken ones skipped."""
        write_package_json(project_dir, dependencies={"react": "18.2.0", "@amplitude/analytics-browser": "2.0.0"})
        write_files(project_dir, {
            "yarn.lock": "",
            "src/track.js": "amplitude.track('x')\n",
            "src/other.js": "legacyTracker() // unmigratable\n",
        })

        def ask(prompt: str, schema: dict[str, Any]) -> Any:
            if schema is FILTER_FILES_SCHEMA:
                return {"files": ["src/track.js", "src/other.js", "src/gone.js"]}
            if "unmigratable" in prompt:
                raise QueryError("gateway failed")
            return {"newContent": "posthog.capture('x')\n"}

        ui = ScriptedUI(ci=True)
        analytics = RecordingAnalytics()
        migration.run_migration_wizard(_options(project_dir), "amplitude", ui, analytics, fetch=lambda k, r: project_data, ask=ask)

        assert package_calls == [
            ("uninstall", "yarn", ["@amplitude/analytics-browser"]),
            ("install", "yarn", ["posthog-js"]),
        ]
        assert (project_dir / "src/track.js").read_text() == "posthog.capture('x')\n"
        assert (project_dir / "src/other.js").read_text() == "legacyTracker() // unmigratable\n"
        assert "REACT_APP_POSTHOG_KEY=phc_test" in (project_dir / ".env").read_text()
        marker = json.loads((project_dir / WIZARD_MARKER_FILENAME).read_text())
        assert marker["status"] == "success"
        assert marker["integration"] == "react"
        assert analytics.finished_status() == "success"
        assert "Migration from Amplitude complete!" in ui.output

    def test_uninstall_failure_is_a_warning(
        self, project_dir: Path, project_data: ProjectData, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A failed uninstall asks the user to clean up and the run continues."""
        write_package_json(project_dir, dependencies={"amplitude-js": "8.0.0"})

        def broken_uninstall(*_args: Any) -> None:
            raise PackageManagerError("npm exploded")

        monkeypatch.setattr(migration, "uninstall_packages", broken_uninstall)
        monkeypatch.setattr(migration, "install_packages", lambda *a, **k: None)
        ui = ScriptedUI(ci=True)
        migration.run_migration_wizard(
            _options(project_dir), "amplitude", ui, RecordingAnalytics(),
            fetch=lambda k, r: project_data, ask=lambda prompt, schema: {"files": []},
        )
        assert "Please remove them manually" in ui.output
        assert "No files with Amplitude code detected" in ui.output

    def test_no_sdk_declined(self, project_dir: Path) -> None:
        """Without the provider SDK the user must confirm to continue."""
        write_package_json(project_dir, dependencies={"react": "18.2.0"})
        with pytest.raises(UserCancelledError):
            migration.run_migration_wizard(_options(project_dir), "amplitude", ScriptedUI(ci=True))

    def test_unknown_provider(self, project_dir: Path) -> None:
        """An unknown provider fails before anything is asked."""
        ui = ScriptedUI()
        with pytest.raises(WizardError):
            migration.run_migration_wizard(_options(project_dir), "mixpanel", ui)
        assert ui.questions == []

    def test_install_failure_marks_error(
        self, project_dir: Path, project_data: ProjectData, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A failed PostHog install ends the run with an error marker."""
        write_package_json(project_dir, dependencies={"amplitude-js": "8.0.0"})

        def broken_install(*_args: Any, **_kwargs: Any) -> None:
            raise PackageManagerError("no network")

        monkeypatch.setattr(migration, "uninstall_packages", lambda *a: None)
        monkeypatch.setattr(migration, "install_packages", broken_install)
        analytics = RecordingAnalytics()
        with pytest.raises(PackageManagerError):
            migration.run_migration_wizard(
                _options(project_dir), "amplitude", ScriptedUI(ci=True), analytics, fetch=lambda k, r: project_data
            )
        marker = json.loads((project_dir / WIZARD_MARKER_FILENAME).read_text())
        assert marker["status"] == "error"
        assert analytics.finished_status() == "error"
