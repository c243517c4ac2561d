"""Tests for package manager detection and command execution."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any

import pytest

from posthog_wizard.exceptions import PackageManagerError
from posthog_wizard.packages.managers import (
    BUN,
    COMPOSER,
    NPM,
    PNPM,
    YARN,
    PythonPackageManager,
    composer_package_manager,
    detect_node_package_managers,
    detect_python_package_manager,
    get_node_package_manager,
    install_packages,
    uninstall_packages,
)
from tests.helpers import write_files


class _Recorder:
    """Stands in for ``subprocess.run`` and records the commands."""

    def __init__(self, returncode: int = 0, stderr: str = "") -> None:
        self.calls: list[tuple[list[str], str]] = []
        self.returncode = returncode
        self.stderr = stderr

    def __call__(self, command: list[str], cwd: str, **_kwargs: Any) -> subprocess.CompletedProcess:
        self.calls.append((command, cwd))
        return subprocess.CompletedProcess(command, self.returncode, stdout="", stderr=self.stderr)


class TestNodeDetection:
    """Tests for lockfile-based Node detection."""

    def test_no_lockfile(self, tmp_path: Path) -> None:
        """Without a lockfile there is no primary and npm is recommended."""
        info = detect_node_package_managers(tmp_path)
        assert info.primary is None
        assert info.detected == []
        assert "npm" in info.recommendation
        assert get_node_package_manager(tmp_path) == NPM

    @pytest.mark.parametrize(
        ("lockfile", "manager"),
        [("bun.lockb", BUN), ("pnpm-lock.yaml", PNPM), ("yarn.lock", YARN), ("package-lock.json", NPM)],
    )
    def test_single_lockfile(self, tmp_path: Path, lockfile: str, manager: Any) -> None:
        """Each lockfile maps to its manager."""
        (tmp_path / lockfile).write_text("")
        info = detect_node_package_managers(tmp_path)
        assert info.primary == manager
        assert info.detected == [manager]

    def test_multiple_lockfiles_prefer_first(self, tmp_path: Path) -> None:
        """pnpm beats yarn and npm when several lockfiles exist."""
        write_files(tmp_path, {"yarn.lock": "", "pnpm-lock.yaml": "", "package-lock.json": ""})
        info = detect_node_package_managers(tmp_path)
        assert info.primary == PNPM
        assert info.detected == [PNPM, YARN, NPM]
        assert info.recommendation.startswith("Multiple package managers detected")

    def test_to_dict(self, tmp_path: Path) -> None:
        """Serialized info uses camelCase command keys."""
        (tmp_path / "yarn.lock").write_text("")
        data = detect_node_package_managers(tmp_path).to_dict()
        assert data["primary"]["installCommand"] == "yarn add"


class TestPythonDetection:
    """Tests for ``detect_python_package_manager``."""

    @pytest.mark.parametrize(
        ("files", "expected"),
        [
            ({"uv.lock": "", "poetry.lock": ""}, PythonPackageManager.UV),
            ({"pyproject.toml": "[tool.poetry]\nname='x'\n"}, PythonPackageManager.POETRY),
            ({"pyproject.toml": "[tool.pdm]\n"}, PythonPackageManager.PDM),
            ({"pyproject.toml": "[tool.hatch.envs.default]\n"}, PythonPackageManager.HATCH),
            ({"poetry.lock": ""}, PythonPackageManager.POETRY),
            ({"Pipfile": ""}, PythonPackageManager.PIPENV),
            ({"environment.yml": ""}, PythonPackageManager.CONDA),
            ({"requirements.txt": "django\n"}, PythonPackageManager.PIP),
            ({"requirements/base.txt": "flask\n"}, PythonPackageManager.PIP),
            ({"pyproject.toml": "[project]\nname='x'\n"}, PythonPackageManager.PIP),
            ({}, PythonPackageManager.UNKNOWN),
        ],
    )
    def test_detection_order(self, tmp_path: Path, files: dict[str, str], expected: PythonPackageManager) -> None:
        """Lockfiles and tool sections are checked before plain pip manifests."""
        write_files(tmp_path, files)
        assert detect_python_package_manager(tmp_path) == expected


class TestInstall:
    """Tests for ``install_packages`` and ``uninstall_packages``."""

    def test_install_runs_in_project(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """The install command is the manager prefix plus the packages."""
        recorder = _Recorder()
        monkeypatch.setattr(subprocess, "run", recorder)
        install_packages(PNPM, ["posthog-js"], tmp_path)
        assert recorder.calls == [(["pnpm", "add", "posthog-js"], str(tmp_path))]

    def test_force_install_only_for_npm(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """``--force`` is appended for npm and ignored for others."""
        recorder = _Recorder()
        monkeypatch.setattr(subprocess, "run", recorder)
        install_packages(NPM, ["posthog-js"], tmp_path, force_install=True)
        install_packages(YARN, ["posthog-js"], tmp_path, force_install=True)
        assert recorder.calls[0][0] == ["npm", "add", "posthog-js", "--force"]
        assert recorder.calls[1][0] == ["yarn", "add", "posthog-js"]

    def test_failure_raises(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """A non-zero exit becomes a PackageManagerError with stderr."""
        monkeypatch.setattr(subprocess, "run", _Recorder(returncode=1, stderr="ERESOLVE"))
        with pytest.raises(PackageManagerError, match="ERESOLVE"):
            install_packages(NPM, ["posthog-js"], tmp_path)

    def test_missing_executable(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """An executable that cannot be started raises PackageManagerError."""

        def _missing(*_args: Any, **_kwargs: Any) -> None:
            raise FileNotFoundError("bun")

        monkeypatch.setattr(subprocess, "run", _missing)
        with pytest.raises(PackageManagerError, match="Could not run bun"):
            install_packages(BUN, ["posthog-js"], tmp_path)

    def test_uninstall(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Uninstall uses the manager's remove command."""
        recorder = _Recorder()
        monkeypatch.setattr(subprocess, "run", recorder)
        uninstall_packages(NPM, ["@amplitude/analytics-browser"], tmp_path)
        assert recorder.calls[0][0] == ["npm", "uninstall", "@amplitude/analytics-browser"]


def test_composer_is_always_primary(tmp_path: Path) -> None:
    """PHP projects always report Composer."""
    assert composer_package_manager(tmp_path).primary == COMPOSER
