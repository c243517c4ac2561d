"""Package manager detection and install/uninstall commands.

Each ecosystem has its own detector returning a :class:`PackageManagerInfo`
with every manager found, the one to prefer, and a sentence the agent can
act on. Installs shell out to the detected manager inside the project
directory.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable

from posthog_wizard.exceptions import PackageManagerError
from posthog_wizard.packages.manifest import read_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackageManager:
    """One package manager and the commands it uses.

    Attributes:
        name: Executable name, e.g. ``pnpm``.
        label: Human-readable name.
        install_command: Command prefix that adds a dependency.
        run_command: Command prefix that runs a project script, if any.
        uninstall_command: Command prefix that removes a dependency.
    """

    name: str
    label: str
    install_command: str
    run_command: str | None = None
    uninstall_command: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = {
            "name": self.name,
            "label": self.label,
            "installCommand": self.install_command,
        }
        if self.run_command:
            data["runCommand"] = self.run_command
        return data


@dataclass
class PackageManagerInfo:
    """Result of package manager detection for a project."""

    detected: list[PackageManager] = field(default_factory=list)
    primary: PackageManager | None = None
    recommendation: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "detected": [pm.to_dict() for pm in self.detected],
            "primary": self.primary.to_dict() if self.primary else None,
            "recommendation": self.recommendation,
        }


PackageManagerDetector = Callable[[Path], PackageManagerInfo]


# ---------------------------------------------------------------------------
# Node.js
# ---------------------------------------------------------------------------

BUN = PackageManager("bun", "Bun", "bun add", "bun run", "bun remove")
PNPM = PackageManager("pnpm", "pnpm", "pnpm add", "pnpm", "pnpm remove")
YARN = PackageManager("yarn", "Yarn", "yarn add", "yarn", "yarn remove")
NPM = PackageManager("npm", "npm", "npm add", "npm run", "npm uninstall")

# Checked in this order; the first lockfile found is the primary manager.
_NODE_LOCKFILES: tuple[tuple[tuple[str, ...], PackageManager], ...] = (
    (("bun.lockb", "bun.lock"), BUN),
    (("pnpm-lock.yaml",), PNPM),
    (("yarn.lock",), YARN),
    (("package-lock.json", "npm-shrinkwrap.json"), NPM),
)


def detect_all_node_package_managers(install_dir: Path) -> list[PackageManager]:
    """Return every Node package manager with a lockfile in ``install_dir``."""
    root = Path(install_dir)
    return [
        manager
        for lockfiles, manager in _NODE_LOCKFILES
        if any((root / lockfile).exists() for lockfile in lockfiles)
    ]


def detect_node_package_managers(install_dir: Path) -> PackageManagerInfo:
    """Detect Node package managers via lockfiles."""
    detected = detect_all_node_package_managers(install_dir)
    if not detected:
        return PackageManagerInfo(
            detected=[],
            primary=None,
            recommendation="No lockfile found. Default to npm (npm add, npm run).",
        )

    primary = detected[0]
    if len(detected) == 1:
        recommendation = f"Use {primary.label} ({primary.install_command})."
    else:
        recommendation = (
            f"Multiple package managers detected. "
            f"Prefer {primary.label} ({primary.install_command})."
        )
    return PackageManagerInfo(detected=detected, primary=primary, recommendation=recommendation)


def get_node_package_manager(install_dir: Path) -> PackageManager:
    """Return the project's Node package manager, defaulting to npm."""
    detected = detect_all_node_package_managers(install_dir)
    return detected[0] if detected else NPM


# ---------------------------------------------------------------------------
# Python
# ---------------------------------------------------------------------------


class PythonPackageManager(str, Enum):
    UV = "uv"
    POETRY = "poetry"
    PDM = "pdm"
    HATCH = "hatch"
    RYE = "rye"
    PIPENV = "pipenv"
    CONDA = "conda"
    PIP = "pip"
    UNKNOWN = "unknown"


_PYTHON_MANAGERS: dict[PythonPackageManager, PackageManager] = {
    PythonPackageManager.UV: PackageManager("uv", "uv", "uv add", "uv run", "uv remove"),
    PythonPackageManager.POETRY: PackageManager("poetry", "Poetry", "poetry add", "poetry run", "poetry remove"),
    PythonPackageManager.PDM: PackageManager("pdm", "PDM", "pdm add", "pdm run", "pdm remove"),
    PythonPackageManager.HATCH: PackageManager("hatch", "Hatch", "hatch add", "hatch run"),
    PythonPackageManager.RYE: PackageManager("rye", "Rye", "rye add", "rye run", "rye remove"),
    PythonPackageManager.PIPENV: PackageManager("pipenv", "Pipenv", "pipenv install", "pipenv run", "pipenv uninstall"),
    PythonPackageManager.CONDA: PackageManager("conda", "Conda", "conda install", "conda run", "conda remove"),
    PythonPackageManager.PIP: PackageManager("pip", "pip", "pip install", None, "pip uninstall -y"),
    PythonPackageManager.UNKNOWN: PackageManager("pip", "pip (default)", "pip install", None, "pip uninstall -y"),
}

_PYPROJECT_TOOLS: tuple[tuple[str, PythonPackageManager], ...] = (
    ("[tool.poetry]", PythonPackageManager.POETRY),
    ("[tool.pdm]", PythonPackageManager.PDM),
    ("[tool.hatch", PythonPackageManager.HATCH),
    ("[tool.rye]", PythonPackageManager.RYE),
)


def detect_python_package_manager(install_dir: Path) -> PythonPackageManager:
    """Identify the Python package manager from lockfiles and config files.

    Checked in order: ``uv.lock``, tool sections in ``pyproject.toml``,
    ``poetry.lock``, ``pdm.lock``, Pipfile, conda environment files, then
    plain pip manifests.
    """
    root = Path(install_dir)

    if (root / "uv.lock").exists():
        return PythonPackageManager.UV

    pyproject = read_text(root / "pyproject.toml")
    for marker, manager in _PYPROJECT_TOOLS:
        if marker in pyproject:
            return manager

    if (root / "poetry.lock").exists():
        return PythonPackageManager.POETRY
    if (root / "pdm.lock").exists():
        return PythonPackageManager.PDM
    if (root / "Pipfile").exists() or (root / "Pipfile.lock").exists():
        return PythonPackageManager.PIPENV
    if (root / "environment.yml").exists() or (root / "environment.yaml").exists():
        return PythonPackageManager.CONDA

    for name in ("requirements.txt", "setup.py", "setup.cfg", "pyproject.toml"):
        if (root / name).exists():
            return PythonPackageManager.PIP
    req_dir = root / "requirements"
    if req_dir.is_dir() and any(req_dir.glob("*.txt")):
        return PythonPackageManager.PIP

    return PythonPackageManager.UNKNOWN


def get_python_package_manager(install_dir: Path) -> PackageManager:
    """Return the command set for the project's Python package manager."""
    return _PYTHON_MANAGERS[detect_python_package_manager(install_dir)]


def detect_python_package_managers(install_dir: Path) -> PackageManagerInfo:
    """Detect the Python package manager as a :class:`PackageManagerInfo`."""
    manager = get_python_package_manager(install_dir)
    return PackageManagerInfo(
        detected=[manager],
        primary=manager,
        recommendation=f"Use {manager.label} ({manager.install_command}).",
    )


# ---------------------------------------------------------------------------
# PHP and Ruby
# ---------------------------------------------------------------------------

COMPOSER = PackageManager("composer", "Composer", "composer require", None, "composer remove")
BUNDLER = PackageManager("bundler", "Bundler", "bundle add", "bundle exec", "bundle remove")


def composer_package_manager(install_dir: Path) -> PackageManagerInfo:
    """Laravel and other PHP projects always use Composer."""
    return PackageManagerInfo(
        detected=[COMPOSER],
        primary=COMPOSER,
        recommendation="Use Composer (composer require).",
    )


def bundler_package_manager(install_dir: Path) -> PackageManagerInfo:
    """Ruby projects always use Bundler."""
    return PackageManagerInfo(
        detected=[BUNDLER],
        primary=BUNDLER,
        recommendation="Use Bundler (bundle add).",
    )


# ---------------------------------------------------------------------------
# Running commands
# ---------------------------------------------------------------------------


def run_command(command: list[str], cwd: Path) -> str:
    """Run a package manager command and return its stdout.

    Raises:
        PackageManagerError: If the command cannot be started or exits non-zero.
    """
    logger.info("Running %s in %s", " ".join(command), cwd)
    try:
        result = subprocess.run(
            command,
            cwd=str(cwd),
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        raise PackageManagerError(f"Could not run {command[0]}: {exc}") from exc

    if result.returncode != 0:
        logger.debug("stdout: %s\nstderr: %s", result.stdout, result.stderr)
        raise PackageManagerError(
            f"{' '.join(command)} exited with status {result.returncode}: "
            f"{result.stderr.strip()[-500:]}"
        )
    return result.stdout


def install_packages(
    manager: PackageManager,
    packages: list[str],
    install_dir: Path,
    force_install: bool = False,
) -> None:
    """Add ``packages`` to the project with ``manager``.

    Args:
        manager: Package manager to run.
        packages: Package names to add.
        install_dir: Project root to run the command in.
        force_install: Pass ``--force`` so npm ignores peer dependency conflicts.

    Raises:
        PackageManagerError: If the command cannot be run or fails.
    """
    command = shlex.split(manager.install_command) + list(packages)
    if force_install and manager.name == "npm":
        command.append("--force")
    run_command(command, install_dir)


def uninstall_packages(manager: PackageManager, packages: list[str], install_dir: Path) -> None:
    """Remove ``packages`` from the project with ``manager``.

    Raises:
        PackageManagerError: If the manager cannot uninstall or the command fails.
    """
    if not manager.uninstall_command:
        raise PackageManagerError(f"{manager.label} has no uninstall command")
    command = shlex.split(manager.uninstall_command) + list(packages)
    run_command(command, install_dir)
