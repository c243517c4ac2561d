"""Readers for dependency manifests: package.json, composer.json, Gemfile and Python files.

Every reader returns an empty result for a missing or malformed file;
detection code treats "cannot read" the same as "not present".
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

PYTHON_MANIFESTS = ("requirements.txt", "requirements-dev.txt", "pyproject.toml", "setup.py", "Pipfile")

_DEPENDENCY_SECTIONS = ("dependencies", "devDependencies", "peerDependencies")


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def read_text(path: Path) -> str:
    """Return a file's content, or an empty string when it cannot be read."""
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return ""


# ---------------------------------------------------------------------------
# package.json
# ---------------------------------------------------------------------------


def read_package_json(install_dir: str | Path) -> dict[str, Any]:
    """Load ``package.json`` from the project root."""
    return _read_json(Path(install_dir) / "package.json")


def get_package_version(package_name: str, package_json: dict[str, Any] | None) -> str | None:
    """Return the declared version range of ``package_name``, if any.

    Searches dependencies, devDependencies and peerDependencies in order.
    """
    if not package_json:
        return None
    for section in _DEPENDENCY_SECTIONS:
        deps = package_json.get(section) or {}
        if isinstance(deps, dict) and package_name in deps:
            return str(deps[package_name])
    return None


def has_package_installed(package_name: str, package_json: dict[str, Any] | None) -> bool:
    """Return True when ``package_name`` is declared in ``package_json``."""
    return get_package_version(package_name, package_json) is not None


def has_any_package(package_names: list[str], package_json: dict[str, Any] | None) -> bool:
    """Return True when any of ``package_names`` is declared."""
    return any(has_package_installed(name, package_json) for name in package_names)


# ---------------------------------------------------------------------------
# composer.json
# ---------------------------------------------------------------------------


def read_composer_json(install_dir: str | Path) -> dict[str, Any]:
    """Load ``composer.json`` from the project root."""
    return _read_json(Path(install_dir) / "composer.json")


def get_composer_requirements(composer_json: dict[str, Any]) -> dict[str, str]:
    """Merge ``require`` and ``require-dev`` into one mapping."""
    merged: dict[str, str] = {}
    for section in ("require", "require-dev"):
        deps = composer_json.get(section) or {}
        if isinstance(deps, dict):
            merged.update({str(k): str(v) for k, v in deps.items()})
    return merged


# ---------------------------------------------------------------------------
# Gemfile
# ---------------------------------------------------------------------------


def gemfile_has_gem(install_dir: str | Path, gem: str) -> bool:
    """Return True when the Gemfile declares ``gem``."""
    content = read_text(Path(install_dir) / "Gemfile")
    return bool(re.search(rf"^\s*gem\s+['\"]{re.escape(gem)}['\"]", content, re.MULTILINE))


def get_gem_version(install_dir: str | Path, gem: str) -> str | None:
    """Return the locked version of ``gem`` from ``Gemfile.lock``."""
    content = read_text(Path(install_dir) / "Gemfile.lock")
    m = re.search(rf"^\s{{4}}{re.escape(gem)} \(([^)]+)\)", content, re.MULTILINE)
    return m.group(1) if m else None


# ---------------------------------------------------------------------------
# Python manifests
# ---------------------------------------------------------------------------


def read_python_manifests(install_dir: str | Path) -> str:
    """Concatenate the Python dependency manifests found in the project root.

    ``requirements/*.txt`` files are included as well.
    """
    root = Path(install_dir)
    chunks = [read_text(root / name) for name in PYTHON_MANIFESTS]
    req_dir = root / "requirements"
    if req_dir.is_dir():
        chunks.extend(read_text(p) for p in sorted(req_dir.glob("*.txt")))
    return "\n".join(chunk for chunk in chunks if chunk)


def python_package_declared(install_dir: str | Path, package: str) -> bool:
    """Return True when a Python manifest names ``package`` as a dependency."""
    content = read_python_manifests(install_dir)
    name = re.escape(package)
    patterns = (
        rf"^\s*{name}\s*([<>=~!\[;]|$)",
        rf"[\"']{name}\s*([<>=~!\[;][^\"']*)?[\"']",
        rf"^\s*{name}\s*=",
    )
    return any(re.search(p, content, re.IGNORECASE | re.MULTILINE) for p in patterns)


def get_python_package_version(install_dir: str | Path, package: str) -> str | None:
    """Return the version pinned for ``package`` in a Python manifest."""
    content = read_python_manifests(install_dir)
    name = re.escape(package)
    patterns = (
        rf"{name}\s*[=<>~!]+\s*([0-9]+\.[0-9]+(?:\.[0-9]+)?)",
        rf"{name}\s*=\s*[\"'][\^~>=<]*([0-9]+\.[0-9]+(?:\.[0-9]+)?)",
    )
    for pattern in patterns:
        m = re.search(pattern, content, re.IGNORECASE)
        if m:
            return m.group(1)
    return None


def is_using_typescript(install_dir: str | Path) -> bool:
    """Return True when the project has a ``tsconfig.json`` or declares typescript."""
    root = Path(install_dir)
    if (root / "tsconfig.json").exists():
        return True
    return has_package_installed("typescript", read_package_json(root))
