"""Monorepo detection.

When the wizard runs at the root of a workspace, the framework usually
lives in one of the member packages. :func:`detect_workspaces` finds
those members so the user can pick one.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

IGNORE_DIRS = frozenset({
    "node_modules",
    "dist",
    "build",
    ".venv",
    "venv",
    "env",
    "__pycache__",
    ".git",
    ".next",
    ".nuxt",
    ".output",
    "vendor",
    "Pods",
    "DerivedData",
    ".build",
    ".gradle",
})

# Files marking a project root at depth 1 or 2, across supported ecosystems.
_PROJECT_INDICATORS = (
    "package.json",
    "manage.py",
    "pyproject.toml",
    "requirements.txt",
    "composer.json",
    "artisan",
    "Gemfile",
    "build.gradle",
    "build.gradle.kts",
    "Package.swift",
)


@dataclass
class WorkspaceInfo:
    """A detected workspace.

    Attributes:
        type: One of ``pnpm``, ``yarn``, ``npm``, ``nx``, ``turbo``,
            ``lerna`` or ``heuristic``.
        root_dir: Workspace root.
        member_dirs: Absolute member directories, de-duplicated.
    """

    type: str
    root_dir: Path
    member_dirs: list[Path] = field(default_factory=list)


def _is_ignored(path: Path, root: Path) -> bool:
    return any(part in IGNORE_DIRS for part in path.relative_to(root).parts)


def _unique(paths: list[Path]) -> list[Path]:
    seen: dict[Path, None] = {}
    for p in paths:
        seen.setdefault(p, None)
    return list(seen)


def resolve_glob_patterns(root_dir: Path, patterns: list[str]) -> list[Path]:
    """Expand workspace globs to existing member directories."""
    dirs: list[Path] = []
    for pattern in patterns:
        pattern = pattern.rstrip("/")
        for match in sorted(root_dir.glob(pattern)):
            if match.is_dir() and not _is_ignored(match, root_dir):
                dirs.append(match.resolve())
    return _unique(dirs)


def parse_pnpm_workspace_yaml(content: str) -> list[str]:
    """Return the positive package globs from ``pnpm-workspace.yaml``.

    Negated patterns (``!packages/internal``) are dropped.
    """
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError:
        logger.debug("Unparseable pnpm-workspace.yaml")
        return []
    if not isinstance(data, dict):
        return []
    packages = data.get("packages") or []
    if not isinstance(packages, list):
        return []
    return [str(p) for p in packages if p and not str(p).startswith("!")]


def _read_json(path: Path) -> dict | None:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return None
    return data if isinstance(data, dict) else None


# ---------------------------------------------------------------------------
# Detectors
# ---------------------------------------------------------------------------


def _detect_pnpm(root: Path) -> WorkspaceInfo | None:
    workspace_file = root / "pnpm-workspace.yaml"
    if not workspace_file.exists():
        return None
    patterns = parse_pnpm_workspace_yaml(workspace_file.read_text(encoding="utf-8"))
    if not patterns:
        return None
    members = resolve_glob_patterns(root, patterns)
    if not members:
        return None
    kind = "turbo" if (root / "turbo.json").exists() else "pnpm"
    return WorkspaceInfo(kind, root, members)


def _detect_npm_or_yarn(root: Path) -> WorkspaceInfo | None:
    package_json = _read_json(root / "package.json")
    if package_json is None:
        return None
    workspaces = package_json.get("workspaces")
    if isinstance(workspaces, dict):
        workspaces = workspaces.get("packages")
    if not isinstance(workspaces, list) or not workspaces:
        return None
    members = resolve_glob_patterns(root, [str(p) for p in workspaces])
    if not members:
        return None
    if (root / "turbo.json").exists():
        kind = "turbo"
    elif (root / "yarn.lock").exists():
        kind = "yarn"
    else:
        kind = "npm"
    return WorkspaceInfo(kind, root, members)


def _detect_lerna(root: Path) -> WorkspaceInfo | None:
    lerna = _read_json(root / "lerna.json")
    if lerna is None:
        return None
    patterns = lerna.get("packages")
    if not isinstance(patterns, list) or not patterns:
        return None
    members = resolve_glob_patterns(root, [str(p) for p in patterns])
    return WorkspaceInfo("lerna", root, members) if members else None


def _detect_nx(root: Path) -> WorkspaceInfo | None:
    if not (root / "nx.json").exists():
        return None
    project_files = [*root.glob("*/project.json"), *root.glob("*/*/project.json")]
    members = _unique(
        [p.parent.resolve() for p in project_files if not _is_ignored(p, root)]
    )
    return WorkspaceInfo("nx", root, members) if members else None


def _detect_heuristic(root: Path) -> WorkspaceInfo | None:
    candidates: list[Path] = []
    for depth in ("*", "*/*"):
        for indicator in _PROJECT_INDICATORS:
            for match in root.glob(f"{depth}/{indicator}"):
                if match.is_file() and not _is_ignored(match, root):
                    candidates.append(match.parent.resolve())
        for xcodeproj in root.glob(f"{depth}/*.xcodeproj"):
            if xcodeproj.is_dir() and not _is_ignored(xcodeproj, root):
                candidates.append(xcodeproj.parent.resolve())

    resolved_root = root.resolve()
    members = sorted(d for d in _unique(candidates) if d != resolved_root)
    if len(members) < 2:
        return None
    return WorkspaceInfo("heuristic", root, members)


def detect_workspaces(root_dir: str | Path) -> WorkspaceInfo | None:
    """Detect a monorepo rooted at ``root_dir``.

    Formal workspace files are tried first (pnpm, npm/yarn, lerna, nx);
    otherwise two or more project roots one or two levels down count as
    a heuristic workspace.

    Returns:
        The workspace, or None when ``root_dir`` is a single project.
    """
    root = Path(root_dir)
    for detector in (_detect_pnpm, _detect_npm_or_yarn, _detect_lerna, _detect_nx):
        info = detector(root)
        if info is not None:
            logger.info("Detected %s workspace with %d member(s)", info.type, len(info.member_dirs))
            return info
    return _detect_heuristic(root)
