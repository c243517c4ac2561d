"""Tests for monorepo detection."""

from __future__ import annotations

from pathlib import Path

from posthog_wizard.workspace import detect_workspaces, parse_pnpm_workspace_yaml
from tests.helpers import write_files, write_package_json


class TestParsePnpmWorkspaceYaml:
    """Tests for ``parse_pnpm_workspace_yaml``."""

    def test_drops_negations(self) -> None:
        """Negated globs are excluded."""
        content = "packages:\n  - 'apps/*'\n  - 'packages/*'\n  - '!packages/internal'\n"
        assert parse_pnpm_workspace_yaml(content) == ["apps/*", "packages/*"]

    def test_invalid_yaml(self) -> None:
        """Unparseable YAML yields no patterns."""
        assert parse_pnpm_workspace_yaml("packages: [unclosed") == []

    def test_non_mapping(self) -> None:
        """A YAML list at the top level yields no patterns."""
        assert parse_pnpm_workspace_yaml("- a\n- b\n") == []


class TestDetectWorkspaces:
    """Tests for ``detect_workspaces``."""

    def test_pnpm_workspace(self, tmp_path: Path) -> None:
        """pnpm globs expand to member directories."""
        write_files(tmp_path, {
            "pnpm-workspace.yaml": "packages:\n  - 'apps/*'\n",
            "apps/web/package.json": "{}",
            "apps/docs/package.json": "{}",
        })
        info = detect_workspaces(tmp_path)
        assert info is not None
        assert info.type == "pnpm"
        assert [p.name for p in info.member_dirs] == ["docs", "web"]

    def test_turbo_with_pnpm(self, tmp_path: Path) -> None:
        """A turbo.json next to pnpm-workspace.yaml marks a turbo repo."""
        write_files(tmp_path, {
            "pnpm-workspace.yaml": "packages:\n  - 'apps/*'\n",
            "turbo.json": "{}",
            "apps/web/package.json": "{}",
        })
        info = detect_workspaces(tmp_path)
        assert info is not None and info.type == "turbo"

    def test_npm_workspaces(self, tmp_path: Path) -> None:
        """package.json ``workspaces`` is honoured."""
        write_package_json(tmp_path, workspaces=["packages/*"])
        write_files(tmp_path, {"packages/a/package.json": "{}"})
        info = detect_workspaces(tmp_path)
        assert info is not None
        assert info.type == "npm"
        assert info.member_dirs == [(tmp_path / "packages" / "a").resolve()]

    def test_yarn_workspaces_object_form(self, tmp_path: Path) -> None:
        """The ``{packages: [...]}`` form with a yarn.lock is a yarn workspace."""
        write_package_json(tmp_path, workspaces={"packages": ["libs/*"]})
        write_files(tmp_path, {"yarn.lock": "", "libs/ui/package.json": "{}"})
        info = detect_workspaces(tmp_path)
        assert info is not None and info.type == "yarn"

    def test_heuristic_needs_two_projects(self, tmp_path: Path) -> None:
        """Two project roots one level down form a heuristic workspace."""
        write_files(tmp_path, {
            "frontend/package.json": "{}",
            "backend/manage.py": "",
        })
        info = detect_workspaces(tmp_path)
        assert info is not None
        assert info.type == "heuristic"
        assert [p.name for p in info.member_dirs] == ["backend", "frontend"]

    def test_single_project(self, tmp_path: Path) -> None:
        """A plain project is not a workspace."""
        write_package_json(tmp_path, dependencies={"react": "^18.0.0"})
        write_files(tmp_path, {"node_modules/react/package.json": "{}", "src/index.js": ""})
        assert detect_workspaces(tmp_path) is None
