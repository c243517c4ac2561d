"""Tests for project file enumeration."""

from __future__ import annotations

from pathlib import Path

from posthog_wizard.files.walk import any_file_contains, find_files
from tests.helpers import write_files


class TestFindFiles:
    """Tests for ``find_files``."""

    def test_matches_root_and_nested_files(self, tmp_path: Path) -> None:
        """``**/`` globs match files at every depth, including the root."""
        write_files(tmp_path, {"index.ts": "", "src/app/page.tsx": "", "README.md": ""})
        files = find_files(tmp_path, ["**/*.ts", "**/*.tsx"])
        assert files == ["index.ts", "src/app/page.tsx"]

    def test_middle_double_star_matches_zero_directories(self, tmp_path: Path) -> None:
        """``src/**/*.tsx`` includes files directly under ``src``."""
        write_files(tmp_path, {"src/a.tsx": "", "src/deep/b.tsx": "", "other/c.tsx": ""})
        assert find_files(tmp_path, ["src/**/*.tsx"]) == ["src/a.tsx", "src/deep/b.tsx"]

    def test_single_star_stays_in_one_directory(self, tmp_path: Path) -> None:
        """``*`` does not cross ``/``, so a bare glob only matches at the root."""
        write_files(tmp_path, {"root.tsx": "", "src/a.tsx": ""})
        assert find_files(tmp_path, ["*.tsx"]) == ["root.tsx"]
        assert find_files(tmp_path, ["src/*.tsx"]) == ["src/a.tsx"]

    def test_trailing_double_star_matches_everything_below(self, tmp_path: Path) -> None:
        """``dir/**`` matches every file under ``dir``."""
        write_files(tmp_path, {"app/x.js": "", "app/y/z.css": "", "lib/w.js": ""})
        assert find_files(tmp_path, ["app/**"]) == ["app/x.js", "app/y/z.css"]

    def test_character_classes(self, tmp_path: Path) -> None:
        """Bracket classes and negation work within a segment."""
        write_files(tmp_path, {"a1.js": "", "b2.js": "", "c3.js": ""})
        assert find_files(tmp_path, ["[ab]*.js"]) == ["a1.js", "b2.js"]
        assert find_files(tmp_path, ["[!ab]*.js"]) == ["c3.js"]

    def test_prunes_default_dirs(self, tmp_path: Path) -> None:
        """Dependency and build directories are never entered."""
        write_files(tmp_path, {"node_modules/x/index.js": "", ".next/a.js": "", "a.js": ""})
        assert find_files(tmp_path, ["**/*.js"]) == ["a.js"]

    def test_ignore_patterns(self, tmp_path: Path) -> None:
        """Caller ignore patterns prune directories and files."""
        write_files(tmp_path, {"public/a.js": "", "b.min.js": "", "c.js": ""})
        assert find_files(tmp_path, ["**/*.js"], ["public", "*.min.js"]) == ["c.js"]


class TestAnyFileContains:
    """Tests for ``any_file_contains``."""

    def test_finds_needle(self, tmp_path: Path) -> None:
        """Returns True when a matching file holds a needle."""
        write_files(tmp_path, {"app.py": "from flask import Flask\n"})
        assert any_file_contains(tmp_path, ["**/*.py"], ["Flask("]) is False
        assert any_file_contains(tmp_path, ["**/*.py"], ["from flask"]) is True
