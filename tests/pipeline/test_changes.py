"""Tests for the templated file-change pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from posthog_wizard.exceptions import PathTraversalError, ProjectFileError, QueryError
from posthog_wizard.pipeline.changes import (
    FILTER_FILES_SCHEMA,
    NEW_CONTENT_SCHEMA,
    FileChange,
    generate_file_changes,
    get_files_to_change,
    get_relevant_files,
    update_file,
)
from posthog_wizard.prompts.templates import PromptTemplate
from tests.helpers import write_files

TEMPLATE = PromptTemplate(
    input_variables=("file_path", "file_content", "changed_files", "unchanged_files", "documentation"),
    template="{file_path}|{file_content}|{changed_files}|{unchanged_files}|{documentation}",
)


class FakeGateway:
    """Answers rewrite queries from a ``{file_path: new_content}`` table."""

    def __init__(self, contents: dict[str, Any]) -> None:
        self.contents = contents
        self.prompts: list[str] = []

    def __call__(self, prompt: str, schema: dict[str, Any]) -> Any:
        self.prompts.append(prompt)
        file_path = prompt.split("|", 1)[0]
        answer = self.contents[file_path]
        if isinstance(answer, Exception):
            raise answer
        return {"newContent": answer}


class TestSelection:
    """Tests for candidate globbing and gateway selection."""

    def test_relevant_files_skip_build_output(self, tmp_path: Path) -> None:
        """Dependency, build and declaration files are never candidates."""
        write_files(tmp_path, {
            "src/app.tsx": "",
            "node_modules/x/index.js": "",
            "public/sw.js": "",
            "types/global.d.ts": "",
        })
        files = get_relevant_files(tmp_path, ["**/*.tsx", "**/*.ts", "**/*.js"])
        assert files == ["src/app.tsx"]

    def test_files_to_change_uses_filter_schema(self) -> None:
        """The gateway is asked with the file list schema and its order kept."""
        calls: list[dict[str, Any]] = []

        def ask(prompt: str, schema: dict[str, Any]) -> Any:
            calls.append(schema)
            return {"files": ["b.ts", "a.ts"]}

        assert get_files_to_change("prompt", ask) == ["b.ts", "a.ts"]
        assert calls == [FILTER_FILES_SCHEMA]


class TestGenerateFileChanges:
    """Tests for ``generate_file_changes``."""

    def test_writes_changed_and_creates_new(self, tmp_path: Path) -> None:
        """Changed files are rewritten and new files created."""
        write_files(tmp_path, {"src/main.tsx": "old"})
        gateway = FakeGateway({"src/main.tsx": "new", "src/posthog.ts": "init()"})

        changes = generate_file_changes(
            ["src/posthog.ts", "src/main.tsx"], TEMPLATE, {"documentation": "DOCS"}, tmp_path, gateway
        )

        assert changes == [
            FileChange("src/posthog.ts", "", "init()"),
            FileChange("src/main.tsx", "old", "new"),
        ]
        assert (tmp_path / "src/posthog.ts").read_text() == "init()"
        assert (tmp_path / "src/main.tsx").read_text() == "new"

    def test_earlier_changes_feed_later_prompts(self, tmp_path: Path) -> None:
        """Each prompt lists changes made so far and files not yet changed."""
        gateway = FakeGateway({"a.ts": "A", "b.ts": "B"})
        generate_file_changes(["a.ts", "b.ts"], TEMPLATE, {"documentation": ""}, tmp_path, gateway)

        first, second = gateway.prompts
        assert first.split("|")[2] == ""
        assert first.split("|")[3] == "a.ts\nb.ts"
        assert second.split("|")[2] == "a.ts\nA"
        assert second.split("|")[3] == "b.ts"

    def test_identical_content_not_written(self, tmp_path: Path) -> None:
        """An unchanged answer produces no change."""
        write_files(tmp_path, {"a.ts": "same"})
        gateway = FakeGateway({"a.ts": "same"})
        assert generate_file_changes(["a.ts"], TEMPLATE, {"documentation": ""}, tmp_path, gateway) == []

    def test_traversal_raises(self, tmp_path: Path) -> None:
        """A path outside the project stops the run before querying."""
        gateway = FakeGateway({})
        with pytest.raises(PathTraversalError):
            generate_file_changes(["../evil.ts"], TEMPLATE, {"documentation": ""}, tmp_path, gateway)
        assert gateway.prompts == []

    def test_query_error_raises(self, tmp_path: Path) -> None:
        """Gateway failures propagate outside best-effort mode."""
        gateway = FakeGateway({"a.ts": QueryError("down")})
        with pytest.raises(QueryError):
            generate_file_changes(["a.ts"], TEMPLATE, {"documentation": ""}, tmp_path, gateway)

    def test_non_utf8_file_raises_wizard_error(self, tmp_path: Path) -> None:
        """A latin-1 file is reported as a project file error, not a decode crash."""
        (tmp_path / "App.jsx").write_bytes("const caf\u00e9 = 1;\n".encode("latin-1"))
        gateway = FakeGateway({})
        with pytest.raises(ProjectFileError, match="App.jsx"):
            generate_file_changes(["App.jsx"], TEMPLATE, {"documentation": ""}, tmp_path, gateway)
        assert gateway.prompts == []

    def test_best_effort_skips_non_utf8_file(self, tmp_path: Path) -> None:
        """Best-effort mode moves past an undecodable file."""
        (tmp_path / "a.ts").write_bytes(b"\xff\xfe")
        write_files(tmp_path, {"b.ts": "b"})
        gateway = FakeGateway({"b.ts": "B"})
        changes = generate_file_changes(
            ["a.ts", "b.ts"], TEMPLATE, {"documentation": ""}, tmp_path, gateway, best_effort=True
        )
        assert changes == [FileChange("b.ts", "b", "B")]

    def test_best_effort_skips_failures(self, tmp_path: Path) -> None:
        """Best-effort mode skips failing, escaping and missing files."""
        write_files(tmp_path, {"a.ts": "a", "c.ts": "c"})
        gateway = FakeGateway({"a.ts": QueryError("down"), "c.ts": "C"})
        seen: list[str] = []

        changes = generate_file_changes(
            ["a.ts", "../evil.ts", "missing.ts", "c.ts"],
            TEMPLATE,
            {"documentation": ""},
            tmp_path,
            gateway,
            best_effort=True,
            on_file=seen.append,
        )

        assert changes == [FileChange("c.ts", "c", "C")]
        assert seen == ["a.ts", "../evil.ts", "missing.ts", "c.ts"]
        assert (tmp_path / "a.ts").read_text() == "a"

    def test_uses_new_content_schema(self, tmp_path: Path) -> None:
        """Rewrite queries ask for ``newContent``."""
        schemas: list[dict[str, Any]] = []

        def ask(prompt: str, schema: dict[str, Any]) -> Any:
            schemas.append(schema)
            return {"newContent": "x"}

        generate_file_changes(["a.ts"], TEMPLATE, {"documentation": ""}, tmp_path, ask)
        assert schemas == [NEW_CONTENT_SCHEMA]


def test_update_file_rejects_traversal(tmp_path: Path) -> None:
    """Direct writes are confined to the project too."""
    with pytest.raises(PathTraversalError):
        update_file(FileChange("/tmp/elsewhere.ts", "", "x"), tmp_path / "project")
