"""Select and rewrite project files one at a time.

The pipeline has three stages:

1. ``get_relevant_files`` globs candidate source files locally.
2. ``get_files_to_change`` asks the gateway which candidates to touch.
3. ``generate_file_changes`` asks the gateway for the new content of each
   selected file, in order, and writes it when it differs from what is on
   disk. Every change made so far is included in the next prompt so later
   files can build on earlier ones.

The gateway is reached through a ``QueryFn`` (``message, schema -> answer``)
so the pipeline stays independent of regions, tokens and HTTP.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterable

from posthog_wizard.exceptions import PathTraversalError, ProjectFileError, QueryError
from posthog_wizard.files.paths import resolve_env_path
from posthog_wizard.files.walk import find_files
from posthog_wizard.prompts.templates import PromptTemplate

logger = logging.getLogger(__name__)

QueryFn = Callable[[str, dict[str, Any]], Any]

FILTER_FILES_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {"files": {"type": "array", "items": {"type": "string"}}},
    "required": ["files"],
    "additionalProperties": False,
}

NEW_CONTENT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {"newContent": {"type": "string"}},
    "required": ["newContent"],
    "additionalProperties": False,
}

# Build output, dependencies and VCS metadata are never candidates.
GLOBAL_IGNORE_PATTERNS: tuple[str, ...] = (
    "node_modules",
    "dist",
    "build",
    "public",
    "static",
    ".git",
    ".next",
    ".nuxt",
    ".svelte-kit",
    ".output",
    "coverage",
    "*.d.ts",
    "*.min.js",
)


@dataclass(frozen=True)
class FileChange:
    """A file rewritten by the pipeline.

    Attributes:
        file_path: Path relative to the install directory, as returned by the gateway.
        old_content: Content before the change; empty for a new file.
        new_content: Content written to disk.
    """

    file_path: str
    old_content: str
    new_content: str


def get_relevant_files(
    install_dir: str | Path,
    filter_patterns: Iterable[str],
    ignore_patterns: Iterable[str] = (),
) -> list[str]:
    """Return candidate files under ``install_dir`` as relative paths."""
    ignore = (*GLOBAL_IGNORE_PATTERNS, *ignore_patterns)
    files = find_files(install_dir, filter_patterns, ignore)
    logger.debug("Found %d relevant files", len(files))
    return files


def get_files_to_change(prompt: str, ask: QueryFn) -> list[str]:
    """Ask the gateway which files to change.

    Args:
        prompt: A formatted file selection prompt.
        ask: Gateway query function.

    Returns:
        File paths in the order the gateway wants them processed.
    """
    response = ask(prompt, FILTER_FILES_SCHEMA)
    files = list(response["files"])
    logger.info("Gateway selected %d files to change", len(files))
    return files


def update_file(change: FileChange, install_dir: str | Path) -> Path:
    """Write ``change.new_content`` to disk, creating parent directories.

    Raises:
        PathTraversalError: If the path escapes ``install_dir``.
    """
    target = resolve_env_path(install_dir, change.file_path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(change.new_content, encoding="utf-8")
    logger.debug("%s %s", "Updated" if change.old_content else "Created", change.file_path)
    return target


def _read_existing(path: Path) -> str | None:
    """Return the file content, or None when the file does not exist.

    Raises:
        ProjectFileError: The file is not valid UTF-8.
    """
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except UnicodeDecodeError as exc:
        raise ProjectFileError(f"{path.name} is not a UTF-8 text file") from exc


def generate_file_changes(
    files_to_change: list[str],
    template: PromptTemplate,
    prompt_values: dict[str, str],
    install_dir: str | Path,
    ask: QueryFn,
    *,
    best_effort: bool = False,
    on_file: Callable[[str], None] | None = None,
) -> list[FileChange]:
    """Rewrite each selected file in order.

    Args:
        files_to_change: Paths chosen by :func:`get_files_to_change`.
        template: File rewrite prompt; receives ``prompt_values`` plus
            ``file_path``, ``file_content``, ``changed_files`` and
            ``unchanged_files``.
        prompt_values: Fixed template values such as the documentation.
        install_dir: Project root every path is confined to.
        ask: Gateway query function.
        best_effort: Skip files that cannot be read, queried or written
            instead of raising. Missing files are skipped too, since there
            is nothing to migrate in them.
        on_file: Called with each path before it is processed.

    Returns:
        The changes actually written, in processing order.

    Raises:
        PathTraversalError: A path escapes ``install_dir`` (when not best-effort).
        ProjectFileError: A selected file is not UTF-8 text (when not best-effort).
        QueryError: The gateway fails (when not best-effort).
    """
    changes: list[FileChange] = []

    for file_path in files_to_change:
        if on_file is not None:
            on_file(file_path)
        try:
            target = resolve_env_path(install_dir, file_path)
            existing = _read_existing(target)
            if existing is None and best_effort:
                logger.info("Skipping %s: file does not exist", file_path)
                continue
            old_content = existing or ""

            changed_paths = {change.file_path for change in changes}
            unchanged = [f for f in files_to_change if f not in changed_paths]
            prompt = template.format(
                **prompt_values,
                file_path=file_path,
                file_content=old_content,
                changed_files="\n".join(
                    f"{change.file_path}\n{change.new_content}" for change in changes
                ),
                unchanged_files="\n".join(unchanged),
            )

            response = ask(prompt, NEW_CONTENT_SCHEMA)
            new_content = response["newContent"]

            if new_content != old_content:
                change = FileChange(file_path, old_content, new_content)
                update_file(change, install_dir)
                changes.append(change)
        except (OSError, PathTraversalError, ProjectFileError, QueryError) as exc:
            if not best_effort:
                raise
            logger.warning("Could not change %s: %s", file_path, exc)

    return changes
