"""Reading and merging ``KEY=value`` environment files.

Values are never interpreted: quoting, ``$`` expansion and multi-line
values are left exactly as written. Only the key on each line matters.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Mapping

from posthog_wizard.files.gitignore import ensure_gitignore_coverage
from posthog_wizard.files.paths import resolve_env_path

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(r"^\s*([A-Za-z_][A-Za-z0-9_]*)\s*=")

KEY_PRESENT = "present"
KEY_MISSING = "missing"


def parse_env_keys(content: str) -> set[str]:
    """Collect the keys assigned in an env file.

    Blank lines, ``#`` comments and lines without a ``KEY=`` prefix are
    ignored.

    Args:
        content: Raw file content.

    Returns:
        Set of key names.
    """
    keys: set[str] = set()
    for line in content.splitlines():
        stripped = line.lstrip()
        if not stripped or stripped.startswith("#"):
            continue
        match = _KEY_RE.match(stripped)
        if match:
            keys.add(match.group(1))
    return keys


def merge_env_values(content: str, values: Mapping[str, str]) -> str:
    """Set ``values`` in ``content``, updating in place and appending the rest.

    Existing assignments keep their line position and are replaced whole
    with ``KEY=value``. Keys not found are appended in input order, with a
    newline inserted first when the content lacks a trailing one.

    Args:
        content: Existing env file content (may be empty).
        values: Keys and full new values, in the order to apply them.

    Returns:
        The merged content.
    """
    updated = content
    missing: list[str] = []

    for key, value in values.items():
        pattern = re.compile(rf"^[ \t]*{re.escape(key)}[ \t]*=[^\r\n]*", re.MULTILINE)
        line = f"{key}={value}"
        if pattern.search(updated):
            updated = pattern.sub(lambda _m, line=line: line, updated, count=1)
        else:
            missing.append(line)

    if missing:
        if updated and not updated.endswith("\n"):
            updated += "\n"
        updated += "".join(f"{line}\n" for line in missing)

    return updated


def check_env_keys(
    working_dir: str | Path, file_path: str | Path, keys: Iterable[str]
) -> dict[str, str]:
    """Report which ``keys`` exist in an env file without reading values out.

    Args:
        working_dir: Project root; ``file_path`` must stay inside it.
        file_path: Env file path relative to ``working_dir``.
        keys: Key names to look up.

    Returns:
        Mapping of key to ``"present"`` or ``"missing"``.

    Raises:
        PathTraversalError: If ``file_path`` escapes ``working_dir``.
    """
    path = resolve_env_path(working_dir, file_path)
    existing = parse_env_keys(path.read_text(encoding="utf-8")) if path.exists() else set()
    return {key: KEY_PRESENT if key in existing else KEY_MISSING for key in keys}


def set_env_values(
    working_dir: str | Path, file_path: str | Path, values: Mapping[str, str]
) -> Path:
    """Create or update keys in an env file and make sure it is gitignored.

    Args:
        working_dir: Project root; ``file_path`` must stay inside it.
        file_path: Env file path relative to ``working_dir``.
        values: Keys and values to write.

    Returns:
        Absolute path of the written file.

    Raises:
        PathTraversalError: If ``file_path`` escapes ``working_dir``.
    """
    path = resolve_env_path(working_dir, file_path)
    content = ""
    if path.exists():
        # Keep CRLF line endings as they are.
        with path.open(encoding="utf-8", newline="") as fh:
            content = fh.read()

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as fh:
        fh.write(merge_env_values(content, values))
    logger.info("Wrote %d key(s) to %s", len(values), path)

    ensure_gitignore_coverage(working_dir, path.name)
    return path
