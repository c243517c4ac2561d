"""Idempotent ``.gitignore`` entry management."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

GITIGNORE_FILENAME = ".gitignore"


def ensure_gitignore_coverage(working_dir: str | Path, entry: str) -> bool:
    """Make sure ``entry`` appears as a line in the project's ``.gitignore``.

    Creates the file when it does not exist. A line whose trimmed value
    equals ``entry`` counts as coverage. File-system errors propagate.

    Args:
        working_dir: Project root holding the ``.gitignore``.
        entry: Literal pattern to add, e.g. ``.env.local``.

    Returns:
        True if the file was created or modified, False if already covered.
    """
    gitignore = Path(working_dir) / GITIGNORE_FILENAME

    if not gitignore.exists():
        gitignore.write_text(f"{entry}\n", encoding="utf-8")
        logger.info("Created %s with %s", gitignore, entry)
        return True

    content = gitignore.read_text(encoding="utf-8")
    if any(line.strip() == entry for line in content.splitlines()):
        return False

    separator = "" if content == "" or content.endswith("\n") else "\n"
    with gitignore.open("a", encoding="utf-8") as fh:
        fh.write(f"{separator}{entry}\n")
    logger.info("Added %s to %s", entry, gitignore)
    return True
