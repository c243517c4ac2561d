"""Project file enumeration with directory pruning.

Globs follow shell rules per path segment: ``*`` and ``?`` stop at ``/``
and a ``**`` segment matches zero or more directories, so ``src/**/*.tsx``
includes ``src/a.tsx``.
"""

from __future__ import annotations

import fnmatch
import functools
import os
import re
from pathlib import Path
from typing import Iterable, Iterator

# Never descended into, regardless of caller-supplied ignore patterns.
DEFAULT_IGNORE_DIRS = frozenset({
    "node_modules",
    ".git",
    "dist",
    "build",
    ".next",
    ".nuxt",
    ".output",
    ".svelte-kit",
    ".venv",
    "venv",
    "__pycache__",
    "vendor",
})


def _translate_segment(segment: str) -> str:
    """Regex for one path segment; wildcards never cross ``/``."""
    out: list[str] = []
    i = 0
    n = len(segment)
    while i < n:
        ch = segment[i]
        i += 1
        if ch == "*":
            out.append("[^/]*")
        elif ch == "?":
            out.append("[^/]")
        elif ch == "[":
            end = segment.find("]", i + 1 if i < n and segment[i] in "!]" else i)
            if end == -1:
                out.append(re.escape(ch))
                continue
            body = segment[i:end].replace("\\", "\\\\")
            if body.startswith("!"):
                body = "^" + body[1:]
            elif body.startswith("^"):
                body = "\\" + body
            out.append(f"[{body}]")
            i = end + 1
        else:
            out.append(re.escape(ch))
    return "".join(out)


@functools.lru_cache(maxsize=256)
def _compile_glob(pattern: str) -> re.Pattern[str]:
    """Compile a ``/``-separated glob where ``**`` spans zero or more directories."""
    parts = pattern.split("/")
    regex: list[str] = []
    for i, part in enumerate(parts):
        last = i == len(parts) - 1
        if part == "**":
            regex.append(".*" if last else "(?:[^/]*/)*")
        else:
            regex.append(_translate_segment(part) + ("" if last else "/"))
    return re.compile("".join(regex) + r"\Z")


def _matches_glob(rel_path: str, pattern: str) -> bool:
    return _compile_glob(pattern).match(rel_path) is not None


def _matches_any(name: str, rel_path: str, patterns: Iterable[str]) -> bool:
    return any(
        fnmatch.fnmatch(name, pattern) or _matches_glob(rel_path, pattern)
        for pattern in patterns
    )


def iter_project_files(
    root: str | Path,
    patterns: Iterable[str] = ("**/*",),
    ignore: Iterable[str] = (),
) -> Iterator[str]:
    """Yield project-relative file paths matching any of ``patterns``.

    Directories named in :data:`DEFAULT_IGNORE_DIRS` or matching an
    ``ignore`` pattern are pruned, as are files matching ``ignore``.
    Paths use forward slashes and are yielded in sorted order per
    directory.

    Args:
        root: Project root.
        patterns: Globs such as ``**/*.tsx``.
        ignore: Directory or file names (or globs) to skip.
    """
    root = Path(root)
    patterns = tuple(patterns)
    ignore = tuple(ignore)

    for dirpath, dirnames, filenames in os.walk(root):
        rel_dir = os.path.relpath(dirpath, root)
        rel_dir = "" if rel_dir == "." else rel_dir.replace(os.sep, "/")

        kept = []
        for name in sorted(dirnames):
            rel = f"{rel_dir}/{name}" if rel_dir else name
            if name in DEFAULT_IGNORE_DIRS or _matches_any(name, rel, ignore):
                continue
            kept.append(name)
        dirnames[:] = kept

        for name in sorted(filenames):
            rel = f"{rel_dir}/{name}" if rel_dir else name
            if _matches_any(name, rel, ignore):
                continue
            if any(_matches_glob(rel, pattern) for pattern in patterns):
                yield rel


def find_files(
    root: str | Path,
    patterns: Iterable[str],
    ignore: Iterable[str] = (),
) -> list[str]:
    """Return :func:`iter_project_files` results as a list."""
    return list(iter_project_files(root, patterns, ignore))


def any_file_contains(
    root: str | Path,
    patterns: Iterable[str],
    needles: Iterable[str],
    ignore: Iterable[str] = (),
) -> bool:
    """Return True when any matching file contains one of ``needles``."""
    needles = tuple(needles)
    root = Path(root)
    for rel in iter_project_files(root, patterns, ignore):
        try:
            content = (root / rel).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            continue
        if any(needle in content for needle in needles):
            return True
    return False
