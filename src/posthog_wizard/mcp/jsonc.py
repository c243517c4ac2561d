"""Reading JSON-with-comments editor settings files.

Editors such as VS Code and Zed allow ``//`` and ``/* */`` comments and
trailing commas in their settings. They are accepted on read, but the
wizard writes settings back as plain JSON, so comments in a file the
wizard updates are not preserved.
"""

from __future__ import annotations

import json
from typing import Any


def _skip_string(text: str, start: int) -> int:
    """Return the index just past the string literal opening at ``start``."""
    i = start + 1
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        i += 1
        if ch == '"':
            break
    return i


def _strip_comments(text: str) -> str:
    out: list[str] = []
    i = 0
    n = len(text)
    while i < n:
        if text[i] == '"':
            end = _skip_string(text, i)
            out.append(text[i:end])
            i = end
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end == -1 else end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 2
        else:
            out.append(text[i])
            i += 1
    return "".join(out)


def _strip_trailing_commas(text: str) -> str:
    out: list[str] = []
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == '"':
            end = _skip_string(text, i)
            out.append(text[i:end])
            i = end
            continue
        if ch == ",":
            j = i + 1
            while j < n and text[j].isspace():
                j += 1
            if j < n and text[j] in "}]":
                i += 1
                continue
        out.append(ch)
        i += 1
    return "".join(out)


def strip_jsonc(text: str) -> str:
    """Remove comments and trailing commas; string contents are left alone."""
    return _strip_trailing_commas(_strip_comments(text))


def loads_jsonc(text: str) -> Any:
    """Parse JSONC text. Blank input yields an empty dict.

    Raises:
        ValueError: If the text is not valid JSON once comments are removed.
    """
    stripped = strip_jsonc(text)
    if not stripped.strip():
        return {}
    return json.loads(stripped)
