"""Working-directory confinement for paths supplied by untrusted callers.

Paths handed to the wizard by the LLM (tool arguments, file lists) are
resolved here before any read or write. A path is accepted only when it
resolves to the working directory itself or to one of its descendants.
"""

from __future__ import annotations

import os
from pathlib import Path

from posthog_wizard.exceptions import PathTraversalError


def resolve_env_path(working_dir: str | Path, file_path: str | Path) -> Path:
    """Resolve ``file_path`` against ``working_dir`` and confine it.

    Args:
        working_dir: Directory every path must stay inside.
        file_path: Relative or absolute path to resolve.

    Returns:
        The absolute, normalized path.

    Raises:
        PathTraversalError: If the path resolves outside ``working_dir``.
    """
    root = os.path.abspath(str(working_dir))
    resolved = os.path.abspath(os.path.join(root, str(file_path)))
    if resolved != root and not resolved.startswith(root.rstrip(os.sep) + os.sep):
        raise PathTraversalError(
            f"Path '{file_path}' resolves outside the working directory"
        )
    return Path(resolved)


def relative_to_root(working_dir: str | Path, path: str | Path) -> str:
    """Return ``path`` relative to ``working_dir`` with forward slashes."""
    rel = os.path.relpath(str(path), str(working_dir))
    return rel.replace(os.sep, "/")
