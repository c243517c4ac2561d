"""Templated file-change pipeline driven by LLM gateway queries."""

from posthog_wizard.pipeline.changes import (
    FileChange,
    QueryFn,
    generate_file_changes,
    get_files_to_change,
    get_relevant_files,
    update_file,
)

__all__ = [
    "FileChange",
    "QueryFn",
    "generate_file_changes",
    "get_files_to_change",
    "get_relevant_files",
    "update_file",
]
