"""File mutation helpers confined to the project directory."""

from posthog_wizard.files.envfile import (
    check_env_keys,
    merge_env_values,
    parse_env_keys,
    set_env_values,
)
from posthog_wizard.files.gitignore import ensure_gitignore_coverage
from posthog_wizard.files.paths import resolve_env_path

__all__ = [
    "check_env_keys",
    "ensure_gitignore_coverage",
    "merge_env_values",
    "parse_env_keys",
    "resolve_env_path",
    "set_env_values",
]
