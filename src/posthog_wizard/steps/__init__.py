"""Optional steps shared by the integration and migration flows."""

from posthog_wizard.steps.editor_rules import add_editor_rules_step
from posthog_wizard.steps.git import confirm_continue_if_no_or_dirty_git_repo
from posthog_wizard.steps.prettier import run_prettier_step
from posthog_wizard.steps.upload_env import upload_environment_variables_step

__all__ = [
    "add_editor_rules_step",
    "confirm_continue_if_no_or_dirty_git_repo",
    "run_prettier_step",
    "upload_environment_variables_step",
]
