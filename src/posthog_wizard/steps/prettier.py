"""Format the files the wizard touched with the project's own Prettier."""

from __future__ import annotations

import logging
from pathlib import Path

from posthog_wizard.analytics import Analytics, analytics as default_analytics
from posthog_wizard.exceptions import PackageManagerError
from posthog_wizard.packages.managers import run_command
from posthog_wizard.packages.manifest import has_package_installed, read_package_json
from posthog_wizard.steps.git import get_uncommitted_or_untracked_files, is_in_git_repo
from posthog_wizard.ui import WizardUI

logger = logging.getLogger(__name__)

PRETTIER_EXTENSIONS = (".js", ".ts", ".jsx", ".tsx", ".mjs", ".cjs")


def run_prettier_step(
    install_dir: Path,
    integration: str,
    ui: WizardUI,
    analytics: Analytics = default_analytics,
) -> bool:
    """Run ``prettier --write`` on changed JavaScript and TypeScript files.

    Only runs inside a git repository, since git is how the changed files
    are found, and only when the project already depends on Prettier.
    A Prettier failure is reported and never fails the run.

    Returns:
        True when Prettier formatted the files.
    """
    if not is_in_git_repo(install_dir):
        return False

    files = [
        path
        for path in get_uncommitted_or_untracked_files(install_dir)
        if path.endswith(PRETTIER_EXTENSIONS)
    ]
    if not files:
        return False

    installed = has_package_installed("prettier", read_package_json(install_dir))
    analytics.set_tag("prettier-installed", installed)
    if not installed:
        return False

    try:
        with ui.spinner("Running Prettier on your files..."):
            run_command(["npx", "prettier", "--ignore-unknown", "--write", *files], install_dir)
    except PackageManagerError as exc:
        logger.debug("Prettier failed: %s", exc)
        ui.warn("Prettier failed to run. You may want to format the changes manually.")
        return False

    ui.success("Prettier has formatted your files.")
    analytics.capture_interaction("ran prettier", integration=integration)
    return True
