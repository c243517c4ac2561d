"""Git repository checks run before the wizard edits any file."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from rich.markup import escape

from posthog_wizard.analytics import Analytics, analytics as default_analytics
from posthog_wizard.exceptions import UserCancelledError
from posthog_wizard.ui import WizardUI

logger = logging.getLogger(__name__)

GIT_TIMEOUT_SECONDS = 10


def run_git(args: list[str], cwd: Path) -> tuple[bool, str]:
    """Run a git command, return (success, stdout).

    A missing ``git`` executable or a timeout counts as failure.
    """
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=str(cwd),
            capture_output=True,
            text=True,
            timeout=GIT_TIMEOUT_SECONDS,
            check=False,
        )
    except (subprocess.TimeoutExpired, OSError) as exc:
        logger.debug("git %s failed: %s", " ".join(args), exc)
        return False, ""
    return result.returncode == 0, result.stdout


def is_in_git_repo(install_dir: Path) -> bool:
    ok, output = run_git(["rev-parse", "--is-inside-work-tree"], install_dir)
    return ok and output.strip() == "true"


def parse_porcelain_status(output: str) -> list[str]:
    """Paths from ``git status --porcelain`` output; renames report the new path."""
    files: list[str] = []
    for line in output.splitlines():
        if len(line) < 4:
            continue
        path = line[3:]
        if " -> " in path:
            path = path.split(" -> ", 1)[1]
        files.append(path.strip().strip('"'))
    return files


def get_uncommitted_or_untracked_files(install_dir: Path) -> list[str]:
    ok, output = run_git(["status", "--porcelain"], install_dir)
    if not ok:
        return []
    return parse_porcelain_status(output)


def confirm_continue_if_no_or_dirty_git_repo(
    install_dir: Path,
    ui: WizardUI,
    analytics: Analytics = default_analytics,
) -> None:
    """Ask before editing a project that is not versioned or has pending changes.

    Both questions default to continuing, so CI and ``--default`` runs go on.

    Raises:
        UserCancelledError: The user chose to stop.
    """
    if not is_in_git_repo(install_dir):
        proceed = ui.confirm(
            "You are not inside a git repository. The wizard will create and update files. "
            "Do you want to continue anyway?",
            default=True,
        )
        analytics.set_tag("continue-without-git", proceed)
        if not proceed:
            raise UserCancelledError("Not a git repository")
        return

    files = get_uncommitted_or_untracked_files(install_dir)
    if not files:
        return
    listing = "\n".join(f"- {escape(path)}" for path in files)
    ui.warn(
        "You have uncommitted or untracked files in your repo:\n\n"
        f"{listing}\n\n"
        "The wizard will create and update files."
    )
    proceed = ui.confirm("Do you want to continue anyway?", default=True)
    analytics.set_tag("continue-with-dirty-repo", proceed)
    if not proceed:
        raise UserCancelledError("Uncommitted changes in the repository")
