"""Run options for the wizard, assembled from CLI flags and environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from posthog_wizard.constants import CloudRegion, Integration


@dataclass
class WizardOptions:
    """Options shared by every wizard flow.

    Attributes:
        install_dir: Absolute path of the project being set up.
        debug: Verbose logging on the console.
        force_install: Install packages even if peer dependency checks fail.
        cloud_region: Region chosen on the command line, if any.
        default: Take the default answer for confirms and selects without asking.
        signup: Point the outro at the onboarding flow for new accounts.
        local_mcp: Use the local development MCP server.
        ci: Non-interactive mode; every prompt takes its default.
        api_key: Personal API key (``phx_...``) used to look up the project.
        integration: Integration forced on the command line.
        menu: Show the integration menu instead of auto-detecting.
    """

    install_dir: Path
    debug: bool = False
    force_install: bool = False
    cloud_region: CloudRegion | None = None
    default: bool = False
    signup: bool = False
    local_mcp: bool = False
    ci: bool = False
    api_key: str | None = None
    integration: Integration | None = None
    menu: bool = False


def resolve_install_dir(install_dir: str | None) -> Path:
    """Resolve ``--install-dir`` against the current working directory.

    Args:
        install_dir: Raw value from the command line, or None.

    Returns:
        Absolute directory path. Defaults to the current directory.
    """
    if not install_dir:
        return Path(os.getcwd())
    path = Path(install_dir).expanduser()
    if path.is_absolute():
        return path
    return Path(os.getcwd()) / path
