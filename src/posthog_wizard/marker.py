"""Wizard marker: a small JSON file recording the outcome of the last run.

The next run reads it to tell a fresh install from a retry after an error
or a rerun after a successful setup. The marker is advisory; failing to
write or read it never stops the wizard.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from posthog_wizard import __version__
from posthog_wizard.constants import WIZARD_MARKER_FILENAME

logger = logging.getLogger(__name__)

STATUS_SUCCESS = "success"
STATUS_ERROR = "error"
STATUS_CANCELLED = "cancelled"

MARKER_COMMENT = (
    "Written by the PostHog wizard to remember the outcome of the last run. "
    "Safe to delete."
)

FRESH_INSTALL = "fresh_install"
MANUAL_INSTALL = "manual_install"
RETRY_AFTER_ERROR = "retry_after_error"
RERUN_AFTER_SUCCESS = "rerun_after_success"


@dataclass
class WizardMarker:
    """Contents of ``.posthog-wizard.json``."""

    status: str
    integration: str
    completedAt: str
    wizardVersion: str
    _comment: str = field(default=MARKER_COMMENT)


def write_wizard_marker(install_dir: str | Path, status: str, integration: str) -> None:
    """Write the marker, replacing any previous one.

    Errors are logged and swallowed.
    """
    marker = WizardMarker(
        status=status,
        integration=integration,
        completedAt=datetime.now(timezone.utc).isoformat(),
        wizardVersion=__version__,
    )
    data = asdict(marker)
    ordered = {"_comment": data.pop("_comment"), **data}
    path = Path(install_dir) / WIZARD_MARKER_FILENAME
    try:
        path.write_text(json.dumps(ordered, indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        logger.debug("Could not write wizard marker to %s: %s", path, exc)


def read_wizard_marker(install_dir: str | Path) -> WizardMarker | None:
    """Read the marker, returning None when it is missing or malformed."""
    path = Path(install_dir) / WIZARD_MARKER_FILENAME
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return None
    if not isinstance(data, dict):
        return None
    try:
        return WizardMarker(
            status=str(data["status"]),
            integration=str(data["integration"]),
            completedAt=str(data.get("completedAt", "")),
            wizardVersion=str(data.get("wizardVersion", "")),
            _comment=str(data.get("_comment", MARKER_COMMENT)),
        )
    except KeyError:
        return None


def classify_rerun_reason(marker: WizardMarker | None, sdk_installed: bool) -> str:
    """Explain why the wizard is running on this project.

    Args:
        marker: Marker from a previous run, if any.
        sdk_installed: Whether the PostHog SDK is already a dependency.

    Returns:
        ``fresh_install``, ``manual_install``, ``retry_after_error`` or
        ``rerun_after_success``.
    """
    if marker is None:
        return MANUAL_INSTALL if sdk_installed else FRESH_INSTALL
    if marker.status == STATUS_ERROR:
        return RETRY_AFTER_ERROR
    return RERUN_AFTER_SUCCESS
