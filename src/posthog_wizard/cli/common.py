"""Helpers shared by the CLI commands: CI validation and exit code mapping."""

from __future__ import annotations

import logging
import sys
from typing import Callable

from posthog_wizard.analytics import analytics
from posthog_wizard.cli.output import print_cancelled
from posthog_wizard.config import WizardOptions
from posthog_wizard.exceptions import UserCancelledError, WizardError
from posthog_wizard.logging_setup import configure_logging
from posthog_wizard.marker import STATUS_CANCELLED
from posthog_wizard.ui import WizardUI

logger = logging.getLogger(__name__)

NON_INTERACTIVE_MESSAGE = (
    "This installer requires an interactive terminal (TTY) to run.\n"
    "It appears you are running in a non-interactive environment.\n"
    "Please run the wizard in an interactive terminal.\n\n"
    "For CI/CD environments, use --ci mode:\n"
    "  posthog-wizard --ci --region us --api-key phx_xxx --install-dir ."
)


def validate_ci_options(options: WizardOptions, install_dir_given: bool) -> str | None:
    """Return the first problem with a ``--ci`` invocation, or None."""
    if not options.ci:
        return None
    if options.cloud_region is None:
        return "CI mode requires --region (us or eu)"
    if not options.api_key:
        return "CI mode requires --api-key (personal API key phx_xxx)"
    if not install_dir_given:
        return "CI mode requires --install-dir (directory to install PostHog in)"
    return None


def run_guarded(options: WizardOptions, flow: Callable[[WizardUI], None]) -> None:
    """Run a wizard flow and turn its outcome into an exit code.

    Cancellation exits 0. A :class:`WizardError` exits 1; the flow has
    already explained the failure to the user.
    """
    configure_logging(options.debug)
    ui = WizardUI(ci=options.ci, assume_defaults=options.default)
    try:
        flow(ui)
    except UserCancelledError as exc:
        logger.info("Cancelled: %s", exc)
        analytics.shutdown(STATUS_CANCELLED)
        print_cancelled()
        sys.exit(0)
    except WizardError as exc:
        logger.error("Wizard failed: %s", exc)
        sys.exit(1)
