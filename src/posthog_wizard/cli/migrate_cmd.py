"""``posthog-wizard migrate`` -- Replace another analytics SDK with PostHog.

Removes the provider's packages, installs the PostHog equivalents and
rewrites every file that uses the provider's SDK.

Exit Codes:
    0 -- Migration finished, or the user cancelled.
    1 -- Migration failed, or invalid arguments for CI mode.
"""

from __future__ import annotations

import dataclasses
import sys

import click

from posthog_wizard.cli.common import run_guarded, validate_ci_options
from posthog_wizard.cli.output import print_error, print_header
from posthog_wizard.config import WizardOptions, resolve_install_dir
from posthog_wizard.migrate.providers import get_available_migration_providers
from posthog_wizard.migrate.wizard import run_migration_wizard


@click.command("migrate")
@click.option(
    "--from",
    "provider_id",
    type=click.Choice(get_available_migration_providers()),
    default="amplitude",
    show_default=True,
    help="Analytics provider to migrate from.",
)
@click.option("--install-dir", default=None, help="Directory of the project to migrate.")
@click.option("--force-install", is_flag=True, default=False, help="Install packages even if peer dependency checks fail.")
@click.pass_obj
def migrate_command(
    options: WizardOptions,
    provider_id: str,
    install_dir: str | None,
    force_install: bool,
) -> None:
    """Migrate from another analytics provider to PostHog."""
    if install_dir is not None:
        options = dataclasses.replace(options, install_dir=resolve_install_dir(install_dir))
    if force_install:
        options = dataclasses.replace(options, force_install=True)

    parent = click.get_current_context().parent
    install_dir_given = install_dir is not None or (
        parent is not None and parent.params.get("install_dir") is not None
    )
    problem = validate_ci_options(options, install_dir_given=install_dir_given)
    if problem is not None:
        print_header("PostHog Migration Wizard")
        print_error(problem)
        sys.exit(1)

    run_guarded(options, lambda ui: run_migration_wizard(options, provider_id, ui))
