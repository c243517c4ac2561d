"""PostHog wizard CLI.

Entry point for the ``posthog-wizard`` command-line tool. Running the
group without a subcommand starts the setup wizard for the current
project. Every option can also be set through an environment variable
prefixed with ``POSTHOG_WIZARD_`` (e.g. ``POSTHOG_WIZARD_REGION=eu``).

Commands:
    (none)   Detect the framework and integrate PostHog.
    mcp      Add or remove the PostHog MCP server in editors.
    migrate  Move from another analytics SDK to PostHog.

Usage::

    posthog-wizard
    posthog-wizard --integration django --install-dir ./backend
    posthog-wizard --ci --region us --api-key phx_xxx --install-dir .
    posthog-wizard mcp add
    posthog-wizard migrate --from amplitude

Exit Codes:
    0 -- Setup finished, or the user cancelled.
    1 -- Setup failed, or invalid arguments for CI mode.
"""

from __future__ import annotations

import sys

import click

from posthog_wizard import __version__
from posthog_wizard.cli.common import NON_INTERACTIVE_MESSAGE, run_guarded, validate_ci_options
from posthog_wizard.cli.mcp_cmd import mcp_group
from posthog_wizard.cli.migrate_cmd import migrate_command
from posthog_wizard.cli.output import print_error, print_header
from posthog_wizard.config import WizardOptions, resolve_install_dir
from posthog_wizard.constants import CloudRegion, Integration
from posthog_wizard.wizard import run_wizard


@click.group(
    invoke_without_command=True,
    context_settings={"auto_envvar_prefix": "POSTHOG_WIZARD"},
)
@click.version_option(version=__version__, prog_name="posthog-wizard")
@click.option("--debug", is_flag=True, default=False, help="Enable verbose logging.")
@click.option(
    "--region",
    type=click.Choice([region.value for region in CloudRegion]),
    default=None,
    help="PostHog cloud region.",
)
@click.option(
    "--default/--no-default",
    default=False,
    help="Take the default answer for every confirm and select prompt.",
)
@click.option("--signup", is_flag=True, default=False, help="Point the outro at onboarding for a new account.")
@click.option("--local-mcp", is_flag=True, default=False, help="Use the local MCP server at http://localhost:8787/mcp.")
@click.option("--ci", is_flag=True, default=False, help="Non-interactive mode for CI.")
@click.option("--api-key", default=None, help="PostHog personal API key (phx_xxx).")
@click.option(
    "--force-install",
    is_flag=True,
    default=False,
    help="Install packages even if peer dependency checks fail.",
)
@click.option("--install-dir", default=None, help="Directory to install PostHog in.")
@click.option(
    "--integration",
    type=click.Choice([integration.value for integration in Integration]),
    default=None,
    help="Integration to set up.",
)
@click.option("--menu", is_flag=True, default=False, help="Pick the integration from a menu instead of auto-detecting.")
@click.pass_context
def cli(
    ctx: click.Context,
    debug: bool,
    region: str | None,
    default: bool,
    signup: bool,
    local_mcp: bool,
    ci: bool,
    api_key: str | None,
    force_install: bool,
    install_dir: str | None,
    integration: str | None,
    menu: bool,
) -> None:
    """PostHog wizard: integrate PostHog analytics into your project.

    Without a subcommand, detects the project's framework and sets up
    PostHog with the help of an LLM.
    """
    options = WizardOptions(
        install_dir=resolve_install_dir(install_dir),
        debug=debug,
        force_install=force_install,
        cloud_region=CloudRegion(region) if region else None,
        default=default,
        signup=signup,
        local_mcp=local_mcp,
        ci=ci,
        api_key=api_key,
        integration=Integration(integration) if integration else None,
        menu=menu,
    )
    ctx.obj = options

    if ctx.invoked_subcommand is not None:
        return

    problem = validate_ci_options(options, install_dir_given=install_dir is not None)
    if problem is None and not ci and not sys.stdin.isatty():
        problem = NON_INTERACTIVE_MESSAGE
    if problem is not None:
        print_header("PostHog Wizard")
        print_error(problem)
        sys.exit(1)

    run_guarded(options, lambda ui: run_wizard(options, ui))


cli.add_command(mcp_group)
cli.add_command(migrate_command)
