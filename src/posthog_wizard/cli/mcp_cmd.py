"""``posthog-wizard mcp add|remove`` -- Manage the PostHog MCP server in editors.

``add`` installs the server into the MCP clients the user picks (Cursor,
Claude Desktop, VS Code, Zed, Claude Code, Codex). ``remove`` takes it
out again. ``--local`` targets the local development server instead.

Exit Codes:
    0 -- Finished, including when nothing needed to change.
"""

from __future__ import annotations

import click

from posthog_wizard.cli.common import run_guarded
from posthog_wizard.cli.output import (
    RESTART_CLIENTS_HINT,
    console,
    print_client_table,
    print_header,
    print_mcp_install_tips,
)
from posthog_wizard.config import WizardOptions
from posthog_wizard.constants import CloudRegion
from posthog_wizard.mcp.steps import add_mcp_server_to_clients_step, remove_mcp_server_from_clients_step
from posthog_wizard.ui import WizardUI


@click.group("mcp")
def mcp_group() -> None:
    """MCP server management commands."""


@mcp_group.command("add")
@click.option("--local", is_flag=True, default=False, help="Add the local development MCP server (http://localhost:8787).")
@click.pass_obj
def mcp_add_command(options: WizardOptions, local: bool) -> None:
    """Install the PostHog MCP server to supported clients."""

    def flow(ui: WizardUI) -> None:
        title = "Installing the PostHog MCP server"
        print_header(f"{title} (local)" if local else title, style="green")
        added = add_mcp_server_to_clients_step(
            ui,
            options.cloud_region or CloudRegion.US,
            options.api_key,
            local=local,
            ask_permission=False,
        )
        if added:
            print_client_table("PostHog MCP server added", added)
        print_mcp_install_tips()

    run_guarded(options, flow)


@mcp_group.command("remove")
@click.option("--local", is_flag=True, default=False, help="Remove the local development MCP server.")
@click.pass_obj
def mcp_remove_command(options: WizardOptions, local: bool) -> None:
    """Remove the PostHog MCP server from supported clients."""

    def flow(ui: WizardUI) -> None:
        print_header("Removing the PostHog MCP server", style="red")
        removed = remove_mcp_server_from_clients_step(ui, local=local)
        if not removed:
            console.print("No PostHog MCP servers found to remove.")
            return
        print_client_table("PostHog MCP server removed from", removed)
        console.print(f"[green]{RESTART_CLIENTS_HINT}[/green]")

    run_guarded(options, flow)
