"""Rich output helpers shared by the CLI commands.

Wizard flows talk to the user through :class:`posthog_wizard.ui.WizardUI`;
the helpers here cover what happens around a flow: argument errors,
cancellation and the MCP command summaries.
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

MCP_DOCS_URL = "https://posthog.com/docs/model-context-protocol"

MCP_EXAMPLE_PROMPTS = (
    "What feature flags do I have active?",
    "Add a new feature flag for our homepage redesign",
    "What are my most common errors?",
)

RESTART_CLIENTS_HINT = "You might need to restart your MCP clients to see the changes."

console = Console()


def print_header(title: str, style: str = "magenta") -> None:
    """Print a boxed title."""
    console.print(Panel(f"[bold]{escape(title)}[/bold]", border_style=style))


def print_error(message: str) -> None:
    console.print(f"[red]✖[/red] {escape(message)}")


def print_cancelled() -> None:
    console.print("[dim]Setup cancelled. PostHog wizard will see you next time![/dim]")


def print_client_table(title: str, clients: list[str]) -> None:
    """Print the MCP clients an operation touched as a one-column table.

    Args:
        title: Table title.
        clients: Client display names.
    """
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Client", style="bold")
    for name in clients:
        table.add_row(name)
    console.print(table)


def print_mcp_install_tips() -> None:
    """Print follow-up hints after installing the MCP server."""
    console.print(f"[bright_green]{RESTART_CLIENTS_HINT}[/bright_green]")
    prompts = "\n".join(f"- {prompt}" for prompt in MCP_EXAMPLE_PROMPTS)
    console.print(f"Get started with some prompts like:\n{prompts}")
    console.print(f"Check out our MCP Server documentation:\n[bright_blue]{MCP_DOCS_URL}[/bright_blue]")
