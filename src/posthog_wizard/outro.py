"""Closing summaries shown after a successful run.

Messages use Rich markup and are printed inside a panel by
:meth:`posthog_wizard.ui.WizardUI.outro`.
"""

from __future__ import annotations

from typing import Iterable

from posthog_wizard.constants import SUPPORT_EMAIL

REVIEW_NOTE = (
    "Note: This wizard uses an LLM agent to analyze and modify your project. "
    "Please review the changes made."
)

UPLOADED_ENV_VARS_BULLET = "Uploaded environment variables to your hosting provider"
EDITOR_RULES_BULLET = "Added Cursor rules for PostHog"


def _bullets(items: Iterable[str]) -> str:
    return "\n".join(f"• {item}" for item in items if item)


def build_outro_changes(
    framework_changes: list[str],
    env_file: str | None = None,
    mcp_clients: list[str] | None = None,
    uploaded_env_vars: bool = False,
    added_editor_rules: bool = False,
) -> list[str]:
    """Combine framework bullets with the steps the wizard itself performed."""
    changes = list(framework_changes)
    if env_file:
        changes.append(f"Added environment variables to {env_file} file")
    if uploaded_env_vars:
        changes.append(UPLOADED_ENV_VARS_BULLET)
    if added_editor_rules:
        changes.append(EDITOR_RULES_BULLET)
    if mcp_clients:
        changes.append(f"Added the PostHog MCP server to {', '.join(mcp_clients)}")
    return changes


def build_outro_message(
    changes: list[str],
    next_steps: list[str],
    docs_url: str,
    continue_url: str | None = None,
    actor: str = "agent",
) -> str:
    """Outro for the integration flows.

    Args:
        changes: "What the ... did" bullets.
        next_steps: "Next steps" bullets.
        docs_url: Framework documentation link.
        continue_url: Onboarding link for new signups.
        actor: ``"agent"`` or ``"wizard"``, depending on the flow.
    """
    parts = [
        "[green]Successfully installed PostHog![/green]",
        f"[cyan]What the {actor} did:[/cyan]\n{_bullets(changes)}",
        f"[yellow]Next steps:[/yellow]\n{_bullets(next_steps)}",
        f"Learn more: [cyan]{docs_url}[/cyan]",
    ]
    if continue_url:
        parts.append(f"Continue onboarding: [cyan]{continue_url}[/cyan]")
    parts.append(f"[dim]{REVIEW_NOTE}[/dim]")
    parts.append(f"[dim]How did this work for you? Drop us a line: {SUPPORT_EMAIL}[/dim]")
    return "\n\n".join(parts)


def build_migration_outro_message(
    provider_name: str,
    default_changes: Iterable[str],
    next_steps: Iterable[str],
    migrated_files_count: int,
    cloud_url: str,
    env_file: str | None = None,
    mcp_clients: list[str] | None = None,
    uploaded_env_vars: bool = False,
    added_editor_rules: bool = False,
) -> str:
    """Outro for ``migrate``."""
    changes = list(default_changes)
    plural = "" if migrated_files_count == 1 else "s"
    changes.append(f"Migrated {migrated_files_count} file{plural}")
    if env_file:
        changes.append(f"Added environment variables to {env_file}")
    if uploaded_env_vars:
        changes.append(UPLOADED_ENV_VARS_BULLET)
    if added_editor_rules:
        changes.append(EDITOR_RULES_BULLET)
    if mcp_clients:
        changes.append(f"Added the PostHog MCP server to {', '.join(mcp_clients)}")
    return "\n\n".join(
        [
            f"[green]Migration from {provider_name} complete![/green]",
            f"[bold]What we did:[/bold]\n{_bullets(changes)}",
            f"[bold]Next steps:[/bold]\n{_bullets(next_steps)}",
            f"View your data at: [cyan]{cloud_url}[/cyan]",
        ]
    )
