"""Interactive steps that add or remove the MCP server across clients."""

from __future__ import annotations

import logging
from typing import Callable

from posthog_wizard.analytics import Analytics, analytics as default_analytics
from posthog_wizard.constants import CloudRegion
from posthog_wizard.mcp.clients import MCPClient, all_clients
from posthog_wizard.mcp.defaults import ALL_FEATURE_VALUES, AVAILABLE_FEATURES
from posthog_wizard.ui import WizardUI

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], list[MCPClient]]


def get_supported_clients(factory: ClientFactory = all_clients) -> list[MCPClient]:
    supported = []
    for client in factory():
        try:
            ok = client.is_client_supported()
        except OSError as exc:
            logger.debug("%s support check failed: %s", client.name, exc)
            ok = False
        logger.debug("%s: %s", client.name, "supported" if ok else "not supported")
        if ok:
            supported.append(client)
    return supported


def get_installed_clients(local: bool = False, factory: ClientFactory = all_clients) -> list[MCPClient]:
    return [client for client in get_supported_clients(factory) if client.is_server_installed(local)]


def add_mcp_server(
    clients: list[MCPClient],
    api_key: str | None,
    selected_features: list[str] | None = None,
    local: bool = False,
    region: CloudRegion | str | None = None,
) -> list[str]:
    """Add the server to each client; a failing client does not stop the rest.

    Returns:
        Names of the clients that were updated.
    """
    added = []
    for client in clients:
        if client.add_server(api_key, selected_features, local, region):
            added.append(client.name)
        else:
            logger.warning("Skipping %s: the MCP server could not be added", client.name)
    return added


def remove_mcp_server(clients: list[MCPClient], local: bool = False) -> list[str]:
    removed = []
    for client in clients:
        if client.remove_server(local):
            removed.append(client.name)
        else:
            logger.warning("Skipping %s: the MCP server could not be removed", client.name)
    return removed


def _feature_options() -> list[tuple[str, str]]:
    return [
        (value, f"{group}: {label} ({hint})")
        for group, features in AVAILABLE_FEATURES.items()
        for value, label, hint in features
    ]


def add_mcp_server_to_clients_step(
    ui: WizardUI,
    region: CloudRegion | str,
    api_key: str | None = None,
    *,
    integration: str | None = None,
    local: bool = False,
    ask_permission: bool = True,
    factory: ClientFactory = all_clients,
    analytics: Analytics = default_analytics,
) -> list[str]:
    """Offer to install the MCP server and install it into the chosen clients.

    Skipped entirely in CI mode.

    Args:
        ui: Prompt handler.
        region: Cloud region the server should talk to.
        api_key: Personal API key for the Authorization header; when
            missing the user may paste one or fall back to OAuth.
        integration: Integration tag for analytics.
        local: Install the local development server instead.
        ask_permission: Ask before doing anything.
        factory: Source of candidate clients.
        analytics: Event sink.

    Returns:
        Names of the clients that received the server.
    """
    if ui.ci:
        ui.info("Skipping MCP installation (CI mode)")
        return []

    if ask_permission:
        question = (
            "Would you like to install the local development MCP server?"
            if local
            else "Would you like to install the MCP server to use PostHog in your editor?"
        )
        if not ui.confirm(question, default=True):
            return []

    selected_features = ui.multiselect(
        "Select which PostHog features to enable as tools:",
        _feature_options(),
        initial=ALL_FEATURE_VALUES,
    )

    supported = get_supported_clients(factory)
    if not supported:
        ui.warn("No supported MCP clients were found on this machine.")
        return []

    names = ui.multiselect(
        "Select which MCP clients to install the MCP server to:",
        [(client.name, client.name) for client in supported],
        required=True,
    )
    clients = [client for client in supported if client.name in names]

    installed = [client for client in clients if client.is_server_installed(local)]
    if installed:
        ui.warn(
            "The MCP server is already configured for:\n"
            + "\n".join(f"  - {client.name}" for client in installed)
        )
        if not ui.confirm("Would you like to reinstall it?", default=True):
            analytics.capture_interaction(
                "declined to reinstall mcp servers",
                clients=[client.name for client in installed],
                integration=integration,
            )
            return []
        remove_mcp_server(installed, local)
        ui.info("Removed existing installation.")

    if api_key is None:
        use_key = ui.select(
            "How would you like to authenticate with PostHog?",
            [("api-key", "API Key (paste a personal API key)"), ("oauth", "OAuth (authenticate on first use)")],
        )
        if use_key == "api-key":
            api_key = ui.text("Personal API key", hide_input=True)

    added = add_mcp_server(clients, api_key, selected_features, local, region)
    if added:
        ui.success("Added the MCP server to:\n" + "\n".join(f"  - {name}" for name in added))
    failed = [client.name for client in clients if client.name not in added]
    if failed:
        ui.warn("Could not add the MCP server to: " + ", ".join(failed))

    analytics.capture_interaction("added mcp servers", clients=added, integration=integration)
    return added


def remove_mcp_server_from_clients_step(
    ui: WizardUI,
    *,
    integration: str | None = None,
    local: bool = False,
    factory: ClientFactory = all_clients,
    analytics: Analytics = default_analytics,
) -> list[str]:
    """Remove the MCP server from the clients the user picks."""
    installed = get_installed_clients(local, factory)
    if not installed:
        analytics.capture_interaction("no mcp servers to remove", integration=integration)
        return []

    names = ui.multiselect(
        "Select which clients to remove the MCP server from:",
        [(client.name, client.name) for client in installed],
    )
    to_remove = [client for client in installed if client.name in names]
    if not to_remove:
        analytics.capture_interaction("no mcp servers selected for removal", integration=integration)
        return []

    removed = remove_mcp_server(to_remove, local)
    analytics.capture_interaction("removed mcp servers", clients=removed, integration=integration)
    return removed
