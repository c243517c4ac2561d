"""MCP server URLs, feature sets and server config shapes."""

from __future__ import annotations

from typing import Any

from posthog_wizard.constants import CloudRegion

SERVER_NAME = "posthog"
LOCAL_SERVER_NAME = "posthog-local"

LOCAL_MCP_HOST = "http://localhost:8787"
US_MCP_HOST = "https://mcp.posthog.com"
EU_MCP_HOST = "https://mcp-eu.posthog.com"

SSE = "sse"
STREAMABLE_HTTP = "streamable-http"

# group -> (value, label, hint)
AVAILABLE_FEATURES: dict[str, list[tuple[str, str, str]]] = {
    "Data & Analytics": [
        ("dashboards", "Dashboards", "Dashboard creation and management"),
        ("insights", "Insights", "Analytics insights and SQL queries"),
        ("experiments", "Experiments", "A/B testing experiments"),
        ("llm-analytics", "LLM Analytics", "LLM usage and cost tracking"),
    ],
    "Development Tools": [
        ("error-tracking", "Error Tracking", "Error monitoring and debugging"),
        ("flags", "Feature Flags", "Feature flag management"),
    ],
    "Platform & Management": [
        ("workspace", "Workspace", "Organization and project management"),
        ("docs", "Documentation", "PostHog documentation search"),
    ],
}

ALL_FEATURE_VALUES: list[str] = [
    value for features in AVAILABLE_FEATURES.values() for value, _label, _hint in features
]


def server_name(local: bool = False) -> str:
    return LOCAL_SERVER_NAME if local else SERVER_NAME


def build_mcp_url(
    server_type: str,
    selected_features: list[str] | None = None,
    local: bool = False,
    region: CloudRegion | str | None = None,
) -> str:
    """Return the MCP endpoint URL.

    A ``features`` query parameter is added only when a non-empty strict
    subset of :data:`ALL_FEATURE_VALUES` is selected.

    Args:
        server_type: ``"sse"`` or ``"streamable-http"``.
        selected_features: Feature values to expose as tools.
        local: Point at the local development server.
        region: Cloud region; EU uses its own subdomain.
    """
    if local:
        host = LOCAL_MCP_HOST
    elif region is not None and CloudRegion(region) == CloudRegion.EU:
        host = EU_MCP_HOST
    else:
        host = US_MCP_HOST
    base_url = f"{host}/{'sse' if server_type == SSE else 'mcp'}"

    if not selected_features:
        return base_url
    all_selected = set(selected_features) == set(ALL_FEATURE_VALUES) and len(selected_features) == len(
        ALL_FEATURE_VALUES
    )
    if all_selected:
        return base_url
    return f"{base_url}?features={','.join(selected_features)}"


def get_native_http_server_config(
    api_key: str | None,
    server_type: str,
    selected_features: list[str] | None = None,
    local: bool = False,
    region: CloudRegion | str | None = None,
) -> dict[str, Any]:
    """Config for clients that speak MCP over HTTP themselves."""
    config: dict[str, Any] = {"url": build_mcp_url(server_type, selected_features, local, region)}
    if api_key:
        config["headers"] = {"Authorization": f"Bearer {api_key}"}
    return config


def get_default_server_config(
    api_key: str | None,
    server_type: str,
    selected_features: list[str] | None = None,
    local: bool = False,
    region: CloudRegion | str | None = None,
) -> dict[str, Any]:
    """Config for stdio-only clients, bridged through ``npx mcp-remote``.

    Without an API key the client authenticates through OAuth on first use.
    """
    url = build_mcp_url(server_type, selected_features, local, region)
    if not api_key:
        return {"command": "npx", "args": ["-y", "mcp-remote@latest", url]}
    return {
        "command": "npx",
        "args": ["-y", "mcp-remote@latest", url, "--header", "Authorization:${POSTHOG_AUTH_HEADER}"],
        "env": {"POSTHOG_AUTH_HEADER": f"Bearer {api_key}"},
    }
