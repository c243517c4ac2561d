"""Tests for MCP URLs and server config shapes."""

from __future__ import annotations

from posthog_wizard.mcp.defaults import (
    ALL_FEATURE_VALUES,
    SSE,
    STREAMABLE_HTTP,
    build_mcp_url,
    get_default_server_config,
    get_native_http_server_config,
    server_name,
)


class TestBuildMcpUrl:
    """Tests for ``build_mcp_url``."""

    def test_hosts(self) -> None:
        """Region and local flag choose the host; type chooses the path."""
        assert build_mcp_url(STREAMABLE_HTTP) == "https://mcp.posthog.com/mcp"
        assert build_mcp_url(SSE, region="eu") == "https://mcp-eu.posthog.com/sse"
        assert build_mcp_url(STREAMABLE_HTTP, local=True, region="eu") == "http://localhost:8787/mcp"

    def test_all_features_has_no_query(self) -> None:
        """Selecting every feature is the same as selecting none."""
        assert build_mcp_url(SSE, list(ALL_FEATURE_VALUES)) == "https://mcp.posthog.com/sse"
        assert build_mcp_url(SSE, []) == "https://mcp.posthog.com/sse"

    def test_subset_adds_features(self) -> None:
        """A strict subset is passed as a comma-separated list."""
        url = build_mcp_url(STREAMABLE_HTTP, ["flags", "docs"])
        assert url == "https://mcp.posthog.com/mcp?features=flags,docs"


class TestServerConfigs:
    """Tests for the two server config shapes."""

    def test_native_http(self) -> None:
        """HTTP clients get a URL and a bearer header."""
        assert get_native_http_server_config("phx", STREAMABLE_HTTP) == {
            "url": "https://mcp.posthog.com/mcp",
            "headers": {"Authorization": "Bearer phx"},
        }

    def test_mcp_remote_with_key(self) -> None:
        """stdio clients bridge through mcp-remote with the key in env."""
        config = get_default_server_config("phx", SSE)
        assert config["command"] == "npx"
        assert config["args"][:3] == ["-y", "mcp-remote@latest", "https://mcp.posthog.com/sse"]
        assert config["env"] == {"POSTHOG_AUTH_HEADER": "Bearer phx"}

    def test_mcp_remote_oauth(self) -> None:
        """Without a key there is no header or env."""
        config = get_default_server_config(None, SSE)
        assert "env" not in config
        assert len(config["args"]) == 3

    def test_server_names(self) -> None:
        """The local server has its own name."""
        assert server_name() == "posthog"
        assert server_name(local=True) == "posthog-local"
