"""Cursor: ``~/.cursor/mcp.json`` with a native HTTP server entry."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from posthog_wizard.constants import CloudRegion
from posthog_wizard.mcp.clients.base import MACOS, WINDOWS, JsonConfigMCPClient
from posthog_wizard.mcp.defaults import STREAMABLE_HTTP, get_native_http_server_config


class CursorMCPClient(JsonConfigMCPClient):
    name = "Cursor"
    server_type = STREAMABLE_HTTP

    def is_client_supported(self) -> bool:
        return self.platform in (MACOS, WINDOWS)

    def get_config_path(self) -> Path:
        return self.home / ".cursor" / "mcp.json"

    def get_server_config(
        self,
        api_key: str | None,
        selected_features: list[str] | None = None,
        local: bool = False,
        region: CloudRegion | str | None = None,
    ) -> dict[str, Any]:
        return get_native_http_server_config(api_key, self.server_type, selected_features, local, region)
