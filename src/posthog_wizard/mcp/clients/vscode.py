"""Visual Studio Code: user-level ``mcp.json`` under the ``servers`` key."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from posthog_wizard.constants import CloudRegion
from posthog_wizard.mcp.clients.base import LINUX, MACOS, WINDOWS, JsonConfigMCPClient
from posthog_wizard.mcp.defaults import STREAMABLE_HTTP, build_mcp_url


class VSCodeMCPClient(JsonConfigMCPClient):
    name = "Visual Studio Code"
    server_property_name = "servers"
    server_type = STREAMABLE_HTTP

    def is_client_supported(self) -> bool:
        return self.platform in (MACOS, WINDOWS, LINUX)

    def get_config_path(self) -> Path:
        if self.platform == MACOS:
            return self.home / "Library" / "Application Support" / "Code" / "User" / "mcp.json"
        if self.platform == WINDOWS:
            return Path(self.environ.get("APPDATA", "")) / "Code" / "User" / "mcp.json"
        if self.platform == LINUX:
            return self.home / ".config" / "Code" / "User" / "mcp.json"
        raise NotImplementedError(f"Unsupported platform: {self.platform}")

    def get_server_config(
        self,
        api_key: str | None,
        selected_features: list[str] | None = None,
        local: bool = False,
        region: CloudRegion | str | None = None,
    ) -> dict[str, Any]:
        config: dict[str, Any] = {
            "type": "http",
            "url": build_mcp_url(self.server_type, selected_features, local, region),
        }
        if api_key:
            config["headers"] = {"Authorization": f"Bearer {api_key}"}
        return config
