"""Zed: ``settings.json`` under ``context_servers``."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from posthog_wizard.constants import CloudRegion
from posthog_wizard.mcp.clients.base import LINUX, MACOS, JsonConfigMCPClient
from posthog_wizard.mcp.defaults import STREAMABLE_HTTP, build_mcp_url


class ZedMCPClient(JsonConfigMCPClient):
    name = "Zed"
    server_property_name = "context_servers"
    server_type = STREAMABLE_HTTP

    def is_client_supported(self) -> bool:
        return self.platform in (MACOS, LINUX)

    def get_config_path(self) -> Path:
        if self.platform == LINUX and self.environ.get("XDG_CONFIG_HOME"):
            return Path(self.environ["XDG_CONFIG_HOME"]) / "zed" / "settings.json"
        if self.platform in (MACOS, LINUX):
            return self.home / ".config" / "zed" / "settings.json"
        raise NotImplementedError(f"Unsupported platform: {self.platform}")

    def get_server_config(
        self,
        api_key: str | None,
        selected_features: list[str] | None = None,
        local: bool = False,
        region: CloudRegion | str | None = None,
    ) -> dict[str, Any]:
        config: dict[str, Any] = {
            "enabled": True,
            "url": build_mcp_url(self.server_type, selected_features, local, region),
        }
        if api_key:
            config["headers"] = {"Authorization": f"Bearer {api_key}"}
        return config
