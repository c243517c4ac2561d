"""Claude Desktop: ``claude_desktop_config.json`` bridged through ``mcp-remote``."""

from __future__ import annotations

from pathlib import Path

from posthog_wizard.mcp.clients.base import MACOS, WINDOWS, JsonConfigMCPClient


class ClaudeDesktopMCPClient(JsonConfigMCPClient):
    name = "Claude Desktop"

    def is_client_supported(self) -> bool:
        return self.platform in (MACOS, WINDOWS)

    def get_config_path(self) -> Path:
        if self.platform == MACOS:
            return self.home / "Library" / "Application Support" / "Claude" / "claude_desktop_config.json"
        if self.platform == WINDOWS:
            return Path(self.environ.get("APPDATA", "")) / "Claude" / "claude_desktop_config.json"
        raise NotImplementedError(f"Unsupported platform: {self.platform}")
