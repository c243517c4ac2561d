"""Codex CLI, configured through ``codex mcp``."""

from __future__ import annotations

import json
import logging
import subprocess

from posthog_wizard.constants import CloudRegion
from posthog_wizard.mcp.clients.base import MCPClient
from posthog_wizard.mcp.defaults import SSE, get_default_server_config, server_name

logger = logging.getLogger(__name__)


class CodexMCPClient(MCPClient):
    name = "Codex CLI"
    binary = "codex"

    def _run(self, args: list[str]) -> subprocess.CompletedProcess[str] | None:
        try:
            return subprocess.run([self.binary, *args], capture_output=True, text=True, check=False)
        except OSError as exc:
            logger.debug("Running codex %s failed: %s", " ".join(args), exc)
            return None

    def is_client_supported(self) -> bool:
        result = self._run(["--version"])
        return result is not None and result.returncode == 0

    def is_server_installed(self, local: bool = False) -> bool:
        result = self._run(["mcp", "list", "--json"])
        if result is None or result.returncode != 0 or not result.stdout.strip():
            return False
        try:
            servers = json.loads(result.stdout)
        except ValueError:
            return False
        name = server_name(local)
        return any(isinstance(s, dict) and s.get("name") == name for s in servers)

    def add_server(
        self,
        api_key: str | None,
        selected_features: list[str] | None = None,
        local: bool = False,
        region: CloudRegion | str | None = None,
    ) -> bool:
        config = get_default_server_config(api_key, SSE, selected_features, local, region)
        args = ["mcp", "add", server_name(local)]
        for key, value in config.get("env", {}).items():
            args.extend(["--env", f"{key}={value}"])
        args.extend(["--", config["command"], *config["args"]])
        result = self._run(args)
        if result is None or result.returncode != 0:
            logger.warning("Failed to add server to Codex CLI. Please ensure codex is installed.")
            return False
        return True

    def remove_server(self, local: bool = False) -> bool:
        result = self._run(["mcp", "remove", server_name(local)])
        if result is None or result.returncode != 0:
            logger.warning("Failed to remove server from Codex CLI. Please ensure codex is installed.")
            return False
        return True
