"""Claude Code, configured through its ``claude mcp`` subcommands."""

from __future__ import annotations

import json
import logging
import shutil
import subprocess
from pathlib import Path
from typing import Any

from posthog_wizard.constants import CloudRegion
from posthog_wizard.mcp.clients.base import MCPClient
from posthog_wizard.mcp.defaults import SSE, build_mcp_url, server_name

logger = logging.getLogger(__name__)


class ClaudeCodeMCPClient(MCPClient):
    name = "Claude Code"

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._binary: str | None = None

    def find_binary(self) -> str | None:
        """Locate the ``claude`` executable in its usual install paths or on PATH."""
        if self._binary:
            return self._binary
        candidates = [
            self.home / ".claude" / "local" / "claude",
            "/usr/local/bin/claude",
            "/opt/homebrew/bin/claude",
        ]
        for candidate in candidates:
            if Path(candidate).exists():
                self._binary = str(candidate)
                return self._binary
        self._binary = shutil.which("claude")
        return self._binary

    def _run(self, args: list[str]) -> subprocess.CompletedProcess[str] | None:
        binary = self.find_binary()
        if binary is None:
            return None
        try:
            return subprocess.run([binary, *args], capture_output=True, text=True, check=False)
        except OSError as exc:
            logger.debug("Running claude %s failed: %s", " ".join(args), exc)
            return None

    def is_client_supported(self) -> bool:
        result = self._run(["--version"])
        return result is not None and result.returncode == 0

    def is_server_installed(self, local: bool = False) -> bool:
        result = self._run(["mcp", "list"])
        if result is None or result.returncode != 0:
            return False
        return server_name(local) in result.stdout

    def build_config(
        self,
        api_key: str | None,
        selected_features: list[str] | None = None,
        local: bool = False,
        region: CloudRegion | str | None = None,
    ) -> dict[str, Any]:
        """``mcp-remote`` config with the token inlined.

        Claude Code does not expand ``${VAR}`` references in args, so the
        Authorization header carries the key directly.
        """
        url = build_mcp_url(SSE, selected_features, local, region)
        args = ["-y", "mcp-remote@latest", url]
        config: dict[str, Any] = {"command": "npx", "args": args}
        if api_key:
            args.extend(["--header", f"Authorization:Bearer {api_key}"])
            config["env"] = {"POSTHOG_AUTH_HEADER": f"Bearer {api_key}"}
        return config

    def add_server(
        self,
        api_key: str | None,
        selected_features: list[str] | None = None,
        local: bool = False,
        region: CloudRegion | str | None = None,
    ) -> bool:
        config = self.build_config(api_key, selected_features, local, region)
        result = self._run(["mcp", "add-json", server_name(local), "-s", "user", json.dumps(config)])
        if result is None or result.returncode != 0:
            logger.warning("Failed to add server to Claude Code: %s", result.stderr if result else "not found")
            return False
        return True

    def remove_server(self, local: bool = False) -> bool:
        result = self._run(["mcp", "remove", "--scope", "user", server_name(local)])
        if result is None or result.returncode != 0:
            logger.warning("Failed to remove server from Claude Code")
            return False
        return True
