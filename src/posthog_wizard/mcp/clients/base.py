"""Base classes for MCP client registrars.

Two kinds of clients exist. File-based clients (Cursor, VS Code, Zed,
Claude Desktop) keep their MCP servers in a JSON(C) settings file under a
key such as ``mcpServers``; :class:`JsonConfigMCPClient` reads, patches and
writes that file. CLI-based clients (Claude Code, Codex) manage their own
configuration and are driven through their command-line tools.

Every client reports failure through its boolean return value; nothing
here raises for a broken or missing editor.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Mapping

from posthog_wizard.constants import CloudRegion
from posthog_wizard.mcp.defaults import SSE, get_default_server_config, server_name
from posthog_wizard.mcp.jsonc import loads_jsonc

logger = logging.getLogger(__name__)

MACOS = "darwin"
WINDOWS = "win32"
LINUX = "linux"


class MCPClient(ABC):
    """An editor or assistant that can host the PostHog MCP server.

    Args:
        home: Home directory override (for testing).
        platform: ``sys.platform`` override (for testing).
        environ: Environment override (for testing).
    """

    name: str = "MCP client"

    def __init__(
        self,
        home: Path | None = None,
        platform: str | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.home = home if home is not None else Path.home()
        self.platform = platform if platform is not None else sys.platform
        self.environ = environ if environ is not None else os.environ

    @abstractmethod
    def is_client_supported(self) -> bool:
        """Return True when the client can be configured on this machine."""

    @abstractmethod
    def is_server_installed(self, local: bool = False) -> bool:
        """Return True when the PostHog server is already registered."""

    @abstractmethod
    def add_server(
        self,
        api_key: str | None,
        selected_features: list[str] | None = None,
        local: bool = False,
        region: CloudRegion | str | None = None,
    ) -> bool:
        """Register the server. Returns False on failure."""

    @abstractmethod
    def remove_server(self, local: bool = False) -> bool:
        """Unregister the server. Returns False when nothing was removed."""

    def get_config_path(self) -> Path:
        raise NotImplementedError(f"{self.name} does not use a config file")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class JsonConfigMCPClient(MCPClient):
    """Client whose servers live under one key of a JSON(C) settings file.

    Comments in the existing file are dropped when it is rewritten; the
    rest of the file's settings are kept.
    """

    server_property_name = "mcpServers"
    server_type = SSE

    def get_server_config(
        self,
        api_key: str | None,
        selected_features: list[str] | None = None,
        local: bool = False,
        region: CloudRegion | str | None = None,
    ) -> dict[str, Any]:
        return get_default_server_config(api_key, self.server_type, selected_features, local, region)

    def _load(self, path: Path) -> dict[str, Any]:
        if not path.exists():
            return {}
        data = loads_jsonc(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"{path} does not contain a JSON object")
        return data

    def _dump(self, path: Path, config: dict[str, Any]) -> None:
        """Write ``config`` as plain JSON; comments in the old file are dropped."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(config, indent=2) + "\n", encoding="utf-8")

    def is_server_installed(self, local: bool = False) -> bool:
        try:
            config = self._load(self.get_config_path())
        except (OSError, ValueError, NotImplementedError):
            return False
        servers = config.get(self.server_property_name)
        return isinstance(servers, dict) and server_name(local) in servers

    def add_server(
        self,
        api_key: str | None,
        selected_features: list[str] | None = None,
        local: bool = False,
        region: CloudRegion | str | None = None,
    ) -> bool:
        try:
            path = self.get_config_path()
            config = self._load(path)
            servers = config.get(self.server_property_name)
            if not isinstance(servers, dict):
                servers = {}
                config[self.server_property_name] = servers
            servers[server_name(local)] = self.get_server_config(api_key, selected_features, local, region)
            self._dump(path, config)
        except (OSError, ValueError, NotImplementedError) as exc:
            logger.warning("Could not add the MCP server to %s: %s", self.name, exc)
            return False
        logger.debug("Added MCP server to %s at %s", self.name, path)
        return True

    def remove_server(self, local: bool = False) -> bool:
        try:
            path = self.get_config_path()
            if not path.exists():
                return False
            config = self._load(path)
            servers = config.get(self.server_property_name)
            name = server_name(local)
            if not isinstance(servers, dict) or name not in servers:
                return False
            del servers[name]
            self._dump(path, config)
        except (OSError, ValueError, NotImplementedError) as exc:
            logger.warning("Could not remove the MCP server from %s: %s", self.name, exc)
            return False
        return True
