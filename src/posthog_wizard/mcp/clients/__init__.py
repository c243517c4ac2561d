"""Supported MCP clients."""

from posthog_wizard.mcp.clients.base import JsonConfigMCPClient, MCPClient
from posthog_wizard.mcp.clients.claude_code import ClaudeCodeMCPClient
from posthog_wizard.mcp.clients.claude_desktop import ClaudeDesktopMCPClient
from posthog_wizard.mcp.clients.codex import CodexMCPClient
from posthog_wizard.mcp.clients.cursor import CursorMCPClient
from posthog_wizard.mcp.clients.vscode import VSCodeMCPClient
from posthog_wizard.mcp.clients.zed import ZedMCPClient

__all__ = [
    "ClaudeCodeMCPClient",
    "ClaudeDesktopMCPClient",
    "CodexMCPClient",
    "CursorMCPClient",
    "JsonConfigMCPClient",
    "MCPClient",
    "VSCodeMCPClient",
    "ZedMCPClient",
    "all_clients",
]


def all_clients() -> list[MCPClient]:
    """One instance of every known client, in menu order."""
    return [
        CursorMCPClient(),
        ClaudeDesktopMCPClient(),
        ClaudeCodeMCPClient(),
        VSCodeMCPClient(),
        ZedMCPClient(),
        CodexMCPClient(),
    ]
