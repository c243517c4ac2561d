"""Register the PostHog MCP server with editors and coding assistants."""
