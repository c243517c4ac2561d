"""Lazy access to the Anthropic SDK.

The SDK is heavy to import and only the agent flow needs it, so the
module is imported on first use and the client is built once per process.
"""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)

_client: Any = None
_client_key: tuple[str, str] | None = None


def import_anthropic() -> Any:  # noqa: ANN401
    """Import the SDK, exiting with an install hint if it is missing."""
    try:
        import anthropic
    except ImportError:
        raise SystemExit(
            "The anthropic package is required for the agent flow.\n"
            "Install it with: pip install posthog-wizard"
        )
    return anthropic


def gateway_base_url(cloud_url: str, project_id: int) -> str:
    """Base URL of the Anthropic-compatible LLM gateway for a project."""
    return f"{cloud_url.rstrip('/')}/api/projects/{project_id}/llm_gateway"


def get_agent_client(access_token: str, base_url: str) -> Any:  # noqa: ANN401
    """Return the process-wide Anthropic client, building it on first use.

    A different token or base URL replaces the cached client.
    """
    global _client, _client_key
    key = (access_token, base_url)
    if _client is None or _client_key != key:
        anthropic = import_anthropic()
        logger.debug("Creating agent client for %s", base_url)
        _client = anthropic.Anthropic(auth_token=access_token, base_url=base_url)
        _client_key = key
    return _client


def reset_agent_client() -> None:
    """Forget the cached client (used by tests)."""
    global _client, _client_key
    _client = None
    _client_key = None
