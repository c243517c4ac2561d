"""Structured queries against the PostHog LLM gateway.

The gateway speaks the OpenAI chat completions protocol. Each query asks
for a JSON object matching a JSON Schema and validates the answer with
``jsonschema`` before handing it back, so callers can index into the
result without further checks.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx
import jsonschema

from posthog_wizard.constants import CloudRegion, get_cloud_url_from_region
from posthog_wizard.exceptions import QueryError, QueryValidationError, RateLimitError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "o4-mini"

# The gateway streams nothing back until the whole completion is done.
DEFAULT_TIMEOUT: float = 300.0


def build_query_url(region: CloudRegion | str, project_id: int) -> str:
    """Return the chat completions endpoint for a project."""
    cloud_url = get_cloud_url_from_region(region)
    return f"{cloud_url}/api/projects/{project_id}/llm_gateway/v1/chat/completions"


def build_query_payload(message: str, schema: dict[str, Any], model: str = DEFAULT_MODEL) -> dict[str, Any]:
    """Build the request body asking for a strict JSON Schema response."""
    return {
        "model": model,
        "messages": [{"role": "user", "content": message}],
        "response_format": {
            "type": "json_schema",
            "json_schema": {"name": "schema", "strict": True, "schema": schema},
        },
    }


def query(
    message: str,
    schema: dict[str, Any],
    region: CloudRegion | str,
    access_token: str,
    project_id: int,
    model: str = DEFAULT_MODEL,
    *,
    client: httpx.Client | None = None,
) -> Any:
    """Ask the LLM gateway a question and return the validated JSON answer.

    Args:
        message: Prompt text.
        schema: JSON Schema the answer must satisfy.
        region: Cloud region hosting the project.
        access_token: Bearer token for the PostHog API.
        project_id: Project the gateway usage is billed to.
        model: Gateway model name.
        client: HTTP client to use; a short-lived one is created otherwise.

    Returns:
        The decoded answer.

    Raises:
        RateLimitError: The gateway answered 429.
        QueryValidationError: The answer is not JSON or violates ``schema``.
        QueryError: Any other HTTP or transport failure.
    """
    url = build_query_url(region, project_id)
    payload = build_query_payload(message, schema, model)
    headers = {"Authorization": f"Bearer {access_token}", "Content-Type": "application/json"}

    logger.debug("Query %s: %s...", url, message[:100])

    owns_client = client is None
    http = client if client is not None else httpx.Client(timeout=DEFAULT_TIMEOUT)
    try:
        resp = http.post(url, json=payload, headers=headers)
        resp.raise_for_status()
        data = resp.json()
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        logger.debug("Query failed with HTTP %d", status)
        if status == 429:
            raise RateLimitError("Wizard usage limit reached. Please try again later.") from exc
        raise QueryError(f"LLM gateway returned HTTP {status}") from exc
    except httpx.HTTPError as exc:
        raise QueryError(f"LLM gateway request failed: {exc}") from exc
    except ValueError as exc:
        raise QueryError(f"LLM gateway returned a non-JSON body: {exc}") from exc
    finally:
        if owns_client:
            http.close()

    try:
        content = data["choices"][0]["message"]["content"]
        answer = json.loads(content)
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        raise QueryValidationError(f"Invalid response from wizard: {exc}") from exc

    try:
        jsonschema.validate(answer, schema)
    except jsonschema.ValidationError as exc:
        logger.debug("Validation error: %s", exc.message)
        raise QueryValidationError(f"Invalid response from wizard: {exc.message}") from exc

    logger.debug("Query response: %s", answer)
    return answer
