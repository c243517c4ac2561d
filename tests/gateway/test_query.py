"""Tests for LLM gateway queries using an in-memory httpx transport."""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from posthog_wizard.exceptions import QueryError, QueryValidationError, RateLimitError
from posthog_wizard.gateway.query import build_query_payload, build_query_url, query

SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {"files": {"type": "array", "items": {"type": "string"}}},
    "required": ["files"],
}


def _completion(content: str) -> dict[str, Any]:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def _client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestBuildQuery:
    """Tests for URL and payload construction."""

    def test_url_per_region(self) -> None:
        """The endpoint lives under the project on the region's cloud."""
        assert build_query_url("eu", 7) == (
            "https://eu.posthog.com/api/projects/7/llm_gateway/v1/chat/completions"
        )

    def test_payload_requests_strict_schema(self) -> None:
        """The response format asks for a strict JSON Schema answer."""
        payload = build_query_payload("hi", SCHEMA)
        assert payload["model"] == "o4-mini"
        assert payload["messages"] == [{"role": "user", "content": "hi"}]
        assert payload["response_format"]["json_schema"] == {
            "name": "schema",
            "strict": True,
            "schema": SCHEMA,
        }


class TestQuery:
    """Tests for ``query``."""

    def test_returns_validated_answer(self) -> None:
        """The message content is decoded and returned."""
        seen: dict[str, Any] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["Authorization"]
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_completion('{"files": ["app/layout.tsx"]}'))

        answer = query("which files?", SCHEMA, "us", "phx_1", 42, client=_client(handler))

        assert answer == {"files": ["app/layout.tsx"]}
        assert seen["auth"] == "Bearer phx_1"
        assert seen["url"].endswith("/api/projects/42/llm_gateway/v1/chat/completions")
        assert seen["body"]["messages"][0]["content"] == "which files?"

    def test_rate_limit(self) -> None:
        """HTTP 429 becomes RateLimitError."""
        client = _client(lambda request: httpx.Response(429, json={"detail": "slow down"}))
        with pytest.raises(RateLimitError):
            query("q", SCHEMA, "us", "phx", 1, client=client)

    def test_server_error(self) -> None:
        """Other HTTP errors become QueryError."""
        client = _client(lambda request: httpx.Response(500, text="boom"))
        with pytest.raises(QueryError) as info:
            query("q", SCHEMA, "us", "phx", 1, client=client)
        assert not isinstance(info.value, RateLimitError)

    def test_schema_violation(self) -> None:
        """An answer that does not match the schema is rejected."""
        client = _client(lambda request: httpx.Response(200, json=_completion('{"files": "nope"}')))
        with pytest.raises(QueryValidationError):
            query("q", SCHEMA, "us", "phx", 1, client=client)

    def test_content_not_json(self) -> None:
        """Non-JSON message content is a validation error."""
        client = _client(lambda request: httpx.Response(200, json=_completion("sure! here are files")))
        with pytest.raises(QueryValidationError):
            query("q", SCHEMA, "us", "phx", 1, client=client)

    def test_missing_choices(self) -> None:
        """A body without choices is a validation error."""
        client = _client(lambda request: httpx.Response(200, json={"error": None}))
        with pytest.raises(QueryValidationError):
            query("q", SCHEMA, "us", "phx", 1, client=client)

    def test_transport_failure(self) -> None:
        """Connection errors become QueryError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(QueryError):
            query("q", SCHEMA, "us", "phx", 1, client=_client(handler))
