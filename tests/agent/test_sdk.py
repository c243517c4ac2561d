"""Tests for the cached agent client."""

from __future__ import annotations

from typing import Any, Iterator

import pytest

from posthog_wizard.agent import sdk


class FakeAnthropicModule:
    """Stands in for the ``anthropic`` module and records client construction."""

    def __init__(self) -> None:
        self.created: list[dict[str, Any]] = []

    def Anthropic(self, **kwargs: Any) -> dict[str, Any]:  # noqa: N802
        self.created.append(kwargs)
        return dict(kwargs)


@pytest.fixture
def fake_anthropic(monkeypatch: pytest.MonkeyPatch) -> Iterator[FakeAnthropicModule]:
    """A fake SDK module and a clean client cache."""
    module = FakeAnthropicModule()
    monkeypatch.setattr(sdk, "import_anthropic", lambda: module)
    sdk.reset_agent_client()
    yield module
    sdk.reset_agent_client()


def test_gateway_base_url() -> None:
    """The gateway lives under the project API."""
    assert (
        sdk.gateway_base_url("https://eu.posthog.com/", 7)
        == "https://eu.posthog.com/api/projects/7/llm_gateway"
    )


class TestClientCache:
    """Tests for ``get_agent_client``."""

    def test_reused(self, fake_anthropic: FakeAnthropicModule) -> None:
        """Same token and URL share one client."""
        first = sdk.get_agent_client("phx", "https://gw.test")
        second = sdk.get_agent_client("phx", "https://gw.test")
        assert first is second
        assert fake_anthropic.created == [{"auth_token": "phx", "base_url": "https://gw.test"}]

    def test_replaced_on_new_token(self, fake_anthropic: FakeAnthropicModule) -> None:
        """A different token builds a new client."""
        sdk.get_agent_client("phx_a", "https://gw.test")
        sdk.get_agent_client("phx_b", "https://gw.test")
        assert len(fake_anthropic.created) == 2
