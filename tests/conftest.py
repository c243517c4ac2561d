"""Shared fixtures for posthog-wizard tests."""

from __future__ import annotations

import pathlib
from typing import Iterator

import pytest

from posthog_wizard.analytics import analytics
from posthog_wizard.gateway import ProjectData


@pytest.fixture(autouse=True)
def _no_telemetry() -> Iterator[None]:
    """Keep the module-level analytics client off the network."""
    previous = analytics.enabled
    analytics.enabled = False
    yield
    analytics.enabled = previous


@pytest.fixture(autouse=True)
def _outside_cursor(monkeypatch: pytest.MonkeyPatch) -> None:
    """Runs started from a Cursor terminal would otherwise be offered editor rules."""
    monkeypatch.delenv("CURSOR_TRACE_ID", raising=False)


@pytest.fixture
def project_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """An empty project root."""
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def project_data() -> ProjectData:
    """Credentials for a fake US project."""
    return ProjectData(
        project_api_key="phc_test",
        host="https://us.i.posthog.com",
        access_token="phx_test",
        project_id=42,
        cloud_url="https://us.posthog.com",
    )
