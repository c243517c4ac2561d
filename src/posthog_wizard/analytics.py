"""Anonymous usage events for the wizard itself.

Events go to PostHog's capture endpoint as soon as they are recorded.
Delivery is best-effort: a failed request is logged at debug level and
never interrupts the run.
"""

from __future__ import annotations

import logging
import traceback
import uuid
from typing import Any

import httpx

from posthog_wizard.constants import (
    ANALYTICS_HOST_URL,
    ANALYTICS_PROJECT_WRITE_KEY,
    WIZARD_FINISHED_EVENT_NAME,
    WIZARD_INTERACTION_EVENT_NAME,
)

logger = logging.getLogger(__name__)

APP_NAME = "wizard"
DEFAULT_TIMEOUT: float = 5.0


class Analytics:
    """Collects tags and sends wizard events.

    Tags are attached to every event. ``shutdown`` sends the final
    ``setup wizard finished`` event carrying the run status.

    Attributes:
        enabled: When False, events are dropped without any network access.
    """

    def __init__(
        self,
        host: str = ANALYTICS_HOST_URL,
        api_key: str = ANALYTICS_PROJECT_WRITE_KEY,
        client: httpx.Client | None = None,
    ) -> None:
        self.host = host.rstrip("/")
        self.api_key = api_key
        self.enabled = True
        self.tags: dict[str, Any] = {"$app_name": APP_NAME}
        self.anonymous_id = str(uuid.uuid4())
        self.distinct_id: str | None = None
        self._client = client

    @property
    def current_distinct_id(self) -> str:
        return self.distinct_id or self.anonymous_id

    def set_distinct_id(self, distinct_id: str) -> None:
        """Identify the user and alias the anonymous id to them."""
        self.distinct_id = distinct_id
        self._send("$create_alias", {"alias": self.anonymous_id})

    def set_tag(self, key: str, value: Any) -> None:
        self.tags[key] = value

    def capture(self, event: str, properties: dict[str, Any] | None = None) -> None:
        self._send(event, {**self.tags, **(properties or {})})

    def capture_interaction(self, action: str, **properties: Any) -> None:
        """Record a ``wizard interaction`` event for one step of the run."""
        self.capture(WIZARD_INTERACTION_EVENT_NAME, {"action": action, **properties})

    def capture_exception(self, error: BaseException, properties: dict[str, Any] | None = None) -> None:
        """Record an ``$exception`` event with the error type and message."""
        self.capture(
            "$exception",
            {
                "team": "growth",
                "$exception_type": type(error).__name__,
                "$exception_message": str(error),
                "$exception_stack_trace_raw": "".join(
                    traceback.format_exception(type(error), error, error.__traceback__)
                ),
                **(properties or {}),
            },
        )

    def shutdown(self, status: str) -> None:
        """Send ``setup wizard finished`` and close the HTTP client.

        Args:
            status: ``success``, ``error`` or ``cancelled``.
        """
        self._send(WIZARD_FINISHED_EVENT_NAME, {"status": status, "tags": dict(self.tags)})
        if self._client is not None:
            self._client.close()
            self._client = None

    def _send(self, event: str, properties: dict[str, Any]) -> None:
        if not self.enabled:
            return
        payload = {
            "api_key": self.api_key,
            "event": event,
            "distinct_id": self.current_distinct_id,
            "properties": properties,
        }
        try:
            if self._client is None:
                self._client = httpx.Client(timeout=DEFAULT_TIMEOUT)
            self._client.post(f"{self.host}/capture/", json=payload)
        except httpx.HTTPError as exc:
            logger.debug("Failed to send analytics event %s: %s", event, exc)


analytics = Analytics()
