"""Clients for the PostHog API and its LLM gateway."""

from posthog_wizard.gateway.project import ProjectData, fetch_project_data
from posthog_wizard.gateway.query import query

__all__ = ["ProjectData", "fetch_project_data", "query"]
