"""Shared constants: integrations, region URLs and well-known file names."""

from __future__ import annotations

from enum import Enum


class Integration(str, Enum):
    """Frameworks the wizard knows how to set up."""

    NEXTJS = "nextjs"
    NUXT = "nuxt"
    VUE = "vue"
    REACT_ROUTER = "react-router"
    TANSTACK_START = "tanstack-start"
    TANSTACK_ROUTER = "tanstack-router"
    REACT_NATIVE = "react-native"
    ANGULAR = "angular"
    ASTRO = "astro"
    SVELTE = "svelte"
    REACT = "react"
    DJANGO = "django"
    FLASK = "flask"
    FASTAPI = "fastapi"
    LARAVEL = "laravel"
    RAILS = "rails"
    PYTHON = "python"


class CloudRegion(str, Enum):
    """PostHog cloud regions."""

    US = "us"
    EU = "eu"


# ---------------------------------------------------------------------------
# URLs
# ---------------------------------------------------------------------------

ISSUES_URL = "https://github.com/posthog/wizard/issues"
DEFAULT_DOCS_URL = "https://posthog.com/docs"
SUPPORT_EMAIL = "wizard@posthog.com"

_HOSTS: dict[CloudRegion, str] = {
    CloudRegion.US: "https://us.i.posthog.com",
    CloudRegion.EU: "https://eu.i.posthog.com",
}

_CLOUD_URLS: dict[CloudRegion, str] = {
    CloudRegion.US: "https://us.posthog.com",
    CloudRegion.EU: "https://eu.posthog.com",
}


def get_host_from_region(region: CloudRegion | str) -> str:
    """Return the ingestion host for a cloud region."""
    return _HOSTS[CloudRegion(region)]


def get_cloud_url_from_region(region: CloudRegion | str) -> str:
    """Return the web app URL for a cloud region."""
    return _CLOUD_URLS[CloudRegion(region)]


def get_asset_host_from_host(host: str) -> str:
    """Map an ingestion host to its static assets host."""
    if "us.i.posthog.com" in host:
        return "https://us-assets.i.posthog.com"
    if "eu.i.posthog.com" in host:
        return "https://eu-assets.i.posthog.com"
    return host


def get_ui_host_from_host(host: str) -> str:
    """Map an ingestion host to the web app host."""
    if "us.i.posthog.com" in host:
        return "https://us.posthog.com"
    if "eu.i.posthog.com" in host:
        return "https://eu.posthog.com"
    return host


# ---------------------------------------------------------------------------
# Files and analytics
# ---------------------------------------------------------------------------

LOG_FILE_PATH = "/tmp/posthog-wizard.log"
WIZARD_MARKER_FILENAME = ".posthog-wizard.json"
DEFAULT_ENV_FILE = ".env"

WIZARD_INTERACTION_EVENT_NAME = "wizard interaction"
WIZARD_FINISHED_EVENT_NAME = "setup wizard finished"
ANALYTICS_HOST_URL = "https://internal-t.posthog.com"
ANALYTICS_PROJECT_WRITE_KEY = "sTMFPsFhdP1Ssg"

SPINNER_MESSAGE = "Writing your PostHog setup with events, error capture and more..."
