"""FastAPI: router and full-stack project detection."""

from __future__ import annotations

import re
from pathlib import Path

from posthog_wizard.constants import Integration
from posthog_wizard.frameworks.base import (
    PYTHON_PACKAGE_INSTALLATION,
    AnalyticsConfig,
    Context,
    EnvironmentConfig,
    FrameworkConfig,
    FrameworkDetection,
    FrameworkMetadata,
    PromptConfig,
    UIConfig,
)
from posthog_wizard.frameworks.python import (
    PYTHON_ENV_VARS,
    PYTHON_IGNORE,
    find_source_containing,
    manifest_version,
    manifests_contain,
    sources_contain,
)
from posthog_wizard.files.walk import find_files
from posthog_wizard.packages.managers import detect_python_package_managers
from posthog_wizard.packages.manifest import python_package_declared
from posthog_wizard.versions import create_version_bucket

STANDARD = "standard"
ROUTER = "router"
FULLSTACK = "fullstack"

_PROJECT_TYPE_NAMES = {
    STANDARD: "Standard FastAPI",
    ROUTER: "FastAPI with APIRouter",
    FULLSTACK: "Full-stack FastAPI",
}

_VERSION_PATTERNS = (
    re.compile(r"[Ff]ast[Aa][Pp][Ii][=<>~!]+([0-9]+\.[0-9]+(?:\.[0-9]+)?)"),
    re.compile(r"[Ff]ast[Aa][Pp][Ii][\"\s]*[=<>~!]+\s*[\"']?[\^~]?([0-9]+\.[0-9]+(?:\.[0-9]+)?)"),
)

get_fastapi_version_bucket = create_version_bucket()


def get_fastapi_version(install_dir: Path) -> str | None:
    return manifest_version(install_dir, _VERSION_PATTERNS)


def detect_fastapi(install_dir: Path) -> bool:
    if python_package_declared(install_dir, "fastapi"):
        return True
    return sources_contain(install_dir, "from fastapi import", "FastAPI(")


def get_fastapi_project_type(install_dir: Path) -> str:
    """Templates make a full-stack app; routers make a router app."""
    root = Path(install_dir)
    if sources_contain(root, "Jinja2Templates", "fastapi.templating"):
        return FULLSTACK
    if find_files(root, ("**/templates/*.html",), PYTHON_IGNORE):
        return FULLSTACK
    if sources_contain(root, "APIRouter(", "include_router(", "from fastapi import APIRouter"):
        return ROUTER
    return STANDARD


def get_fastapi_project_type_name(project_type: str) -> str:
    return _PROJECT_TYPE_NAMES.get(project_type, "FastAPI")


def _gather_context(install_dir: Path) -> Context:
    return {
        "project_type": get_fastapi_project_type(install_dir),
        "app_file": find_source_containing(install_dir, "FastAPI("),
        "uses_pydantic_settings": manifests_contain(install_dir, "pydantic-settings"),
    }


def _context_lines(context: Context) -> list[str]:
    lines = [
        f"Project type: {get_fastapi_project_type_name(context.get('project_type', STANDARD))}",
        "Framework docs ID: fastapi (use posthog://docs/frameworks/fastapi for documentation)",
    ]
    if context.get("app_file"):
        lines.append(f"App file: {context['app_file']}")
    if context.get("uses_pydantic_settings"):
        lines.append("Settings: pydantic-settings is installed; read PostHog values from the settings class")
    return lines


def _outro_changes(context: Context) -> list[str]:
    name = get_fastapi_project_type_name(context.get("project_type", ""))
    return [
        f"Analyzed your {name} project structure",
        "Installed the PostHog Python package",
        "Configured PostHog in your FastAPI application",
        "Added PostHog initialization with automatic event tracking",
    ]


FASTAPI_CONFIG = FrameworkConfig(
    metadata=FrameworkMetadata(
        name="FastAPI",
        integration=Integration.FASTAPI,
        docs_url="https://posthog.com/docs/libraries/python",
        gather_context=_gather_context,
    ),
    detection=FrameworkDetection(
        package_name="fastapi",
        package_display_name="FastAPI",
        detect=detect_fastapi,
        detect_package_manager=detect_python_package_managers,
        get_installed_version=get_fastapi_version,
        get_version_bucket=get_fastapi_version_bucket,
        uses_package_json=False,
        minimum_version="0.100.0",
    ),
    environment=EnvironmentConfig(get_env_vars=PYTHON_ENV_VARS),
    analytics=AnalyticsConfig(
        get_tags=lambda context: {"projectType": context.get("project_type") or "unknown"},
    ),
    prompts=PromptConfig(
        project_type_detection=(
            "This is a Python/FastAPI project. Look for requirements.txt, pyproject.toml, "
            "setup.py, Pipfile, or main.py to confirm."
        ),
        package_installation=PYTHON_PACKAGE_INSTALLATION,
        get_additional_context_lines=_context_lines,
    ),
    ui=UIConfig(
        success_message="PostHog integration complete",
        estimated_duration_minutes=5,
        get_outro_changes=_outro_changes,
        get_outro_next_steps=lambda context: [
            "Start your FastAPI server (e.g. uvicorn main:app --reload) to see PostHog in action",
            "Visit your PostHog dashboard to see incoming events",
            "Use posthog.identify() to associate events with users",
        ],
    ),
)
