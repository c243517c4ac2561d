"""Flask: extension-based project types and app file lookup."""

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
    find_source_containing,
    manifest_version,
    manifests_contain,
    sources_contain,
)
from posthog_wizard.packages.managers import detect_python_package_managers
from posthog_wizard.packages.manifest import python_package_declared
from posthog_wizard.versions import create_version_bucket

STANDARD = "standard"
RESTFUL = "restful"
RESTX = "restx"
SMOREST = "smorest"
BLUEPRINT = "blueprint"

_PROJECT_TYPE_NAMES = {
    STANDARD: "Standard Flask",
    RESTFUL: "Flask-RESTful",
    RESTX: "Flask-RESTX",
    SMOREST: "flask-smorest",
    BLUEPRINT: "Flask with Blueprints",
}

_VERSION_PATTERNS = (
    re.compile(r"[Ff]lask[=<>~!]+([0-9]+\.[0-9]+(?:\.[0-9]+)?)"),
    re.compile(r"[Ff]lask[\"\s]*[=<>~!]+\s*[\"']?[\^~]?([0-9]+\.[0-9]+(?:\.[0-9]+)?)"),
)

get_flask_version_bucket = create_version_bucket()


def get_flask_version(install_dir: Path) -> str | None:
    return manifest_version(install_dir, _VERSION_PATTERNS)


def detect_flask(install_dir: Path) -> bool:
    """Flask declared as a dependency, or ``Flask(__name__)`` in the sources."""
    if python_package_declared(install_dir, "flask"):
        return True
    return sources_contain(install_dir, "Flask(__name__)")


def get_flask_project_type(install_dir: Path) -> str:
    """Classify by extension: RESTX, smorest, RESTful, then Blueprints."""
    if manifests_contain(install_dir, "flask-restx") or sources_contain(install_dir, "flask_restx"):
        return RESTX
    if manifests_contain(install_dir, "flask-smorest") or sources_contain(install_dir, "flask_smorest"):
        return SMOREST
    if manifests_contain(install_dir, "flask-restful") or sources_contain(install_dir, "flask_restful"):
        return RESTFUL
    if sources_contain(install_dir, "Blueprint("):
        return BLUEPRINT
    return STANDARD


def get_flask_project_type_name(project_type: str) -> str:
    return _PROJECT_TYPE_NAMES.get(project_type, "Flask")


def find_flask_app_file(install_dir: Path) -> str | None:
    """Return the module that creates the Flask app."""
    return find_source_containing(install_dir, "Flask(__name__)", "def create_app(")


def _gather_context(install_dir: Path) -> Context:
    return {
        "project_type": get_flask_project_type(install_dir),
        "app_file": find_flask_app_file(install_dir),
    }


def _context_lines(context: Context) -> list[str]:
    lines = [
        f"Project type: {get_flask_project_type_name(context.get('project_type', STANDARD))}",
        "Framework docs ID: flask (use posthog://docs/frameworks/flask for documentation)",
    ]
    if context.get("app_file"):
        lines.append(f"App file: {context['app_file']}")
    return lines


def _outro_changes(context: Context) -> list[str]:
    name = get_flask_project_type_name(context.get("project_type", ""))
    return [
        f"Analyzed your {name} project structure",
        "Installed the PostHog Python package",
        "Configured PostHog in your Flask application",
        "Added PostHog initialization with automatic event tracking",
    ]


FLASK_CONFIG = FrameworkConfig(
    metadata=FrameworkMetadata(
        name="Flask",
        integration=Integration.FLASK,
        docs_url="https://posthog.com/docs/libraries/flask",
        unsupported_version_docs_url="https://posthog.com/docs/libraries/python",
        gather_context=_gather_context,
    ),
    detection=FrameworkDetection(
        package_name="flask",
        package_display_name="Flask",
        detect=detect_flask,
        detect_package_manager=detect_python_package_managers,
        get_installed_version=get_flask_version,
        get_version_bucket=get_flask_version_bucket,
        uses_package_json=False,
        minimum_version="2.0.0",
    ),
    environment=EnvironmentConfig(get_env_vars=PYTHON_ENV_VARS),
    analytics=AnalyticsConfig(
        get_tags=lambda context: {"projectType": context.get("project_type") or "unknown"},
    ),
    prompts=PromptConfig(
        project_type_detection=(
            "This is a Python/Flask project. Look for requirements.txt, pyproject.toml, "
            "setup.py, Pipfile, or app.py/wsgi.py to confirm."
        ),
        package_installation=PYTHON_PACKAGE_INSTALLATION,
        get_additional_context_lines=_context_lines,
    ),
    ui=UIConfig(
        success_message="PostHog integration complete",
        estimated_duration_minutes=5,
        get_outro_changes=_outro_changes,
        get_outro_next_steps=lambda context: [
            "Start your Flask development server to see PostHog in action",
            "Visit your PostHog dashboard to see incoming events",
            "Use posthog.identify() to associate events with users",
        ],
    ),
)
