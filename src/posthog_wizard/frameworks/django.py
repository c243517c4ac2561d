"""Django: project type and settings file detection."""

from __future__ import annotations

import re
from pathlib import Path

from posthog_wizard.constants import Integration
from posthog_wizard.files.walk import find_files
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
    manifest_version,
    manifests_contain,
    sources_contain,
)
from posthog_wizard.packages.managers import detect_python_package_managers
from posthog_wizard.packages.manifest import python_package_declared, read_text
from posthog_wizard.versions import create_version_bucket

STANDARD = "standard"
DRF = "drf"
WAGTAIL = "wagtail"
CHANNELS = "channels"

_PROJECT_TYPE_NAMES = {
    STANDARD: "Standard Django",
    DRF: "Django REST Framework",
    WAGTAIL: "Wagtail CMS",
    CHANNELS: "Django Channels",
}

_VERSION_PATTERNS = (
    re.compile(r"[Dd]jango[=<>~!]+([0-9]+\.[0-9]+(?:\.[0-9]+)?)"),
    re.compile(r"[Dd]jango[\"\s]*[=<>~!]+\s*[\"']?[\^~]?([0-9]+\.[0-9]+(?:\.[0-9]+)?)"),
)

get_django_version_bucket = create_version_bucket()


def get_django_version(install_dir: Path) -> str | None:
    """Read the Django version pinned in requirements or pyproject files."""
    return manifest_version(install_dir, _VERSION_PATTERNS)


def detect_django(install_dir: Path) -> bool:
    """A ``manage.py`` mentioning Django, or Django declared as a dependency."""
    root = Path(install_dir)
    for rel in find_files(root, ("**/manage.py",), PYTHON_IGNORE):
        if "django" in read_text(root / rel).lower():
            return True
    return python_package_declared(root, "django")


def _settings_files(install_dir: Path) -> list[str]:
    return find_files(install_dir, ("**/settings.py",), PYTHON_IGNORE)


def get_django_project_type(install_dir: Path) -> str:
    """Classify the project: Wagtail first, then DRF, then Channels."""
    root = Path(install_dir)
    if manifests_contain(root, "wagtail"):
        return WAGTAIL
    if manifests_contain(root, "djangorestframework"):
        return DRF
    if any("rest_framework" in read_text(root / rel) for rel in _settings_files(root)):
        return DRF
    if manifests_contain(root, "channels"):
        return CHANNELS
    return STANDARD


def get_django_project_type_name(project_type: str) -> str:
    return _PROJECT_TYPE_NAMES.get(project_type, "Django")


def find_django_settings_file(install_dir: Path) -> str | None:
    """Return the main settings module, preferring the one defining ``ROOT_URLCONF``.

    Falls back to ``settings/__init__.py`` for split settings packages.
    """
    root = Path(install_dir)
    settings = _settings_files(root)
    if not settings:
        split = find_files(root, ("**/settings/__init__.py",), PYTHON_IGNORE)
        return split[0] if split else None
    if len(settings) == 1:
        return settings[0]
    for rel in settings:
        if "ROOT_URLCONF" in read_text(root / rel):
            return rel
    return settings[0]


def find_django_urls_file(install_dir: Path) -> str | None:
    """Return the root URLconf, following ``ROOT_URLCONF`` when possible."""
    root = Path(install_dir)
    settings = find_django_settings_file(root)
    if settings:
        m = re.search(r"ROOT_URLCONF\s*=\s*['\"]([^'\"]+)['\"]", read_text(root / settings))
        if m:
            candidate = m.group(1).replace(".", "/") + ".py"
            if (root / candidate).exists():
                return candidate

    urls = find_files(root, ("**/urls.py",), (*PYTHON_IGNORE, "admin"))
    for rel in urls:
        if "urlpatterns" in read_text(root / rel):
            return rel
    return urls[0] if urls else None


def _gather_context(install_dir: Path) -> Context:
    return {
        "project_type": get_django_project_type(install_dir),
        "settings_file": find_django_settings_file(install_dir),
        "asgi": sources_contain(install_dir, "get_asgi_application"),
    }


def _context_lines(context: Context) -> list[str]:
    lines = [
        f"Project type: {get_django_project_type_name(context.get('project_type', STANDARD))}",
        "Framework docs ID: django (use posthog://docs/frameworks/django for documentation)",
    ]
    if context.get("settings_file"):
        lines.append(f"Settings file: {context['settings_file']}")
    return lines


def _outro_changes(context: Context) -> list[str]:
    name = get_django_project_type_name(context.get("project_type", ""))
    return [
        f"Analyzed your {name} project structure",
        "Installed the PostHog Python package",
        "Configured PostHog in your Django settings",
        "Added PostHog middleware for automatic event tracking",
    ]


DJANGO_CONFIG = FrameworkConfig(
    metadata=FrameworkMetadata(
        name="Django",
        integration=Integration.DJANGO,
        docs_url="https://posthog.com/docs/libraries/django",
        unsupported_version_docs_url="https://posthog.com/docs/libraries/python",
        gather_context=_gather_context,
    ),
    detection=FrameworkDetection(
        package_name="django",
        package_display_name="Django",
        detect=detect_django,
        detect_package_manager=detect_python_package_managers,
        get_installed_version=get_django_version,
        get_version_bucket=get_django_version_bucket,
        uses_package_json=False,
        minimum_version="3.0.0",
    ),
    environment=EnvironmentConfig(get_env_vars=PYTHON_ENV_VARS),
    analytics=AnalyticsConfig(
        get_tags=lambda context: {"projectType": context.get("project_type") or "unknown"},
    ),
    prompts=PromptConfig(
        project_type_detection=(
            "This is a Python/Django project. Look for requirements.txt, pyproject.toml, "
            "setup.py, Pipfile, or manage.py to confirm."
        ),
        package_installation=PYTHON_PACKAGE_INSTALLATION,
        get_additional_context_lines=_context_lines,
    ),
    ui=UIConfig(
        success_message="PostHog integration complete",
        estimated_duration_minutes=5,
        get_outro_changes=_outro_changes,
        get_outro_next_steps=lambda context: [
            "Start your Django development server to see PostHog in action",
            "Visit your PostHog dashboard to see incoming events",
            "Use identify_context() within new_context() to associate events with users",
        ],
    ),
)
