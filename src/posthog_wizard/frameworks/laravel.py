"""Laravel: Composer-based detection with Inertia and Livewire variants."""

from __future__ import annotations

import re
from pathlib import Path

from posthog_wizard.constants import Integration
from posthog_wizard.frameworks.base import (
    AnalyticsConfig,
    Context,
    EnvironmentConfig,
    FrameworkConfig,
    FrameworkDetection,
    FrameworkMetadata,
    PromptConfig,
    UIConfig,
    posthog_env_vars,
)
from posthog_wizard.packages.managers import composer_package_manager
from posthog_wizard.packages.manifest import get_composer_requirements, read_composer_json
from posthog_wizard.versions import create_version_bucket

STANDARD = "standard"
INERTIA = "inertia"
LIVEWIRE = "livewire"

_PROJECT_TYPE_NAMES = {
    STANDARD: "Standard Laravel",
    INERTIA: "Laravel with Inertia.js",
    LIVEWIRE: "Laravel with Livewire",
}

get_laravel_version_bucket = create_version_bucket()


def get_laravel_version(install_dir: Path) -> str | None:
    """Read the ``laravel/framework`` constraint, stripped of its operators."""
    requirements = get_composer_requirements(read_composer_json(install_dir))
    constraint = requirements.get("laravel/framework")
    if not constraint:
        return None
    return re.sub(r"^[\^~>=<]+", "", constraint.strip())


def detect_laravel(install_dir: Path) -> bool:
    root = Path(install_dir)
    if "laravel/framework" in get_composer_requirements(read_composer_json(root)):
        return True
    return (root / "artisan").is_file()


def get_laravel_project_type(install_dir: Path) -> str:
    requirements = get_composer_requirements(read_composer_json(install_dir))
    if "inertiajs/inertia-laravel" in requirements:
        return INERTIA
    if "livewire/livewire" in requirements:
        return LIVEWIRE
    return STANDARD


def get_laravel_project_type_name(project_type: str) -> str:
    return _PROJECT_TYPE_NAMES.get(project_type, "Laravel")


def _context_lines(context: Context) -> list[str]:
    return [
        f"Project type: {get_laravel_project_type_name(context.get('project_type', STANDARD))}",
        "Framework docs ID: laravel (use posthog://docs/frameworks/laravel for documentation)",
    ]


LARAVEL_CONFIG = FrameworkConfig(
    metadata=FrameworkMetadata(
        name="Laravel",
        integration=Integration.LARAVEL,
        docs_url="https://posthog.com/docs/libraries/laravel",
        unsupported_version_docs_url="https://posthog.com/docs/libraries/php",
        beta=True,
        gather_context=lambda install_dir: {"project_type": get_laravel_project_type(install_dir)},
    ),
    detection=FrameworkDetection(
        package_name="laravel/framework",
        package_display_name="Laravel",
        detect=detect_laravel,
        detect_package_manager=composer_package_manager,
        get_installed_version=get_laravel_version,
        get_version_bucket=get_laravel_version_bucket,
        uses_package_json=False,
        minimum_version="9.0.0",
    ),
    environment=EnvironmentConfig(get_env_vars=posthog_env_vars("POSTHOG_API_KEY", "POSTHOG_HOST")),
    analytics=AnalyticsConfig(
        get_tags=lambda context: {"projectType": context.get("project_type") or "unknown"},
    ),
    prompts=PromptConfig(
        project_type_detection=(
            "This is a PHP/Laravel project. Look for composer.json and the artisan script to confirm."
        ),
        package_installation=(
            "Use the detect_package_manager tool to determine the package manager. "
            "Install the posthog/posthog-php package with Composer; do not edit composer.json by hand."
        ),
        get_additional_context_lines=_context_lines,
    ),
    ui=UIConfig(
        success_message="PostHog integration complete",
        estimated_duration_minutes=5,
        get_outro_changes=lambda context: [
            f"Analyzed your {get_laravel_project_type_name(context.get('project_type', ''))} project structure",
            "Installed the PostHog PHP package",
            "Configured PostHog in your Laravel application",
        ],
        get_outro_next_steps=lambda context: [
            "Start your Laravel server (php artisan serve) to see PostHog in action",
            "Visit your PostHog dashboard to see incoming events",
        ],
    ),
)
