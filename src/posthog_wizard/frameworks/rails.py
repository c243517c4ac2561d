"""Ruby on Rails."""

from __future__ import annotations

from pathlib import Path

from posthog_wizard.constants import Integration
from posthog_wizard.frameworks.base import (
    EnvironmentConfig,
    FrameworkConfig,
    FrameworkDetection,
    FrameworkMetadata,
    PromptConfig,
    UIConfig,
    posthog_env_vars,
)
from posthog_wizard.packages.managers import bundler_package_manager
from posthog_wizard.packages.manifest import gemfile_has_gem, get_gem_version, read_text
from posthog_wizard.versions import create_version_bucket

get_rails_version_bucket = create_version_bucket()


def detect_rails(install_dir: Path) -> bool:
    root = Path(install_dir)
    if gemfile_has_gem(root, "rails"):
        return True
    return "Rails" in read_text(root / "config" / "application.rb")


def get_rails_version(install_dir: Path) -> str | None:
    return get_gem_version(install_dir, "rails")


RAILS_CONFIG = FrameworkConfig(
    metadata=FrameworkMetadata(
        name="Ruby on Rails",
        integration=Integration.RAILS,
        docs_url="https://posthog.com/docs/libraries/ruby",
        beta=True,
    ),
    detection=FrameworkDetection(
        package_name="rails",
        package_display_name="Rails",
        detect=detect_rails,
        detect_package_manager=bundler_package_manager,
        get_installed_version=get_rails_version,
        get_version_bucket=get_rails_version_bucket,
        uses_package_json=False,
        minimum_version="6.0.0",
    ),
    environment=EnvironmentConfig(get_env_vars=posthog_env_vars("POSTHOG_API_KEY", "POSTHOG_HOST")),
    prompts=PromptConfig(
        project_type_detection="This is a Ruby on Rails project. Look for Gemfile and config/application.rb to confirm.",
        package_installation=(
            "Use the detect_package_manager tool to determine the package manager. "
            "Add the posthog-ruby gem with Bundler."
        ),
        get_additional_context_lines=lambda context: [
            "Framework docs ID: rails (use posthog://docs/frameworks/rails for documentation)",
        ],
    ),
    ui=UIConfig(
        success_message="PostHog integration complete",
        estimated_duration_minutes=5,
        get_outro_changes=lambda context: [
            "Analyzed your Rails project structure",
            "Installed the posthog-ruby gem",
            "Added a PostHog initializer under config/initializers",
        ],
        get_outro_next_steps=lambda context: [
            "Start your Rails server (bin/rails server) to see PostHog in action",
            "Visit your PostHog dashboard to see incoming events",
        ],
    ),
)
