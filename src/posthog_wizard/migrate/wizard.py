"""Replace a third-party analytics SDK with PostHog.

The migration reuses the gateway file pipeline with migration prompts:
provider packages are removed, PostHog equivalents installed, and every
file the gateway flags is rewritten one at a time. A file that cannot be
migrated is skipped with a warning; the rest of the run continues.
"""

from __future__ import annotations

import functools
import logging
from pathlib import Path
from typing import Any

from rich.markup import escape

from posthog_wizard.analytics import Analytics, analytics as default_analytics
from posthog_wizard.config import WizardOptions
from posthog_wizard.exceptions import PackageManagerError, UserCancelledError, WizardError
from posthog_wizard.files.envfile import set_env_values
from posthog_wizard.frameworks.javascript import get_react_env_var_prefix
from posthog_wizard.gateway import fetch_project_data, query
from posthog_wizard.marker import STATUS_ERROR, STATUS_SUCCESS, write_wizard_marker
from posthog_wizard.mcp.steps import add_mcp_server_to_clients_step
from posthog_wizard.migrate.providers import MigrationProvider, get_migration_provider
from posthog_wizard.outro import build_migration_outro_message
from posthog_wizard.packages.managers import get_node_package_manager, install_packages, uninstall_packages
from posthog_wizard.packages.manifest import get_package_version, is_using_typescript, read_package_json
from posthog_wizard.pipeline import QueryFn, generate_file_changes, get_files_to_change, get_relevant_files
from posthog_wizard.prompts.templates import MIGRATION_FILTER_FILES_PROMPT, MIGRATION_GENERATE_FILE_CHANGES_PROMPT
from posthog_wizard.steps import (
    add_editor_rules_step,
    confirm_continue_if_no_or_dirty_git_repo,
    run_prettier_step,
    upload_environment_variables_step,
)
from posthog_wizard.ui import WizardUI
from posthog_wizard.wizard import (
    AI_CONSENT_NOTICE,
    ProjectFetcher,
    ask_for_cloud_region,
    get_or_ask_for_project_data,
)

logger = logging.getLogger(__name__)

MIGRATION_FILE_PATTERNS = ("**/*.tsx", "**/*.ts", "**/*.jsx", "**/*.js", "**/*.mjs", "**/*.cjs")

# First match wins; meta-frameworks before the libraries they build on.
_FRAMEWORK_PACKAGES = (
    ("next", "nextjs"),
    ("react-native", "react-native"),
    ("@sveltejs/kit", "svelte"),
    ("astro", "astro"),
    ("react", "react"),
)


def detect_migration_framework(install_dir: Path) -> str:
    """Classify the project for the migration docs; ``node`` when nothing matches."""
    package_json = read_package_json(install_dir)
    for package, framework in _FRAMEWORK_PACKAGES:
        if get_package_version(package, package_json) is not None:
            return framework
    return "node"


def get_installed_provider_packages(
    provider: MigrationProvider, package_json: dict[str, Any]
) -> list[tuple[str, str]]:
    """Return ``(package, version)`` for every provider package in ``package_json``."""
    installed = []
    for package in provider.packages:
        version = get_package_version(package, package_json)
        if version is not None:
            installed.append((package, version))
    return installed


def get_posthog_packages(provider: MigrationProvider, installed: list[str]) -> list[str]:
    """PostHog packages replacing ``installed``, defaulting to ``posthog-js``."""
    packages: list[str] = []
    for package in installed:
        equivalent = provider.get_posthog_equivalent(package)
        if equivalent and equivalent not in packages:
            packages.append(equivalent)
    return packages or ["posthog-js"]


def _uninstall_provider_packages(
    provider: MigrationProvider,
    packages: list[str],
    install_dir: Path,
    ui: WizardUI,
    analytics: Analytics,
) -> None:
    manager = get_node_package_manager(install_dir)
    try:
        with ui.spinner(f"Removing {provider.name} packages: {', '.join(packages)}"):
            uninstall_packages(manager, packages, install_dir)
    except PackageManagerError as exc:
        logger.debug("Uninstall failed: %s", exc)
        ui.warn(f"Could not automatically remove {provider.name} packages. Please remove them manually.")
        return
    ui.success(f"Removed {provider.name} packages: {', '.join(packages)}")
    analytics.capture_interaction(
        "uninstalled packages",
        packages=packages,
        migration_source=provider.id,
    )


def run_migration_wizard(
    options: WizardOptions,
    provider_id: str,
    ui: WizardUI,
    analytics: Analytics = default_analytics,
    *,
    fetch: ProjectFetcher = fetch_project_data,
    ask: QueryFn | None = None,
) -> None:
    """Migrate the project at ``options.install_dir`` from ``provider_id`` to PostHog.

    Args:
        options: Run options.
        provider_id: Key of a registered provider, e.g. ``"amplitude"``.
        ui: Prompt handler.
        analytics: Event sink.
        fetch: Project lookup, replaced in tests.
        ask: Gateway query function; built from the project when None.

    Raises:
        UserCancelledError: Consent was declined or the user stopped the run.
        WizardError: The provider is unknown or a required step failed.
    """
    provider = get_migration_provider(provider_id)
    if provider is None:
        ui.error(f"Unknown migration provider: {provider_id}")
        raise WizardError(f"Unknown migration provider: {provider_id}")

    install_dir = Path(options.install_dir)

    ui.intro(
        "PostHog Migration Wizard",
        f"This wizard will help you migrate from {provider.name} to PostHog.\n"
        f"It will replace {provider.name} SDK code with PostHog equivalents.",
    )

    ui.info(AI_CONSENT_NOTICE)
    if not ui.confirm("This setup wizard uses AI, are you happy to continue? ✨", default=True):
        ui.info(f"The migration wizard requires AI to work. Please view the docs to migrate manually: {provider.docs_url}")
        raise UserCancelledError("AI consent declined")

    confirm_continue_if_no_or_dirty_git_repo(install_dir, ui, analytics)

    region = options.cloud_region or ask_for_cloud_region(ui)

    package_json = read_package_json(install_dir)
    installed = get_installed_provider_packages(provider, package_json)
    if not installed:
        ui.warn(f"No {provider.name} SDK detected in your project. Are you sure you want to continue?")
        if not ui.confirm("Continue with migration anyway?", default=False):
            ui.info("Migration cancelled.")
            raise UserCancelledError("Migration cancelled")
    else:
        package, version = installed[0]
        ui.success(f"Detected {provider.name} installation: {package}@{version}")

    analytics.set_tag("migration-source", provider.id)
    analytics.set_tag(f"{provider.id}-package", installed[0][0] if installed else None)

    typescript = is_using_typescript(install_dir)
    env_var_prefix = get_react_env_var_prefix(install_dir)

    framework = detect_migration_framework(install_dir)
    analytics.set_tag("migration-framework", framework)

    try:
        project = get_or_ask_for_project_data(options, region, ui, fetch)
        analytics.set_distinct_id(str(project.project_id))

        installed_names = [package for package, _version in installed]
        if installed_names:
            _uninstall_provider_packages(provider, installed_names, install_dir, ui, analytics)

        posthog_packages = get_posthog_packages(provider, installed_names)
        manager = get_node_package_manager(install_dir)
        with ui.spinner(f"Installing {', '.join(posthog_packages)} with {manager.label}..."):
            install_packages(manager, posthog_packages, install_dir, force_install=options.force_install)
        ui.success(f"Installed {', '.join(posthog_packages)} with {manager.label}")

        documentation = provider.build_docs(
            "typescript" if typescript else "javascript", env_var_prefix, framework
        )
        relevant_files = get_relevant_files(install_dir, MIGRATION_FILE_PATTERNS)
        analytics.capture_interaction(
            "detected relevant files for migration",
            number_of_files=len(relevant_files),
        )

        if ask is None:
            ask = functools.partial(
                query,
                region=region,
                access_token=project.access_token,
                project_id=project.project_id,
            )

        ui.info(f"Reviewing project files for {provider.name} code...")
        with ui.spinner(f"Scanning for {provider.name} code..."):
            files_to_migrate = get_files_to_change(
                MIGRATION_FILTER_FILES_PROMPT.format(
                    documentation=documentation,
                    file_list="\n".join(relevant_files),
                    source_sdk=provider.name,
                    integration_rules="",
                ),
                ask,
            )
        ui.info(f"Found {len(files_to_migrate)} files with {provider.name} code")
        analytics.capture_interaction(
            "detected files to migrate",
            files=files_to_migrate,
            migration_source=provider.id,
        )

        if not files_to_migrate:
            ui.warn(f"No files with {provider.name} code detected. The migration may already be complete.")
        else:
            with ui.spinner(f"Migrating {len(files_to_migrate)} file(s)..."):
                changes = generate_file_changes(
                    files_to_migrate,
                    MIGRATION_GENERATE_FILE_CHANGES_PROMPT,
                    {
                        "documentation": documentation,
                        "source_sdk": provider.name,
                        "integration_rules": "",
                    },
                    install_dir,
                    ask,
                    best_effort=True,
                )
            for change in changes:
                ui.success(f"Migrated {escape(change.file_path)}")
            analytics.capture_interaction(
                "migrated files",
                files=[change.file_path for change in changes],
                migration_source=provider.id,
            )

        env_file = ".env"
        env_vars = {
            f"{env_var_prefix}POSTHOG_KEY": project.project_api_key,
            f"{env_var_prefix}POSTHOG_HOST": project.host,
        }
        set_env_values(install_dir, env_file, env_vars)

        run_prettier_step(install_dir, framework, ui, analytics)
        added_editor_rules = add_editor_rules_step(install_dir, "react", framework, ui, analytics)
        uploaded_env_vars = upload_environment_variables_step(env_vars, install_dir, framework, ui, analytics)
    except UserCancelledError:
        raise
    except Exception as exc:
        logger.debug("Migration failed", exc_info=True)
        analytics.capture_exception(exc, {"migration_source": provider.id})
        write_wizard_marker(install_dir, STATUS_ERROR, framework)
        analytics.shutdown(STATUS_ERROR)
        ui.error(
            f"Something went wrong. You can read the documentation at "
            f"{provider.docs_url} to migrate to PostHog manually."
        )
        if not isinstance(exc, WizardError):
            raise WizardError(str(exc)) from exc
        raise

    mcp_clients = add_mcp_server_to_clients_step(
        ui,
        region,
        options.api_key,
        integration=framework,
        local=options.local_mcp,
        analytics=analytics,
    )

    write_wizard_marker(install_dir, STATUS_SUCCESS, framework)
    ui.outro(
        build_migration_outro_message(
            provider.name,
            provider.default_changes,
            provider.next_steps,
            len(files_to_migrate),
            project.cloud_url,
            env_file,
            mcp_clients,
            uploaded_env_vars=bool(uploaded_env_vars),
            added_editor_rules=added_editor_rules,
        )
    )
    analytics.shutdown(STATUS_SUCCESS)
