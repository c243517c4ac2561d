"""Top-level wizard flow.

``run_wizard`` picks an integration for the project, then runs it in one
of two modes:

* **templated**: the LLM gateway chooses files and rewrites them one at a
  time from framework documentation (older Next.js, React, Astro);
* **agent**: a tool-using model follows a setup skill from the PostHog
  MCP server and edits the project itself.

Both modes share the setup phase (AI consent, cloud region, project
lookup) and the closing phase (env file, MCP servers, marker, outro).

Usage::

    from posthog_wizard.wizard import run_wizard

    run_wizard(options, WizardUI(ci=options.ci))
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Callable

from rich.markup import escape

from posthog_wizard.agent.runner import AgentResult, build_integration_prompt, get_mcp_url, run_agent
from posthog_wizard.agent.sdk import gateway_base_url, get_agent_client
from posthog_wizard.agent.tools import WizardTools
from posthog_wizard.analytics import Analytics, analytics as default_analytics
from posthog_wizard.config import WizardOptions
from posthog_wizard.constants import (
    DEFAULT_DOCS_URL,
    SPINNER_MESSAGE,
    SUPPORT_EMAIL,
    CloudRegion,
    Integration,
    get_cloud_url_from_region,
)
from posthog_wizard.exceptions import (
    AgentError,
    McpMissingError,
    PackageManagerError,
    RateLimitError,
    ResourceMissingError,
    UserCancelledError,
    WizardError,
)
from posthog_wizard.files.envfile import set_env_values
from posthog_wizard.frameworks.base import Context, FrameworkConfig, TemplatedFlow
from posthog_wizard.frameworks.registry import (
    INTEGRATION_ORDER,
    detect_integration,
    get_framework_config,
    get_integration_description,
)
from posthog_wizard.gateway import ProjectData, fetch_project_data, query
from posthog_wizard.marker import (
    STATUS_CANCELLED,
    STATUS_ERROR,
    STATUS_SUCCESS,
    classify_rerun_reason,
    read_wizard_marker,
    write_wizard_marker,
)
from posthog_wizard.mcp.steps import add_mcp_server_to_clients_step
from posthog_wizard.outro import build_outro_changes, build_outro_message
from posthog_wizard.packages.managers import NPM, install_packages
from posthog_wizard.packages.manifest import (
    gemfile_has_gem,
    has_any_package,
    has_package_installed,
    is_using_typescript,
    python_package_declared,
    read_composer_json,
    read_package_json,
)
from posthog_wizard.pipeline import QueryFn, generate_file_changes, get_files_to_change, get_relevant_files
from posthog_wizard.prompts.templates import BASE_FILTER_FILES_PROMPT, BASE_GENERATE_FILE_CHANGES_PROMPT
from posthog_wizard.steps import (
    add_editor_rules_step,
    confirm_continue_if_no_or_dirty_git_repo,
    run_prettier_step,
    upload_environment_variables_step,
)
from posthog_wizard.ui import WizardUI
from posthog_wizard.versions import is_version_below
from posthog_wizard.workspace import detect_workspaces

logger = logging.getLogger(__name__)

AI_CONSENT_NOTICE = (
    "We're about to read your project using our LLM gateway.\n\n"
    ".env* file contents will not leave your machine.\n\n"
    "Other files will be read and edited to provide a fully-custom PostHog integration."
)

GOODBYE_MESSAGE = "PostHog wizard will see you next time!"

_NODE_SDK_PACKAGES = ["posthog-js", "posthog-node", "posthog-react-native"]

ProjectFetcher = Callable[[str, CloudRegion], ProjectData]
AgentClientFactory = Callable[[ProjectData], Any]


@dataclass(frozen=True)
class SharedSetup:
    """Answers collected once per run before any project is changed.

    Attributes:
        region: Cloud region hosting the project.
        project: Credentials and ids of the PostHog project.
    """

    region: CloudRegion
    project: ProjectData


def _default_agent_client(project: ProjectData) -> Any:  # noqa: ANN401
    return get_agent_client(
        project.access_token,
        gateway_base_url(project.cloud_url, project.project_id),
    )


# ---------------------------------------------------------------------------
# Shared setup
# ---------------------------------------------------------------------------


def ask_for_ai_consent(ui: WizardUI) -> bool:
    """Show what the wizard will read and ask to go ahead.

    CI runs consent implicitly.
    """
    ui.info(AI_CONSENT_NOTICE)
    return ui.confirm("This setup wizard uses AI, are you happy to continue? ✨", default=True)


def ask_for_cloud_region(ui: WizardUI) -> CloudRegion:
    return ui.select(
        "Select your PostHog Cloud region",
        [(CloudRegion.US, "🇺🇸 US Cloud"), (CloudRegion.EU, "🇪🇺 EU Cloud")],
    )


def get_or_ask_for_project_data(
    options: WizardOptions,
    region: CloudRegion,
    ui: WizardUI,
    fetch: ProjectFetcher = fetch_project_data,
) -> ProjectData:
    """Resolve the PostHog project from ``--api-key`` or a prompt."""
    api_key = options.api_key
    if not api_key:
        cloud_url = get_cloud_url_from_region(region)
        ui.info(
            "Create a personal API key with project read access at "
            f"{cloud_url}/settings/user-api-keys"
        )
        api_key = ui.text("Personal API key", hide_input=True)
    with ui.spinner("Looking up your PostHog project..."):
        project = fetch(api_key, region)
    ui.success(f"Using PostHog project {project.project_id}")
    return project


def run_shared_setup(
    options: WizardOptions,
    ui: WizardUI,
    docs_url: str | None = None,
    *,
    fetch: ProjectFetcher = fetch_project_data,
    analytics: Analytics = default_analytics,
) -> SharedSetup:
    """Consent, git check, region and project lookup.

    Raises:
        UserCancelledError: The user declined AI consent or stopped at the git check.
    """
    fallback_url = docs_url or DEFAULT_DOCS_URL
    if not ask_for_ai_consent(ui):
        ui.info(
            "This wizard uses an LLM agent to intelligently modify your project. "
            f"Please view the docs to set up PostHog manually instead: {fallback_url}"
        )
        raise UserCancelledError("AI consent declined")

    confirm_continue_if_no_or_dirty_git_repo(Path(options.install_dir), ui, analytics)

    region = options.cloud_region or ask_for_cloud_region(ui)
    project = get_or_ask_for_project_data(options, CloudRegion(region), ui, fetch)
    return SharedSetup(region=CloudRegion(region), project=project)


# ---------------------------------------------------------------------------
# Integration selection
# ---------------------------------------------------------------------------


def _select_integration_from_menu(ui: WizardUI) -> Integration:
    return ui.select(
        "What do you want to set up?",
        [(integration, get_integration_description(integration)) for integration in INTEGRATION_ORDER],
    )


def _select_workspace_member(install_dir: Path, ui: WizardUI) -> Path | None:
    workspace = detect_workspaces(install_dir)
    if workspace is None or not workspace.member_dirs:
        return None
    root = Path(install_dir).resolve()
    options: list[tuple[Path, str]] = []
    for member in workspace.member_dirs:
        detected = detect_integration(member)
        label = member.relative_to(root).as_posix() if member.is_relative_to(root) else str(member)
        if detected is not None:
            label = f"{label} ({get_integration_description(detected)})"
        options.append((member, label))
    ui.info(f"Detected a {workspace.type} workspace with {len(options)} projects.")
    return ui.select("Which project do you want to set up?", options)


def resolve_integration(options: WizardOptions, ui: WizardUI) -> tuple[Integration, Path]:
    """Decide which integration to run and in which directory.

    Order: ``--integration``, ``--menu``, detection at the install
    directory, detection inside a selected workspace member, then the menu.

    Raises:
        WizardError: Nothing was detected in CI mode, where no menu can be shown.
    """
    install_dir = Path(options.install_dir)
    if options.integration is not None:
        return Integration(options.integration), install_dir
    if options.menu:
        return _select_integration_from_menu(ui), install_dir

    detected = detect_integration(install_dir)
    if detected is not None:
        ui.success(f"Detected integration: {get_integration_description(detected)}")
        return detected, install_dir

    if not ui.ci:
        member = _select_workspace_member(install_dir, ui)
        if member is not None:
            detected = detect_integration(member)
            if detected is not None:
                ui.success(f"Detected integration: {get_integration_description(detected)}")
                return detected, member
            return _select_integration_from_menu(ui), member

    if ui.ci:
        message = "Could not detect a supported framework. Pass --integration to choose one."
        ui.error(message)
        raise WizardError(message)
    return _select_integration_from_menu(ui), install_dir


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------


def check_framework_version(config: FrameworkConfig, install_dir: Path, ui: WizardUI) -> bool:
    """Return False (after telling the user) when the installed version is too old."""
    minimum = config.detection.minimum_version
    if not minimum:
        return True
    version = config.detection.get_installed_version(install_dir)
    if not version or not is_version_below(version, minimum):
        return True

    docs_url = config.metadata.unsupported_version_docs_url or config.metadata.docs_url
    ui.warn(
        f"Sorry: the wizard can't help you with {config.name} {version}. "
        f"Upgrade to {config.name} {minimum} or later, or check out the manual setup guide."
    )
    ui.info(f"Setup {config.name} manually: {docs_url}")
    ui.outro(GOODBYE_MESSAGE)
    return False


def ensure_framework_installed(config: FrameworkConfig, install_dir: Path, ui: WizardUI) -> None:
    """Ask before continuing when a Node framework is missing from package.json."""
    detection = config.detection
    if not detection.uses_package_json:
        return
    if has_package_installed(detection.package_name, read_package_json(install_dir)):
        return
    ui.warn(f"{detection.package_display_name} does not seem to be installed.")
    if not ui.confirm("Do you want to continue anyway?", default=False):
        raise UserCancelledError(f"{detection.package_display_name} is not installed")


def posthog_sdk_installed(install_dir: Path) -> bool:
    """Return True when any PostHog SDK is already a project dependency."""
    if has_any_package(_NODE_SDK_PACKAGES, read_package_json(install_dir)):
        return True
    if python_package_declared(install_dir, "posthog"):
        return True
    if "posthog/posthog-php" in (read_composer_json(install_dir).get("require") or {}):
        return True
    return gemfile_has_gem(install_dir, "posthog-ruby")


def uses_templated_flow(config: FrameworkConfig, framework_version: str | None) -> bool:
    """Whether the gateway prompt/response flow runs instead of the agent.

    Frameworks with a templated flow and no version cutoff always use it;
    with a cutoff, only installed versions below it do.
    """
    templated = config.templated
    if templated is None:
        return False
    if templated.use_below_version is None:
        return True
    if not framework_version:
        return False
    return is_version_below(framework_version, templated.use_below_version)


# ---------------------------------------------------------------------------
# Flows
# ---------------------------------------------------------------------------


def _require_templated(config: FrameworkConfig) -> TemplatedFlow:
    if config.templated is None:
        raise WizardError(f"{config.name} has no templated setup flow")
    return config.templated


def _install_sdk_packages(
    config: FrameworkConfig,
    install_dir: Path,
    options: WizardOptions,
    ui: WizardUI,
    analytics: Analytics,
) -> None:
    templated = _require_templated(config)
    package_json = read_package_json(install_dir)
    missing = [
        package
        for package in templated.packages
        if options.force_install or not has_package_installed(package, package_json)
    ]
    if not missing:
        return
    manager = config.detection.detect_package_manager(install_dir).primary or NPM
    label = ", ".join(missing)
    with ui.spinner(f"Installing {label} with {manager.label}..."):
        install_packages(manager, missing, install_dir, force_install=options.force_install)
    ui.success(f"Installed {label} with {manager.label}")
    analytics.capture_interaction(
        "package installed",
        integration=config.integration.value,
        packages=missing,
        package_manager=manager.name,
    )


def run_templated_flow(
    config: FrameworkConfig,
    install_dir: Path,
    options: WizardOptions,
    setup: SharedSetup,
    context: Context,
    ui: WizardUI,
    analytics: Analytics,
    ask: QueryFn,
) -> list[str]:
    """Install the SDK and rewrite files through the LLM gateway.

    Returns:
        Outro bullets describing what was done.
    """
    templated = _require_templated(config)
    integration = config.integration.value

    _install_sdk_packages(config, install_dir, options, ui, analytics)

    relevant_files = get_relevant_files(install_dir, templated.filter_patterns, templated.ignore_patterns)
    analytics.capture_interaction(
        "detected relevant files",
        integration=integration,
        number_of_files=len(relevant_files),
    )

    documentation = templated.build_documentation(
        context, setup.project.project_api_key, setup.project.host
    )
    ui.info(f"Reviewing PostHog documentation for {config.name}")

    file_list = "\n".join(relevant_files)
    with ui.spinner("Looking for files to change..."):
        files_to_change = get_files_to_change(
            BASE_FILTER_FILES_PROMPT.format(
                documentation=documentation,
                file_list=file_list,
                integration_name=config.name,
                integration_rules=templated.filter_files_rules,
            ),
            ask,
        )
    analytics.capture_interaction("detected files to change", integration=integration, files=files_to_change)

    with ui.spinner(f"Updating {len(files_to_change)} file(s)..."):
        changes = generate_file_changes(
            files_to_change,
            BASE_GENERATE_FILE_CHANGES_PROMPT,
            {
                "documentation": documentation,
                "integration_name": config.name,
                "integration_rules": templated.generate_files_rules,
            },
            install_dir,
            ask,
        )
    for change in changes:
        ui.success(f"{'Updated' if change.old_content else 'Created'} file {escape(change.file_path)}")
    analytics.capture_interaction(
        "changed files",
        integration=integration,
        files=[change.file_path for change in changes],
    )
    return list(templated.default_changes)


def _report_agent_error(config: FrameworkConfig, error: AgentError, ui: WizardUI, analytics: Analytics) -> None:
    integration = config.integration.value
    if isinstance(error, McpMissingError):
        analytics.capture_exception(error, {"integration": integration, "error_type": "mcp_missing"})
        ui.error(
            "Could not access the PostHog MCP server\n\n"
            "The wizard was unable to connect to the PostHog MCP server. "
            "This could be due to a network issue or a configuration problem.\n\n"
            f"Please try again, or set up {config.name} manually by following our documentation:\n"
            f"{config.metadata.docs_url}"
        )
    elif isinstance(error, ResourceMissingError):
        analytics.capture_exception(error, {"integration": integration, "error_type": "resource_missing"})
        ui.error(
            "Could not access the setup resource\n\n"
            "The wizard could not access the setup resource. This may indicate a "
            "version mismatch or a temporary service issue.\n\n"
            f"Please try again, or set up {config.name} manually by following our documentation:\n"
            f"{config.metadata.docs_url}"
        )
    else:
        analytics.capture_interaction(
            "api error",
            integration=integration,
            error_type="api_error",
            error_message=str(error),
        )
        analytics.capture_exception(error, {"integration": integration, "error_type": "api_error"})
        ui.error(f"API Error\n\n{escape(str(error))}\n\nPlease report this error to: {SUPPORT_EMAIL}")


def run_agent_flow(
    config: FrameworkConfig,
    install_dir: Path,
    options: WizardOptions,
    setup: SharedSetup,
    context: Context,
    framework_version: str | None,
    ui: WizardUI,
    analytics: Analytics,
    agent_client: Any,  # noqa: ANN401
) -> AgentResult:
    """Let the agent integrate PostHog.

    Raises:
        McpMissingError: The MCP server could not be reached.
        ResourceMissingError: No setup skill matches the project.
        RateLimitError: The usage limit was reached.
        AgentError: Any other agent failure.
    """
    prompt = build_integration_prompt(
        config,
        framework_version,
        is_using_typescript(install_dir),
        setup.project.project_api_key,
        setup.project.host,
        context,
    )
    tools = WizardTools(install_dir, config.detection.detect_package_manager)
    ui.info(
        f"This usually takes around {config.ui.estimated_duration_minutes} minutes. "
        "Progress is shown as the agent works."
    )
    try:
        with ui.spinner(SPINNER_MESSAGE):
            result = run_agent(
                agent_client,
                prompt,
                tools,
                mcp_url=get_mcp_url(setup.region, options.local_mcp),
                access_token=setup.project.access_token,
                on_status=lambda message: ui.info(escape(message)),
            )
    except RateLimitError:
        analytics.capture_interaction("api error", integration=config.integration.value, error_type="rate_limit")
        raise
    except AgentError as exc:
        _report_agent_error(config, exc, ui, analytics)
        raise

    ui.success(config.ui.success_message)
    analytics.capture_interaction(
        "agent integration completed",
        integration=config.integration.value,
        turns=result.turns,
        duration_seconds=round(result.duration_seconds),
        files=result.written_files,
    )
    return result


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def run_integration(
    config: FrameworkConfig,
    options: WizardOptions,
    ui: WizardUI,
    analytics: Analytics = default_analytics,
    *,
    fetch: ProjectFetcher = fetch_project_data,
    ask: QueryFn | None = None,
    agent_client_factory: AgentClientFactory = _default_agent_client,
) -> bool:
    """Set up one framework in ``options.install_dir``.

    Args:
        config: Framework to set up.
        options: Run options; ``install_dir`` is the project root.
        ui: Prompt handler.
        analytics: Event sink.
        fetch: Project lookup, replaced in tests.
        ask: Gateway query function; built from the project when None.
        agent_client_factory: Builds the agent SDK client for a project.

    Returns:
        False when the installed version is unsupported and nothing was done.
    """
    install_dir = Path(options.install_dir)
    integration = config.integration.value

    if not check_framework_version(config, install_dir, ui):
        analytics.shutdown(STATUS_CANCELLED)
        return False

    ui.intro(
        f"PostHog {config.name} wizard",
        "We'll set up PostHog analytics for your project.",
    )
    if config.metadata.beta:
        ui.info(
            f"[yellow]\\[BETA][/yellow] The {config.name} wizard is in beta. "
            f"Questions or feedback? Email {SUPPORT_EMAIL}"
        )
    if config.metadata.pre_run_notice:
        ui.warn(config.metadata.pre_run_notice)

    setup = run_shared_setup(options, ui, config.metadata.docs_url, fetch=fetch, analytics=analytics)
    analytics.set_distinct_id(str(setup.project.project_id))

    ensure_framework_installed(config, install_dir, ui)
    framework_version = config.detection.get_installed_version(install_dir)
    if framework_version and config.detection.get_version_bucket is not None:
        analytics.set_tag(f"{integration}-version", config.detection.get_version_bucket(framework_version))

    marker = read_wizard_marker(install_dir)
    analytics.set_tag("rerun-reason", classify_rerun_reason(marker, posthog_sdk_installed(install_dir)))

    context = config.metadata.gather_context(install_dir)
    for key, value in config.analytics.get_tags(context).items():
        analytics.set_tag(key, value)

    templated = uses_templated_flow(config, framework_version)
    analytics.capture_interaction(
        "started templated integration" if templated else "started agent integration",
        integration=integration,
    )

    if templated:
        if ask is None:
            ask = functools.partial(
                query,
                region=setup.region,
                access_token=setup.project.access_token,
                project_id=setup.project.project_id,
            )
        framework_changes = run_templated_flow(config, install_dir, options, setup, context, ui, analytics, ask)
        next_steps = list(_require_templated(config).next_steps)
    else:
        run_agent_flow(
            config,
            install_dir,
            options,
            setup,
            context,
            framework_version,
            ui,
            analytics,
            agent_client_factory(setup.project),
        )
        framework_changes = config.ui.get_outro_changes(context)
        next_steps = config.ui.get_outro_next_steps(context)

    env_vars = config.environment.build(setup.project.project_api_key, setup.project.host, context)
    env_file = None
    if env_vars:
        set_env_values(install_dir, config.environment.env_file, env_vars)
        env_file = config.environment.env_file
        analytics.capture_interaction("added environment variables", integration=integration)

    added_editor_rules = False
    if templated:
        templated_flow = _require_templated(config)
        run_prettier_step(install_dir, integration, ui, analytics)
        if templated_flow.rules_name:
            added_editor_rules = add_editor_rules_step(
                install_dir, templated_flow.rules_name, integration, ui, analytics
            )

    uploaded_env_vars: list[str] = []
    if config.environment.upload_to_hosting:
        uploaded_env_vars = upload_environment_variables_step(env_vars, install_dir, integration, ui, analytics)
        if not uploaded_env_vars:
            next_steps.append("Upload your Project API key to your hosting provider")

    mcp_clients = add_mcp_server_to_clients_step(
        ui,
        setup.region,
        options.api_key,
        integration=integration,
        local=options.local_mcp,
        analytics=analytics,
    )

    write_wizard_marker(install_dir, STATUS_SUCCESS, integration)

    continue_url = f"{setup.project.cloud_url}/products?source=wizard" if options.signup else None
    ui.outro(
        build_outro_message(
            build_outro_changes(
                framework_changes,
                env_file,
                mcp_clients,
                uploaded_env_vars=bool(uploaded_env_vars),
                added_editor_rules=added_editor_rules,
            ),
            next_steps,
            config.metadata.docs_url,
            continue_url,
            actor="wizard" if templated else "agent",
        )
    )
    return True


def run_wizard(
    options: WizardOptions,
    ui: WizardUI,
    analytics: Analytics = default_analytics,
    **kwargs: Any,
) -> None:
    """Run the setup wizard end to end.

    Keyword arguments are passed through to :func:`run_integration`.

    Raises:
        UserCancelledError: The user aborted a prompt.
        WizardError: The run failed; the user has already been told.
    """
    ui.intro("Welcome to the PostHog setup wizard ✨")

    integration, install_dir = resolve_integration(options, ui)
    if install_dir != Path(options.install_dir):
        options = replace(options, install_dir=install_dir)
    analytics.set_tag("integration", integration.value)
    config = get_framework_config(integration)

    try:
        completed = run_integration(config, options, ui, analytics, **kwargs)
    except UserCancelledError:
        raise
    except Exception as exc:
        logger.debug("Integration failed", exc_info=True)
        analytics.capture_exception(exc, {"integration": integration.value})
        write_wizard_marker(install_dir, STATUS_ERROR, integration.value)
        analytics.shutdown(STATUS_ERROR)
        if isinstance(exc, RateLimitError):
            ui.error("Wizard usage limit reached. Please try again later.")
        else:
            if isinstance(exc, PackageManagerError):
                ui.error(str(exc))
            ui.error(
                f"Something went wrong. You can read the documentation at "
                f"{config.metadata.docs_url} to set up PostHog manually."
            )
        if not isinstance(exc, WizardError):
            raise WizardError(str(exc)) from exc
        raise

    if completed:
        analytics.shutdown(STATUS_SUCCESS)
