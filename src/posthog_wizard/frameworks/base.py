"""Declarative per-framework configuration.

Each supported framework is described by one :class:`FrameworkConfig`
value: how to detect it, what to tell the agent, which environment
variables to write and what to show the user afterwards. The wizard
runner threads a framework-specific ``context`` dict (router type,
project type, ...) through the config without interpreting it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

from posthog_wizard.constants import Integration
from posthog_wizard.packages.managers import PackageManagerDetector

Context = dict[str, Any]

DEFAULT_PACKAGE_INSTALLATION = (
    "Use the detect_package_manager tool to determine the package manager. "
    "Do not manually edit package.json; the package manager handles it automatically."
)

PYTHON_PACKAGE_INSTALLATION = (
    "Use the detect_package_manager tool to determine the package manager. "
    "If the detected tool manages dependencies directly (e.g. uv add, poetry add), "
    "use it and it will update the manifest automatically. If using pip, you must "
    "also add the dependency to requirements.txt or the appropriate manifest file."
)

JS_PROJECT_TYPE_DETECTION = (
    "This is a JavaScript/TypeScript project. Look for package.json and lockfiles "
    "(package-lock.json, yarn.lock, pnpm-lock.yaml, bun.lockb) to confirm."
)

DEFAULT_NEXT_STEPS = (
    "Start your development server to see PostHog in action",
    "Visit your PostHog dashboard to see incoming events",
)


def _no_context(install_dir: Path) -> Context:
    return {}


def _no_tags(context: Context) -> dict[str, str]:
    return {}


def _no_lines(context: Context) -> list[str]:
    return []


def _default_next_steps(context: Context) -> list[str]:
    return list(DEFAULT_NEXT_STEPS)


@dataclass(frozen=True)
class FrameworkMetadata:
    """Display name, docs and optional pre-run hooks.

    Attributes:
        name: Display name, e.g. ``"Next.js"``.
        integration: Registry key.
        docs_url: Manual setup guide.
        unsupported_version_docs_url: Guide for versions below the minimum.
        beta: Show a beta notice before running.
        pre_run_notice: Warning shown before the agent starts.
        gather_context: Collects framework-specific context from the project.
    """

    name: str
    integration: Integration
    docs_url: str
    unsupported_version_docs_url: str | None = None
    beta: bool = False
    pre_run_notice: str | None = None
    gather_context: Callable[[Path], Context] = _no_context


@dataclass(frozen=True)
class FrameworkDetection:
    """How to recognize the framework and read its version.

    Attributes:
        package_name: Dependency name in the framework's manifest.
        package_display_name: Human-readable package name.
        detect: Predicate over the project directory.
        detect_package_manager: Used by the agent's package manager tool.
        get_installed_version: Reads the declared version from the project.
        get_version_bucket: Groups versions for analytics.
        uses_package_json: Whether the project is a Node project.
        minimum_version: Lowest supported version, if any.
    """

    package_name: str
    package_display_name: str
    detect: Callable[[Path], bool]
    detect_package_manager: PackageManagerDetector
    get_installed_version: Callable[[Path], str | None]
    get_version_bucket: Callable[[str | None], str] | None = None
    uses_package_json: bool = True
    minimum_version: str | None = None


@dataclass(frozen=True)
class EnvironmentConfig:
    """Environment variables the integration needs.

    Attributes:
        get_env_vars: Maps ``(project_api_key, host)`` to variable names and values.
        get_context_env_vars: Variant of ``get_env_vars`` that also sees the
            framework context, for frameworks whose variable names depend on
            the bundler.
        upload_to_hosting: Remind the user to add the variables to their host.
        env_file: File the variables are written to, relative to the project root.
    """

    get_env_vars: Callable[[str, str], dict[str, str]]
    get_context_env_vars: Callable[[Context, str, str], dict[str, str]] | None = None
    upload_to_hosting: bool = False
    env_file: str = ".env"

    def build(self, api_key: str, host: str, context: Context | None = None) -> dict[str, str]:
        """Return the variables to write for this project."""
        if self.get_context_env_vars is not None and context is not None:
            return self.get_context_env_vars(context, api_key, host)
        return self.get_env_vars(api_key, host)


@dataclass(frozen=True)
class AnalyticsConfig:
    get_tags: Callable[[Context], dict[str, str]] = _no_tags


@dataclass(frozen=True)
class PromptConfig:
    """Project guidance included in the agent prompt."""

    project_type_detection: str = JS_PROJECT_TYPE_DETECTION
    package_installation: str = DEFAULT_PACKAGE_INSTALLATION
    get_additional_context_lines: Callable[[Context], list[str]] = _no_lines


@dataclass(frozen=True)
class UIConfig:
    """Messages shown while the wizard runs and in the outro."""

    success_message: str
    estimated_duration_minutes: int
    get_outro_changes: Callable[[Context], list[str]]
    get_outro_next_steps: Callable[[Context], list[str]] = _default_next_steps


@dataclass(frozen=True)
class TemplatedFlow:
    """Prompt/response flow used instead of the agent for some projects.

    The LLM gateway picks files from ``filter_patterns`` and rewrites each
    one following the documentation returned by ``build_documentation``.

    Attributes:
        filter_patterns: Globs of candidate source files.
        ignore_patterns: Directory or file names never sent to the gateway.
        packages: SDK packages installed before files are changed.
        build_documentation: Maps ``(context, project_api_key, host)`` to
            documentation text.
        filter_files_rules: Extra rules for the file selection prompt.
        generate_files_rules: Extra rules for the file rewrite prompt.
        default_changes: Outro bullets describing what was done.
        next_steps: Outro bullets for the user.
        use_below_version: Run this flow instead of the agent when the
            installed framework version is below this.
        rules_name: Cursor rules offered after the run, see
            :mod:`posthog_wizard.steps.editor_rules`.
    """

    filter_patterns: tuple[str, ...]
    ignore_patterns: tuple[str, ...]
    packages: tuple[str, ...]
    build_documentation: Callable[[Context, str, str], str]
    filter_files_rules: str = ""
    generate_files_rules: str = ""
    default_changes: tuple[str, ...] = ()
    next_steps: tuple[str, ...] = ()
    use_below_version: str | None = None
    rules_name: str | None = None


@dataclass(frozen=True)
class FrameworkConfig:
    """Everything the wizard needs to know about one framework."""

    metadata: FrameworkMetadata
    detection: FrameworkDetection
    environment: EnvironmentConfig
    ui: UIConfig
    analytics: AnalyticsConfig = field(default_factory=AnalyticsConfig)
    prompts: PromptConfig = field(default_factory=PromptConfig)
    templated: TemplatedFlow | None = None

    @property
    def integration(self) -> Integration:
        return self.metadata.integration

    @property
    def name(self) -> str:
        return self.metadata.name


def standard_outro_changes(name: str, detail: str | None = None) -> Callable[[Context], list[str]]:
    """Build the usual three outro bullets for a framework.

    Args:
        name: Framework display name.
        detail: Context key whose value is shown after the name, if present.
    """

    def changes(context: Context) -> list[str]:
        label = f"{name} project structure"
        if detail and context.get(detail):
            label = f"{label} ({context[detail]})"
        return [
            f"Analyzed your {label}",
            "Created and configured PostHog initializers",
            "Integrated PostHog into your application",
        ]

    return changes


def posthog_env_vars(key_name: str, host_name: str) -> Callable[[str, str], dict[str, str]]:
    """Return an env var builder writing the key and host under the given names."""

    def build(api_key: str, host: str) -> dict[str, str]:
        return {key_name: api_key, host_name: host}

    return build
