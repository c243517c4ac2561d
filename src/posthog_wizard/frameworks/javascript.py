"""JavaScript frameworks other than Next.js.

Most of these differ only in package name, environment variable prefix
and a small piece of context (router mode, Expo or bare React Native).
:func:`_node_framework` fills in the shared parts.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

from posthog_wizard.constants import Integration
from posthog_wizard.files.walk import any_file_contains, find_files
from posthog_wizard.frameworks.base import (
    AnalyticsConfig,
    Context,
    EnvironmentConfig,
    FrameworkConfig,
    FrameworkDetection,
    FrameworkMetadata,
    PromptConfig,
    TemplatedFlow,
    UIConfig,
    _no_context,
    _no_lines,
    _no_tags,
    posthog_env_vars,
    standard_outro_changes,
)
from posthog_wizard.packages.managers import detect_node_package_managers
from posthog_wizard.packages.manifest import (
    get_package_version,
    has_any_package,
    has_package_installed,
    is_using_typescript,
    read_package_json,
)
from posthog_wizard.prompts.docs import get_astro_docs, get_react_docs
from posthog_wizard.versions import coerce_version, create_version_bucket

_JS_SOURCES = ("**/*.tsx", "**/*.ts", "**/*.jsx", "**/*.js")
_JS_IGNORE = ("node_modules", "dist", "build", "public", ".vinxi", ".output")


def _package_detector(*packages: str) -> Callable[[Path], bool]:
    def detect(install_dir: Path) -> bool:
        return has_any_package(list(packages), read_package_json(install_dir))

    return detect


def _package_version(package: str) -> Callable[[Path], str | None]:
    def version(install_dir: Path) -> str | None:
        return get_package_version(package, read_package_json(install_dir))

    return version


def _node_framework(
    *,
    integration: Integration,
    name: str,
    package: str,
    docs_url: str,
    key_var: str,
    host_var: str,
    detect: Callable[[Path], bool] | None = None,
    minimum_version: str | None = None,
    min_major_bucket: int | None = None,
    gather_context: Callable[[Path], Context] = _no_context,
    get_tags: Callable[[Context], dict[str, str]] = _no_tags,
    context_lines: Callable[[Context], list[str]] = _no_lines,
    outro_detail: str | None = None,
    context_env_vars: Callable[[Context, str, str], dict[str, str]] | None = None,
    upload_to_hosting: bool = False,
    duration: int = 8,
    beta: bool = False,
    templated: TemplatedFlow | None = None,
) -> FrameworkConfig:
    return FrameworkConfig(
        metadata=FrameworkMetadata(
            name=name,
            integration=integration,
            docs_url=docs_url,
            unsupported_version_docs_url=docs_url if minimum_version else None,
            beta=beta,
            gather_context=gather_context,
        ),
        detection=FrameworkDetection(
            package_name=package,
            package_display_name=name,
            detect=detect or _package_detector(package),
            detect_package_manager=detect_node_package_managers,
            get_installed_version=_package_version(package),
            get_version_bucket=create_version_bucket(min_major_bucket),
            minimum_version=minimum_version,
        ),
        environment=EnvironmentConfig(
            get_env_vars=posthog_env_vars(key_var, host_var),
            get_context_env_vars=context_env_vars,
            upload_to_hosting=upload_to_hosting,
        ),
        analytics=AnalyticsConfig(get_tags=get_tags),
        prompts=PromptConfig(get_additional_context_lines=context_lines),
        ui=UIConfig(
            success_message="PostHog integration complete",
            estimated_duration_minutes=duration,
            get_outro_changes=standard_outro_changes(name, outro_detail),
        ),
        templated=templated,
    )


# ---------------------------------------------------------------------------
# React Router
# ---------------------------------------------------------------------------

REACT_ROUTER_V6 = "v6"
REACT_ROUTER_V7_FRAMEWORK = "v7-framework"
REACT_ROUTER_V7_DATA = "v7-data"
REACT_ROUTER_V7_DECLARATIVE = "v7-declarative"

_REACT_ROUTER_MODE_NAMES = {
    REACT_ROUTER_V6: "React Router v6",
    REACT_ROUTER_V7_FRAMEWORK: "React Router v7 framework mode",
    REACT_ROUTER_V7_DATA: "React Router v7 data mode",
    REACT_ROUTER_V7_DECLARATIVE: "React Router v7 declarative mode",
}

_REACT_ROUTER_DOCS_IDS = {
    REACT_ROUTER_V6: "react-react-router-6",
    REACT_ROUTER_V7_FRAMEWORK: "react-react-router-7-framework",
    REACT_ROUTER_V7_DATA: "react-react-router-7-data",
    REACT_ROUTER_V7_DECLARATIVE: "react-react-router-7-declarative",
}


def get_react_router_mode(install_dir: Path) -> str:
    """Classify how the project uses React Router.

    v6 projects are reported as such. For v7, a ``react-router.config``
    file or ``@react-router/dev`` means framework mode, a data router
    (``createBrowserRouter``) means data mode, anything else is declarative.
    """
    root = Path(install_dir)
    package_json = read_package_json(root)
    version = coerce_version(get_package_version("react-router", package_json)
                             or get_package_version("react-router-dom", package_json))
    if version is not None and version[0] < 7:
        return REACT_ROUTER_V6

    if find_files(root, ("react-router.config.*",)) or has_package_installed(
        "@react-router/dev", package_json
    ):
        return REACT_ROUTER_V7_FRAMEWORK
    if any_file_contains(root, _JS_SOURCES, ("createBrowserRouter", "RouterProvider"), _JS_IGNORE):
        return REACT_ROUTER_V7_DATA
    return REACT_ROUTER_V7_DECLARATIVE


def _react_router_lines(context: Context) -> list[str]:
    mode = context.get("router_mode", REACT_ROUTER_V7_FRAMEWORK)
    docs_id = _REACT_ROUTER_DOCS_IDS.get(mode, _REACT_ROUTER_DOCS_IDS[REACT_ROUTER_V7_FRAMEWORK])
    return [
        f"Router mode: {_REACT_ROUTER_MODE_NAMES.get(mode, 'unknown')}",
        f"Framework docs ID: {docs_id} (use posthog://docs/frameworks/{docs_id} for documentation)",
    ]


REACT_ROUTER_CONFIG = _node_framework(
    integration=Integration.REACT_ROUTER,
    name="React Router",
    package="react-router",
    docs_url="https://posthog.com/docs/libraries/react",
    key_var="REACT_APP_POSTHOG_KEY",
    host_var="REACT_APP_POSTHOG_HOST",
    detect=_package_detector("react-router", "@react-router/dev"),
    minimum_version="6.0.0",
    gather_context=lambda install_dir: {"router_mode": get_react_router_mode(install_dir)},
    get_tags=lambda context: {"routerMode": context.get("router_mode") or "unknown"},
    context_lines=_react_router_lines,
    outro_detail="router_mode",
)


# ---------------------------------------------------------------------------
# TanStack
# ---------------------------------------------------------------------------

TANSTACK_FILE_BASED = "file-based"
TANSTACK_CODE_BASED = "code-based"


def get_tanstack_router_mode(install_dir: Path) -> str:
    """Return ``file-based`` when the router plugin or a generated route tree is present."""
    root = Path(install_dir)
    if find_files(root, ("**/routeTree.gen.*",), _JS_IGNORE):
        return TANSTACK_FILE_BASED
    if has_any_package(
        ["@tanstack/router-plugin", "@tanstack/router-vite-plugin"], read_package_json(root)
    ):
        return TANSTACK_FILE_BASED
    if any_file_contains(root, _JS_SOURCES, ("createFileRoute",), _JS_IGNORE):
        return TANSTACK_FILE_BASED
    return TANSTACK_CODE_BASED


TANSTACK_START_CONFIG = _node_framework(
    integration=Integration.TANSTACK_START,
    name="TanStack Start",
    package="@tanstack/react-start",
    docs_url="https://posthog.com/docs/libraries/react",
    key_var="VITE_PUBLIC_POSTHOG_KEY",
    host_var="VITE_PUBLIC_POSTHOG_HOST",
    minimum_version="1.0.0",
)

TANSTACK_ROUTER_CONFIG = _node_framework(
    integration=Integration.TANSTACK_ROUTER,
    name="TanStack Router",
    package="@tanstack/react-router",
    docs_url="https://posthog.com/docs/libraries/react",
    key_var="VITE_PUBLIC_POSTHOG_KEY",
    host_var="VITE_PUBLIC_POSTHOG_HOST",
    minimum_version="1.0.0",
    gather_context=lambda install_dir: {"router_mode": get_tanstack_router_mode(install_dir)},
    get_tags=lambda context: {"routerMode": context.get("router_mode", TANSTACK_CODE_BASED)},
    context_lines=lambda context: [f"Routing: {context.get('router_mode', TANSTACK_CODE_BASED)}"],
    outro_detail="router_mode",
)


# ---------------------------------------------------------------------------
# React Native
# ---------------------------------------------------------------------------

EXPO = "expo"
BARE_REACT_NATIVE = "react-native"


def detect_react_native_variant(install_dir: Path) -> str:
    if has_package_installed("expo", read_package_json(install_dir)):
        return EXPO
    return BARE_REACT_NATIVE


def _react_native_name(variant: str) -> str:
    return "Expo" if variant == EXPO else "React Native"


REACT_NATIVE_CONFIG = _node_framework(
    integration=Integration.REACT_NATIVE,
    name="React Native",
    package="react-native",
    docs_url="https://posthog.com/docs/libraries/react-native",
    key_var="POSTHOG_API_KEY",
    host_var="POSTHOG_HOST",
    minimum_version="0.73.0",
    gather_context=lambda install_dir: {"variant": detect_react_native_variant(install_dir)},
    get_tags=lambda context: {"variant": context.get("variant", BARE_REACT_NATIVE)},
    context_lines=lambda context: [
        f"Platform: {_react_native_name(context.get('variant', BARE_REACT_NATIVE))}"
    ],
)


# ---------------------------------------------------------------------------
# Vue, Nuxt, Angular, Svelte
# ---------------------------------------------------------------------------

NUXT_CONFIG = _node_framework(
    integration=Integration.NUXT,
    name="Nuxt",
    package="nuxt",
    docs_url="https://posthog.com/docs/libraries/nuxt-js",
    key_var="NUXT_PUBLIC_POSTHOG_KEY",
    host_var="NUXT_PUBLIC_POSTHOG_HOST",
    min_major_bucket=3,
)

VUE_CONFIG = _node_framework(
    integration=Integration.VUE,
    name="Vue",
    package="vue",
    docs_url="https://posthog.com/docs/libraries/vue-js",
    key_var="VITE_POSTHOG_KEY",
    host_var="VITE_POSTHOG_HOST",
)

ANGULAR_CONFIG = _node_framework(
    integration=Integration.ANGULAR,
    name="Angular",
    package="@angular/core",
    docs_url="https://posthog.com/docs/libraries/angular",
    key_var="POSTHOG_KEY",
    host_var="POSTHOG_HOST",
    minimum_version="19.0.0",
)

SVELTE_CONFIG = _node_framework(
    integration=Integration.SVELTE,
    name="SvelteKit",
    package="@sveltejs/kit",
    docs_url="https://posthog.com/docs/libraries/svelte",
    key_var="PUBLIC_POSTHOG_KEY",
    host_var="PUBLIC_POSTHOG_HOST",
)


# ---------------------------------------------------------------------------
# Astro
# ---------------------------------------------------------------------------


def _astro_documentation(context: Context, project_api_key: str, host: str) -> str:
    return get_astro_docs(project_api_key, host)


ASTRO_CONFIG = _node_framework(
    integration=Integration.ASTRO,
    name="Astro",
    package="astro",
    docs_url="https://posthog.com/docs/libraries/astro",
    key_var="PUBLIC_POSTHOG_KEY",
    host_var="PUBLIC_POSTHOG_HOST",
    minimum_version="4.0.0",
    templated=TemplatedFlow(
        filter_patterns=("**/*.astro", "**/*.ts", "**/*.js", "**/*.mjs"),
        ignore_patterns=("node_modules", "dist", "build", "public", ".astro"),
        packages=(),
        build_documentation=_astro_documentation,
        rules_name="astro",
        default_changes=(
            "Added a PostHog component with the snippet loader",
            "Created a PostHog layout and wrapped your pages in it",
        ),
        next_steps=(
            "Call posthog.identify() when a user signs into your app",
            "Call posthog.capture() to capture custom events in your app",
        ),
    ),
)


# ---------------------------------------------------------------------------
# React
# ---------------------------------------------------------------------------


def get_react_env_var_prefix(install_dir: Path) -> str:
    """Pick the environment variable prefix the bundler exposes to the browser."""
    package_json = read_package_json(install_dir)
    if has_package_installed("vite", package_json):
        return "VITE_PUBLIC_"
    if has_package_installed("next", package_json):
        return "NEXT_PUBLIC_"
    return "REACT_APP_"


def _react_context(install_dir: Path) -> Context:
    return {
        "env_var_prefix": get_react_env_var_prefix(install_dir),
        "typescript": is_using_typescript(install_dir),
    }


def _react_documentation(context: Context, project_api_key: str, host: str) -> str:
    language = "typescript" if context.get("typescript") else "javascript"
    return get_react_docs(language, context.get("env_var_prefix", "REACT_APP_"))


def _react_env_vars(context: Context, api_key: str, host: str) -> dict[str, str]:
    prefix = context.get("env_var_prefix", "REACT_APP_")
    return posthog_env_vars(f"{prefix}POSTHOG_KEY", f"{prefix}POSTHOG_HOST")(api_key, host)


REACT_CONFIG = _node_framework(
    integration=Integration.REACT,
    name="React",
    package="react",
    docs_url="https://posthog.com/docs/libraries/react",
    key_var="REACT_APP_POSTHOG_KEY",
    host_var="REACT_APP_POSTHOG_HOST",
    gather_context=_react_context,
    context_lines=lambda context: [f"Environment variable prefix: {context.get('env_var_prefix')}"],
    context_env_vars=_react_env_vars,
    upload_to_hosting=True,
    duration=5,
    templated=TemplatedFlow(
        filter_patterns=_JS_SOURCES,
        ignore_patterns=("node_modules", "dist", "build", "public", "static", "assets"),
        packages=("posthog-js",),
        build_documentation=_react_documentation,
        rules_name="react",
        default_changes=(
            "Installed posthog-js package",
            "Added PostHogProvider to the root of the app, to initialize PostHog and enable autocapture",
        ),
        next_steps=(
            "Call posthog.identify() when a user signs into your app",
            "Call posthog.capture() to capture custom events in your app",
        ),
    ),
)
