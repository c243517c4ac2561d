"""Next.js: App Router or Pages Router detection and templated docs."""

from __future__ import annotations

import logging
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
    TemplatedFlow,
    UIConfig,
    posthog_env_vars,
)
from posthog_wizard.packages.managers import detect_node_package_managers
from posthog_wizard.packages.manifest import (
    get_package_version,
    has_package_installed,
    is_using_typescript,
    read_package_json,
)
from posthog_wizard.prompts.docs import get_nextjs_app_router_docs, get_nextjs_pages_router_docs
from posthog_wizard.versions import create_version_bucket

logger = logging.getLogger(__name__)

APP_ROUTER = "app"
PAGES_ROUTER = "pages"

_ROUTER_NAMES = {APP_ROUTER: "app router", PAGES_ROUTER: "pages router"}

get_nextjs_version_bucket = create_version_bucket(11)


def _has_route_dir(root: Path, name: str) -> bool:
    return any((root / prefix / name).is_dir() for prefix in ("", "src"))


def get_nextjs_router(install_dir: Path) -> str:
    """Return ``"app"`` or ``"pages"`` depending on the router in use.

    A project with both directories is treated as App Router, which is
    where new code belongs.
    """
    root = Path(install_dir)
    if _has_route_dir(root, "app"):
        return APP_ROUTER
    if _has_route_dir(root, "pages"):
        return PAGES_ROUTER
    return APP_ROUTER


def get_nextjs_router_name(router: str) -> str:
    return _ROUTER_NAMES.get(router, router)


def _gather_context(install_dir: Path) -> Context:
    return {
        "router": get_nextjs_router(install_dir),
        "typescript": is_using_typescript(install_dir),
    }


def _detect(install_dir: Path) -> bool:
    return has_package_installed("next", read_package_json(install_dir))


def _installed_version(install_dir: Path) -> str | None:
    return get_package_version("next", read_package_json(install_dir))


def _documentation(context: Context, project_api_key: str, host: str) -> str:
    language = "typescript" if context.get("typescript") else "javascript"
    if context.get("router") == PAGES_ROUTER:
        return get_nextjs_pages_router_docs(host, language)
    return get_nextjs_app_router_docs(host, language)


def _outro_changes(context: Context) -> list[str]:
    router_name = get_nextjs_router_name(context.get("router", APP_ROUTER))
    return [
        f"Analyzed your Next.js project structure ({router_name})",
        "Created and configured PostHog initializers",
        "Integrated PostHog into your application",
    ]


NEXTJS_CONFIG = FrameworkConfig(
    metadata=FrameworkMetadata(
        name="Next.js",
        integration=Integration.NEXTJS,
        docs_url="https://posthog.com/docs/libraries/next-js",
        gather_context=_gather_context,
    ),
    detection=FrameworkDetection(
        package_name="next",
        package_display_name="Next.js",
        detect=_detect,
        detect_package_manager=detect_node_package_managers,
        get_installed_version=_installed_version,
        get_version_bucket=get_nextjs_version_bucket,
    ),
    environment=EnvironmentConfig(
        get_env_vars=posthog_env_vars("NEXT_PUBLIC_POSTHOG_KEY", "NEXT_PUBLIC_POSTHOG_HOST"),
        upload_to_hosting=True,
        env_file=".env.local",
    ),
    analytics=AnalyticsConfig(
        get_tags=lambda context: {"router": context.get("router", APP_ROUTER)},
    ),
    prompts=PromptConfig(
        get_additional_context_lines=lambda context: [f"Router: {context.get('router', APP_ROUTER)}"],
    ),
    ui=UIConfig(
        success_message="PostHog integration complete",
        estimated_duration_minutes=8,
        get_outro_changes=_outro_changes,
    ),
    templated=TemplatedFlow(
        filter_patterns=("**/*.tsx", "**/*.ts", "**/*.jsx", "**/*.js", "**/*.mjs", "**/*.cjs"),
        ignore_patterns=("node_modules", "dist", "build", "public", "static", "next-env.d.*"),
        packages=("posthog-js", "posthog-node"),
        build_documentation=_documentation,
        rules_name="nextjs",
        default_changes=(
            "Installed posthog-js & posthog-node packages",
            "Initialized PostHog and added pageview tracking",
            "Created a PostHogClient to use PostHog server-side",
            "Setup a reverse proxy to avoid ad blockers blocking analytics requests",
        ),
        next_steps=(
            "Call posthog.identify() when a user signs into your app",
            "Call posthog.capture() to capture custom events in your app",
        ),
        use_below_version="15.3.0",
    ),
)
