"""Tests for Next.js router detection and templated documentation."""

from __future__ import annotations

from pathlib import Path

from posthog_wizard.frameworks.nextjs import (
    APP_ROUTER,
    NEXTJS_CONFIG,
    PAGES_ROUTER,
    get_nextjs_router,
    get_nextjs_version_bucket,
)
from tests.helpers import write_files, write_package_json


class TestNextjsRouter:
    """Tests for ``get_nextjs_router``."""

    def test_app_router(self, tmp_path: Path) -> None:
        """An ``app`` directory means App Router."""
        (tmp_path / "app").mkdir()
        assert get_nextjs_router(tmp_path) == APP_ROUTER

    def test_pages_router_in_src(self, tmp_path: Path) -> None:
        """``src/pages`` means Pages Router."""
        (tmp_path / "src" / "pages").mkdir(parents=True)
        assert get_nextjs_router(tmp_path) == PAGES_ROUTER

    def test_both_prefers_app(self, tmp_path: Path) -> None:
        """With both directories, new code goes to the App Router."""
        (tmp_path / "app").mkdir()
        (tmp_path / "pages").mkdir()
        assert get_nextjs_router(tmp_path) == APP_ROUTER


class TestNextjsConfig:
    """Tests for the Next.js config values."""

    def test_context_and_tags(self, tmp_path: Path) -> None:
        """Context carries the router and TypeScript usage."""
        write_package_json(tmp_path, dependencies={"next": "14.2.0"})
        write_files(tmp_path, {"pages/index.tsx": "", "tsconfig.json": "{}"})
        context = NEXTJS_CONFIG.metadata.gather_context(tmp_path)
        assert context == {"router": PAGES_ROUTER, "typescript": True}
        assert NEXTJS_CONFIG.analytics.get_tags(context) == {"router": PAGES_ROUTER}

    def test_env_vars(self) -> None:
        """Public env vars are written to .env.local."""
        env = NEXTJS_CONFIG.environment
        assert env.env_file == ".env.local"
        assert env.build("phc_1", "https://eu.i.posthog.com") == {
            "NEXT_PUBLIC_POSTHOG_KEY": "phc_1",
            "NEXT_PUBLIC_POSTHOG_HOST": "https://eu.i.posthog.com",
        }

    def test_templated_docs_follow_router(self) -> None:
        """Pages and App Router get different documentation."""
        templated = NEXTJS_CONFIG.templated
        assert templated is not None
        pages = templated.build_documentation({"router": PAGES_ROUTER}, "phc", "https://us.i.posthog.com")
        app = templated.build_documentation({"router": APP_ROUTER}, "phc", "https://us.i.posthog.com")
        assert pages != app
        assert templated.use_below_version == "15.3.0"

    def test_version_bucket(self) -> None:
        """Versions before 11 collapse into one bucket."""
        assert get_nextjs_version_bucket("10.2.0") == "<11.0.0"
        assert get_nextjs_version_bucket("^15.3.0") == "15.x"
