"""Tests for prompt templates and installation documentation."""

from __future__ import annotations

import pytest

from posthog_wizard.prompts.docs import (
    get_astro_docs,
    get_nextjs_app_router_docs,
    get_nextjs_pages_router_docs,
    get_react_docs,
)
from posthog_wizard.prompts.templates import (
    BASE_FILTER_FILES_PROMPT,
    MIGRATION_FILTER_FILES_PROMPT,
    PromptTemplate,
)


class TestPromptTemplate:
    """Tests for ``PromptTemplate.format``."""

    def test_missing_variable(self) -> None:
        """Every declared variable is required."""
        with pytest.raises(ValueError, match="integration_rules"):
            BASE_FILTER_FILES_PROMPT.format(documentation="", file_list="", integration_name="React")

    def test_braces_in_values_pass_through(self) -> None:
        """Values containing braces are substituted verbatim."""
        template = PromptTemplate(input_variables=("code",), template="Code: {code}")
        assert template.format(code="function x() { return {a: 1} }") == "Code: function x() { return {a: 1} }"

    def test_filter_prompts_mention_inputs(self) -> None:
        """Formatted prompts contain the documentation and file list."""
        text = MIGRATION_FILTER_FILES_PROMPT.format(
            documentation="DOCS", file_list="src/a.ts", source_sdk="Amplitude", integration_rules=""
        )
        assert "DOCS" in text and "src/a.ts" in text and "Amplitude" in text


class TestDocs:
    """Tests for the installation documentation builders."""

    def test_nextjs_app_router(self) -> None:
        """App Router docs create a provider and use the region hosts."""
        docs = get_nextjs_app_router_docs("https://eu.i.posthog.com", "typescript")
        assert "PostHogProvider.tsx" in docs
        assert "https://eu.posthog.com" in docs
        assert "https://eu-assets.i.posthog.com" in docs
        assert "__HOST__" not in docs

    def test_nextjs_pages_router(self) -> None:
        """Pages Router docs target ``_app``."""
        docs = get_nextjs_pages_router_docs("https://us.i.posthog.com", "javascript")
        assert "_app.jsx" in docs
        assert "posthog.js" in docs

    def test_react_vite(self) -> None:
        """Vite projects read env vars through ``import.meta.env``."""
        docs = get_react_docs("typescript", "VITE_PUBLIC_")
        assert "import.meta.env.VITE_PUBLIC_POSTHOG_KEY" in docs

    def test_react_cra(self) -> None:
        """Other projects read env vars through ``process.env``."""
        assert "process.env.REACT_APP_POSTHOG_HOST" in get_react_docs("javascript", "REACT_APP_")

    def test_astro_embeds_key(self) -> None:
        """Astro docs embed the project key and host in the snippet."""
        docs = get_astro_docs("phc_abc", "https://us.i.posthog.com")
        assert "posthog.init('phc_abc', { api_host: 'https://us.i.posthog.com'" in docs
