"""Tests for the framework registry and detection order."""

from __future__ import annotations

from pathlib import Path

import pytest

from posthog_wizard.constants import Integration
from posthog_wizard.frameworks.registry import (
    FRAMEWORK_REGISTRY,
    INTEGRATION_ORDER,
    detect_integration,
    get_framework_config,
    get_integration_description,
)
from tests.helpers import write_files, write_package_json


class TestRegistry:
    """Tests for registry completeness."""

    def test_every_integration_registered(self) -> None:
        """Each integration has exactly one config keyed by itself."""
        assert set(FRAMEWORK_REGISTRY) == set(Integration)
        for integration, config in FRAMEWORK_REGISTRY.items():
            assert config.integration == integration

    def test_order_covers_every_integration(self) -> None:
        """The detection order lists every integration once."""
        assert len(INTEGRATION_ORDER) == len(set(INTEGRATION_ORDER)) == len(Integration)

    def test_lookup_by_string(self) -> None:
        """Configs can be looked up by their string value."""
        assert get_framework_config("nextjs").name == "Next.js"
        assert get_integration_description(Integration.DJANGO) == "Django"

    def test_unknown_integration(self) -> None:
        """Unknown names raise."""
        with pytest.raises(ValueError):
            get_framework_config("cobol")


class TestDetectIntegration:
    """Tests for ``detect_integration``."""

    def test_nextjs_beats_react(self, tmp_path: Path) -> None:
        """A Next.js app also depends on react but is reported as Next.js."""
        write_package_json(tmp_path, dependencies={"next": "15.3.0", "react": "19.0.0"})
        assert detect_integration(tmp_path) == Integration.NEXTJS

    def test_plain_react(self, tmp_path: Path) -> None:
        """React alone is React."""
        write_package_json(tmp_path, dependencies={"react": "^18.2.0", "react-dom": "^18.2.0"})
        assert detect_integration(tmp_path) == Integration.REACT

    def test_nuxt_beats_vue(self, tmp_path: Path) -> None:
        """Nuxt comes before Vue."""
        write_package_json(tmp_path, dependencies={"nuxt": "^3.10.0", "vue": "^3.4.0"})
        assert detect_integration(tmp_path) == Integration.NUXT

    def test_django_beats_python(self, tmp_path: Path) -> None:
        """A Django requirement wins over the generic Python match."""
        write_files(tmp_path, {"requirements.txt": "Django==5.0.1\n", "manage.py": "import django\n"})
        assert detect_integration(tmp_path) == Integration.DJANGO

    def test_flask(self, tmp_path: Path) -> None:
        """A Flask requirement is Flask."""
        write_files(tmp_path, {"requirements.txt": "flask==3.0.0\n"})
        assert detect_integration(tmp_path) == Integration.FLASK

    def test_fastapi(self, tmp_path: Path) -> None:
        """A FastAPI requirement is FastAPI."""
        write_files(tmp_path, {"pyproject.toml": '[project]\ndependencies = ["fastapi>=0.110"]\n'})
        assert detect_integration(tmp_path) == Integration.FASTAPI

    def test_generic_python(self, tmp_path: Path) -> None:
        """Any other Python manifest falls back to generic Python."""
        write_files(tmp_path, {"requirements.txt": "requests\n"})
        assert detect_integration(tmp_path) == Integration.PYTHON

    def test_laravel(self, tmp_path: Path) -> None:
        """composer.json requiring laravel/framework is Laravel."""
        write_files(tmp_path, {"composer.json": '{"require": {"laravel/framework": "^11.0"}}'})
        assert detect_integration(tmp_path) == Integration.LARAVEL

    def test_rails(self, tmp_path: Path) -> None:
        """A Gemfile with rails is Rails."""
        write_files(tmp_path, {"Gemfile": "gem 'rails', '~> 7.1'\n"})
        assert detect_integration(tmp_path) == Integration.RAILS

    def test_nothing_detected(self, tmp_path: Path) -> None:
        """An empty directory matches nothing."""
        assert detect_integration(tmp_path) is None
