"""Framework registry and detection.

``detect_integration(install_dir)`` runs each framework's detector in
:data:`INTEGRATION_ORDER` and returns the first match. The order matters:
meta-frameworks come before the libraries they are built on (Next.js
before React, Django before generic Python), so a Next.js project is
never reported as plain React.
"""

from __future__ import annotations

import logging
from pathlib import Path

from posthog_wizard.constants import Integration
from posthog_wizard.frameworks.base import FrameworkConfig
from posthog_wizard.frameworks.django import DJANGO_CONFIG
from posthog_wizard.frameworks.fastapi import FASTAPI_CONFIG
from posthog_wizard.frameworks.flask import FLASK_CONFIG
from posthog_wizard.frameworks.javascript import (
    ANGULAR_CONFIG,
    ASTRO_CONFIG,
    NUXT_CONFIG,
    REACT_CONFIG,
    REACT_NATIVE_CONFIG,
    REACT_ROUTER_CONFIG,
    SVELTE_CONFIG,
    TANSTACK_ROUTER_CONFIG,
    TANSTACK_START_CONFIG,
    VUE_CONFIG,
)
from posthog_wizard.frameworks.laravel import LARAVEL_CONFIG
from posthog_wizard.frameworks.nextjs import NEXTJS_CONFIG
from posthog_wizard.frameworks.python import PYTHON_CONFIG
from posthog_wizard.frameworks.rails import RAILS_CONFIG

logger = logging.getLogger(__name__)

INTEGRATION_ORDER: tuple[Integration, ...] = (
    Integration.NEXTJS,
    Integration.NUXT,
    Integration.VUE,
    Integration.REACT_ROUTER,
    Integration.TANSTACK_START,
    Integration.TANSTACK_ROUTER,
    Integration.REACT_NATIVE,
    Integration.ANGULAR,
    Integration.ASTRO,
    Integration.SVELTE,
    Integration.REACT,
    Integration.DJANGO,
    Integration.FLASK,
    Integration.FASTAPI,
    Integration.LARAVEL,
    Integration.RAILS,
    Integration.PYTHON,
)

FRAMEWORK_REGISTRY: dict[Integration, FrameworkConfig] = {
    config.integration: config
    for config in (
        NEXTJS_CONFIG,
        NUXT_CONFIG,
        VUE_CONFIG,
        REACT_ROUTER_CONFIG,
        TANSTACK_START_CONFIG,
        TANSTACK_ROUTER_CONFIG,
        REACT_NATIVE_CONFIG,
        ANGULAR_CONFIG,
        ASTRO_CONFIG,
        SVELTE_CONFIG,
        REACT_CONFIG,
        DJANGO_CONFIG,
        FLASK_CONFIG,
        FASTAPI_CONFIG,
        LARAVEL_CONFIG,
        RAILS_CONFIG,
        PYTHON_CONFIG,
    )
}


def get_framework_config(integration: Integration | str) -> FrameworkConfig:
    """Look up the config for an integration.

    Raises:
        KeyError: If the integration is not registered.
    """
    return FRAMEWORK_REGISTRY[Integration(integration)]


def detect_integration(install_dir: str | Path) -> Integration | None:
    """Return the first integration whose detector matches, or None.

    A detector that raises is logged and treated as "no match".
    """
    root = Path(install_dir)
    for integration in INTEGRATION_ORDER:
        config = FRAMEWORK_REGISTRY[integration]
        try:
            matched = config.detection.detect(root)
        except OSError as exc:
            logger.debug("Detector for %s failed: %s", integration.value, exc)
            continue
        if matched:
            logger.debug("Detected %s in %s", integration.value, root)
            return integration
    return None


def get_integration_description(integration: Integration | str) -> str:
    """Display name of an integration, for prompts and menus."""
    return get_framework_config(integration).name
