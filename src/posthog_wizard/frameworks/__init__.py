"""Per-framework configuration and detection."""

from posthog_wizard.frameworks.base import FrameworkConfig
from posthog_wizard.frameworks.registry import (
    FRAMEWORK_REGISTRY,
    INTEGRATION_ORDER,
    detect_integration,
    get_framework_config,
    get_integration_description,
)

__all__ = [
    "FRAMEWORK_REGISTRY",
    "INTEGRATION_ORDER",
    "FrameworkConfig",
    "detect_integration",
    "get_framework_config",
    "get_integration_description",
]
