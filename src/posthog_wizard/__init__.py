"""PostHog Wizard: set up PostHog analytics in a web project from the terminal."""

from __future__ import annotations

__version__ = "1.0.0"
