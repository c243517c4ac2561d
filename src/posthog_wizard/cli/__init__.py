"""Command-line interface for the PostHog wizard."""
