"""Migration from other analytics SDKs to PostHog."""
