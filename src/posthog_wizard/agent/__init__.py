"""LLM agent that edits the project to integrate PostHog."""
