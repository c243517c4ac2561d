"""Prompt templates and installation documentation fed to the LLM."""
