"""Upload the PostHog environment variables to the project's hosting provider.

Vercel is the only supported provider. It is used when the ``vercel``
CLI is installed, the project is linked (``.vercel/project.json``) and
the CLI is logged in.
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import Mapping, Sequence

from rich.markup import escape

from posthog_wizard.analytics import Analytics, analytics as default_analytics
from posthog_wizard.ui import WizardUI

logger = logging.getLogger(__name__)

# stderr fragments the Vercel CLI prints when a variable is already set.
_ALREADY_EXISTS_MARKERS = ("already exists", "already been added", "vercel env rm")


class EnvironmentProvider:
    """A hosting provider that can store environment variables."""

    name = ""

    def __init__(self, install_dir: Path, analytics: Analytics = default_analytics) -> None:
        self.install_dir = Path(install_dir)
        self.analytics = analytics

    def detect(self) -> bool:
        raise NotImplementedError

    def upload_env_vars(self, env_vars: Mapping[str, str], ui: WizardUI) -> dict[str, bool]:
        """Upload each variable; returns whether each key was uploaded."""
        raise NotImplementedError


class VercelEnvironmentProvider(EnvironmentProvider):
    name = "Vercel"
    binary = "vercel"
    environments = ("production", "preview", "development")

    def _run(
        self, args: list[str], input_text: str | None = None
    ) -> subprocess.CompletedProcess[str] | None:
        env = {**os.environ, "FORCE_COLOR": "0", "CI": "1"}
        try:
            return subprocess.run(
                [self.binary, *args],
                cwd=str(self.install_dir),
                input=input_text,
                capture_output=True,
                text=True,
                env=env,
                check=False,
            )
        except OSError as exc:
            logger.debug("Running vercel %s failed: %s", " ".join(args), exc)
            return None

    def has_cli(self) -> bool:
        result = self._run(["--version"])
        installed = result is not None and result.returncode == 0
        self.analytics.set_tag("vercel-cli-installed", installed)
        return installed

    def is_project_linked(self) -> bool:
        linked = (self.install_dir / ".vercel" / "project.json").exists()
        self.analytics.set_tag("vercel-project-linked", linked)
        return linked

    def is_authenticated(self) -> bool:
        result = self._run(["whoami"])
        if result is None:
            authenticated = False
        else:
            output = (result.stdout + result.stderr).lower()
            authenticated = (
                result.returncode == 0
                and "log in to vercel" not in output
                and "vercel login" not in output
            )
        self.analytics.set_tag("vercel-authenticated", authenticated)
        return authenticated

    def detect(self) -> bool:
        detected = self.has_cli() and self.is_project_linked() and self.is_authenticated()
        self.analytics.set_tag("vercel-detected", detected)
        return detected

    def upload_env_var(self, key: str, value: str, environment: str) -> str | None:
        """Add one variable to one environment.

        Returns:
            None on success, otherwise a message for the user.
        """
        result = self._run(["env", "add", key, environment], input_text=f"{value}\n")
        if result is None:
            return f"Failed to upload environment variable {key} to {self.name}. Please upload it manually."
        if any(marker in result.stderr for marker in _ALREADY_EXISTS_MARKERS):
            return f"Environment variable {key} already exists in {self.name}. Please upload it manually."
        if result.returncode != 0:
            return f"Failed to upload environment variable {key} to {self.name}. Please upload it manually."
        return None

    def upload_env_vars(self, env_vars: Mapping[str, str], ui: WizardUI) -> dict[str, bool]:
        results: dict[str, bool] = {}
        for key, value in env_vars.items():
            with ui.spinner(f"Uploading {key} to {self.name}..."):
                outcomes = [self.upload_env_var(key, value, env) for env in self.environments]
            problems = [problem for problem in outcomes if problem is not None]
            if problems:
                ui.warn(escape(problems[0]))
                results[key] = False
            else:
                ui.success(f"Uploaded {escape(key)} to {self.name}")
                results[key] = True
        return results


def upload_environment_variables_step(
    env_vars: Mapping[str, str],
    install_dir: Path,
    integration: str,
    ui: WizardUI,
    analytics: Analytics = default_analytics,
    providers: Sequence[EnvironmentProvider] | None = None,
) -> list[str]:
    """Offer to upload ``env_vars`` to the first detected hosting provider.

    CI runs never upload, since that would write secrets to a shared
    deployment without anyone confirming it.

    Returns:
        Keys that were uploaded.
    """
    if ui.ci:
        logger.info("Skipping environment variable upload in CI mode")
        return []
    if not env_vars:
        return []

    candidates = (
        providers if providers is not None else [VercelEnvironmentProvider(install_dir, analytics)]
    )
    provider = next((p for p in candidates if p.detect()), None)
    if provider is None:
        analytics.capture_interaction(
            "not uploading environment variables",
            reason="no environment provider found",
            integration=integration,
        )
        return []

    upload = ui.select(
        f"It looks like you are using {provider.name}. Would you like to upload the environment variables?",
        [
            (True, f"Yes, upload them to {provider.name}"),
            (False, "No, I'll do it later"),
        ],
    )
    if not upload:
        analytics.capture_interaction(
            "not uploading environment variables",
            reason="user declined to upload",
            provider=provider.name,
            integration=integration,
        )
        return []

    results = provider.upload_env_vars(env_vars, ui)
    uploaded = [key for key, ok in results.items() if ok]
    analytics.capture_interaction(
        "uploaded environment variables",
        provider=provider.name,
        integration=integration,
        keys=uploaded,
    )
    return uploaded
