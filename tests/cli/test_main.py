"""Tests for the ``posthog-wizard`` command group and its subcommands."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from posthog_wizard.cli import main, mcp_cmd, migrate_cmd
from posthog_wizard.cli.main import cli
from posthog_wizard.config import WizardOptions
from posthog_wizard.constants import CloudRegion, Integration
from posthog_wizard.exceptions import UserCancelledError, WizardError
from posthog_wizard.ui import WizardUI


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CliRunner for invoking commands."""
    return CliRunner()


@pytest.fixture
def captured(monkeypatch: pytest.MonkeyPatch) -> list[WizardOptions]:
    """Replace the wizard run with one that records its options."""
    seen: list[WizardOptions] = []

    def fake_run_wizard(options: WizardOptions, ui: Any) -> None:
        seen.append(options)

    monkeypatch.setattr(main, "run_wizard", fake_run_wizard)
    return seen


class TestCIValidation:
    """``--ci`` needs region, key and install directory."""

    def test_missing_region(self, runner: CliRunner) -> None:
        """Region is checked first."""
        result = runner.invoke(cli, ["--ci"])
        assert result.exit_code == 1
        assert "CI mode requires --region" in result.output

    def test_missing_api_key(self, runner: CliRunner) -> None:
        """Then the personal API key."""
        result = runner.invoke(cli, ["--ci", "--region", "us"])
        assert result.exit_code == 1
        assert "CI mode requires --api-key" in result.output

    def test_missing_install_dir(self, runner: CliRunner) -> None:
        """Then an explicit install directory."""
        result = runner.invoke(cli, ["--ci", "--region", "us", "--api-key", "phx_x"])
        assert result.exit_code == 1
        assert "CI mode requires --install-dir" in result.output

    def test_valid_invocation_runs(self, runner: CliRunner, tmp_path: Path, captured: list[WizardOptions]) -> None:
        """Valid flags reach the wizard as typed options."""
        result = runner.invoke(
            cli,
            ["--ci", "--region", "eu", "--api-key", "phx_x", "--install-dir", str(tmp_path), "--integration", "django"],
        )
        assert result.exit_code == 0, result.output
        options = captured[0]
        assert options.install_dir == tmp_path
        assert options.cloud_region == CloudRegion.EU
        assert options.integration == Integration.DJANGO
        assert options.default is False

    def test_options_from_environment(self, runner: CliRunner, tmp_path: Path, captured: list[WizardOptions]) -> None:
        """Every flag can come from a POSTHOG_WIZARD_ variable."""
        result = runner.invoke(
            cli,
            ["--ci", "--install-dir", str(tmp_path)],
            env={"POSTHOG_WIZARD_REGION": "eu", "POSTHOG_WIZARD_API_KEY": "phx_env"},
        )
        assert result.exit_code == 0, result.output
        assert captured[0].api_key == "phx_env"

    def test_default_flag_reaches_prompts(
        self, runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """``--default`` makes the prompt layer take default answers."""
        seen: list[WizardUI] = []
        monkeypatch.setattr(main, "run_wizard", lambda options, ui: seen.append(ui))
        base = ["--ci", "--region", "us", "--api-key", "k", "--install-dir", str(tmp_path)]

        assert runner.invoke(cli, ["--default", *base]).exit_code == 0
        assert runner.invoke(cli, base).exit_code == 0
        assert [ui.assume_defaults for ui in seen] == [True, False]

    def test_bad_region(self, runner: CliRunner) -> None:
        """Unknown regions are a usage error."""
        result = runner.invoke(cli, ["--region", "ap"])
        assert result.exit_code == 2


class TestInteractiveGuard:
    """Without ``--ci`` the wizard needs a terminal."""

    def test_non_tty(self, runner: CliRunner, captured: list[WizardOptions]) -> None:
        """CliRunner stdin is not a TTY, so the run is refused."""
        result = runner.invoke(cli, [])
        assert result.exit_code == 1
        assert "requires an interactive terminal" in result.output
        assert captured == []


class TestExitCodes:
    """Outcome of the flow maps to the exit code."""

    def test_cancel_exits_zero(self, runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Cancelling is not a failure."""

        def cancel(options: WizardOptions, ui: Any) -> None:
            raise UserCancelledError("no")

        monkeypatch.setattr(main, "run_wizard", cancel)
        result = runner.invoke(cli, ["--ci", "--region", "us", "--api-key", "k", "--install-dir", str(tmp_path)])
        assert result.exit_code == 0
        assert "Setup cancelled" in result.output

    def test_error_exits_one(self, runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """A wizard failure exits 1."""

        def fail(options: WizardOptions, ui: Any) -> None:
            raise WizardError("broken")

        monkeypatch.setattr(main, "run_wizard", fail)
        result = runner.invoke(cli, ["--ci", "--region", "us", "--api-key", "k", "--install-dir", str(tmp_path)])
        assert result.exit_code == 1


class TestMcpCommands:
    """Tests for ``mcp add`` and ``mcp remove``."""

    def test_add_in_ci_skips(self, runner: CliRunner) -> None:
        """CI mode never edits client configs but still prints tips."""
        result = runner.invoke(cli, ["--ci", "mcp", "add"])
        assert result.exit_code == 0, result.output
        assert "Skipping MCP installation (CI mode)" in result.output
        assert "posthog.com/docs/model-context-protocol" in result.output

    def test_remove_nothing(self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
        """With nothing installed the command says so and succeeds."""
        monkeypatch.setattr(mcp_cmd, "remove_mcp_server_from_clients_step", lambda ui, local=False: [])
        result = runner.invoke(cli, ["mcp", "remove"])
        assert result.exit_code == 0
        assert "No PostHog MCP servers found to remove." in result.output

    def test_remove_lists_clients(self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
        """Removed clients are listed with a restart hint."""
        monkeypatch.setattr(mcp_cmd, "remove_mcp_server_from_clients_step", lambda ui, local=False: ["Cursor"])
        result = runner.invoke(cli, ["mcp", "remove", "--local"])
        assert result.exit_code == 0
        assert "Cursor" in result.output
        assert "restart your MCP clients" in result.output


class TestMigrateCommand:
    """Tests for ``migrate``."""

    def test_ci_validation(self, runner: CliRunner) -> None:
        """CI rules apply to the migration as well."""
        result = runner.invoke(cli, ["--ci", "migrate"])
        assert result.exit_code == 1
        assert "CI mode requires --region" in result.output

    def test_ci_requires_install_dir(self, runner: CliRunner) -> None:
        """CI migration without any --install-dir is rejected."""
        result = runner.invoke(cli, ["--ci", "--region", "us", "--api-key", "k", "migrate"])
        assert result.exit_code == 1
        assert "CI mode requires --install-dir" in result.output

    def test_ci_install_dir_on_either_level(
        self, runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """--install-dir is accepted on the group or on ``migrate`` itself."""
        seen: list[Path] = []
        monkeypatch.setattr(
            migrate_cmd,
            "run_migration_wizard",
            lambda options, provider_id, ui: seen.append(options.install_dir),
        )
        ci = ["--ci", "--region", "us", "--api-key", "k"]

        assert runner.invoke(cli, [*ci, "--install-dir", str(tmp_path), "migrate"]).exit_code == 0
        assert runner.invoke(cli, [*ci, "migrate", "--install-dir", str(tmp_path)]).exit_code == 0
        assert seen == [tmp_path, tmp_path]

    def test_unknown_provider(self, runner: CliRunner) -> None:
        """Only registered providers are accepted."""
        result = runner.invoke(cli, ["migrate", "--from", "mixpanel"])
        assert result.exit_code == 2
