"""Terminal interaction: Rich output and Click prompts.

Every prompt goes through :class:`WizardUI` so that CI mode and
``--default`` can answer with defaults, and so that Ctrl-C at a prompt turns into
:class:`UserCancelledError` rather than a traceback.
"""

from __future__ import annotations

import contextlib
import logging
from typing import Any, Iterator, Sequence, TypeVar

import click
from rich.console import Console
from rich.panel import Panel

from posthog_wizard.exceptions import UserCancelledError

logger = logging.getLogger(__name__)

T = TypeVar("T")

console = Console()


class WizardUI:
    """Prompts and status messages for one wizard run.

    Args:
        ci: Answer every prompt with its default instead of asking.
        output: Rich console to print to; defaults to the shared one.
        assume_defaults: Take the default of confirms and selects without
            asking. Free-text prompts still ask.
    """

    def __init__(
        self,
        ci: bool = False,
        output: Console | None = None,
        assume_defaults: bool = False,
    ) -> None:
        self.ci = ci
        self.assume_defaults = assume_defaults
        self.console = output if output is not None else console

    # -- Messages ---------------------------------------------------------

    def intro(self, title: str, message: str | None = None) -> None:
        body = f"[bold]{title}[/bold]"
        if message:
            body = f"{body}\n\n{message}"
        self.console.print(Panel(body, border_style="magenta"))

    def info(self, message: str) -> None:
        logger.info(message)
        self.console.print(f"[cyan]i[/cyan] {message}")

    def success(self, message: str) -> None:
        logger.info(message)
        self.console.print(f"[green]✔[/green] {message}")

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.console.print(f"[yellow]![/yellow] {message}")

    def error(self, message: str) -> None:
        logger.error(message)
        self.console.print(f"[red]✖[/red] {message}")

    def outro(self, message: str) -> None:
        self.console.print(Panel(message, border_style="green"))

    @contextlib.contextmanager
    def spinner(self, message: str) -> Iterator[None]:
        """Show a status spinner while the block runs."""
        logger.info(message)
        if self.ci or not self.console.is_terminal:
            self.console.print(f"[dim]{message}[/dim]")
            yield
            return
        with self.console.status(message):
            yield

    # -- Prompts ----------------------------------------------------------

    def confirm(self, message: str, default: bool = True) -> bool:
        if self.ci or self.assume_defaults:
            logger.debug("Answered %r with default %s", message, default)
            return default
        try:
            return click.confirm(message, default=default)
        except click.Abort as exc:
            raise UserCancelledError(message) from exc

    def text(self, message: str, default: str | None = None, hide_input: bool = False) -> str:
        if self.ci:
            if default is None:
                raise UserCancelledError(f"{message} (no value available in CI mode)")
            return default
        try:
            return click.prompt(message, default=default, hide_input=hide_input)
        except click.Abort as exc:
            raise UserCancelledError(message) from exc

    def select(self, message: str, options: Sequence[tuple[T, str]], default: int = 0) -> T:
        """Ask the user to pick one option.

        Args:
            message: Question to ask.
            options: ``(value, label)`` pairs, shown as a numbered list.
            default: Index of the default option.
        """
        if not options:
            raise ValueError("select() needs at least one option")
        if self.ci or self.assume_defaults:
            return options[default][0]
        self.console.print(f"[bold]{message}[/bold]")
        for i, (_value, label) in enumerate(options, start=1):
            self.console.print(f"  {i}. {label}")
        try:
            choice = click.prompt(
                "Choose",
                type=click.IntRange(1, len(options)),
                default=default + 1,
            )
        except click.Abort as exc:
            raise UserCancelledError(message) from exc
        return options[choice - 1][0]

    def multiselect(
        self,
        message: str,
        options: Sequence[tuple[T, str]],
        initial: Sequence[T] | None = None,
        required: bool = False,
    ) -> list[T]:
        """Ask the user to pick several options by number.

        An empty answer keeps ``initial`` (every option when not given).
        """
        values = [value for value, _label in options]
        selected = list(initial) if initial is not None else values
        if self.ci:
            return selected
        self.console.print(f"[bold]{message}[/bold]")
        for i, (value, label) in enumerate(options, start=1):
            mark = "x" if value in selected else " "
            self.console.print(f"  [{mark}] {i}. {label}")
        while True:
            try:
                raw = click.prompt(
                    "Numbers separated by commas (Enter keeps the checked ones)",
                    default="",
                    show_default=False,
                )
            except click.Abort as exc:
                raise UserCancelledError(message) from exc
            if not raw.strip():
                chosen = selected
            else:
                chosen = _parse_indices(raw, values)
                if chosen is None:
                    self.console.print("[red]Enter numbers from the list.[/red]")
                    continue
            if required and not chosen:
                self.console.print("[red]Select at least one option.[/red]")
                continue
            return chosen


def _parse_indices(raw: str, values: list[Any]) -> list[Any] | None:
    chosen: list[Any] = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        if not part.isdigit() or not 1 <= int(part) <= len(values):
            return None
        value = values[int(part) - 1]
        if value not in chosen:
            chosen.append(value)
    return chosen
