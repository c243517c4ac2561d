"""Shared helpers for building fake projects and driving the wizard UI."""

from __future__ import annotations

import io
import json
from pathlib import Path
from typing import Any, Sequence

from rich.console import Console

from posthog_wizard.analytics import Analytics
from posthog_wizard.ui import WizardUI


def write_package_json(root: Path, **sections: Any) -> Path:
    """Write a package.json with the given top-level sections."""
    data: dict[str, Any] = {"name": "app", "version": "1.0.0", **sections}
    path = root / "package.json"
    path.write_text(json.dumps(data, indent=2))
    return path


def write_files(root: Path, files: dict[str, str]) -> None:
    """Write ``{relative_path: content}`` under ``root``."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)


class ScriptedUI(WizardUI):
    """A WizardUI that answers prompts from a script and records output.

    Answers are consumed in order by ``confirm``, ``text``, ``select`` and
    ``multiselect``. When the script runs out, prompts fall back to their
    defaults, as in CI mode.
    """

    def __init__(self, answers: Sequence[Any] = (), ci: bool = False) -> None:
        self.buffer = io.StringIO()
        super().__init__(ci=ci, output=Console(file=self.buffer, width=200, force_terminal=False))
        self.answers = list(answers)
        self.questions: list[str] = []

    @property
    def output(self) -> str:
        return self.buffer.getvalue()

    def _next(self, message: str, default: Any) -> Any:
        self.questions.append(message)
        if self.answers:
            return self.answers.pop(0)
        return default

    def confirm(self, message: str, default: bool = True) -> bool:
        return self._next(message, default)

    def text(self, message: str, default: str | None = None, hide_input: bool = False) -> str:
        return self._next(message, default)

    def select(self, message: str, options: Sequence[tuple[Any, str]], default: int = 0) -> Any:
        return self._next(message, options[default][0])

    def multiselect(
        self,
        message: str,
        options: Sequence[tuple[Any, str]],
        initial: Sequence[Any] | None = None,
        required: bool = False,
    ) -> list[Any]:
        fallback = list(initial) if initial is not None else [value for value, _label in options]
        return self._next(message, fallback)


class RecordingAnalytics(Analytics):
    """Analytics that keeps events in memory instead of sending them."""

    def __init__(self) -> None:
        super().__init__()
        self.events: list[tuple[str, dict[str, Any]]] = []

    def _send(self, event: str, properties: dict[str, Any]) -> None:
        self.events.append((event, properties))

    def actions(self) -> list[str]:
        """The ``action`` of every interaction event, in order."""
        return [props["action"] for _event, props in self.events if "action" in props]

    def finished_status(self) -> str | None:
        for event, props in self.events:
            if event == "setup wizard finished":
                return props["status"]
        return None
