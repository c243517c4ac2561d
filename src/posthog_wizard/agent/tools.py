"""Tools the agent can call in this process.

Every file path is confined to the project directory by the path guard.
Env files are never read back to the model: ``check_env_keys`` reports
only whether keys exist, and ``read_file`` refuses ``.env*`` files.
Shell access is limited to package manager install commands.
"""

from __future__ import annotations

import json
import logging
import re
import shlex
from pathlib import Path
from typing import Any, Callable

from posthog_wizard.exceptions import PackageManagerError, PathTraversalError
from posthog_wizard.files.envfile import check_env_keys, set_env_values
from posthog_wizard.files.paths import relative_to_root, resolve_env_path
from posthog_wizard.files.walk import iter_project_files
from posthog_wizard.packages.managers import PackageManagerDetector, run_command

logger = logging.getLogger(__name__)

ALLOWED_COMMAND_PREFIXES: tuple[str, ...] = (
    "npm install",
    "npm ci",
    "pnpm install",
    "pnpm add",
    "bun install",
    "bun add",
    "yarn add",
    "yarn install",
    "pip install",
    "uv add",
    "uv pip install",
    "poetry add",
    "pdm add",
    "pipenv install",
    "hatch add",
    "rye add",
    "composer require",
    "bundle add",
    "bundle install",
)

_SHELL_OPERATORS_RE = re.compile(r"[;&|`$()<>]")

MAX_LISTED_FILES = 500
MAX_OUTPUT_CHARS = 4000


class ToolError(Exception):
    """A tool call the model made was invalid; reported back as an error result."""


def check_command(command: str) -> str | None:
    """Return None when ``command`` may run, otherwise the reason it may not."""
    command = command.strip()
    if _SHELL_OPERATORS_RE.search(command):
        return "Command not allowed. Chained commands are not permitted."
    if any(command == prefix or command.startswith(prefix + " ") for prefix in ALLOWED_COMMAND_PREFIXES):
        return None
    return "Command not allowed. Only package manager install commands are permitted."


def _is_env_file(path: Path) -> bool:
    return path.name.startswith(".env")


TOOL_SCHEMAS: list[dict[str, Any]] = [
    {
        "name": "list_files",
        "description": "List project files matching a glob pattern (e.g. '**/*.tsx'). Dependency and build directories are skipped.",
        "input_schema": {
            "type": "object",
            "properties": {"pattern": {"type": "string", "description": "Glob relative to the project root."}},
            "required": [],
        },
    },
    {
        "name": "read_file",
        "description": "Read a project file. You must read a file immediately before writing it. .env files cannot be read; use check_env_keys.",
        "input_schema": {
            "type": "object",
            "properties": {"path": {"type": "string"}},
            "required": ["path"],
        },
    },
    {
        "name": "write_file",
        "description": "Create or overwrite a project file with the given content.",
        "input_schema": {
            "type": "object",
            "properties": {"path": {"type": "string"}, "content": {"type": "string"}},
            "required": ["path", "content"],
        },
    },
    {
        "name": "check_env_keys",
        "description": "Report which keys exist in an env file (e.g. .env.local) without revealing their values.",
        "input_schema": {
            "type": "object",
            "properties": {
                "file_path": {"type": "string"},
                "keys": {"type": "array", "items": {"type": "string"}},
            },
            "required": ["file_path", "keys"],
        },
    },
    {
        "name": "set_env_values",
        "description": "Create or update keys in an env file. The file is added to .gitignore.",
        "input_schema": {
            "type": "object",
            "properties": {
                "file_path": {"type": "string"},
                "values": {"type": "object", "additionalProperties": {"type": "string"}},
            },
            "required": ["file_path", "values"],
        },
    },
    {
        "name": "detect_package_manager",
        "description": "Detect the project's package manager and the commands to install packages with it.",
        "input_schema": {"type": "object", "properties": {}, "required": []},
    },
    {
        "name": "run_install_command",
        "description": "Run a package manager install command (e.g. 'npm install posthog-js') in the project root.",
        "input_schema": {
            "type": "object",
            "properties": {"command": {"type": "string"}},
            "required": ["command"],
        },
    },
]


class WizardTools:
    """Dispatches tool calls for one agent run.

    Args:
        install_dir: Project root every path is confined to.
        detect_package_manager: Framework-specific package manager detector.
    """

    def __init__(self, install_dir: str | Path, detect_package_manager: PackageManagerDetector) -> None:
        self.install_dir = Path(install_dir)
        self._detect_package_manager = detect_package_manager
        self._read_paths: set[Path] = set()
        self.written_files: list[str] = []
        self._handlers: dict[str, Callable[[dict[str, Any]], str]] = {
            "list_files": self.list_files,
            "read_file": self.read_file,
            "write_file": self.write_file,
            "check_env_keys": self.check_env_keys,
            "set_env_values": self.set_env_values,
            "detect_package_manager": self.detect_package_manager,
            "run_install_command": self.run_install_command,
        }

    @property
    def schemas(self) -> list[dict[str, Any]]:
        return TOOL_SCHEMAS

    def call(self, name: str, arguments: dict[str, Any]) -> tuple[str, bool]:
        """Run a tool and return ``(result_text, is_error)``."""
        handler = self._handlers.get(name)
        if handler is None:
            return f"Unknown tool: {name}", True
        try:
            return handler(arguments or {}), False
        except (ToolError, PathTraversalError, PackageManagerError) as exc:
            logger.warning("Tool %s failed: %s", name, exc)
            return str(exc), True
        except (OSError, UnicodeDecodeError, KeyError, TypeError) as exc:
            logger.warning("Tool %s failed: %s", name, exc)
            return f"{type(exc).__name__}: {exc}", True

    # -- Files ------------------------------------------------------------

    def list_files(self, args: dict[str, Any]) -> str:
        pattern = args.get("pattern") or "**/*"
        files = []
        for rel in iter_project_files(self.install_dir, (pattern,)):
            if not _is_env_file(Path(rel)):
                files.append(rel)
            if len(files) >= MAX_LISTED_FILES:
                files.append(f"... (truncated at {MAX_LISTED_FILES} files)")
                break
        return "\n".join(files) if files else "No files found."

    def read_file(self, args: dict[str, Any]) -> str:
        path = resolve_env_path(self.install_dir, args["path"])
        if _is_env_file(path):
            raise ToolError("Env files cannot be read. Use check_env_keys instead.")
        content = path.read_text(encoding="utf-8")
        self._read_paths.add(path)
        return content

    def write_file(self, args: dict[str, Any]) -> str:
        path = resolve_env_path(self.install_dir, args["path"])
        if _is_env_file(path):
            raise ToolError("Env files cannot be written directly. Use set_env_values instead.")
        if path.exists() and path not in self._read_paths:
            raise ToolError(f"Read {args['path']} immediately before writing it.")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(args["content"], encoding="utf-8")
        self._read_paths.discard(path)
        rel = relative_to_root(self.install_dir, path)
        if rel not in self.written_files:
            self.written_files.append(rel)
        return f"Wrote {rel}"

    # -- Env files --------------------------------------------------------

    def check_env_keys(self, args: dict[str, Any]) -> str:
        status = check_env_keys(self.install_dir, args["file_path"], list(args["keys"]))
        return json.dumps(status)

    def set_env_values(self, args: dict[str, Any]) -> str:
        values = {str(k): str(v) for k, v in dict(args["values"]).items()}
        path = set_env_values(self.install_dir, args["file_path"], values)
        return f"Updated {len(values)} key(s) in {relative_to_root(self.install_dir, path)}"

    # -- Package managers -------------------------------------------------

    def detect_package_manager(self, args: dict[str, Any]) -> str:
        return json.dumps(self._detect_package_manager(self.install_dir).to_dict())

    def run_install_command(self, args: dict[str, Any]) -> str:
        command = str(args["command"])
        reason = check_command(command)
        if reason is not None:
            logger.info("Denying command: %s", command)
            raise ToolError(reason)
        logger.info("Allowing command: %s", command)
        output = run_command(shlex.split(command), self.install_dir)
        return output[-MAX_OUTPUT_CHARS:] or "Command completed."
