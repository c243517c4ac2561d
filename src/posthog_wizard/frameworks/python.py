"""Python project helpers and the generic Python framework config.

The Django, Flask and FastAPI configs build on the helpers here; the
generic config catches Python projects that none of them claim.
"""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
from pathlib import Path

from posthog_wizard.constants import Integration
from posthog_wizard.files.walk import any_file_contains, find_files
from posthog_wizard.frameworks.base import (
    PYTHON_PACKAGE_INSTALLATION,
    EnvironmentConfig,
    FrameworkConfig,
    FrameworkDetection,
    FrameworkMetadata,
    PromptConfig,
    UIConfig,
    posthog_env_vars,
)
from posthog_wizard.packages.managers import detect_python_package_managers
from posthog_wizard.packages.manifest import read_text

logger = logging.getLogger(__name__)

PYTHON_IGNORE = ("node_modules", "dist", "build", "venv", ".venv", "env", ".env", "__pycache__", "migrations")
PYTHON_MANIFEST_GLOBS = ("**/requirements*.txt", "**/pyproject.toml", "**/setup.py", "**/Pipfile")
PYTHON_SOURCES = ("**/*.py",)

PYTHON_ENV_VARS = posthog_env_vars("POSTHOG_API_KEY", "POSTHOG_HOST")

PYTHON_PROJECT_TYPE_DETECTION = (
    "This is a Python project. Look for requirements.txt, pyproject.toml, setup.py, "
    "Pipfile, or manage.py to confirm."
)


def manifests_contain(install_dir: Path, needle: str) -> bool:
    """Return True when any Python manifest in the project mentions ``needle``."""
    return any_file_contains(install_dir, PYTHON_MANIFEST_GLOBS, (needle,), PYTHON_IGNORE)


def manifests_match(install_dir: Path, pattern: re.Pattern[str]) -> bool:
    """Return True when any Python manifest matches ``pattern``."""
    root = Path(install_dir)
    return any(
        pattern.search(read_text(root / rel))
        for rel in find_files(root, PYTHON_MANIFEST_GLOBS, PYTHON_IGNORE)
    )


def manifest_version(install_dir: Path, patterns: tuple[re.Pattern[str], ...]) -> str | None:
    """Return the first version captured by ``patterns`` across Python manifests."""
    root = Path(install_dir)
    for rel in find_files(root, PYTHON_MANIFEST_GLOBS, PYTHON_IGNORE):
        content = read_text(root / rel)
        for pattern in patterns:
            m = pattern.search(content)
            if m:
                return m.group(1)
    return None


def sources_contain(install_dir: Path, *needles: str) -> bool:
    """Return True when any Python source file contains one of ``needles``."""
    return any_file_contains(install_dir, PYTHON_SOURCES, needles, PYTHON_IGNORE)


def find_source_containing(install_dir: Path, *needles: str) -> str | None:
    """Return the first Python file containing one of ``needles``."""
    root = Path(install_dir)
    for rel in find_files(root, PYTHON_SOURCES, PYTHON_IGNORE):
        content = read_text(root / rel)
        if any(needle in content for needle in needles):
            return rel
    return None


# ---------------------------------------------------------------------------
# Generic Python
# ---------------------------------------------------------------------------


def get_python_version(install_dir: Path) -> str | None:
    """Return the version of the ``python3`` (or ``python``) on PATH."""
    executable = shutil.which("python3") or shutil.which("python")
    if executable is None:
        return None
    try:
        result = subprocess.run(
            [executable, "--version"],
            cwd=str(install_dir),
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError:
        return None
    output = (result.stdout or result.stderr).strip()
    return output.replace("Python ", "") or None


def get_python_version_bucket(version: str | None) -> str:
    """Bucket a Python version by minor, e.g. ``3.11.4`` to ``3.11``."""
    if not version:
        return "none"
    m = re.match(r"^(\d+\.\d+)", version)
    return m.group(1) if m else version


def detect_python_project(install_dir: Path) -> bool:
    """Any Python manifest in the project counts."""
    return bool(find_files(install_dir, PYTHON_MANIFEST_GLOBS, PYTHON_IGNORE))


PYTHON_CONFIG = FrameworkConfig(
    metadata=FrameworkMetadata(
        name="Python",
        integration=Integration.PYTHON,
        docs_url="https://posthog.com/docs/libraries/python",
        beta=True,
    ),
    detection=FrameworkDetection(
        package_name="posthog",
        package_display_name="Python",
        detect=detect_python_project,
        detect_package_manager=detect_python_package_managers,
        get_installed_version=get_python_version,
        get_version_bucket=get_python_version_bucket,
        uses_package_json=False,
        minimum_version="3.8.0",
    ),
    environment=EnvironmentConfig(get_env_vars=PYTHON_ENV_VARS),
    prompts=PromptConfig(
        project_type_detection=PYTHON_PROJECT_TYPE_DETECTION,
        package_installation=PYTHON_PACKAGE_INSTALLATION,
    ),
    ui=UIConfig(
        success_message="PostHog integration complete",
        estimated_duration_minutes=5,
        get_outro_changes=lambda context: [
            "Analyzed your Python project structure",
            "Installed the PostHog Python package",
            "Initialized a PostHog client for your application",
        ],
        get_outro_next_steps=lambda context: [
            "Run your application to see PostHog in action",
            "Visit your PostHog dashboard to see incoming events",
            "Call posthog.shutdown() before your process exits to flush events",
        ],
    ),
)
