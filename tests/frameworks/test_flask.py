"""Tests for Flask detection and project classification."""

from __future__ import annotations

from pathlib import Path

from posthog_wizard.frameworks.flask import (
    BLUEPRINT,
    RESTX,
    STANDARD,
    detect_flask,
    find_flask_app_file,
    get_flask_project_type,
    get_flask_version,
)
from tests.helpers import write_files


class TestFlask:
    """Tests for the Flask helpers."""

    def test_detect_from_source(self, tmp_path: Path) -> None:
        """``Flask(__name__)`` in a module is enough without a manifest."""
        write_files(tmp_path, {"app.py": "from flask import Flask\napp = Flask(__name__)\n"})
        assert detect_flask(tmp_path) is True
        assert find_flask_app_file(tmp_path) == "app.py"

    def test_restx_before_blueprints(self, tmp_path: Path) -> None:
        """Extensions take precedence over Blueprint usage."""
        write_files(tmp_path, {
            "requirements.txt": "flask\nflask-restx\n",
            "views.py": "bp = Blueprint('x', __name__)\n",
        })
        assert get_flask_project_type(tmp_path) == RESTX

    def test_blueprints(self, tmp_path: Path) -> None:
        """Blueprint usage without extensions is a Blueprint app."""
        write_files(tmp_path, {"views.py": "bp = Blueprint('x', __name__)\n"})
        assert get_flask_project_type(tmp_path) == BLUEPRINT

    def test_standard(self, tmp_path: Path) -> None:
        """Nothing special is standard."""
        write_files(tmp_path, {"requirements.txt": "flask==2.3.3\n"})
        assert get_flask_project_type(tmp_path) == STANDARD
        assert get_flask_version(tmp_path) == "2.3.3"

    def test_virtualenv_ignored(self, tmp_path: Path) -> None:
        """Sources inside a virtualenv are not scanned."""
        write_files(tmp_path, {".venv/lib/flask/app.py": "Flask(__name__)\n"})
        assert detect_flask(tmp_path) is False
