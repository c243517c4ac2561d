"""Logging configuration for the wizard process.

Every run appends to a log file so failures can be diagnosed after the
terminal output is gone. ``--debug`` additionally mirrors log records to
the console through Rich.
"""

from __future__ import annotations

import logging

from rich.logging import RichHandler

from posthog_wizard.constants import LOG_FILE_PATH

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(debug: bool = False, log_file: str = LOG_FILE_PATH) -> None:
    """Attach the file handler and, in debug mode, a console handler.

    Calling this more than once replaces the handlers installed earlier.

    Args:
        debug: Mirror DEBUG records to the terminal.
        log_file: Path of the append-only log file.
    """
    root = logging.getLogger("posthog_wizard")
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    root.setLevel(logging.DEBUG)

    try:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
    except OSError:
        file_handler = None
    if file_handler is not None:
        file_handler.setLevel(logging.DEBUG if debug else logging.INFO)
        file_handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        root.addHandler(file_handler)

    if debug:
        console_handler = RichHandler(show_path=False, markup=False)
        console_handler.setLevel(logging.DEBUG)
        root.addHandler(console_handler)
