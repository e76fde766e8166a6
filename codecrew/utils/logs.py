"""Logging setup shared by the web app and the CLI commands."""

from __future__ import annotations

import logging

from rich.logging import RichHandler


def setup_logging(level: int | str = logging.INFO) -> None:
    """Configure the root logger with a single Rich console handler."""

    root = logging.getLogger()
    root.setLevel(level)

    handler = next((h for h in root.handlers if isinstance(h, RichHandler)), None)
    if handler is None:
        handler = RichHandler(show_path=False, rich_tracebacks=True)
        root.addHandler(handler)
    handler.setFormatter(logging.Formatter("%(name)s | %(message)s", datefmt="[%X]"))

    # Reduce verbosity of some libraries
    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
