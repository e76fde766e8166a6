from __future__ import annotations

import logging

import pytest
from rich.logging import RichHandler

from codecrew.utils.logs import setup_logging


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    root.handlers = [h for h in root.handlers if not isinstance(h, RichHandler)]
    yield root
    root.handlers = saved_handlers
    root.setLevel(saved_level)


def test_setup_logging_installs_one_rich_handler(root_logger):
    setup_logging("DEBUG")
    setup_logging(logging.WARNING)

    rich_handlers = [h for h in root_logger.handlers if isinstance(h, RichHandler)]
    assert len(rich_handlers) == 1
    assert rich_handlers[0].rich_tracebacks is True
    assert root_logger.level == logging.WARNING


def test_setup_logging_quiets_noisy_libraries(root_logger):
    setup_logging(logging.DEBUG)

    assert logging.getLogger("werkzeug").level == logging.WARNING
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
