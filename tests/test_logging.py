from __future__ import annotations

import io
import logging

from rich.console import Console
from rich.logging import RichHandler

from repobot import logging as repobot_logging
from repobot.logging import configure_logging, get_logger


def _reset() -> None:
    logger = logging.getLogger("repobot")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def test_console_handler_shares_progress_console() -> None:
    try:
        logger = configure_logging()
        handlers = [h for h in logger.handlers if isinstance(h, RichHandler)]
        assert len(handlers) == 1
        assert handlers[0].console is repobot_logging.console
        assert logger.level == logging.INFO
        assert logger.propagate is False
    finally:
        _reset()


def test_reconfiguring_replaces_handlers(tmp_path) -> None:
    try:
        configure_logging()
        logger = configure_logging(verbose=True, log_file=tmp_path / "run.log")
        assert len(logger.handlers) == 2
        assert logger.level == logging.DEBUG
    finally:
        _reset()


def test_records_reach_console_and_log_file(tmp_path) -> None:
    buffer = io.StringIO()
    output = Console(file=buffer, width=120, force_terminal=False)
    log_file = tmp_path / "run.log"
    try:
        configure_logging(log_file=log_file, output=output)
        get_logger("orchestrator").info("pushed [bold]paper-input[/bold]")
    finally:
        _reset()

    assert "pushed [bold]paper-input[/bold]" in buffer.getvalue()
    assert "repobot.orchestrator: pushed" in log_file.read_text(encoding="utf-8")
