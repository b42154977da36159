"""Console and logging setup shared by the CLI and the progress display.

Log records and progress bars are written through the same rich
:class:`~rich.console.Console`, so a failure logged while a bar is live is
printed above the bar instead of tearing it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

_LOGGER_NAME = "repobot"

console = Console(stderr=True)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger under the ``repobot`` hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *,
    verbose: bool = False,
    log_file: Path | None = None,
    output: Console | None = None,
) -> logging.Logger:
    """Route repobot logs to the shared console, plus ``log_file`` when given.

    Calling this again replaces the handlers installed by the previous call.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    rich_handler = RichHandler(
        console=output or console,
        level=level,
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=verbose,
    )
    rich_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(rich_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["configure_logging", "console", "get_logger"]
