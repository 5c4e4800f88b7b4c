"""Logging setup for the web search gateway.

Every module logs through ``get_logger``, which hands out children of the
``search_gateway`` logger. ``setup_logging`` is only called by entry points
(the CLI, an embedding application); as a library the gateway leaves
handler configuration to its host.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from .config import LoggingConfig

LOGGER_NAMESPACE = "search_gateway"

console = Console(stderr=True)


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Replace the root handlers with a rich console and an optional log file.

    Args:
        config: LoggingConfig instance. If None, uses defaults.
    """
    config = config or LoggingConfig()
    level = getattr(logging, config.level)

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.setLevel(level)
    logging.getLogger(LOGGER_NAMESPACE).setLevel(level)

    root_logger.addHandler(
        RichHandler(
            console=console,
            show_time=True,
            show_path=config.show_path,
            markup=False,
            rich_tracebacks=True,
        )
    )

    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
            delay=True,
        )
        file_handler.setFormatter(logging.Formatter(config.format))
        root_logger.addHandler(file_handler)

    get_logger("setup").debug(
        "Logging configured: level=%s, file=%s", config.level, config.log_file or "-"
    )


def get_logger(name: str) -> logging.Logger:
    """Return the ``search_gateway.<name>`` logger."""
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


def log_exception(logger: logging.Logger, exc: Exception, context: str = "") -> None:
    """Log ``exc`` with its traceback, prefixed by ``context`` when given."""
    if context:
        logger.exception("%s: %s", context, exc)
    else:
        logger.exception("Exception occurred: %s", exc)
