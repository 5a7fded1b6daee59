"""Logging configuration for sourcerer.

Every module obtains its logger through :func:`get_logger` so that all
output lives under the ``sourcerer`` namespace and can be configured once
from the CLI.
"""

import logging
from pathlib import Path

from rich.logging import RichHandler

ROOT_LOGGER_NAME = "sourcerer"


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``sourcerer`` namespace.

    Args:
        name: Usually ``__name__`` of the calling module.

    Returns:
        The namespaced logger.
    """
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def setup_logging(
    level: int | str = logging.WARNING,
    log_file: str | Path | None = None,
) -> logging.Logger:
    """Configure console (and optionally file) logging.

    Calling this more than once replaces the previously installed handlers.

    Args:
        level: Log level for the ``sourcerer`` logger.
        log_file: Optional path for a plain-text log file.

    Returns:
        The configured root ``sourcerer`` logger.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(
        show_path=False, rich_tracebacks=True, markup=False, log_time_format="[%X]"
    )
    console_handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(Path(log_file), encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    logger.propagate = False
    logger.debug("Logging configured (level=%s, file=%s)", level, log_file)
    return logger

