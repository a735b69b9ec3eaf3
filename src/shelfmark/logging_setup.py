# ABOUTME: Logging configuration for the shelfmark CLI.
# ABOUTME: Rich console handler on stderr plus an optional always-DEBUG file log.

import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "shelfmark"


def setup_logging(
    log_level: str = "WARNING",
    log_file: Path | str | None = None,
    rich_console: bool = True,
) -> logging.Logger:
    """Configure the shelfmark logger.

    Args:
        log_level: Console level name (DEBUG, INFO, WARNING, ERROR).
        log_file: Optional path that receives every record at DEBUG.
        rich_console: Use Rich for console output instead of a plain stream.

    Returns:
        The configured shelfmark logger.
    """
    level = getattr(logging, log_level.upper(), logging.WARNING)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if log_file else level)
    logger.handlers.clear()

    console_handler: logging.Handler
    if rich_console:
        console_handler = RichHandler(
            console=Console(stderr=True),
            show_time=True,
            show_path=False,
            rich_tracebacks=True,
        )
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)-5s | [%(name)s] %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(file_handler)

    return logger
