"""Logging helpers for PartScout."""

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging.

    Args:
        level: Log level name.
    """

    if logging.getLogger().handlers:
        return

    logging.basicConfig(level=level, format=LOG_FORMAT)


def add_file_handler(log_path: Path, level: str = "INFO") -> None:
    """Attach a file handler that mirrors the root log.

    Args:
        log_path: Path to the log file.
        level: Log level name.
    """

    root = logging.getLogger()
    for handler in root.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == str(
            log_path.resolve()
        ):
            return

    log_path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_path)
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(file_handler)
