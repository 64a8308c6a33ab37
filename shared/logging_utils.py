"""Log file setup and reading for the watcher runtime."""

from __future__ import annotations

import logging
import os
from collections import deque
from itertools import chain
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
MAX_LOG_BYTES = 1_000_000
BACKUP_COUNT = 5


def resolve_log_file(filename: str = "watcher.log") -> Path:
    override_dir = os.getenv("TMSCRAPER_LOG_DIR")
    if override_dir:
        return Path(override_dir) / filename

    return Path(__file__).resolve().parent.parent / "logs" / filename


def configure_logging(log_file: Path, level: int = logging.INFO) -> logging.Logger:
    """Send everything logged under "tmscraper" to the console and a rotating file.

    When the log directory cannot be created the watcher still runs, logging to
    the console only.
    """
    logger = logging.getLogger("tmscraper")
    if logger.handlers:
        return logger

    logger.setLevel(level)
    logger.propagate = False
    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=MAX_LOG_BYTES,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
    except OSError as exc:
        logger.warning("Cannot write log file %s (%s); logging to console only", log_file, exc)
        return logger

    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)
    return logger


def rotated_log_files(log_file: Path) -> list[Path]:
    """The log file and its rotated backups that exist, oldest first."""
    backups = [log_file.with_name(f"{log_file.name}.{n}") for n in range(BACKUP_COUNT, 0, -1)]
    return [path for path in backups + [log_file] if path.exists()]


def read_recent_lines(log_file: Path, lines: int) -> list[str]:
    """Last `lines` lines across the log file and its backups.

    A rotation can split a watch session over several files, so the backups
    are read too.
    """
    handles = [path.open("r", encoding="utf-8", errors="replace") for path in rotated_log_files(log_file)]
    try:
        return list(deque(chain.from_iterable(handles), maxlen=lines))
    finally:
        for handle in handles:
            handle.close()
