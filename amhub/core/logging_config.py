"""
AMHUB Logging System
====================
Author: AMHUB Member
Date: 2026-10-18

One logger tree rooted at "AMHUB":
- Daily log file (logs/YYYY-MM-DD.log), everything from DEBUG up
- Colored console stream, INFO and up unless told otherwise
- log_exception() for failures the console survives (poll cycles, callbacks)

Component modules only ever call logging.getLogger("AMHUB.<Component>");
records propagate to the root "AMHUB" logger, which owns the handlers.
Nothing is written until an entry point calls setup_logging().
"""

import logging
import os
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Optional

PROJECT_ROOT = Path(__file__).parent.parent.parent
LOGS_DIR = Path(os.getenv("AMHUB_LOG_DIR", str(PROJECT_ROOT / "logs")))

ROOT_LOGGER_NAME = "AMHUB"

FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-20s | L%(lineno)-4d | %(message)s"
CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-18s | %(message)s"


def daily_log_path(log_dir: Path, day: Optional[datetime] = None) -> Path:
    return log_dir / f"{(day or datetime.now()).strftime('%Y-%m-%d')}.log"


class ColorFormatter(logging.Formatter):
    """Console formatter that tints the level name."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record):
        # Tint a copy; the file handler shares the original record
        tinted = logging.makeLogRecord(record.__dict__)
        tinted.levelname = f"{self.COLORS.get(record.levelname, '')}{record.levelname}{self.RESET}"
        return super().format(tinted)


# =============================================================================
# Handler setup
# =============================================================================

class _LogSetup:
    """Handlers attached to the AMHUB root logger; created at most once."""

    def __init__(self, log_dir: Path):
        log_dir.mkdir(parents=True, exist_ok=True)
        self.log_file = daily_log_path(log_dir)

        self.file_handler = logging.FileHandler(self.log_file, encoding='utf-8', mode='a')
        self.file_handler.setLevel(logging.DEBUG)
        self.file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

        self.console_handler = logging.StreamHandler(sys.stdout)
        self.console_handler.setLevel(logging.INFO)
        self.console_handler.setFormatter(ColorFormatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))

        root = logging.getLogger(ROOT_LOGGER_NAME)
        root.setLevel(logging.DEBUG)
        root.propagate = False
        root.handlers.clear()
        root.addHandler(self.file_handler)
        root.addHandler(self.console_handler)

        root.info(f"Session started, logging to {self.log_file}")

    def close(self) -> None:
        root = logging.getLogger(ROOT_LOGGER_NAME)
        for handler in (self.file_handler, self.console_handler):
            root.removeHandler(handler)
        root.propagate = True
        self.file_handler.close()


_setup: Optional[_LogSetup] = None


def setup_logging(level: str = "INFO", log_dir: Optional[Path] = None) -> logging.Logger:
    """
    Configure the AMHUB logger tree for an entry point (idempotent).

    Args:
        level: Console logging level name; the file always gets DEBUG
        log_dir: Directory for the daily file (default LOGS_DIR)

    Returns:
        The root "AMHUB" logger
    """
    global _setup
    if _setup is None:
        _setup = _LogSetup(Path(log_dir) if log_dir else LOGS_DIR)
    _setup.console_handler.setLevel(getattr(logging, level.upper(), logging.INFO))
    return logging.getLogger(ROOT_LOGGER_NAME)


def shutdown_logging() -> None:
    """Detach and close the handlers installed by setup_logging()."""
    global _setup
    if _setup is not None:
        _setup.close()
        _setup = None


def get_logger(name: str) -> logging.Logger:
    """Logger under the AMHUB tree, e.g. get_logger("AMHUB.Watch")."""
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def log_exception(logger: logging.Logger, error: BaseException, context: str = "") -> None:
    """
    Log a survived exception: one ERROR line for the console, the
    traceback at DEBUG so it only lands in the log file.
    """
    summary = f"{type(error).__name__}: {error}"
    logger.error(f"{context} ({summary})" if context else summary)

    tb = "".join(traceback.format_exception(type(error), error, error.__traceback__))
    logger.debug(f"Traceback for {type(error).__name__}{' during ' + context if context else ''}:\n{tb}")
