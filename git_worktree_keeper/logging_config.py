"""Logging configuration for git-worktree-keeper"""
import logging
import sys
from pathlib import Path
from typing import Optional

from git_worktree_keeper.constants import APP_DIR_NAME

PACKAGE_PREFIX = 'git_worktree_keeper.'
LOG_FILE_NAME = 'git-worktree-keeper.log'

DETAILED_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
SHORT_FORMAT = '[%(name)s] %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Third-party loggers that only matter when debugging
NOISY_LOGGERS = ('git', 'asyncio')


class ColoredFormatter(logging.Formatter):
    """Formatter that colours the level name when writing to a terminal."""

    LEVEL_COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, fmt: str, datefmt: Optional[str] = None, use_color: Optional[bool] = None):
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = sys.stderr.isatty() if use_color is None else use_color

    def format(self, record):
        color = self.LEVEL_COLORS.get(record.levelname)
        if self.use_color and color:
            # Colour a copy so other handlers see the plain level name
            record = logging.makeLogRecord(record.__dict__)
            record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def get_log_file() -> Path:
    """Return the path of the debug log file."""
    return Path.home() / APP_DIR_NAME / LOG_FILE_NAME


def _level_for(verbose: bool, debug: bool) -> int:
    if debug:
        return logging.DEBUG
    if verbose:
        return logging.INFO
    return logging.WARNING


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """
    Configure logging for the command-line application.

    Library code only creates loggers; handlers are installed here. Calling
    this again replaces the handlers from the previous call.

    Args:
        verbose: If True, show INFO level messages
        debug: If True, show DEBUG level messages with timestamps, and also
            write them to the log file returned by get_log_file()
    """
    level = _level_for(verbose, debug)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    if debug:
        console_handler.setFormatter(ColoredFormatter(DETAILED_FORMAT, DATE_FORMAT))
    else:
        console_handler.setFormatter(ColoredFormatter(SHORT_FORMAT))
    root_logger.addHandler(console_handler)

    if debug:
        log_file = get_log_file()
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode='w')  # Overwrite each run
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(DETAILED_FORMAT, DATE_FORMAT))
        root_logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if debug else logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a module, named without the package prefix.

    ``git_worktree_keeper.services.git.worktrees`` becomes
    ``services.git.worktrees``.
    """
    if name.startswith(PACKAGE_PREFIX):
        name = name[len(PACKAGE_PREFIX):]
    return logging.getLogger(name)
