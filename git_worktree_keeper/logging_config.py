"""Logging configuration for git-worktree-keeper"""
import logging
import os
import sys
from pathlib import Path
from typing import Optional

# All package loggers live under this name so they never mix with GitPython's "git.*"
LOGGER_NAMESPACE = 'gwt'

# Library loggers that are only interesting when debugging
NOISY_LOGGERS = ('git', 'asyncio')

LOG_DIR = Path.home() / '.git-worktree-keeper'
LOG_FILE_NAME = 'git-worktree-keeper.log'


class ColoredFormatter(logging.Formatter):
    """Custom formatter that adds colors to log levels in terminal output."""

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m'       # Reset
    }

    def format(self, record):
        """Format log record with colors if stderr is a terminal."""
        if sys.stderr.isatty():
            levelname = record.levelname
            if levelname in self.COLORS:
                record.levelname = f"{self.COLORS[levelname]}{levelname}{self.COLORS['RESET']}"
        return super().format(record)


def debug_requested() -> bool:
    """True when GWT_DEBUG is set to a non-empty value."""
    return bool(os.environ.get('GWT_DEBUG'))


def _file_handler(log_dir: Path) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_dir / LOG_FILE_NAME, mode='w')  # One run per file
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    return handler


def setup_logging(
    verbose: bool = False, debug: bool = False, log_dir: Optional[Path] = None
) -> None:
    """
    Configure logging for a command invocation.

    Package loggers go to stderr: warnings by default, decisions (which
    branch a worktree attaches to, why a removal was blocked) with
    ``verbose``, and every git command with ``debug``. Debug mode also
    writes a log file, since git output can be long.

    Args:
        verbose: If True, show INFO level messages
        debug: If True (or GWT_DEBUG is set), show DEBUG level messages with
            timestamps and write them to ``<log_dir>/git-worktree-keeper.log``
        log_dir: Directory for the debug log file (default ~/.git-worktree-keeper)
    """
    debug = debug or debug_requested()

    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # GitPython logs every command it runs at debug level
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if debug else logging.WARNING)

    if debug:
        root_logger.addHandler(_file_handler(log_dir or LOG_DIR))

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    if debug:
        console_handler.setFormatter(ColoredFormatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%H:%M:%S'
        ))
    else:
        console_handler.setFormatter(ColoredFormatter(fmt='%(levelname)s: %(message)s'))
    root_logger.addHandler(console_handler)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a module, named under the ``gwt`` namespace.

    ``git_worktree_keeper.services.git.runner`` becomes ``gwt.git.runner``.

    Args:
        name: Name of the module (typically __name__)

    Returns:
        Logger instance
    """
    for prefix in ('git_worktree_keeper.', 'services.'):
        if name.startswith(prefix):
            name = name[len(prefix):]
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")
