"""Logging configuration for the Instagram migrator."""

import logging
import sys
from pathlib import Path
from typing import Optional


class CleanFormatter(logging.Formatter):
    """Formatter with timestamps and optional colored level names.

    Console output colors the level name; file output stays plain and
    always includes the logger name.
    """

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True, verbose: bool = False):
        """Initialize formatter.

        Args:
            use_colors: Whether to wrap level names in ANSI color codes
            verbose: Whether to include the logger name
        """
        self.use_colors = use_colors
        self.verbose = verbose

        if verbose:
            fmt = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
        else:
            fmt = '%(asctime)s [%(levelname)s] %(message)s'

        super().__init__(fmt=fmt, datefmt='%Y-%m-%d %H:%M:%S')

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)

        color = self.COLORS.get(record.levelname)
        if self.use_colors and color:
            formatted = formatted.replace(
                f'[{record.levelname}]',
                f'[{color}{record.levelname}{self.RESET}]',
                1
            )

        return formatted


def setup_logging(
    verbose: bool = False,
    log_file: Optional[Path] = None,
    console: bool = True,
    level: Optional[int] = None
) -> None:
    """Configure the root logger for a migration run.

    Args:
        verbose: If True, log DEBUG to the console and show logger names
        log_file: Optional path to a log file (always DEBUG)
        console: Whether to log to stdout
        level: Explicit console level, overrides ``verbose``

    Example:
        setup_logging(verbose=True, log_file=Path("ig-migrate.log"))
        logger = logging.getLogger(__name__)
        logger.info("Starting migration...")
    """
    if level is None:
        level = logging.DEBUG if verbose else logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(
            CleanFormatter(use_colors=sys.stdout.isatty(), verbose=verbose)
        )
        root_logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(CleanFormatter(use_colors=False, verbose=True))
        root_logger.addHandler(file_handler)

    # Pillow logs every plugin import at DEBUG
    logging.getLogger('PIL').setLevel(logging.WARNING)
    logging.getLogger('asyncio').setLevel(logging.WARNING)


def log_exception(logger: logging.Logger, message: str, exc: Exception) -> None:
    """Log an exception with traceback.

    Args:
        logger: Logger instance
        message: Context message
        exc: Exception to log
    """
    logger.error(f"{message}: {exc}", exc_info=True)
