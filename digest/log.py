"""Logging configuration for page-digest."""

import logging
import logging.handlers
import sys
from pathlib import Path

import colorlog

DATE_FORMAT = "%m-%d %H:%M:%S"

FILE_FORMAT = "%(asctime)s %(levelname)8s %(message)s (%(name)s@%(lineno)d)"

CONSOLE_FORMAT = (
    "%(asctime)s %(log_color)s%(levelname)8s%(reset)s %(message)s "
    "\033[90m(%(name)s@%(lineno)d)\033[0m"
)

LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}


def setup_logging(
    level: int = logging.INFO,
    log_file: Path | None = None,
    rotate: bool = True,
) -> None:
    """Configure the root logger.

    Args:
        level: Logging level to use
        log_file: Also write records here when given
        rotate: Rotate ``log_file`` instead of truncating it on each run
    """
    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(
        colorlog.ColoredFormatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT, log_colors=LOG_COLORS)
    )
    handlers: list[logging.Handler] = [console]

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler: logging.Handler
        if rotate:
            file_handler = logging.handlers.RotatingFileHandler(
                log_file, maxBytes=2 * 1024 * 1024, backupCount=3, encoding="utf-8"
            )
        else:
            file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    # httpx logs every request line at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def setup_production_logging(level: int = logging.INFO) -> None:
    """Console plus a rotating ``logs/digest.log``."""
    setup_logging(level=level, log_file=Path("logs") / "digest.log")


def setup_test_logging(level: int = logging.DEBUG) -> None:
    """Console plus ``logs/test/test.log``, rewritten on each run."""
    setup_logging(level=level, log_file=Path("logs") / "test" / "test.log", rotate=False)
