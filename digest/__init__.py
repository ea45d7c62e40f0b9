"""page-digest: article detection and AI summaries for web pages."""

from .config import Settings, settings
from .log import (
    get_logger,
    setup_logging,
    setup_production_logging,
    setup_test_logging,
)
from .types import Environment

__version__ = "0.1.0"

__all__ = [
    "Environment",
    "Settings",
    "settings",
    "get_logger",
    "setup_logging",
    "setup_production_logging",
    "setup_test_logging",
]
