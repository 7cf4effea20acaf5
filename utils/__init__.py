"""Shared utilities for the sticker exporter."""

# Common utilities
from utils.common import format_bytes, elapsed

# Pattern definitions
from utils.patterns import STICKER_ID, STICKER_URL, STICKER_FILENAME

# HTTP utilities
from utils.http import RetryStrategy, SessionManager, TimeoutConfig

# Configuration
from utils.config import (
    Config,
    ExporterConfig,
    DEFAULT_ARCHIVE_GLOB,
    DEFAULT_DATA_DIR,
)

# Logging
from utils.logging import JsonFormatter, setup_logging

__all__ = [
    # Common
    "format_bytes",
    "elapsed",
    # Patterns
    "STICKER_ID",
    "STICKER_URL",
    "STICKER_FILENAME",
    # HTTP
    "RetryStrategy",
    "SessionManager",
    "TimeoutConfig",
    # Config
    "Config",
    "ExporterConfig",
    "DEFAULT_ARCHIVE_GLOB",
    "DEFAULT_DATA_DIR",
    # Logging
    "JsonFormatter",
    "setup_logging",
]
