"""Configuration management utilities for the sticker exporter.

Provides:
- Config: attribute-style base class with dict conversion
- ExporterConfig: run configuration loaded from environment variables
"""

import os as _os
from pathlib import Path
from typing import Dict, Any


# Where WeChat for macOS keeps its favorite-sticker archives, relative to the
# user's home directory.  The two wildcards are the app version directory and
# the per-account hash directory.
DEFAULT_ARCHIVE_GLOB = (
    "Library/Containers/com.tencent.xinWeChat/Data/Library/Application Support/"
    "com.tencent.xinWeChat/*/*/Stickers/fav.archive"
)

DEFAULT_DATA_DIR = Path("data")

DECODER_CHOICES = ("auto", "plutil", "plistlib")
LOG_FORMAT_CHOICES = ("text", "json")


def _env_number(name: str, default: str, convert=float):
    """Read a numeric env var, naming the variable if it does not parse."""
    raw = _os.getenv(name, default)
    try:
        return convert(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


class Config:
    """Base configuration class for organizing application settings."""

    def __init__(self):
        """Initialize configuration with default values."""
        pass

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary.

        Returns:
            Dictionary of all config attributes
        """
        return {k: v for k, v in self.__dict__.items() if not k.startswith("_")}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create config from dictionary.

        Starts from the defaults and overrides only the keys present.

        Args:
            data: Configuration dictionary

        Returns:
            Config instance with values from dictionary
        """
        config = cls()
        for key, value in data.items():
            setattr(config, key, value)
        return config


class ExporterConfig(Config):
    """Run configuration loaded from environment variables.

    All env vars have sensible defaults so the exporter works out of the box
    without any configuration.

    Environment variables:
        STICKER_DATA_DIR: Directory downloaded stickers are written to (default: data)
        STICKER_HOME: Home directory searched for archives (default: user home)
        STICKER_ARCHIVE_GLOB: Archive glob, relative to the home directory
        STICKER_DECODER: Archive decoder: "auto", "plutil" or "plistlib" (default: auto)
        STICKER_MAX_ATTEMPTS: Download attempts per sticker (default: 3)
        STICKER_RETRY_DELAY: Seconds between download attempts (default: 3)
        STICKER_CONNECT_TIMEOUT: Connect + TLS handshake timeout in seconds (default: 5)
        STICKER_HEADER_TIMEOUT: Response header timeout in seconds (default: 5)
        STICKER_TOTAL_TIMEOUT: Whole-request timeout in seconds (default: 30)
        STICKER_LOG_LEVEL: Logging level (default: INFO)
        STICKER_LOG_FORMAT: Logging format: "text" or "json" (default: text)
    """

    def __init__(self) -> None:
        super().__init__()
        self.data_dir = Path(_os.getenv("STICKER_DATA_DIR", str(DEFAULT_DATA_DIR)))
        raw_home = _os.getenv("STICKER_HOME", "")
        self.home_dir = Path(raw_home) if raw_home else Path.home()
        self.archive_glob = _os.getenv("STICKER_ARCHIVE_GLOB", DEFAULT_ARCHIVE_GLOB)
        self.decoder = _os.getenv("STICKER_DECODER", "auto").lower()
        self.max_attempts = _env_number("STICKER_MAX_ATTEMPTS", "3", int)
        self.retry_delay = _env_number("STICKER_RETRY_DELAY", "3")
        self.connect_timeout = _env_number("STICKER_CONNECT_TIMEOUT", "5")
        self.header_timeout = _env_number("STICKER_HEADER_TIMEOUT", "5")
        self.total_timeout = _env_number("STICKER_TOTAL_TIMEOUT", "30")
        self.log_level = _os.getenv("STICKER_LOG_LEVEL", "INFO").upper()
        self.log_format = _os.getenv("STICKER_LOG_FORMAT", "text").lower()

    @classmethod
    def from_env(cls) -> "ExporterConfig":
        """Create an ExporterConfig instance populated from environment variables.

        Raises:
            ValueError: if a numeric variable does not parse.
        """
        return cls()

    def validate(self) -> None:
        """Raise ValueError if any setting is out of range."""
        if self.decoder not in DECODER_CHOICES:
            raise ValueError(
                f"unknown decoder {self.decoder!r}, expected one of {', '.join(DECODER_CHOICES)}"
            )
        if self.log_format not in LOG_FORMAT_CHOICES:
            raise ValueError(
                f"unknown log format {self.log_format!r}, expected one of "
                f"{', '.join(LOG_FORMAT_CHOICES)}"
            )
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        for name in ("retry_delay", "connect_timeout", "header_timeout", "total_timeout"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} cannot be negative, got {getattr(self, name)}")
        if not self.archive_glob or Path(self.archive_glob).is_absolute():
            raise ValueError(
                f"archive_glob must be a pattern relative to the home directory, "
                f"got {self.archive_glob!r}"
            )
