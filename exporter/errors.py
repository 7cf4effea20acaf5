"""
Exceptions raised by the sticker export pipeline.

Every per-item failure derives from StickerExportError so the orchestrator
can count it and move on to the next archive or sticker.
"""


class StickerExportError(Exception):
    """Base class for sticker export failures."""


class DiscoveryError(StickerExportError):
    """No sticker archive was found."""


class ArchiveError(StickerExportError):
    """An archive could not be decoded or parsed."""


class InvalidStickerError(StickerExportError):
    """A sticker is missing the id or url needed to download it."""


class FetchError(StickerExportError):
    """A download attempt failed.

    Attributes:
        url: The URL that was requested.
        retryable: True for transport errors, body read errors and non-4xx
            statuses; False for 4xx client errors.
        status: HTTP status code, if a response was received.
    """

    def __init__(self, url: str, message: str, retryable: bool,
                 status: int | None = None):
        self.url = url
        self.retryable = retryable
        self.status = status
        super().__init__(f"GET {url}: {message}")


class WriteError(StickerExportError):
    """Writing a downloaded sticker to disk failed."""
