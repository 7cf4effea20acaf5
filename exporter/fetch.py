"""
Sticker download over HTTP.

Each attempt is classified: 4xx responses are final, everything else that
goes wrong (connection errors, timeouts, 5xx and other non-200 statuses,
broken bodies) may be retried.  Retrying is a plain bounded loop with a
fixed delay.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

import requests
from urllib3.exceptions import HTTPError as URLLibError

from exporter.errors import FetchError
from utils.http import RetryStrategy, TimeoutConfig

logger = logging.getLogger(__name__)

CHUNK_SIZE = 65536

# Magic-byte signatures checked against the start of a downloaded payload
_SIGNATURES: list[tuple[bytes, str]] = [
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"BM", "image/bmp"),
    (b"\x00\x00\x01\x00", "image/x-icon"),
]

EXTENSIONS = {
    "image/gif": ".gif",
    "image/jpeg": ".jpg",
    "image/png": ".png",
}
DEFAULT_EXTENSION = ".png"


def detect_content_type(content: bytes) -> str:
    """Return the MIME type sniffed from the first bytes of ``content``."""
    for magic, mime in _SIGNATURES:
        if content.startswith(magic):
            return mime
    if content[:4] == b"RIFF" and content[8:12] == b"WEBP":
        return "image/webp"
    return "application/octet-stream"


def extension_for(content: bytes, sticker_id: str = "") -> str:
    """Pick the file extension for a payload from its content alone."""
    mime = detect_content_type(content)
    ext = EXTENSIONS.get(mime)
    if ext is None:
        logger.warning("sticker %s: unrecognized mime type %s, falling back to %s extension",
                       sticker_id, mime, DEFAULT_EXTENSION, extra={"sticker_id": sticker_id})
        return DEFAULT_EXTENSION
    return ext


class Fetcher:
    """Downloads URLs with a shared session, timeouts and retry policy.

    Args:
        session: HTTP session, created once per run and injected here.
        retry: Attempt limit and fixed delay.
        timeouts: Connect/header/total bounds.
        sleep: Called with the delay between attempts (replaced in tests).
    """

    def __init__(self, session: requests.Session,
                 retry: RetryStrategy | None = None,
                 timeouts: TimeoutConfig | None = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.session = session
        self.retry = retry or RetryStrategy()
        self.timeouts = timeouts or TimeoutConfig()
        self.sleep = sleep

    def fetch_once(self, url: str) -> bytes:
        """Make one GET attempt and return the body.

        Raises:
            FetchError: with ``retryable`` set according to the failure.
        """
        deadline = time.monotonic() + self.timeouts.total
        try:
            resp = self.session.get(url, timeout=self.timeouts.requests_timeout(), stream=True)
        except requests.RequestException as e:
            raise FetchError(url, str(e), retryable=True) from e

        with resp:
            code = resp.status_code
            if code != 200:
                raise FetchError(url, f"HTTP {code}", retryable=not 400 <= code < 500,
                                 status=code)
            # read1 returns as soon as any bytes arrive, so a slow body cannot
            # outlive the deadline by more than one read timeout
            chunks = []
            while True:
                if time.monotonic() > deadline:
                    raise FetchError(
                        url, f"request exceeded total timeout of {self.timeouts.total}s",
                        retryable=True, status=code,
                    )
                try:
                    chunk = resp.raw.read1(CHUNK_SIZE, decode_content=True)
                except (URLLibError, OSError) as e:
                    raise FetchError(url, f"failed to read response body: {e}",
                                     retryable=True, status=code) from e
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)

    def fetch(self, url: str) -> bytes:
        """GET ``url``, retrying retryable failures up to the attempt limit.

        Raises:
            FetchError: the last failure, once retries are exhausted or the
                failure is terminal.
        """
        last_error: FetchError | None = None
        for attempt in range(1, self.retry.max_attempts + 1):
            if last_error is not None:
                self.sleep(self.retry.delay)
            try:
                return self.fetch_once(url)
            except FetchError as e:
                logger.warning("%s (attempt %d/%d)", e, attempt, self.retry.max_attempts,
                               extra={"url": url, "attempt": attempt})
                last_error = e
                if not self.retry.should_retry(attempt, e.retryable):
                    break
        raise last_error
