"""HTTP utilities for the sticker exporter.

Provides reusable pieces for:
- Retry policy (fixed delay, bounded attempts)
- Per-phase request timeouts
- Session management with connection pooling
"""

from typing import Optional, Tuple

import requests
from requests.adapters import HTTPAdapter


class RetryStrategy:
    """Defines retry behavior for sticker downloads.

    The delay between attempts is fixed; there is no backoff growth.
    """

    def __init__(self, max_attempts: int = 3, delay: float = 3.0):
        """Initialize retry strategy.

        Args:
            max_attempts: Total number of attempts, including the first (default: 3)
            delay: Seconds to wait between attempts (default: 3.0)
        """
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.max_attempts = max_attempts
        self.delay = delay

    def should_retry(self, attempt: int, retryable: bool) -> bool:
        """Return True if another attempt should follow failed attempt number ``attempt``.

        Args:
            attempt: 1-based number of the attempt that just failed
            retryable: Whether the failure was classified as retryable
        """
        return retryable and attempt < self.max_attempts


class TimeoutConfig:
    """Per-phase request timeouts in seconds.

    ``connect`` bounds TCP connection establishment and the TLS handshake,
    ``header`` bounds the wait for the response headers (and any single
    stall while reading the body), ``total`` bounds the whole request
    including the body.  ``total`` is checked each time body bytes arrive, so
    it can be overshot by at most one ``header`` interval.
    """

    def __init__(self, connect: float = 5.0, header: float = 5.0, total: float = 30.0):
        self.connect = connect
        self.header = header
        self.total = total

    def requests_timeout(self) -> Tuple[float, float]:
        """Return the (connect, read) tuple accepted by requests."""
        return (self.connect, self.header)


class SessionManager:
    """Manages a single HTTP session with connection pooling.

    Transport-level retries are disabled on the adapter; retrying is the
    caller's decision so failures can be classified first.
    """

    def __init__(self, pool_connections: int = 4, pool_maxsize: int = 4):
        """Initialize session manager.

        Args:
            pool_connections: Number of connection pools to cache
            pool_maxsize: Maximum number of connections per pool
        """
        self.pool_connections = pool_connections
        self.pool_maxsize = pool_maxsize
        self._session: Optional[requests.Session] = None

    @property
    def session(self) -> requests.Session:
        """Get or create the HTTP session.

        Returns:
            requests.Session object
        """
        if self._session is None:
            self._session = requests.Session()
            adapter = HTTPAdapter(
                max_retries=0,
                pool_connections=self.pool_connections,
                pool_maxsize=self.pool_maxsize,
            )
            self._session.mount("http://", adapter)
            self._session.mount("https://", adapter)

        return self._session

    def close(self) -> None:
        """Close the session and release resources."""
        if self._session:
            self._session.close()
            self._session = None

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
