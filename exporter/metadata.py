"""
Sticker timestamp enrichment.

WeChat keeps an encrypted copy of every favorite sticker next to the
archive.  We cannot use its content, but its mtime is the best record of
when the sticker was saved, so downloaded files inherit it.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from exporter.models import Sticker

logger = logging.getLogger(__name__)


def resolve_mtime(reference_path: Path) -> datetime | None:
    """Return the modification time of ``reference_path``, or None if it can't be read."""
    try:
        st = os.stat(reference_path)
    except OSError as e:
        logger.warning("failed to stat %r, cannot determine mtime: %s",
                       str(reference_path), e, extra={"path": str(reference_path)})
        return None
    return datetime.fromtimestamp(st.st_mtime, tz=timezone.utc)


def with_resolved_mtimes(stickers: Iterable[Sticker]) -> list[Sticker]:
    """Return copies of ``stickers`` with mtime read from each reference_path."""
    return [s.with_mtime(resolve_mtime(s.reference_path)) for s in stickers]
