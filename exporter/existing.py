"""
Deduplication against stickers already in the data directory.

The data directory doubles as the index of what has been downloaded: every
file named ``<id>.<ext>`` marks ``<id>`` as done.  Nothing else is persisted,
so the index can always be rebuilt by rescanning.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

from exporter.models import Sticker
from utils.patterns import STICKER_FILENAME

logger = logging.getLogger(__name__)


def scan_existing_ids(data_dir: Path) -> frozenset[str]:
    """Return the ids of stickers already present in ``data_dir``.

    Raises:
        OSError: if the directory cannot be listed.
    """
    ids = set()
    with os.scandir(data_dir) as entries:
        for entry in entries:
            m = STICKER_FILENAME.fullmatch(entry.name)
            if m:
                ids.add(m.group(1))
    logger.debug("found %d existing sticker(s) in %s", len(ids), data_dir)
    return frozenset(ids)


def sort_by_mtime(stickers: Iterable[Sticker]) -> list[Sticker]:
    """Oldest first, so interrupted runs have fetched the earliest stickers."""
    return sorted(stickers, key=lambda s: s.sort_key)


def filter_new(stickers: Iterable[Sticker], existing_ids: frozenset[str]) -> list[Sticker]:
    """Drop stickers whose id is already downloaded, preserving order.

    An id listed more than once (e.g. in two accounts' archives) is kept
    only at its first, oldest occurrence.
    """
    new: list[Sticker] = []
    seen: set[str] = set()
    for s in stickers:
        if s.id in existing_ids:
            logger.info("sticker %s already downloaded", s.id, extra={"sticker_id": s.id})
            continue
        if s.id in seen:
            logger.info("sticker %s listed more than once, skipped", s.id,
                        extra={"sticker_id": s.id})
            continue
        seen.add(s.id)
        new.append(s)
    return new
