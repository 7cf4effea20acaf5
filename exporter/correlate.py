"""
Pairing of sticker ids with their URLs.

The archive stores each favorite sticker as two consecutive strings in one
flat array: the hex id, then the download URL.  Nothing else ties them
together, so the only correlation signal is position.

correlate() walks the node list and reports one tagged result per URL it
sees; it never logs and never raises.  stickers_from_nodes() turns those
results into Sticker candidates and logs the rejects.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Sequence, Union

from exporter.models import Sticker
from utils.patterns import STICKER_ID, STICKER_URL

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Matched:
    """URL preceded by a valid id."""

    id: str
    url: str
    index: int


@dataclass(frozen=True)
class OrphanedURL:
    """URL at the start of the array, with nothing before it."""

    url: str
    index: int


@dataclass(frozen=True)
class InvalidID:
    """URL whose predecessor is not a hex id (possibly another URL)."""

    candidate: str
    url: str
    index: int


CorrelationResult = Union[Matched, OrphanedURL, InvalidID]


def is_sticker_url(text: str) -> bool:
    return STICKER_URL.match(text) is not None


def is_sticker_id(text: str) -> bool:
    return STICKER_ID.fullmatch(text) is not None


def correlate(nodes: Sequence[str]) -> Iterator[CorrelationResult]:
    """Yield a result for every URL node, judged against its own predecessor."""
    previous: str | None = None
    for index, text in enumerate(nodes):
        if is_sticker_url(text):
            if previous is None:
                yield OrphanedURL(url=text, index=index)
            elif is_sticker_id(previous):
                yield Matched(id=previous, url=text, index=index)
            else:
                yield InvalidID(candidate=previous, url=text, index=index)
        previous = text


def stickers_from_nodes(nodes: Sequence[str], reference_dir: Path) -> list[Sticker]:
    """Build Sticker candidates from an archive's string nodes.

    Args:
        nodes: Archive strings in document order.
        reference_dir: Directory holding the encrypted copies; each sticker's
            reference_path is ``reference_dir / id``.
    """
    stickers: list[Sticker] = []
    for result in correlate(nodes):
        if isinstance(result, OrphanedURL):
            logger.warning("found url %r at the beginning without an id before it, skipped",
                           result.url, extra={"url": result.url})
        elif isinstance(result, InvalidID):
            logger.warning("the string %r before %r isn't a valid hex id, skipped",
                           result.candidate, result.url, extra={"url": result.url})
        else:
            stickers.append(Sticker(
                id=result.id,
                url=result.url,
                reference_path=Path(reference_dir) / result.id,
            ))
    return stickers
