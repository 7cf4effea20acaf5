"""
Sticker record shared by every pipeline stage.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from pathlib import Path

# Sort key used for stickers whose mtime could not be resolved; they sort
# before every real timestamp.
ZERO_TIME = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class Sticker:
    """One favorite sticker found in an archive.

    Stages never mutate a Sticker; they return an updated copy.
    """

    id: str
    url: str
    # Expected path of the encrypted copy WeChat keeps on disk.  Only its
    # mtime is read.
    reference_path: Path
    mtime: datetime | None = None
    # Set only after a successful download.
    downloaded_path: Path | None = None

    def with_mtime(self, mtime: datetime | None) -> "Sticker":
        return replace(self, mtime=mtime)

    def with_downloaded_path(self, path: Path) -> "Sticker":
        return replace(self, downloaded_path=path)

    @property
    def sort_key(self) -> datetime:
        """Chronological sort key; unresolved mtimes come first."""
        return self.mtime if self.mtime is not None else ZERO_TIME
