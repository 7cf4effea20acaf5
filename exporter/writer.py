"""
Crash-safe persistence of downloaded stickers.

Files are written to a temporary sibling and renamed into place, so the
destination either holds its previous content or the complete new content,
never a partial write.  The temporary file lives in the destination
directory because ``os.replace`` is only atomic within one filesystem.
"""

from __future__ import annotations

import contextlib
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from exporter.errors import InvalidStickerError, WriteError
from exporter.fetch import Fetcher, extension_for
from exporter.models import Sticker
from utils.common import format_bytes

logger = logging.getLogger(__name__)

FILE_MODE = 0o644

EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


def atomic_write_file(dest: Path, data: bytes, mode: int = FILE_MODE) -> None:
    """Write ``data`` to ``dest`` via a temp file and an atomic rename.

    Raises:
        WriteError: on any failure; the temp file is removed first.
    """
    dest = Path(dest)
    try:
        tmp = tempfile.NamedTemporaryFile(dir=dest.parent, prefix=dest.name + ".",
                                          delete=False)
    except OSError as e:
        raise WriteError(f"failed to create tmp file in {str(dest.parent)!r}: {e}") from e

    tmp_path = Path(tmp.name)
    try:
        try:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        except OSError as e:
            raise WriteError(f"failed to write to tmp file {str(tmp_path)!r}: {e}") from e
        try:
            os.chmod(tmp_path, mode)
        except OSError as e:
            raise WriteError(
                f"failed to chmod tmp file {str(tmp_path)!r} to {mode:o}: {e}"
            ) from e
        try:
            tmp.close()
        except OSError as e:
            raise WriteError(f"failed to close tmp file {str(tmp_path)!r}: {e}") from e
        try:
            os.replace(tmp_path, dest)
        except OSError as e:
            raise WriteError(
                f"failed to rename tmp file {str(tmp_path)!r} to {str(dest)!r}: {e}"
            ) from e
    except BaseException:
        with contextlib.suppress(OSError):
            tmp.close()
        tmp_path.unlink(missing_ok=True)
        raise


def apply_mtime(path: Path, mtime: datetime | None, sticker_id: str = "") -> bool:
    """Set the access and modification times of ``path`` to ``mtime``.

    An unresolved mtime becomes the POSIX epoch.  Failures are logged, not
    raised.

    Returns:
        True if the times were set.
    """
    if mtime is None:
        logger.warning("sticker %s: cannot determine mtime, setting mtime to posix epoch 0",
                       sticker_id, extra={"sticker_id": sticker_id})
        mtime = EPOCH
    ts = mtime.timestamp()
    try:
        os.utime(path, times=(ts, ts))
    except OSError as e:
        logger.error("sticker %s: failed to set mtime to %s: %s", sticker_id,
                     mtime.isoformat(), e,
                     extra={"sticker_id": sticker_id, "path": str(path)})
        return False
    return True


def download_sticker(sticker: Sticker, data_dir: Path, fetcher: Fetcher) -> Sticker:
    """Fetch ``sticker`` and save it as ``data_dir/<id>.<ext>``.

    Returns:
        A copy of ``sticker`` with downloaded_path set.

    Raises:
        InvalidStickerError: if the id or url is empty.
        FetchError: if the download failed after retries.
        WriteError: if the file could not be written.
    """
    if not sticker.id:
        raise InvalidStickerError("cannot download sticker: id is empty")
    if not sticker.url:
        raise InvalidStickerError(f"cannot download sticker {sticker.id}: url is empty")

    content = fetcher.fetch(sticker.url)
    dest = Path(data_dir) / (sticker.id + extension_for(content, sticker.id))
    try:
        atomic_write_file(dest, content)
    except WriteError as e:
        raise WriteError(
            f"failed to write downloaded sticker {sticker.id} to {str(dest)!r}: {e}"
        ) from e
    logger.info("sticker %s: downloaded to %s (%s)", sticker.id, dest,
                format_bytes(len(content)),
                extra={"sticker_id": sticker.id, "path": str(dest)})
    apply_mtime(dest, sticker.mtime, sticker.id)
    return sticker.with_downloaded_path(dest)
