"""
WeChat Sticker Exporter Package.

Finds WeChat for macOS favorite-sticker archives, pairs each sticker id with
its download URL, and saves every sticker not yet downloaded into a flat
data directory as ``<id>.<ext>``, carrying over the original save time.

The public names are re-exported here so ``from exporter import X`` works
without knowing which module defines X.
"""

# ---- Models and errors ----
from exporter.models import Sticker
from exporter.errors import (
    ArchiveError,
    DiscoveryError,
    FetchError,
    InvalidStickerError,
    StickerExportError,
    WriteError,
)

# ---- Sources: discovery, decoding, node extraction ----
from exporter.sources import (
    PlistlibDecoder,
    PlutilDecoder,
    discover_archives,
    extract_nodes,
    get_decoder,
    reference_dir,
)

# ---- Correlation ----
from exporter.correlate import (
    InvalidID,
    Matched,
    OrphanedURL,
    correlate,
    stickers_from_nodes,
)

# ---- Timestamps and dedup ----
from exporter.metadata import resolve_mtime, with_resolved_mtimes
from exporter.existing import filter_new, scan_existing_ids, sort_by_mtime

# ---- Download and persistence ----
from exporter.fetch import Fetcher, detect_content_type, extension_for
from exporter.writer import apply_mtime, atomic_write_file, download_sticker

# ---- Core: orchestration and CLI ----
from exporter.core import (
    ExportSummary,
    ExtractionResult,
    export_stickers,
    extract_all,
    extract_archive,
    main,
    run,
)

__all__ = [
    # Models / errors
    "Sticker",
    "StickerExportError",
    "DiscoveryError",
    "ArchiveError",
    "InvalidStickerError",
    "FetchError",
    "WriteError",
    # Sources
    "PlutilDecoder",
    "PlistlibDecoder",
    "discover_archives",
    "extract_nodes",
    "get_decoder",
    "reference_dir",
    # Correlation
    "Matched",
    "OrphanedURL",
    "InvalidID",
    "correlate",
    "stickers_from_nodes",
    # Timestamps / dedup
    "resolve_mtime",
    "with_resolved_mtimes",
    "scan_existing_ids",
    "sort_by_mtime",
    "filter_new",
    # Download / persistence
    "Fetcher",
    "detect_content_type",
    "extension_for",
    "atomic_write_file",
    "apply_mtime",
    "download_sticker",
    # Core
    "ExtractionResult",
    "ExportSummary",
    "extract_archive",
    "extract_all",
    "export_stickers",
    "run",
    "main",
]
