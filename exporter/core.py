"""
Core export orchestration for the sticker exporter.

Contains the pipeline that turns archives into downloaded files:
extract_archive() / extract_all() for the archive side, export_stickers()
for the download side, run() tying them together, and the CLI entry point
(main).

Everything runs sequentially on one thread.  Failures of a single archive
or sticker are logged and counted; they never stop the run.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Sequence

import requests

from exporter.correlate import stickers_from_nodes
from exporter.errors import ArchiveError, DiscoveryError, StickerExportError
from exporter.existing import filter_new, scan_existing_ids, sort_by_mtime
from exporter.fetch import Fetcher
from exporter.metadata import with_resolved_mtimes
from exporter.models import Sticker
from exporter.sources import discover_archives, extract_nodes, get_decoder, reference_dir
from exporter.writer import download_sticker
from utils.common import elapsed
from utils.config import ExporterConfig, LOG_FORMAT_CHOICES
from utils.http import RetryStrategy, SessionManager, TimeoutConfig
from utils.logging import setup_logging

logger = logging.getLogger(__name__)


# ---- Results ----

@dataclass
class ExtractionResult:
    """Stickers gathered from a set of archives."""

    stickers: list[Sticker] = field(default_factory=list)
    archives_total: int = 0
    archives_failed: int = 0


@dataclass
class ExportSummary:
    """Outcome of a whole run."""

    downloaded: list[Sticker] = field(default_factory=list)
    skipped: int = 0
    failed: int = 0
    archives_total: int = 0
    archives_failed: int = 0
    discovery_failed: bool = False

    @property
    def errored(self) -> bool:
        """True if anything failed, even when some stickers were downloaded."""
        return self.discovery_failed or self.archives_failed > 0 or self.failed > 0

    @property
    def exit_code(self) -> int:
        return 1 if self.errored else 0


# ---- Archive side ----

def extract_archive(archive_path: Path, decoder) -> list[Sticker]:
    """Decode one archive and return its stickers with resolved mtimes.

    Raises:
        ArchiveError: if the archive cannot be decoded or parsed.
    """
    xml_content = decoder.decode(archive_path)
    nodes = extract_nodes(xml_content, str(archive_path))
    candidates = stickers_from_nodes(nodes, reference_dir(archive_path))
    logger.debug("%s: %d string node(s), %d sticker(s)", archive_path, len(nodes),
                 len(candidates), extra={"archive": str(archive_path)})
    return with_resolved_mtimes(candidates)


def extract_all(archives: Sequence[Path], decoder) -> ExtractionResult:
    """Extract stickers from every archive, continuing past failures."""
    result = ExtractionResult(archives_total=len(archives))
    for archive_path in archives:
        try:
            stickers = extract_archive(archive_path, decoder)
        except ArchiveError as e:
            logger.error("failed to extract stickers from %r: %s", str(archive_path), e,
                         extra={"archive": str(archive_path)})
            result.archives_failed += 1
            continue
        result.stickers.extend(stickers)
    if result.archives_failed:
        logger.error("failed to extract stickers from %d/%d fav.archive file(s)",
                     result.archives_failed, result.archives_total)
    return result


# ---- Download side ----

def export_stickers(stickers: Iterable[Sticker], data_dir: Path, fetcher: Fetcher,
                    existing_ids: frozenset[str]) -> ExportSummary:
    """Download every sticker not yet in ``data_dir``, oldest first."""
    ordered = sort_by_mtime(stickers)
    pending = filter_new(ordered, existing_ids)
    summary = ExportSummary(skipped=len(ordered) - len(pending))

    for sticker in pending:
        try:
            summary.downloaded.append(download_sticker(sticker, data_dir, fetcher))
        except StickerExportError as e:
            logger.error("failed to download sticker %s to %r: %s", sticker.id,
                         str(data_dir), e, extra={"sticker_id": sticker.id})
            summary.failed += 1

    if summary.failed:
        logger.error("failed to download %d sticker(s)", summary.failed)
    return summary


# ---- Run ----

def build_fetcher(config: ExporterConfig, session: requests.Session) -> Fetcher:
    return Fetcher(
        session,
        retry=RetryStrategy(max_attempts=config.max_attempts, delay=config.retry_delay),
        timeouts=TimeoutConfig(
            connect=config.connect_timeout,
            header=config.header_timeout,
            total=config.total_timeout,
        ),
    )


def run(config: ExporterConfig, fetcher: Fetcher, decoder=None,
        archives: Sequence[Path] | None = None) -> ExportSummary:
    """Run the whole pipeline.

    Args:
        config: Run configuration.
        fetcher: Fetcher wrapping the run's HTTP session.
        decoder: Archive decoder (default: chosen by ``config.decoder``).
        archives: Archives to read (default: discovered under ``config.home_dir``).

    Raises:
        OSError: if the data directory cannot be created or listed.
    """
    data_dir = Path(config.data_dir)
    data_dir.mkdir(parents=True, exist_ok=True)
    existing_ids = scan_existing_ids(data_dir)

    discovery_failed = False
    if archives is None:
        try:
            archives = discover_archives(config.home_dir, config.archive_glob)
        except DiscoveryError as e:
            logger.error("%s", e)
            discovery_failed = True
            archives = []

    if decoder is None:
        decoder = get_decoder(config.decoder)
    extraction = extract_all(archives, decoder)

    summary = export_stickers(extraction.stickers, data_dir, fetcher, existing_ids)
    summary.archives_total = extraction.archives_total
    summary.archives_failed = extraction.archives_failed
    summary.discovery_failed = discovery_failed
    return summary


def print_summary(summary: ExportSummary, out=None) -> None:
    """Print the newly downloaded files to standard output."""
    out = out if out is not None else sys.stdout
    if summary.downloaded:
        print(f"downloaded {len(summary.downloaded)} new stickers:", file=out)
        for s in summary.downloaded:
            print(s.downloaded_path, file=out)
    else:
        print("no new stickers downloaded", file=out)


# ---- Main ----

def main(argv: Sequence[str] | None = None) -> int:
    """Parse CLI arguments, run the export, and return the process exit code."""
    parser = argparse.ArgumentParser(
        description="Download WeChat favorite stickers into a local directory.",
    )
    parser.add_argument(
        "--data-dir", type=Path, default=None,
        help="Directory to save stickers into (default: data or STICKER_DATA_DIR env var)",
    )
    parser.add_argument(
        "--log-format", choices=LOG_FORMAT_CHOICES, default=None,
        help="Log output format on stderr (default: text or STICKER_LOG_FORMAT env var)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )
    args = parser.parse_args(argv)

    try:
        config = ExporterConfig.from_env()
    except ValueError as e:
        setup_logging(log_format=args.log_format or "text")
        logger.critical("invalid configuration: %s", e)
        return 1
    if args.data_dir is not None:
        config.data_dir = args.data_dir
    if args.log_format is not None:
        config.log_format = args.log_format
    if args.verbose:
        config.log_level = "DEBUG"

    setup_logging(config.log_level, config.log_format)
    try:
        config.validate()
    except ValueError as e:
        logger.critical("invalid configuration: %s", e)
        return 1
    logger.debug("configuration: %s", config.to_dict())

    start = time.time()
    with SessionManager() as sm:
        try:
            summary = run(config, build_fetcher(config, sm.session))
        except OSError as e:
            logger.critical("failed to prepare data dir %r: %s", str(config.data_dir), e)
            return 1

    print_summary(summary)
    logger.debug("finished in %s: %d downloaded, %d skipped, %d failed",
                 elapsed(start), len(summary.downloaded), summary.skipped, summary.failed)
    return summary.exit_code
