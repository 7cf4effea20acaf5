"""
Archive discovery and decoding for the sticker exporter.

Locates WeChat ``fav.archive`` files under the user's home directory, converts
the binary keyed-archiver plist into its XML form, and pulls out the flat
list of ``<string>`` values that carry sticker ids and URLs.

Two decoders are available:
  - PlutilDecoder: shells out to macOS ``plutil -convert xml1``
  - PlistlibDecoder: pure Python, works on any platform
"""

import logging
import plistlib
import shutil
import subprocess
from pathlib import Path
from xml.parsers.expat import ExpatError

from bs4 import BeautifulSoup

from exporter.errors import ArchiveError, DiscoveryError
from utils.config import DEFAULT_ARCHIVE_GLOB

logger = logging.getLogger(__name__)

# BeautifulSoup's lxml-backed XML parser
PARSER = "xml"

# Directory, next to fav.archive, holding the encrypted sticker copies
PERSISTENCE_DIRNAME = "Persistence"


# ---- Discovery ----

def discover_archives(home: Path, pattern: str = DEFAULT_ARCHIVE_GLOB) -> list[Path]:
    """Return every archive matching ``pattern`` under ``home``, sorted.

    Raises:
        DiscoveryError: if nothing matches or the pattern is not a relative glob.
    """
    try:
        archives = sorted(p.resolve() for p in Path(home).glob(pattern) if p.is_file())
    except (NotImplementedError, ValueError) as e:
        # absolute or empty patterns
        raise DiscoveryError(
            f"failed to find fav.archive: bad glob pattern {pattern!r}: {e}"
        ) from e
    if not archives:
        raise DiscoveryError(
            f"failed to find fav.archive: no match for glob pattern "
            f"{str(Path(home) / pattern)!r}"
        )
    logger.debug("found %d archive(s) under %s", len(archives), home)
    return archives


def reference_dir(archive_path: Path) -> Path:
    """Directory where the encrypted copies of an archive's stickers live."""
    return Path(archive_path).parent / PERSISTENCE_DIRNAME


# ---- Decoders ----

class PlutilDecoder:
    """Convert an archive to XML with the macOS ``plutil`` tool."""

    name = "plutil"

    def __init__(self, executable: str = "plutil"):
        self.executable = executable

    def command(self, path: Path) -> list[str]:
        return [self.executable, "-convert", "xml1", "-o", "-", str(path)]

    def decode(self, path: Path) -> bytes:
        cmd = self.command(path)
        try:
            result = subprocess.run(cmd, capture_output=True, check=True)
        except OSError as e:
            raise ArchiveError(f"failed to convert plist to xml: {' '.join(cmd)}: {e}") from e
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or b"").decode("utf-8", errors="replace").strip()
            detail = f"exit status {e.returncode}" + (f": {stderr}" if stderr else "")
            raise ArchiveError(
                f"failed to convert plist to xml: {' '.join(cmd)}: {detail}"
            ) from e
        return result.stdout


def _uids_to_dicts(value):
    """Rewrite plistlib.UID values the way plutil renders them in XML.

    NSKeyedArchiver object references are UIDs, which the XML plist format
    cannot represent; plutil writes them as ``{"CF$UID": <int>}``.
    """
    if isinstance(value, plistlib.UID):
        return {"CF$UID": value.data}
    if isinstance(value, dict):
        return {k: _uids_to_dicts(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_uids_to_dicts(v) for v in value]
    return value


class PlistlibDecoder:
    """Convert an archive to XML in-process with :mod:`plistlib`."""

    name = "plistlib"

    def decode(self, path: Path) -> bytes:
        try:
            with open(path, "rb") as fh:
                root = plistlib.load(fh)
        except (plistlib.InvalidFileException, ValueError, ExpatError, OSError) as e:
            raise ArchiveError(f"failed to load plist {str(path)!r}: {e}") from e
        try:
            return plistlib.dumps(_uids_to_dicts(root), fmt=plistlib.FMT_XML)
        except (TypeError, OverflowError, ValueError) as e:
            # control characters are valid in binary plist strings, not in XML
            raise ArchiveError(f"failed to convert plist {str(path)!r} to xml: {e}") from e


DECODERS = {
    PlutilDecoder.name: PlutilDecoder,
    PlistlibDecoder.name: PlistlibDecoder,
}


def get_decoder(name: str = "auto"):
    """Return a decoder instance by name.

    ``auto`` picks plutil when it is on PATH and plistlib otherwise.
    """
    if name == "auto":
        name = PlutilDecoder.name if shutil.which("plutil") else PlistlibDecoder.name
    try:
        return DECODERS[name]()
    except KeyError:
        raise ValueError(
            f"unknown decoder {name!r}, expected one of auto, {', '.join(DECODERS)}"
        ) from None


# ---- Node extraction ----

def extract_nodes(xml_content: bytes, source: str = "<archive>") -> list[str]:
    """Return the text of every ``/plist/dict/array/string`` element, in order.

    For a keyed archive this is the ``$objects`` array, where each sticker
    shows up as its hex id immediately followed by its URL.
    """
    soup = BeautifulSoup(xml_content, PARSER)
    if soup.find("plist") is None:
        raise ArchiveError(f"failed to parse xml1 format of {source!r} as a plist document")
    return [node.get_text() for node in soup.select("plist > dict > array > string")]
