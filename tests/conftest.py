"""
Pytest fixtures for sticker exporter tests.

Provides reusable fixtures: binary keyed-archive plists laid out the way
WeChat stores them, and a fake HTTP session that replays canned responses
so no test touches the network.
"""

import os
import plistlib
import sys
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from utils.config import DEFAULT_ARCHIVE_GLOB  # noqa: E402

GIF_BYTES = b"GIF89a\x01\x00\x01\x00\x80\x00\x00\xff\xff\xff\x00\x00\x00!\xf9\x04"
JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01"
PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01"


# ── Helpers ───────────────────────────────────────────────────────────────────

def keyed_archive(strings: list) -> dict:
    """Build a minimal NSKeyedArchiver-shaped plist whose $objects holds ``strings``."""
    return {
        "$archiver": "NSKeyedArchiver",
        "$version": 100000,
        "$top": {"root": plistlib.UID(1)},
        "$objects": [
            "$null",
            {"NS.objects": [plistlib.UID(2)], "$class": plistlib.UID(3)},
            *strings,
            {"$classname": "NSMutableArray", "$classes": ["NSMutableArray", "NSArray"]},
        ],
    }


def archive_path_for(home: Path, account: str = "0123abcd") -> Path:
    """Where the default glob expects an account's fav.archive under ``home``."""
    relative = DEFAULT_ARCHIVE_GLOB.replace("*/*", f"2.0b4.0.9/{account}")
    return home / relative


def write_archive(path: Path, strings: list) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(plistlib.dumps(keyed_archive(strings), fmt=plistlib.FMT_BINARY))
    return path


def write_reference(archive: Path, sticker_id: str, mtime: datetime) -> Path:
    """Create the encrypted-copy placeholder for ``sticker_id`` with the given mtime."""
    ref = archive.parent / "Persistence" / sticker_id
    ref.parent.mkdir(parents=True, exist_ok=True)
    ref.write_bytes(b"\x00encrypted")
    ts = mtime.timestamp()
    os.utime(ref, (ts, ts))
    return ref


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class FakeRaw:
    """Stand-in for the urllib3 response behind requests.Response.raw."""

    def __init__(self, content: bytes, body_error: Exception | None = None):
        self.content = content
        self.body_error = body_error
        self.offset = 0

    def read1(self, amt: int = -1, decode_content: bool | None = None) -> bytes:
        if self.body_error is not None:
            raise self.body_error
        end = len(self.content) if amt < 0 else self.offset + amt
        chunk = self.content[self.offset:end]
        self.offset += len(chunk)
        return chunk


class FakeResponse:
    """Stand-in for requests.Response supporting the calls Fetcher makes."""

    def __init__(self, status_code: int = 200, content: bytes = b"",
                 body_error: Exception | None = None):
        self.status_code = status_code
        self.content = content
        self.body_error = body_error
        self.closed = False
        self.raw = FakeRaw(content, body_error)

    def __enter__(self):
        # fresh body for each use, so one response can be replayed
        self.raw = FakeRaw(self.content, self.body_error)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.closed = True


def fake_session(*outcomes) -> MagicMock:
    """Session whose get() returns or raises each outcome in turn.

    Outcomes may be FakeResponse objects, exceptions, or a dict mapping URL
    to a list of outcomes for that URL.
    """
    session = MagicMock(spec=requests.Session)
    if len(outcomes) == 1 and isinstance(outcomes[0], dict):
        per_url = {url: list(items) for url, items in outcomes[0].items()}

        def _get(url, **kwargs):
            outcome = per_url[url].pop(0)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        session.get.side_effect = _get
    else:
        session.get.side_effect = list(outcomes)
    return session


# ── Fixtures ──────────────────────────────────────────────────────────────────

@pytest.fixture()
def home(tmp_path):
    """Fake home directory for archive discovery."""
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture()
def data_dir(tmp_path):
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture()
def no_sleep():
    """Recording replacement for time.sleep."""
    calls = []
    return calls.append, calls
