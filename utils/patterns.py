"""Pre-compiled regex patterns for the sticker exporter.

All patterns are compiled once at module import.

Usage:
    from utils.patterns import STICKER_ID, STICKER_URL

    if STICKER_ID.fullmatch(text):
        ...
"""

import re

# Sticker ids are lowercase hex digests.  Use with fullmatch() so a trailing
# newline is not accepted the way ``$`` would.
STICKER_ID = re.compile(r'[0-9a-f]+')

# Remote sticker URLs: only http and https, case-sensitive.  Use with match().
STICKER_URL = re.compile(r'https?://')

# Downloaded sticker files in the data directory: "<id>.<ext>"
# Captures the id (group 1).  Use with fullmatch().
STICKER_FILENAME = re.compile(r'([0-9a-f]+)\.[0-9a-z]+')
