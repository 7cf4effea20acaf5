#!/usr/bin/env python3
"""
WeChat Sticker Exporter

Downloads the stickers saved as favorites in WeChat for macOS into ./data
(or STICKER_DATA_DIR), one ``<id>.<ext>`` file per sticker.  Stickers that
are already in the data directory are skipped, so the exporter can be rerun
at any time to pick up new favorites.

Requirements:
  pip install requests beautifulsoup4 lxml

Usage:
    python sticker_exporter.py                    # download new stickers
    python sticker_exporter.py --data-dir ~/stickers
    STICKER_LOG_FORMAT=json python sticker_exporter.py 2> export.log

Prints the downloaded files on stdout; logs go to stderr.  Exits with status
1 if any archive or sticker failed, even when others succeeded.
"""

import sys

from exporter.core import main

if __name__ == "__main__":
    sys.exit(main())
