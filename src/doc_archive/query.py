"""
Module: query.py

Description:
Keyword lookup over one package's manifest entry. Matching is a
case-insensitive substring test in three tiers, returned in fixed priority
order with no re-ranking between tiers:

  1. path matches
  2. title matches (files not already matched by path)
  3. content matches on the first CONTENT_SCAN_CHARS characters of the file
     (files not already matched by path or title)

Within a tier, files keep manifest order. Only the manifest and the files it
references are read; the package directory is never re-scanned.
"""

import logging
from typing import List

from .manifest import ManifestStore
from .models import FileRecord

logger = logging.getLogger(__name__)

# Content matching only looks at the head of each document.
CONTENT_SCAN_CHARS = 500
MAX_LISTED_MATCHES = 10


def _content_head(store: ManifestStore, record: FileRecord) -> str:
    path = store.resolve(record)
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            return f.read(CONTENT_SCAN_CHARS)
    except OSError as e:
        logger.debug(f"Skipping content match for unreadable file {path}: {e}")
        return ""


def find(store: ManifestStore, package_name: str, keyword: str) -> List[FileRecord]:
    """
    Returns the files of `package_name` matching `keyword`, best tier first.

    An empty keyword matches every file.

    Raises:
        PackageNotFound: if the package is not in the manifest.
    """
    package = store.get(package_name)
    needle = keyword.lower()

    path_matches: List[FileRecord] = []
    title_matches: List[FileRecord] = []
    content_matches: List[FileRecord] = []

    for record in package.files:
        if needle in record.path.lower():
            path_matches.append(record)
        elif needle in record.title.lower():
            title_matches.append(record)
        elif needle in _content_head(store, record).lower():
            content_matches.append(record)

    logger.debug(
        f"'{keyword}' in {package_name}: {len(path_matches)} path, "
        f"{len(title_matches)} title, {len(content_matches)} content matches"
    )
    return path_matches + title_matches + content_matches
