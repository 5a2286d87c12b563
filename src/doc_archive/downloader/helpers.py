# File: src/doc_archive/downloader/helpers.py

"""
Module: downloader/helpers.py

Description:
Maps crawled URLs to local file paths. Raw pages mirror the site layout
under `<raw_root>/<host>/<url path>`; markdown files mirror the layout below
the crawl scope. Every path segment is sanitized with `pathvalidate`, and
'..' segments that would climb out of the base directory are rejected.

Third-Party Documentation:
  - pathvalidate: https://pathvalidate.readthedocs.io/en/latest/

Sample Input:
  url_to_local_path(Path("/docs/fastapi/raw"), "https://fastapi.tiangolo.com/tutorial/")
  markdown_relpath("https://fastapi.tiangolo.com/", "https://fastapi.tiangolo.com/tutorial/first-steps/")

Sample Expected Output:
  /docs/fastapi/raw/fastapi.tiangolo.com/tutorial/index.html
  "tutorial/first-steps/index.md"
"""

import logging
from pathlib import Path
from typing import List
from urllib.parse import unquote, urlparse

from pathvalidate import sanitize_filename

logger = logging.getLogger(__name__)

HTML_EXTENSIONS = (".html", ".htm")
DEFAULT_INDEX = "index"

# Assets wget was told to reject; never worth fetching for documentation text.
REJECTED_EXTENSIONS = {
    ".css",
    ".js",
    ".woff",
    ".woff2",
    ".ttf",
    ".eot",
    ".otf",
    ".png",
    ".jpg",
    ".jpeg",
    ".svg",
    ".gif",
    ".ico",
    ".xml",
    ".zip",
    ".pdf",
    ".json",
}


def is_rejected_asset(url: str) -> bool:
    """True for URLs whose path ends in a non-document extension."""
    path = urlparse(url).path.lower()
    return any(path.endswith(ext) for ext in REJECTED_EXTENSIONS)


def _safe_segments(url_path: str) -> List[str]:
    """
    Splits a URL path into sanitized segments, resolving '.' and '..'.

    Raises:
        ValueError: if '..' climbs above the root of the path.
    """
    segments: List[str] = []
    for raw_segment in unquote(url_path).split("/"):
        if raw_segment in ("", "."):
            continue
        if raw_segment == "..":
            if not segments:
                raise ValueError(f"URL path '{url_path}' escapes base directory")
            segments.pop()
            continue
        safe = sanitize_filename(raw_segment, replacement_text="_")
        segments.append(safe or "_")
    return segments


def _page_segments(url_path: str) -> List[str]:
    """Segments of a page path, with 'index' for directories and no .html suffix."""
    segments = _safe_segments(url_path)
    if not segments or url_path.endswith("/"):
        segments.append(DEFAULT_INDEX)
    last = segments[-1]
    for ext in HTML_EXTENSIONS:
        if last.lower().endswith(ext) and len(last) > len(ext):
            segments[-1] = last[: -len(ext)]
            break
    return segments


def url_to_local_path(base_dir: Path, url: str) -> Path:
    """
    Local path for the raw HTML of `url`: base_dir / host / path[.html].

    Directory URLs get 'index.html'; paths without an HTML extension get
    '.html' appended.

    Raises:
        ValueError: for URLs without a hostname or paths escaping base_dir.
    """
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError(f"URL must have a scheme and valid hostname: '{url}'")

    resolved_base = Path(base_dir).resolve(strict=False)
    safe_host = sanitize_filename(parsed.netloc, replacement_text="_") or "_"
    segments = _page_segments(parsed.path)
    segments[-1] = segments[-1] + ".html"

    target = resolved_base.joinpath(safe_host, *segments)
    if resolved_base not in target.parents:
        raise ValueError(f"Path for '{url}' escapes base directory {resolved_base}")
    return target


def markdown_relpath(scope_url: str, url: str) -> str:
    """
    Markdown path (posix, relative to the markdown root) for a crawled page.

    The page path is taken relative to the crawl scope, so a crawl started at
    'https://host/docs/' stores 'https://host/docs/guide/' as 'guide/index.md'.

    Raises:
        ValueError: if `url` does not live under `scope_url`.
    """
    scope_path = urlparse(scope_url).path or "/"
    page_path = urlparse(url).path or "/"
    if page_path + "/" == scope_path:
        page_path = scope_path
    if not page_path.startswith(scope_path):
        raise ValueError(f"'{url}' is outside crawl scope '{scope_url}'")

    relative = page_path[len(scope_path):]
    if not relative:
        relative = "/"
    segments = _page_segments(relative)
    return "/".join(segments) + ".md"
