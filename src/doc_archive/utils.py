"""
Module: utils.py

Description:
Shared URL and text helpers for doc-archive: URL canonicalization, source URL
normalization, the llms.txt probe location, crawl scope computation, the
markdown-path to URL rule used for crawled packages, title extraction and
package name sanitization.

Third-Party Documentation:
- urllib.parse: https://docs.python.org/3/library/urllib.parse.html

Sample Input/Output:

Function: canonicalize_url()
Input: "http://Example.Com:80/Path/?query=1#frag"
Output: "http://example.com/Path"

Function: crawl_scope()
Input: "https://docs.pydantic.dev/latest/"
Output: "https://docs.pydantic.dev/latest/"
Input: "https://example.com/guide/intro.html"
Output: "https://example.com/guide/"

Function: derive_file_url()
Input: ("https://sqlmodel.tiangolo.com/", "tutorial/index.md")
Output: "https://sqlmodel.tiangolo.com/tutorial/"
"""

import logging
import re
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse, urlunparse

from .errors import InvalidArguments

logger = logging.getLogger(__name__)

# --- Constants ---
LLMS_TXT_PATH = "/llms.txt"
_HEADING_PREFIX = re.compile(r"^#+\s*")
_UNSAFE_NAME_CHARS = re.compile(r"[^\w\-.]+")


# --- URL Utilities ---


def canonicalize_url(url: str) -> str:
    """
    Normalize URL for consistent identification during a crawl.
    - Converts scheme and netloc to lowercase.
    - Removes default ports (80 for http, 443 for https).
    - Ensures path starts with '/'.
    - Removes trailing slash from path unless it's just '/'.
    - Removes fragment (#...) and query string (?...).
    - Adds 'http://' if scheme is missing.
    - Decodes percent-encoded characters in the path.

    Raises:
        ValueError: If the URL cannot be parsed or canonicalized.
    """
    if not isinstance(url, str):
        raise ValueError("URL must be a string.")
    url = url.strip()
    if not url:
        raise ValueError("URL cannot be empty.")

    try:
        if url.startswith("//"):
            url = "http:" + url

        parsed = urlparse(url)
        scheme = parsed.scheme.lower()
        if not scheme:
            url = "http://" + url
            parsed = urlparse(url)
            scheme = parsed.scheme.lower()

        netloc = parsed.netloc.lower()
        if ":" in netloc:
            host, port_str = netloc.rsplit(":", 1)
            try:
                port = int(port_str)
                if (scheme == "http" and port == 80) or (
                    scheme == "https" and port == 443
                ):
                    netloc = host
            except ValueError:
                logger.debug(
                    f"Invalid port '{port_str}' in URL '{url}', keeping netloc as is."
                )

        path = unquote(parsed.path) if parsed.path else "/"
        if not path.startswith("/"):
            path = "/" + path
        if path != "/" and path.endswith("/"):
            path = path.rstrip("/")

        return urlunparse((scheme, netloc, path, "", "", ""))

    except Exception as e:
        logger.error(f"Failed to canonicalize URL '{url}': {e}")
        raise ValueError(f"Could not canonicalize URL: '{url}' - Error: {e}") from e


def normalize_source_url(url: str) -> str:
    """The package URL as recorded in the manifest: trailing slashes stripped."""
    return url.strip().rstrip("/")


def require_http_url(url: str) -> str:
    """Returns the stripped URL, or raises InvalidArguments if it has no http(s) origin."""
    url = (url or "").strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidArguments(f"Not an http(s) URL: '{url}'")
    return url


def origin_of(url: str) -> str:
    """scheme://host[:port] of `url`."""
    parsed = urlparse(url)
    return urlunparse((parsed.scheme, parsed.netloc, "", "", "", ""))


def llms_txt_url(url: str) -> str:
    """Location of the single-file export for the site hosting `url`."""
    return origin_of(url) + LLMS_TXT_PATH


def crawl_scope(url: str) -> str:
    """
    The directory URL a crawl of `url` may not climb above.

    A URL whose path ends in '/' is its own scope; otherwise the last path
    segment is dropped. Query and fragment are ignored.
    """
    parsed = urlparse(url.strip())
    path = parsed.path or "/"
    if not path.endswith("/"):
        path = path.rsplit("/", 1)[0] + "/"
    return urlunparse((parsed.scheme, parsed.netloc, path, "", "", ""))


def is_within_scope(url: str, scope: str) -> bool:
    """True when `url` shares the scope's origin and lives at or below its path."""
    target = urlparse(url)
    base = urlparse(scope)
    if target.scheme != base.scheme or target.netloc.lower() != base.netloc.lower():
        return False
    path = target.path or "/"
    if not path.endswith("/") and path + "/" == base.path:
        # "https://host/docs" is the scope "https://host/docs/" itself
        return True
    return path.startswith(base.path)


def derive_file_url(scope_url: str, rel_path: str) -> str:
    """
    Rebuilds a directory-style page URL from a crawled markdown path.

    'index.md' maps to the scope itself, 'a/index.md' to 'a/', 'a/b.md' to
    'a/b/'. Best effort only: sites with other routing schemes won't match.
    """
    base = scope_url if scope_url.endswith("/") else scope_url + "/"
    if rel_path == "index.md":
        tail = ""
    elif rel_path.endswith("/index.md"):
        tail = rel_path[: -len("index.md")]
    elif rel_path.endswith(".md"):
        tail = rel_path[: -len(".md")] + "/"
    else:
        tail = rel_path
    return base + tail


# --- Text Utilities ---


def extract_title(md_file: Path) -> str:
    """
    Title of a markdown file: its first line with leading '#' markup removed.

    Returns "" for empty or unreadable files.
    """
    try:
        with open(md_file, "r", encoding="utf-8", errors="replace") as f:
            first_line = f.readline().strip()
    except OSError as e:
        logger.warning(f"Could not read title from {md_file}: {e}")
        return ""
    return _HEADING_PREFIX.sub("", first_line)


def sanitize_package_name(name: Optional[str]) -> str:
    """
    Makes a package name safe for use as a directory name.

    Letters, digits, '_', '-' and '.' are kept; other runs become '_'.
    Raises InvalidArguments if nothing usable is left.
    """
    raw = (name or "").strip()
    safe = _UNSAFE_NAME_CHARS.sub("_", raw).strip(".")
    if not safe:
        raise InvalidArguments(f"Invalid package name: '{raw}'")
    if safe != raw:
        logger.warning(f"Package name '{raw}' sanitized to '{safe}'")
    return safe
