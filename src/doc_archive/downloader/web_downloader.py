"""
Description:
  Sequential recursive crawl of a documentation site. Starting from one URL it
  visits pages breadth first, one request at a time, keeping to the start
  URL's origin and crawl scope (never climbing above the start directory) and
  stopping `depth` links away from the start page. Each HTML page is written
  under `<raw_root>/<host>/...` and its links are queued for the next level.
  Non-HTML responses, asset URLs, error statuses and URLs disallowed by the
  origin's robots.txt are skipped. Progress is reported with tqdm.

Third-Party Documentation:
  - tqdm (Used for progress bars): https://tqdm.github.io/

Internal Module Dependencies:
  - .fetchers (Fetcher, extract_links)
  - .helpers (url_to_local_path, is_rejected_asset)
  - .robots (load_robots, is_allowed)
  - doc_archive.utils (canonicalize_url, crawl_scope, is_within_scope)

Sample Input:
  with HttpxFetcher() as fetcher:
      pages = crawl_site(
          start_url="https://sqlmodel.tiangolo.com/",
          raw_root=Path("sqlmodel/raw"),
          fetcher=fetcher,
          depth=1,
      )

Sample Expected Output:
  - sqlmodel/raw/sqlmodel.tiangolo.com/index.html plus one file per linked page.
  - A list of CrawledPage entries in visit order.
"""

import logging
from collections import deque
from pathlib import Path
from typing import Deque, List, NamedTuple, Set, Tuple

from tqdm import tqdm

from ..errors import AcquisitionFailure
from ..utils import canonicalize_url, crawl_scope, is_within_scope
from .fetchers import Fetcher, extract_links
from .helpers import is_rejected_asset, url_to_local_path
from .robots import is_allowed, load_robots

logger = logging.getLogger(__name__)


class CrawledPage(NamedTuple):
    url: str
    raw_path: Path


def crawl_site(
    start_url: str,
    raw_root: Path,
    fetcher: Fetcher,
    depth: int = 5,
    timeout: float = 30,
    show_progress: bool = False,
    respect_robots: bool = True,
) -> List[CrawledPage]:
    """
    Crawls `start_url` and saves raw HTML pages below `raw_root`.

    Args:
        start_url: First page; also defines the crawl scope.
        raw_root: Directory receiving `<host>/<path>` HTML files.
        fetcher: Fetcher used for every request.
        depth: Maximum link distance from the start page (0 = start page only).
        timeout: Per-request timeout in seconds.
        show_progress: Display a tqdm progress bar on stderr.
        respect_robots: Skip URLs that the origin's robots.txt disallows.

    Returns:
        Saved pages in visit order. Individual page failures are logged and
        skipped.
    """
    scope = crawl_scope(start_url)
    logger.info(f"Starting crawl of {start_url} (scope {scope}, depth {depth})")
    rules = load_robots(start_url, fetcher, timeout) if respect_robots else None

    queue: Deque[Tuple[str, int]] = deque([(start_url, 0)])
    seen: Set[str] = {canonicalize_url(start_url)}
    saved: Set[Path] = set()
    pages: List[CrawledPage] = []

    pbar = tqdm(desc="Crawling", unit="page", disable=not show_progress, leave=False)
    try:
        while queue:
            url, level = queue.popleft()
            pbar.update(1)
            if not is_allowed(rules, url):
                logger.info(f"Skipping {url}: disallowed by robots.txt")
                continue
            try:
                result = fetcher.fetch(url, timeout=timeout)
            except AcquisitionFailure as e:
                logger.warning(f"Skipping {url}: {e}")
                continue

            if not result.ok:
                logger.warning(f"Skipping {url}: HTTP {result.status_code}")
                continue
            if not result.is_html:
                logger.debug(f"Skipping non-HTML content '{result.content_type}' at {url}")
                continue
            if not is_within_scope(result.url, scope):
                logger.debug(f"Skipping {url}: redirected outside scope to {result.url}")
                continue

            try:
                raw_path = url_to_local_path(raw_root, result.url)
            except ValueError as e:
                logger.warning(f"Skipping {url}: {e}")
                continue
            if raw_path in saved:
                logger.debug(f"Already saved {raw_path}, skipping duplicate {url}")
                continue
            raw_path.parent.mkdir(parents=True, exist_ok=True)
            raw_path.write_bytes(result.content)
            saved.add(raw_path)
            pages.append(CrawledPage(url=result.url, raw_path=raw_path))
            logger.debug(f"Saved {result.url} to {raw_path}")

            if level >= depth:
                continue
            for link in extract_links(result.content, result.url):
                if not is_within_scope(link, scope) or is_rejected_asset(link):
                    continue
                try:
                    canonical = canonicalize_url(link)
                except ValueError:
                    continue
                if canonical in seen:
                    continue
                seen.add(canonical)
                queue.append((link, level + 1))
                pbar.total = len(seen)
    finally:
        pbar.close()

    logger.info(f"Crawl finished: {len(pages)} page(s) saved from {start_url}")
    return pages
