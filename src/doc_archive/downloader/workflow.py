"""
Description:
  Central orchestrator for downloading one package. `acquire` tries the
  site's single-file `llms.txt` export first and, when that probe fails for
  any reason (error status, timeout, network error), falls back to a
  recursive crawl followed by per-page HTML to markdown conversion.
  `download_package` runs `acquire` and then rebuilds the package's manifest
  entry from the resulting markdown tree.

  On-disk layout per package:
    <docs_root>/<name>/markdown/...   markdown documents
    <docs_root>/<name>/raw/<host>/... raw HTML (crawl only)

  A download is staged in <docs_root>/<name>/.incoming and swapped in only
  when it succeeds: a re-download replaces the previous contents entirely, and
  a failed one leaves them untouched.

Internal Module Dependencies:
  - .fetchers (Fetcher)
  - .converters (Converter)
  - .web_downloader (crawl_site)
  - .helpers (markdown_relpath)
  - doc_archive.manifest (ManifestStore)

Sample Input:
  with HttpxFetcher() as fetcher:
      package = download_package(
          name="sqlmodel",
          url="https://sqlmodel.tiangolo.com/",
          docs_root=Path("."),
          store=ManifestStore(Path("manifest.json")),
          fetcher=fetcher,
          converter=Html2TextConverter(),
      )

Sample Expected Output:
  - Package(name="sqlmodel", method="crawl", file_count=..., files=[...])
  - manifest.json updated with the new entry.
"""

import logging
import shutil
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field

from ..errors import AcquisitionFailure, ConversionFailure
from ..manifest import ManifestStore
from ..models import METHOD_CRAWL, METHOD_SINGLE_FILE, AcquisitionMethod, Package, PageOutcome
from ..utils import crawl_scope, llms_txt_url
from .converters import Converter
from .fetchers import Fetcher
from .helpers import markdown_relpath
from .web_downloader import CrawledPage, crawl_site

logger = logging.getLogger(__name__)

SINGLE_FILE_NAME = "all-docs.md"
MARKDOWN_DIR_NAME = "markdown"
RAW_DIR_NAME = "raw"
STAGING_DIR_NAME = ".incoming"
DEFAULT_PROBE_TIMEOUT = 5
DEFAULT_REQUEST_TIMEOUT = 30
DEFAULT_DEPTH = 5


class AcquisitionResult(BaseModel):
    """What `acquire` produced for one package."""

    method: AcquisitionMethod
    markdown_root: Path
    raw_index: Optional[str] = None
    outcomes: List[PageOutcome] = Field(default_factory=list)

    @property
    def converted(self) -> List[PageOutcome]:
        return [o for o in self.outcomes if o.status == "converted"]

    @property
    def skipped(self) -> List[PageOutcome]:
        return [o for o in self.outcomes if o.status == "skipped"]


def _reset_dir(path: Path) -> None:
    if path.exists():
        logger.debug(f"Clearing leftover directory {path}")
        shutil.rmtree(path)
    path.mkdir(parents=True, exist_ok=True)


def try_single_file(
    url: str, markdown_root: Path, fetcher: Fetcher, timeout: float
) -> bool:
    """
    Probes `<origin>/llms.txt`; on a 2xx response writes it as the sole document.

    Returns False (after logging why) when the probe fails.
    """
    probe_url = llms_txt_url(url)
    logger.info(f"Checking for llms.txt at {probe_url}")
    try:
        result = fetcher.fetch(probe_url, timeout=timeout)
    except AcquisitionFailure as e:
        logger.info(f"No llms.txt ({e})")
        return False
    if not result.ok:
        logger.info(f"No llms.txt (HTTP {result.status_code})")
        return False

    target = markdown_root / SINGLE_FILE_NAME
    target.write_bytes(result.content)
    logger.info(f"Downloaded single-file docs to {target}")
    return True


def convert_page(
    page: CrawledPage, scope: str, markdown_root: Path, converter: Converter
) -> PageOutcome:
    """Converts one raw page. Never raises: failures become skipped outcomes."""
    try:
        rel_path = markdown_relpath(scope, page.url)
    except ValueError as e:
        return PageOutcome(url=page.url, status="skipped", reason=str(e))

    target = markdown_root / rel_path
    if target.exists():
        return PageOutcome(
            url=page.url, status="skipped", reason=f"duplicate of {rel_path}"
        )
    try:
        markdown = converter.convert(page.raw_path.read_bytes(), page.url)
    except OSError as e:
        return PageOutcome(url=page.url, status="skipped", reason=f"unreadable: {e}")
    except ConversionFailure as e:
        return PageOutcome(url=page.url, status="skipped", reason=str(e))

    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(markdown, encoding="utf-8")
    return PageOutcome(url=page.url, status="converted", path=rel_path)


def _promote(staging: Path, package_dir: Path) -> None:
    """Replaces `markdown/` and `raw/` of `package_dir` with the staged copies."""
    for sub in (MARKDOWN_DIR_NAME, RAW_DIR_NAME):
        target = package_dir / sub
        if target.exists():
            shutil.rmtree(target)
        staged = staging / sub
        if staged.exists():
            staged.rename(target)
    shutil.rmtree(staging)


def _acquire_into(
    url: str,
    staging: Path,
    fetcher: Fetcher,
    converter: Converter,
    depth: int,
    probe_timeout: float,
    request_timeout: float,
    show_progress: bool,
) -> AcquisitionResult:
    markdown_root = staging / MARKDOWN_DIR_NAME
    raw_root = staging / RAW_DIR_NAME
    markdown_root.mkdir(parents=True, exist_ok=True)

    if try_single_file(url, markdown_root, fetcher, probe_timeout):
        return AcquisitionResult(method=METHOD_SINGLE_FILE, markdown_root=markdown_root)

    logger.info("Falling back to crawling the site")
    raw_root.mkdir(parents=True, exist_ok=True)
    pages = crawl_site(
        start_url=url,
        raw_root=raw_root,
        fetcher=fetcher,
        depth=depth,
        timeout=request_timeout,
        show_progress=show_progress,
    )
    if not pages:
        raise AcquisitionFailure(f"No llms.txt and no pages could be crawled from {url}")

    scope = crawl_scope(url)
    outcomes = [convert_page(page, scope, markdown_root, converter) for page in pages]
    for outcome in outcomes:
        if outcome.status == "skipped":
            logger.debug(f"Skipped {outcome.url}: {outcome.reason}")

    result = AcquisitionResult(
        method=METHOD_CRAWL,
        markdown_root=markdown_root,
        raw_index=pages[0].raw_path.relative_to(raw_root.resolve()).as_posix(),
        outcomes=outcomes,
    )
    logger.info(
        f"Converted {len(result.converted)} of {len(pages)} page(s) to markdown"
    )
    return result


def acquire(
    name: str,
    url: str,
    package_dir: Path,
    fetcher: Fetcher,
    converter: Converter,
    depth: int = DEFAULT_DEPTH,
    probe_timeout: float = DEFAULT_PROBE_TIMEOUT,
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    show_progress: bool = False,
) -> AcquisitionResult:
    """
    Populates `<package_dir>/markdown` from `url`.

    Everything is first written to `<package_dir>/.incoming`; the previous
    `markdown/` and `raw/` directories are only replaced once acquisition
    has succeeded.

    Raises:
        AcquisitionFailure: if the llms.txt probe fails and the crawl
            retrieves no page at all. The previous download is left intact.
    """
    package_dir = Path(package_dir)
    staging = package_dir / STAGING_DIR_NAME
    _reset_dir(staging)

    logger.info(f"Downloading {name} from {url} into {package_dir}")
    try:
        result = _acquire_into(
            url,
            staging,
            fetcher,
            converter,
            depth=depth,
            probe_timeout=probe_timeout,
            request_timeout=request_timeout,
            show_progress=show_progress,
        )
    except BaseException:
        shutil.rmtree(staging, ignore_errors=True)
        raise

    _promote(staging, package_dir)
    return result.model_copy(update={"markdown_root": package_dir / MARKDOWN_DIR_NAME})


def download_package(
    name: str,
    url: str,
    docs_root: Path,
    store: ManifestStore,
    fetcher: Fetcher,
    converter: Converter,
    depth: int = DEFAULT_DEPTH,
    probe_timeout: float = DEFAULT_PROBE_TIMEOUT,
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    show_progress: bool = False,
) -> Package:
    """Acquires `url` as package `name` and records it in the manifest."""
    # Fail before touching the network if the manifest can't be rewritten.
    store.load(strict=True)
    result = acquire(
        name=name,
        url=url,
        package_dir=Path(docs_root) / name,
        fetcher=fetcher,
        converter=converter,
        depth=depth,
        probe_timeout=probe_timeout,
        request_timeout=request_timeout,
        show_progress=show_progress,
    )
    return store.rebuild(
        name=name,
        source_url=url,
        method=result.method,
        markdown_root=result.markdown_root,
        raw_index=result.raw_index,
    )
