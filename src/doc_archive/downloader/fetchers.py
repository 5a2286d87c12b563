"""
Description:
    Retrieval of single URLs for the downloader. `Fetcher` is the capability
    the workflow depends on; `HttpxFetcher` implements it with a blocking
    httpx client. Transport-level problems (timeouts, DNS, refused
    connections, malformed URLs) raise AcquisitionFailure; HTTP error statuses are returned
    as a normal FetchResult so callers can decide what a 404 means.

    Also provides `extract_links`, which pulls navigable links out of an
    HTML page with BeautifulSoup.

Third-Party Documentation:
    - httpx: https://www.python-httpx.org/
    - BeautifulSoup: https://www.crummy.com/software/BeautifulSoup/bs4/doc/

Sample Input/Output:
    with HttpxFetcher() as fetcher:
        result = fetcher.fetch("https://example.com/llms.txt", timeout=5)
    # FetchResult(url="https://example.com/llms.txt", status_code=404,
    #             content=b"...", content_type="text/html")
"""

import logging
from typing import List, Optional, Protocol
from urllib.parse import urldefrag, urljoin

import httpx
from bs4 import BeautifulSoup

from ..errors import AcquisitionFailure
from ..models import FetchResult

logger = logging.getLogger(__name__)

USER_AGENT = "doc-archive/0.1"


class Fetcher(Protocol):
    def fetch(self, url: str, timeout: float) -> FetchResult:
        """GETs `url`. Raises AcquisitionFailure when no response is received."""
        ...


class HttpxFetcher:
    """
    Fetcher backed by a shared `httpx.Client`.

    Redirects are followed; the FetchResult carries the final URL.
    """

    def __init__(self, client: Optional[httpx.Client] = None):
        self._owns_client = client is None
        self._client = client or httpx.Client(
            follow_redirects=True, headers={"User-Agent": USER_AGENT}
        )

    def fetch(self, url: str, timeout: float) -> FetchResult:
        logger.debug(f"GET {url} (timeout {timeout}s)")
        try:
            response = self._client.get(url, timeout=timeout)
        except httpx.TimeoutException as e:
            raise AcquisitionFailure(f"Timed out fetching {url}: {e}") from e
        except httpx.HTTPError as e:
            raise AcquisitionFailure(f"Request to {url} failed: {e}") from e
        # InvalidURL is not an HTTPError subclass.
        except httpx.InvalidURL as e:
            raise AcquisitionFailure(f"Invalid URL {url!r}: {e}") from e

        logger.debug(f"Received response for {url}: Status {response.status_code}")
        return FetchResult(
            url=str(response.url),
            status_code=response.status_code,
            content=response.content,
            content_type=response.headers.get("content-type", ""),
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


def extract_links(content: bytes, base_url: str) -> List[str]:
    """
    Absolute, fragment-free link targets of an HTML page, in document order.

    Anchors, javascript:, mailto: and tel: links are dropped.
    """
    links: List[str] = []
    try:
        soup = BeautifulSoup(content, "html.parser")
    except Exception as e:
        logger.warning(f"Error parsing HTML from {base_url}: {e}")
        return links

    for a_tag in soup.find_all("a", href=True):
        href = a_tag["href"].strip()
        if not href or href.startswith(("#", "javascript:", "mailto:", "tel:")):
            continue
        try:
            abs_url, _fragment = urldefrag(urljoin(base_url, href))
        except ValueError:
            logger.warning(f"Could not resolve relative link '{href}' from base '{base_url}'")
            continue
        links.append(abs_url)
    logger.debug(f"Extracted {len(links)} links from {base_url}")
    return links
