# tests/helpers.py
from doc_archive.errors import AcquisitionFailure
from doc_archive.models import FetchResult

HTML = "text/html; charset=utf-8"


class FakeFetcher:
    """
    In-memory Fetcher. `pages` maps URL -> (status, body, content_type);
    unknown URLs answer 404 and URLs in `failures` raise AcquisitionFailure.
    """

    def __init__(self, pages=None, failures=()):
        self.pages = dict(pages or {})
        self.failures = set(failures)
        self.requested = []

    def fetch(self, url, timeout):
        self.requested.append(url)
        if url in self.failures:
            raise AcquisitionFailure(f"Timed out fetching {url}")
        status, body, content_type = self.pages.get(url, (404, b"Not Found", "text/plain"))
        if isinstance(body, str):
            body = body.encode("utf-8")
        return FetchResult(url=url, status_code=status, content=body, content_type=content_type)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return None


def html_page(title, body="", links=()):
    anchors = "".join(f'<a href="{href}">{href}</a> ' for href in links)
    return (
        f"<html><head><title>{title}</title></head><body>"
        f"<h1>{title}</h1><p>{body}</p><nav>{anchors}</nav></body></html>"
    )


def page(title, body="", links=()):
    """A 200 HTML response tuple for FakeFetcher."""
    return (200, html_page(title, body, links), HTML)
