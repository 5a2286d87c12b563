"""
Module: tests/unit/downloader/test_helpers.py

Description:
Unit tests for the path mapping helpers in downloader/helpers.py.
Tests cover mirrored raw paths, markdown paths relative to the crawl scope,
traversal prevention and error handling.
"""
import pytest

from doc_archive.downloader.helpers import (
    is_rejected_asset,
    markdown_relpath,
    url_to_local_path,
)


def test_basic_url_conversion(tmp_path):
    """Test basic URL formats convert correctly"""
    result = url_to_local_path(tmp_path, "http://example.com/path/file.html")
    assert result.relative_to(tmp_path.resolve()).as_posix() == "example.com/path/file.html"


def test_directory_and_extensionless_urls(tmp_path):
    """Trailing slashes map to index.html, bare paths get .html appended"""
    base = tmp_path.resolve()
    assert url_to_local_path(tmp_path, "http://example.com/path/").relative_to(base).as_posix() == "example.com/path/index.html"
    assert url_to_local_path(tmp_path, "http://example.com").relative_to(base).as_posix() == "example.com/index.html"
    assert url_to_local_path(tmp_path, "http://example.com/docs/intro").relative_to(base).as_posix() == "example.com/docs/intro.html"
    assert url_to_local_path(tmp_path, "http://example.com/page.htm").relative_to(base).as_posix() == "example.com/page.html"


def test_query_and_fragment_are_ignored(tmp_path):
    result = url_to_local_path(tmp_path, "http://localhost:8000/a/b?x=1#frag")
    assert result.name == "b.html"
    assert result.parent.name == "a"
    assert len(result.relative_to(tmp_path.resolve()).parts) == 3


def test_path_traversal_prevention(tmp_path):
    """Test path traversal attempts are blocked"""
    with pytest.raises(ValueError, match="escapes base directory"):
        url_to_local_path(tmp_path, "http://example.com/../../../../etc/passwd")

    with pytest.raises(ValueError, match="escapes base directory"):
        url_to_local_path(tmp_path, "http://example.com/a/../../b/../../../etc/passwd")

    with pytest.raises(ValueError, match="escapes base directory"):
        url_to_local_path(tmp_path, "http://example.com/%2e%2e/%2e%2e/etc/passwd")


def test_inner_parent_segments_are_resolved(tmp_path):
    result = url_to_local_path(tmp_path, "http://example.com/a/b/../c.html")
    assert result.relative_to(tmp_path.resolve()).as_posix() == "example.com/a/c.html"


def test_long_path_handling(tmp_path):
    """Test long filenames are kept"""
    long_name = "x" * 100 + ".html"
    result = url_to_local_path(tmp_path, f"http://example.com/{long_name}")
    assert len(result.name) == len(long_name)


def test_error_cases(tmp_path):
    """Test error cases raise appropriate exceptions"""
    with pytest.raises(ValueError, match="hostname"):
        url_to_local_path(tmp_path, "")

    with pytest.raises(ValueError):
        url_to_local_path(tmp_path, "not_a_url")

    with pytest.raises(ValueError, match="hostname"):
        url_to_local_path(tmp_path, "http://")

    with pytest.raises(ValueError):
        url_to_local_path(tmp_path, "http:///missing/hostname")


@pytest.mark.parametrize("scope, url, expected", [
    ("https://x.com/", "https://x.com/", "index.md"),
    ("https://x.com/", "https://x.com/tutorial/", "tutorial/index.md"),
    ("https://x.com/", "https://x.com/tutorial/first-steps.html", "tutorial/first-steps.md"),
    ("https://x.com/latest/", "https://x.com/latest/concepts/models/", "concepts/models/index.md"),
    ("https://x.com/latest/", "https://x.com/latest", "index.md"),
    ("https://x.com/latest/", "https://x.com/latest/api", "api.md"),
])
def test_markdown_relpath(scope, url, expected):
    assert markdown_relpath(scope, url) == expected


def test_markdown_relpath_outside_scope():
    with pytest.raises(ValueError, match="outside crawl scope"):
        markdown_relpath("https://x.com/latest/", "https://x.com/blog/post")


@pytest.mark.parametrize("url, expected", [
    ("https://x.com/static/site.css", True),
    ("https://x.com/img/logo.PNG", True),
    ("https://x.com/sitemap.xml", True),
    ("https://x.com/docs/intro.html", False),
    ("https://x.com/docs/", False),
    ("https://x.com/docs/javascript", False),
])
def test_is_rejected_asset(url, expected):
    assert is_rejected_asset(url) is expected
