# tests/conftest.py
import pytest
from loguru import logger

from doc_archive.manifest import ManifestStore


@pytest.fixture(autouse=True)
def reset_loguru():
    """CLI runs point loguru at CliRunner streams; drop those handlers afterwards."""
    yield
    logger.remove()


@pytest.fixture
def docs_root(tmp_path):
    return tmp_path / "docs"


@pytest.fixture
def store(docs_root):
    docs_root.mkdir(parents=True, exist_ok=True)
    return ManifestStore(docs_root / "manifest.json")


@pytest.fixture
def make_package(docs_root, store):
    """Writes markdown files for a package and rebuilds its manifest entry."""

    def _make(name, files, url="https://docs.example.com/", method="crawl"):
        markdown_root = docs_root / name / "markdown"
        for rel_path, content in files.items():
            target = markdown_root / rel_path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        markdown_root.mkdir(parents=True, exist_ok=True)
        return store.rebuild(name, url, method, markdown_root)

    return _make
