"""
Module: tests/test_cli.py

Description:
Exercises the Typer CLI end to end with CliRunner. The network is replaced by
a FakeFetcher through `cli.build_fetcher`; everything else (conversion,
manifest, query, export) runs for real against a temporary docs root.
"""
import json

import pytest
from typer.testing import CliRunner

from doc_archive import cli
from tests.helpers import FakeFetcher, page

START = "https://sqlmodel.example.com/"
LLMS = "https://sqlmodel.example.com/llms.txt"

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Keep a stray doc-archive.json or DOC_ARCHIVE_* variable out of the tests."""
    monkeypatch.chdir(tmp_path)
    for key in ("DOC_ARCHIVE_DOCS_ROOT", "DOC_ARCHIVE_LOG_LEVEL", "DOC_ARCHIVE_CRAWL_DEPTH"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def site_fetcher(monkeypatch):
    fetcher = FakeFetcher(
        {
            START: page("SQLModel", "SQLModel docs home.", ["tutorial/", "many-to-many/"]),
            START + "tutorial/": page("Tutorial", "Create a Session and select rows."),
            START + "many-to-many/": page("Relationships", "Link tables."),
        }
    )
    monkeypatch.setattr(cli, "build_fetcher", lambda: fetcher)
    return fetcher


def invoke(docs_root, *args):
    return runner.invoke(cli.app, ["--root", str(docs_root), *args])


@pytest.fixture
def downloaded(docs_root, site_fetcher):
    result = invoke(docs_root, "download", "sqlmodel", START)
    assert result.exit_code == 0, result.output
    return docs_root


def test_download_crawls_and_writes_manifest(downloaded, site_fetcher):
    assert site_fetcher.requested[0] == LLMS
    data = json.loads((downloaded / "manifest.json").read_text(encoding="utf-8"))
    entry = data["packages"][0]
    assert entry["name"] == "sqlmodel"
    assert entry["method"] == "crawl"
    assert entry["file_count"] == 3
    assert [f["path"] for f in entry["files"]] == ["index.md", "many-to-many/index.md", "tutorial/index.md"]


def test_download_single_file(docs_root, monkeypatch):
    fetcher = FakeFetcher({LLMS: (200, "# SQLModel\n\nall docs\n", "text/plain")})
    monkeypatch.setattr(cli, "build_fetcher", lambda: fetcher)

    result = invoke(docs_root, "download", "sqlmodel", START)
    assert result.exit_code == 0, result.output
    assert "single-file" in result.output
    assert (docs_root / "sqlmodel" / "markdown" / "all-docs.md").is_file()


def test_download_requires_name_and_url(docs_root, site_fetcher):
    assert invoke(docs_root, "download", "sqlmodel").exit_code != 0
    assert invoke(docs_root, "download").exit_code != 0
    assert invoke(docs_root, "download", "sqlmodel", "  ").exit_code != 0
    assert site_fetcher.requested == []
    assert not (docs_root / "manifest.json").exists()


def test_download_reports_total_failure(docs_root, monkeypatch):
    fetcher = FakeFetcher({}, failures=[LLMS, START])
    monkeypatch.setattr(cli, "build_fetcher", lambda: fetcher)

    result = invoke(docs_root, "download", "sqlmodel", START)
    assert result.exit_code == 1
    assert "❌" in result.output


def test_list_shows_files_in_order(downloaded):
    result = invoke(downloaded, "list", "sqlmodel")
    assert result.exit_code == 0
    assert "sqlmodel (3 docs)" in result.output
    lines = [line for line in result.output.splitlines() if line.startswith("• ")]
    assert lines == ["• index.md", "• many-to-many/index.md", "• tutorial/index.md"]
    assert "Relationships" in result.output
    assert f"🔗 {START}tutorial/" in result.output


def test_list_unknown_package(downloaded):
    result = invoke(downloaded, "list", "django")
    assert result.exit_code != 0
    assert "not found" in result.output
    assert "• " not in result.output


def test_fetch_lists_matches_then_prints_top(downloaded):
    result = invoke(downloaded, "fetch", "sqlmodel", "many-to-many")
    assert result.exit_code == 0
    output = result.output
    assert "Found 2 matches" in output
    assert "1) many-to-many/index.md" in output
    assert "2) index.md" in output
    assert "✅ many-to-many/index.md" in output
    assert "Link tables." in output


def test_fetch_single_match_has_no_disambiguation(downloaded):
    result = invoke(downloaded, "fetch", "sqlmodel", "session")
    assert result.exit_code == 0
    assert "Found" not in result.output
    assert "✅ tutorial/index.md" in result.output


def test_fetch_without_match_fails(downloaded):
    result = invoke(downloaded, "fetch", "sqlmodel", "kubernetes")
    assert result.exit_code == 1
    assert "No matches" in result.output


def test_fetch_unknown_package_fails(downloaded):
    assert invoke(downloaded, "fetch", "django", "models").exit_code == 1


def test_export_to_stdout_and_file(downloaded, tmp_path):
    first = invoke(downloaded, "export", "sqlmodel")
    assert first.exit_code == 0
    assert "<!-- index.md -->" in first.output
    assert f"<!-- {START}many-to-many/ -->" in first.output

    out_file = tmp_path / "sqlmodel-docs.md"
    second = invoke(downloaded, "export", "sqlmodel", str(out_file))
    assert second.exit_code == 0
    content = out_file.read_text(encoding="utf-8")
    assert content.startswith("<!-- index.md -->")
    assert content.count("\n---\n") == 3


def test_export_unknown_package_writes_nothing(downloaded, tmp_path):
    out_file = tmp_path / "nothing.md"
    result = invoke(downloaded, "export", "django", str(out_file))
    assert result.exit_code == 1
    assert not out_file.exists()


def test_packages_and_remove(downloaded):
    listing = invoke(downloaded, "packages")
    assert listing.exit_code == 0
    assert "sqlmodel [crawl] 3 docs" in listing.output

    removed = invoke(downloaded, "remove", "sqlmodel", "--yes")
    assert removed.exit_code == 0
    assert not (downloaded / "sqlmodel").exists()
    assert invoke(downloaded, "list", "sqlmodel").exit_code == 1
    assert "No packages" in invoke(downloaded, "packages").output


def test_remove_keep_files(downloaded):
    result = invoke(downloaded, "remove", "sqlmodel", "--yes", "--keep-files")
    assert result.exit_code == 0
    assert (downloaded / "sqlmodel" / "markdown").is_dir()


def test_remove_unknown_package(downloaded):
    assert invoke(downloaded, "remove", "django", "--yes").exit_code == 1


def test_fetch_keeps_spaces_in_keyword(downloaded):
    # "rows." ends the tutorial text, so "rows " must not match while "rows" does.
    assert invoke(downloaded, "fetch", "sqlmodel", "rows").exit_code == 0
    result = invoke(downloaded, "fetch", "sqlmodel", "rows ")
    assert result.exit_code == 1
    assert "No matches" in result.output


def test_fetch_blank_keyword_is_rejected(downloaded):
    result = invoke(downloaded, "fetch", "sqlmodel", "   ")
    assert result.exit_code == 1
    assert "Usage" in result.output
