"""
Unit tests for exporter.py (combined markdown export).
"""
import pytest

from doc_archive.errors import PackageNotFound
from doc_archive.exporter import export_package, render_export


@pytest.fixture
def crawled(make_package):
    return make_package(
        "fastapi",
        {"b.md": "# B\nbody b", "a.md": "# A\nbody a"},
        url="https://fastapi.tiangolo.com/",
    )


def test_export_wraps_each_file_in_manifest_order(store, crawled):
    document = render_export(store, "fastapi")
    assert document == (
        "<!-- a.md -->\n<!-- https://fastapi.tiangolo.com/a/ -->\n\n# A\nbody a\n\n---\n\n"
        "<!-- b.md -->\n<!-- https://fastapi.tiangolo.com/b/ -->\n\n# B\nbody b\n\n---\n\n"
    )


def test_export_without_provenance(store, crawled):
    document = render_export(store, "fastapi", provenance=False)
    assert document == "# A\nbody a\n\n---\n\n# B\nbody b\n\n---\n\n"


def test_export_is_idempotent(store, crawled):
    assert render_export(store, "fastapi") == render_export(store, "fastapi")


def test_single_file_package_is_exported_verbatim(store, make_package):
    content = "# Pydantic\n\nAll the docs in one file.\n"
    make_package(
        "pydantic",
        {"all-docs.md": content},
        url="https://docs.pydantic.dev/latest/",
        method="single-file",
    )
    assert render_export(store, "pydantic") == content


def test_export_writes_output_file(store, tmp_path, crawled):
    output = tmp_path / "out" / "fastapi.md"
    document = export_package(store, "fastapi", output=output)
    assert output.read_text(encoding="utf-8") == document
    assert document == render_export(store, "fastapi")


def test_unknown_package_writes_nothing(store, tmp_path, crawled):
    output = tmp_path / "missing.md"
    with pytest.raises(PackageNotFound):
        export_package(store, "django", output=output)
    assert not output.exists()


def test_export_of_empty_package_is_empty(store, make_package):
    make_package("empty", {})
    assert render_export(store, "empty") == ""
