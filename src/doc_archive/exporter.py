"""
Module: exporter.py

Description:
Concatenates every markdown file of a package, in manifest order, into one
document suitable for feeding to an AI assistant. Each file is wrapped as:

  <!-- {path} -->
  <!-- {url} -->

  {content}

  ---

A single-file package (one llms.txt document) is already in combined form and
is emitted verbatim. The whole document is assembled in memory before anything
is written, so an unknown package or unreadable file never leaves a partial
export behind.
"""

import logging
from pathlib import Path
from typing import List, Optional

from .errors import PersistenceFailure
from .manifest import ManifestStore, write_atomic
from .models import METHOD_SINGLE_FILE, Package

logger = logging.getLogger(__name__)

SEPARATOR = "---"


def _read_markdown(store: ManifestStore, package: Package, index: int) -> str:
    record = package.files[index]
    path = store.resolve(record)
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise PersistenceFailure(
            f"Cannot read {record.path} of package '{package.name}': {e}"
        ) from e


def render_export(
    store: ManifestStore, package_name: str, provenance: bool = True
) -> str:
    """
    Builds the combined markdown document for `package_name`.

    Args:
        store: Manifest store to read from.
        package_name: Package to export.
        provenance: Emit the path/url comment lines before each file.

    Raises:
        PackageNotFound: if the package is not in the manifest.
        PersistenceFailure: if a recorded file cannot be read.
    """
    package = store.get(package_name)

    if package.method == METHOD_SINGLE_FILE and package.file_count == 1:
        logger.debug(f"'{package_name}' is a single combined document, exporting as is")
        return _read_markdown(store, package, 0)

    parts: List[str] = []
    for index, record in enumerate(package.files):
        content = _read_markdown(store, package, index)
        if provenance:
            parts.append(f"<!-- {record.path} -->\n<!-- {record.url} -->\n\n")
        parts.append(f"{content}\n\n{SEPARATOR}\n\n")
    return "".join(parts)


def export_package(
    store: ManifestStore,
    package_name: str,
    output: Optional[Path] = None,
    provenance: bool = True,
) -> str:
    """
    Renders the export and, when `output` is given, writes it atomically.

    Returns the rendered document either way.
    """
    document = render_export(store, package_name, provenance=provenance)
    if output is not None:
        try:
            write_atomic(Path(output), document)
        except OSError as e:
            raise PersistenceFailure(f"Could not write export to {output}: {e}") from e
        logger.info(f"Exported '{package_name}' to {output}")
    return document
