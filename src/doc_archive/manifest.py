"""
Module: manifest.py

Description:
The Manifest Store: one JSON document (`manifest.json`) mapping package names
to their ordered file records. Every mutation is a load / modify / save cycle
and each save replaces the whole file atomically (write to a temp file in the
same directory, then `os.replace`).

Sample Input/Output:
  store = ManifestStore(Path("manifest.json"))
  pkg = store.rebuild("sqlmodel", "https://sqlmodel.tiangolo.com/", "crawl",
                      Path("sqlmodel/markdown"))
  # manifest.json now holds:
  # {"packages": [{"name": "sqlmodel", "url": "https://sqlmodel.tiangolo.com",
  #                "method": "crawl", "file_count": 2,
  #                "files": [{"path": "index.md", "title": "SQLModel",
  #                           "url": "https://sqlmodel.tiangolo.com/",
  #                           "file": "sqlmodel/markdown/index.md"}, ...]}]}
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from .errors import PackageNotFound, PersistenceFailure
from .models import METHOD_CRAWL, FileRecord, Manifest, Package
from .utils import crawl_scope, derive_file_url, extract_title, normalize_source_url

logger = logging.getLogger(__name__)


def write_atomic(target: Path, text: str) -> None:
    """Writes `text` to `target` via a sibling temp file and os.replace."""
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{target.name}.", suffix=".tmp", dir=str(target.parent)
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_name, target)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


class ManifestStore:
    """
    Reads and writes the manifest file.

    Usage:
        store = ManifestStore(Path("docs/manifest.json"))
        package = store.get("fastapi")
        for record in package.files:
            print(record.path, store.resolve(record))
    """

    def __init__(self, manifest_path: Path):
        self.manifest_path = Path(manifest_path)
        self.root = self.manifest_path.parent

    def load(self, strict: bool = False) -> Manifest:
        """
        Loads the manifest. A missing file is an empty manifest.

        A corrupt file is logged and treated as empty, unless `strict` is set,
        in which case PersistenceFailure is raised.
        """
        if not self.manifest_path.exists():
            logger.debug(f"No manifest at {self.manifest_path}, starting empty.")
            return Manifest()
        try:
            with open(self.manifest_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return Manifest.model_validate(data)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            if strict:
                raise PersistenceFailure(
                    f"Manifest {self.manifest_path} is unreadable: {e}"
                ) from e
            logger.warning(f"Ignoring unreadable manifest {self.manifest_path}: {e}")
            return Manifest()

    def save(self, manifest: Manifest) -> None:
        payload = manifest.model_dump(by_alias=True, exclude_none=True)
        try:
            write_atomic(self.manifest_path, json.dumps(payload, indent=2) + "\n")
        except OSError as e:
            raise PersistenceFailure(
                f"Could not write manifest {self.manifest_path}: {e}"
            ) from e
        logger.debug(f"Saved manifest with {len(manifest.packages)} package(s)")

    def get(self, name: str) -> Package:
        package = self.load().find(name)
        if package is None:
            raise PackageNotFound(name)
        return package

    def list_packages(self) -> List[Package]:
        return list(self.load().packages)

    def remove(self, name: str) -> Package:
        manifest = self.load(strict=True)
        package = manifest.find(name)
        if package is None:
            raise PackageNotFound(name)
        manifest.packages = [p for p in manifest.packages if p.name != name]
        self.save(manifest)
        logger.info(f"Removed package '{name}' from manifest")
        return package

    def rebuild(
        self,
        name: str,
        source_url: str,
        method: str,
        markdown_root: Path,
        raw_index: Optional[str] = None,
    ) -> Package:
        """
        Rebuilds the package entry from the markdown files on disk and saves.

        Any existing entry with the same name is replaced, never merged.
        """
        markdown_root = Path(markdown_root)
        scope = crawl_scope(source_url)
        package_url = normalize_source_url(source_url)

        files = []
        for md_file in self._scan_markdown(markdown_root):
            rel_path = md_file.relative_to(markdown_root).as_posix()
            if method == METHOD_CRAWL:
                doc_url = derive_file_url(scope, rel_path)
            else:
                doc_url = package_url
            files.append(
                FileRecord(
                    path=rel_path,
                    title=extract_title(md_file),
                    url=doc_url,
                    local_reference=self._reference_for(md_file),
                )
            )

        package = Package(name=name, url=package_url, method=method, files=files)
        if method == METHOD_CRAWL:
            package.local_raw = f"{name}/raw"
            package.raw_index = raw_index

        manifest = self.load(strict=True)
        manifest.replace(package)
        self.save(manifest)
        logger.info(f"Manifest updated: {package.file_count} files indexed for '{name}'")
        return package

    def resolve(self, record: FileRecord) -> Path:
        """Path on disk of a record's markdown file."""
        reference = Path(record.local_reference)
        if reference.is_absolute():
            return reference
        return self.root / reference

    def _reference_for(self, md_file: Path) -> str:
        try:
            return md_file.resolve().relative_to(self.root.resolve()).as_posix()
        except ValueError:
            return str(md_file.resolve())

    @staticmethod
    def _scan_markdown(markdown_root: Path) -> List[Path]:
        if not markdown_root.is_dir():
            logger.warning(f"Markdown directory {markdown_root} does not exist")
            return []
        return sorted(
            p
            for p in markdown_root.rglob("*.md")
            if p.is_file() and "raw" not in p.relative_to(markdown_root).parts[:-1]
        )
