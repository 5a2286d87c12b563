"""
Pydantic models for doc-archive.

Defines data structures for:
- The persisted manifest (`Manifest`, `Package`, `FileRecord`).
- Single HTTP responses handed back by a fetcher (`FetchResult`).
- Per-page conversion outcomes of a crawl (`PageOutcome`).

Third-party documentation:
- Pydantic: https://docs.pydantic.dev

Sample Input/Output:

Input (Python Code):
  record = FileRecord(
      path="tutorial/index.md",
      title="Tutorial",
      url="https://sqlmodel.tiangolo.com/tutorial/",
      local_reference="sqlmodel/markdown/tutorial/index.md",
  )
  print(record.model_dump_json(by_alias=True))

Output (JSON String):
  {"path": "tutorial/index.md", "title": "Tutorial",
   "url": "https://sqlmodel.tiangolo.com/tutorial/",
   "file": "sqlmodel/markdown/tutorial/index.md"}
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

METHOD_SINGLE_FILE = "single-file"
METHOD_CRAWL = "crawl"

AcquisitionMethod = Literal["single-file", "crawl"]


# ==============================================================================
# Manifest Models
# ==============================================================================


class FileRecord(BaseModel):
    """
    One markdown document belonging to a package.

    Attributes:
        path: Path relative to the package's markdown root (posix separators).
        title: First heading of the document, "" when absent or unreadable.
        url: Provenance URL of the document.
        local_reference: Location of the markdown file on disk. Serialized as
            ``file`` to stay compatible with existing manifests.
    """

    model_config = ConfigDict(populate_by_name=True)

    path: str
    title: str = ""
    url: str
    local_reference: str = Field(alias="file")


class Package(BaseModel):
    """One archived documentation set, keyed by name."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    url: str
    method: AcquisitionMethod
    file_count: int = 0
    files: List[FileRecord] = Field(default_factory=list)
    local_raw: Optional[str] = None
    raw_index: Optional[str] = None

    @field_validator("files")
    def files_sorted_and_unique(cls, v):
        paths = [f.path for f in v]
        if len(paths) != len(set(paths)):
            raise ValueError("file paths must be unique within a package")
        return sorted(v, key=lambda f: f.path)

    @model_validator(mode="after")
    def sync_file_count(self):
        self.file_count = len(self.files)
        return self


class Manifest(BaseModel):
    """The persisted index of all packages."""

    packages: List[Package] = Field(default_factory=list)

    @field_validator("packages")
    def unique_names(cls, v):
        names = [p.name for p in v]
        if len(names) != len(set(names)):
            raise ValueError("package names must be unique in the manifest")
        return v

    def find(self, name: str) -> Optional[Package]:
        return next((p for p in self.packages if p.name == name), None)

    def replace(self, package: Package) -> None:
        """Drops any package with the same name, then appends `package`."""
        self.packages = [p for p in self.packages if p.name != package.name]
        self.packages.append(package)


# ==============================================================================
# Download Models
# ==============================================================================


class FetchResult(BaseModel):
    """A single completed HTTP exchange, independent of the client library."""

    url: str
    status_code: int
    content: bytes = b""
    content_type: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def is_html(self) -> bool:
        return "html" in self.content_type.lower()


class PageOutcome(BaseModel):
    """
    Result of converting one crawled page.

    Only ``converted`` outcomes contribute markdown files; ``skipped`` outcomes
    carry the reason the page was left out.
    """

    url: str
    status: Literal["converted", "skipped"]
    path: Optional[str] = None
    reason: Optional[str] = None

    @model_validator(mode="after")
    def check_payload(self):
        if self.status == "converted" and not self.path:
            raise ValueError("converted outcome requires a path")
        if self.status == "skipped" and not self.reason:
            raise ValueError("skipped outcome requires a reason")
        return self
