"""
Module: errors.py

Description:
Exception hierarchy for doc-archive. Library code raises these; the CLI is the
only place they are turned into user-facing messages and exit codes.
"""


class DocArchiveError(Exception):
    """Base exception for all doc-archive failures."""

    pass


class InvalidArguments(DocArchiveError):
    """A required argument is missing or unusable."""

    pass


class PackageNotFound(DocArchiveError):
    """The named package has no entry in the manifest."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Package '{name}' not found")


class AcquisitionFailure(DocArchiveError):
    """Documentation could not be retrieved from the source URL."""

    pass


class ConversionFailure(DocArchiveError):
    """A single HTML page could not be converted to markdown."""

    pass


class PersistenceFailure(DocArchiveError):
    """The manifest could not be read or written."""

    pass
