"""doc-archive: download, index, search and export documentation as markdown."""

__version__ = "0.1.0"
