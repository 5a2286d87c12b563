"""Acquisition of documentation: llms.txt probe, site crawl and HTML conversion."""

from .converters import Converter, Html2TextConverter
from .fetchers import Fetcher, HttpxFetcher
from .workflow import AcquisitionResult, acquire, download_package

__all__ = [
    "AcquisitionResult",
    "Converter",
    "Fetcher",
    "Html2TextConverter",
    "HttpxFetcher",
    "acquire",
    "download_package",
]
