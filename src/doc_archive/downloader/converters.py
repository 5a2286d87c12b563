"""
Description:
    HTML to markdown conversion for crawled pages. `Converter` is the
    capability the workflow depends on; `Html2TextConverter` implements it
    with html2text. Any failure is raised as ConversionFailure so the caller
    can record the page as skipped and move on.

Third-Party Documentation:
    - html2text: https://github.com/Alir3z4/html2text
    - BeautifulSoup (UnicodeDammit): https://www.crummy.com/software/BeautifulSoup/bs4/doc/#unicode-dammit

Sample Input/Output:
    converter = Html2TextConverter()
    converter.convert(b"<h1>Intro</h1><p>Hello <a href='/x'>x</a></p>", "https://example.com/")
    # "# Intro\n\nHello [x](https://example.com/x)\n"
"""

import logging
from typing import Protocol

import html2text
from bs4 import UnicodeDammit

from ..errors import ConversionFailure

logger = logging.getLogger(__name__)


class Converter(Protocol):
    def convert(self, content: bytes, base_url: str) -> str:
        """Returns markdown for one HTML page. Raises ConversionFailure."""
        ...


class Html2TextConverter:
    """
    html2text with links kept, images dropped and no line wrapping.
    """

    def __init__(self, ignore_links: bool = False, ignore_images: bool = True):
        self.ignore_links = ignore_links
        self.ignore_images = ignore_images

    def _handler(self, base_url: str) -> html2text.HTML2Text:
        h = html2text.HTML2Text(baseurl=base_url)
        h.ignore_links = self.ignore_links
        h.ignore_images = self.ignore_images
        h.body_width = 0
        return h

    def convert(self, content: bytes, base_url: str) -> str:
        markup = UnicodeDammit(content, is_html=True).unicode_markup
        if markup is None:
            raise ConversionFailure(f"Could not decode HTML from {base_url}")
        try:
            markdown = self._handler(base_url).handle(markup)
        except Exception as e:
            raise ConversionFailure(f"html2text failed for {base_url}: {e}") from e
        if not markdown.strip():
            raise ConversionFailure(f"No text content in {base_url}")
        return markdown.strip() + "\n"
