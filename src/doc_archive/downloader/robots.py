"""
Description:
  Robots Exclusion Protocol support for the crawl. `load_robots` fetches
  `<origin>/robots.txt` once through the crawl's Fetcher and parses it with
  the standard library's RobotFileParser; `is_allowed` then answers per URL
  for our user agent.

  Anything short of a readable 2xx robots.txt (404, timeout, empty body,
  unparsable content) means crawling is allowed.

Python Standard Library Documentation:
  - urllib.robotparser: https://docs.python.org/3/library/urllib.robotparser.html

Sample Input:
  rules = load_robots("https://docs.example.com/guide/", fetcher, timeout=30)
  is_allowed(rules, "https://docs.example.com/guide/private/")

Sample Expected Output:
  - False when robots.txt holds "Disallow: /guide/private/" for "*".
"""

import logging
from typing import Optional
from urllib.robotparser import RobotFileParser

from ..errors import AcquisitionFailure
from ..utils import origin_of
from .fetchers import USER_AGENT, Fetcher

logger = logging.getLogger(__name__)


def robots_txt_url(url: str) -> str:
    return origin_of(url) + "/robots.txt"


def load_robots(url: str, fetcher: Fetcher, timeout: float) -> Optional[RobotFileParser]:
    """
    Fetches and parses robots.txt for the origin of `url`.

    Returns None when there are no usable rules, which allows everything.
    """
    robots_url = robots_txt_url(url)
    logger.debug(f"ROBOTS: Fetching {robots_url}")
    try:
        result = fetcher.fetch(robots_url, timeout=timeout)
    except AcquisitionFailure as e:
        logger.debug(f"ROBOTS: Could not fetch {robots_url} ({e}). Allowing crawl.")
        return None
    if not result.ok:
        logger.debug(f"ROBOTS: {robots_url} returned HTTP {result.status_code}. Allowing crawl.")
        return None

    content = result.content.decode("utf-8", errors="replace")
    if not content.strip():
        logger.debug(f"ROBOTS: Empty robots.txt at {robots_url}. Allowing crawl.")
        return None

    parser = RobotFileParser()
    parser.set_url(robots_url)
    parser.parse(content.splitlines())
    logger.info(f"Loaded robots.txt rules from {robots_url}")
    return parser


def is_allowed(rules: Optional[RobotFileParser], url: str) -> bool:
    if rules is None:
        return True
    return rules.can_fetch(USER_AGENT, url)
