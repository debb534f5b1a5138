"""Exception types raised by the crawl pipeline."""

from __future__ import annotations


class SpiderError(Exception):
    """Base class for crawl failures."""


class DiscoveryError(SpiderError):
    """The category index could not be loaded; the crawl has no starting point."""


class ExtractionError(SpiderError):
    """An entry (or one of its variant pages) could not be read or parsed."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{reason}: {url}")
        self.url = url
        self.reason = reason
