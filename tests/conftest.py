from typing import Dict, List, Optional

import pytest

from signspider.workflows.page_fetch import PageFetcher
from signspider.workflows.spider_config import CrawlConfig

BASE_URL = "https://sts.example"


class FakeFetcher(PageFetcher):
    """PageFetcher that serves canned HTML instead of touching the network."""

    def __init__(self, config: CrawlConfig, pages: Dict[str, str], statuses: Optional[Dict[str, int]] = None) -> None:
        super().__init__(config)
        self.pages = pages
        self.statuses = statuses or {}
        self.calls: List[str] = []

    async def __aenter__(self) -> "FakeFetcher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        return None

    async def _fetch_once(self, url: str):
        self.calls.append(url)
        if url in self.statuses:
            return self.statuses[url], ""
        if url in self.pages:
            return 200, self.pages[url]
        return 404, "not found"


@pytest.fixture
def config() -> CrawlConfig:
    return CrawlConfig(base_url=BASE_URL, language="en.au", concurrency=3)


@pytest.fixture
def make_fetcher(config):
    def _make(pages: Dict[str, str], statuses: Optional[Dict[str, int]] = None, cfg: Optional[CrawlConfig] = None):
        return FakeFetcher(cfg or config, pages, statuses)

    return _make
