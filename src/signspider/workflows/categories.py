from __future__ import annotations

import asyncio
import logging
from typing import Dict

import aiohttp

from .errors import DiscoveryError
from .page_fetch import PageFetcher
from .spider_config import CATEGORY_INDEX_PATH, SEL_CATEGORY_LINKS, CrawlConfig
from .url_utils import encode_component, resolve

logger = logging.getLogger(__name__)

CategoryIndex = Dict[str, str]


def category_index_url(config: CrawlConfig) -> str:
    return f"{config.base_url}/{encode_component(config.language)}/{CATEGORY_INDEX_PATH}"


async def discover_categories(config: CrawlConfig, fetcher: PageFetcher) -> CategoryIndex:
    """Map each category label on the index page to its listing URL.

    Raises DiscoveryError when the index page cannot be loaded. Duplicate
    labels keep the last link seen.
    """

    index_url = category_index_url(config)
    logger.info("loading categories list...")
    try:
        page = await fetcher.fetch_document(index_url)
    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
        raise DiscoveryError(f"Couldn't load categories search page {index_url}: {exc}") from exc
    if page is None:
        raise DiscoveryError(f"Couldn't load categories search page {index_url}")

    categories: CategoryIndex = {}
    for link in page.select(SEL_CATEGORY_LINKS):
        href = link.get("href")
        if not href:
            continue
        categories[link.get_text()] = resolve(href, index_url)
    logger.info("Categories: %s", ", ".join(categories))
    return categories
