from __future__ import annotations

import logging
from typing import Iterable, Iterator, List, Optional, Set

from .page_fetch import PageFetcher
from .scheduler import TaskQueue
from .spider_config import SEL_NEXT_PAGE, SEL_RESULT_LINKS
from .url_utils import resolve

logger = logging.getLogger(__name__)


class EntryURLSet:
    """Insertion-ordered entry URLs for one category, without duplicates.

    Also remembers which listing pages were already scheduled so a "next"
    link that points back into the chain is not walked twice.
    """

    def __init__(self, urls: Iterable[str] = ()) -> None:
        self._urls: List[str] = []
        self._seen: Set[str] = set()
        self.visited_pages: Set[str] = set()
        for url in urls:
            self.add(url)

    def add(self, url: str) -> bool:
        if url in self._seen:
            return False
        self._seen.add(url)
        self._urls.append(url)
        return True

    def __contains__(self, url: object) -> bool:
        return url in self._seen

    def __iter__(self) -> Iterator[str]:
        return iter(self._urls)

    def __len__(self) -> int:
        return len(self._urls)

    def to_list(self) -> List[str]:
        return list(self._urls)


def schedule_category_page(
    page_url: str,
    entry_urls: EntryURLSet,
    *,
    fetcher: PageFetcher,
    queue: TaskQueue,
) -> bool:
    """Queue a listing page unless it was already scheduled for this category."""

    if page_url in entry_urls.visited_pages:
        logger.debug("Skipping already scheduled page %s", page_url)
        return False
    entry_urls.visited_pages.add(page_url)
    queue.add(
        lambda: crawl_category_page(page_url, entry_urls, fetcher=fetcher, queue=queue),
        label=f"page {page_url}",
    )
    return True


async def crawl_category_page(
    page_url: str,
    entry_urls: EntryURLSet,
    *,
    fetcher: PageFetcher,
    queue: TaskQueue,
) -> Optional[str]:
    """Collect entry links from one listing page and queue the next page.

    Returns the next page URL when one was found.
    """

    logger.debug("Scanning %s", page_url)
    page = await fetcher.fetch_document(page_url)
    if page is None:
        logger.info("Listing page unavailable, stopping: %s", page_url)
        return None

    for link in page.select(SEL_RESULT_LINKS):
        href = link.get("href")
        if href:
            entry_urls.add(resolve(href, page_url))

    next_link = page.select_one(SEL_NEXT_PAGE)
    if next_link is None or not next_link.get("href"):
        return None
    next_url = resolve(next_link["href"], page_url)
    schedule_category_page(next_url, entry_urls, fetcher=fetcher, queue=queue)
    return next_url
