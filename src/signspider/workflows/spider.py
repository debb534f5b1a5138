"""Two-phase crawl: walk category listings, then extract every entry found."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .categories import CategoryIndex, discover_categories
from .dataset import Dataset, write_dataset
from .entries import extract_entry
from .page_fetch import PageFetcher
from .pagination import EntryURLSet, schedule_category_page
from .scheduler import TaskFailure, TaskQueue
from .spider_config import CrawlConfig

logger = logging.getLogger(__name__)

_MAX_FAILURE_EXAMPLES = 8


@dataclass
class SpiderResult:
    dataset: Dataset
    categories: CategoryIndex
    entry_urls: Dict[str, List[str]]
    audit: Dict[str, Any] = field(default_factory=dict)


def _build_audit(
    *,
    categories: CategoryIndex,
    entry_urls: Dict[str, EntryURLSet],
    dataset: Dataset,
    failures: List[TaskFailure],
    fetch_stats: Dict[str, int],
    runtime_seconds: float,
) -> Dict[str, Any]:
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "categories": len(categories),
        "listing_pages": sum(len(urls.visited_pages) for urls in entry_urls.values()),
        "entry_urls": sum(len(urls) for urls in entry_urls.values()),
        "records": len(dataset),
        "failed_tasks": len(failures),
        "failure_examples": [f.to_dict() for f in failures[:_MAX_FAILURE_EXAMPLES]],
        "fetch": dict(fetch_stats),
        "runtime_seconds": round(max(runtime_seconds, 0.0), 3),
    }


async def crawl(config: CrawlConfig, *, fetcher: Optional[PageFetcher] = None) -> SpiderResult:
    """Run both crawl phases and return the merged dataset.

    Raises DiscoveryError when the category index is unreachable; every other
    failure is confined to its own task and reported in the audit.
    """

    start = time.perf_counter()
    page_fetcher = fetcher or PageFetcher(config)
    async with page_fetcher:
        categories = await discover_categories(config, page_fetcher)
        queue = TaskQueue(config.concurrency)

        logger.info("Scraping category pages for entry links...")
        entry_urls: Dict[str, EntryURLSet] = {}
        for category, listing_url in categories.items():
            logger.debug("Looking at Category: %s...", category)
            entry_urls[category] = EntryURLSet()
            schedule_category_page(listing_url, entry_urls[category], fetcher=page_fetcher, queue=queue)
        await queue.on_idle()

        logger.info("Scraping entry links for entry data...")
        dataset: Dataset = {}
        for category, urls in entry_urls.items():
            for entry_url in urls:
                queue.add(
                    lambda entry_url=entry_url, category=category: extract_entry(
                        entry_url,
                        category,
                        categories,
                        dataset,
                        fetcher=page_fetcher,
                        config=config,
                    ),
                    label=f"entry {entry_url}",
                )
        await queue.on_idle()

    audit = _build_audit(
        categories=categories,
        entry_urls=entry_urls,
        dataset=dataset,
        failures=queue.failures,
        fetch_stats=page_fetcher.stats,
        runtime_seconds=time.perf_counter() - start,
    )
    if queue.failures:
        logger.warning("%d task(s) failed; see log for details", len(queue.failures))
    return SpiderResult(
        dataset=dataset,
        categories=categories,
        entry_urls={category: urls.to_list() for category, urls in entry_urls.items()},
        audit=audit,
    )


def run_spider(config: CrawlConfig, output_path: Path) -> SpiderResult:
    """Crawl synchronously and write the dataset to ``output_path``."""

    result = asyncio.run(crawl(config))
    write_dataset(result.dataset, output_path)
    result.audit["output_path"] = str(output_path)
    logger.info("Done scraping SpreadTheSign (%d entries)", len(result.dataset))
    return result
