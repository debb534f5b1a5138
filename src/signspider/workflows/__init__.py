"""High-level exports for the crawl workflows."""

from .categories import CategoryIndex, category_index_url, discover_categories
from .dataset import Dataset, EntryRecord, merge_record, tagify, write_dataset
from .entries import extract_entry, parse_entry_page
from .errors import DiscoveryError, ExtractionError, SpiderError
from .page_fetch import CachedDocument, PageFetcher
from .pagination import EntryURLSet, crawl_category_page
from .scheduler import TaskQueue
from .spider import SpiderResult, crawl, run_spider
from .spider_config import CrawlConfig, parse_duration

__all__ = [
    "CachedDocument",
    "CategoryIndex",
    "CrawlConfig",
    "Dataset",
    "DiscoveryError",
    "EntryRecord",
    "EntryURLSet",
    "ExtractionError",
    "PageFetcher",
    "SpiderError",
    "SpiderResult",
    "TaskQueue",
    "category_index_url",
    "crawl",
    "crawl_category_page",
    "discover_categories",
    "extract_entry",
    "merge_record",
    "parse_duration",
    "parse_entry_page",
    "run_spider",
    "tagify",
    "write_dataset",
]
