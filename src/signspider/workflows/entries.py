from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..core.keys import (
    K_METHOD,
    K_PROVIDER_ID,
    K_PROVIDER_LINK,
    K_PROVIDER_VERB,
    K_URL,
    MEDIA_METHOD_FETCH,
    PROVIDER_ID,
    PROVIDER_LABEL,
    PROVIDER_VERB,
)
from .categories import CategoryIndex
from .dataset import Dataset, EntryRecord, merge_record, tagify
from .errors import ExtractionError
from .page_fetch import CachedDocument, PageFetcher
from .spider_config import (
    SEL_CANONICAL,
    SEL_DESCRIPTION,
    SEL_KIND,
    SEL_TITLE,
    SEL_VARIANT_LINKS,
    SEL_VIDEO,
    CrawlConfig,
)
from .url_utils import entry_id_from_url, resolve

logger = logging.getLogger(__name__)


@dataclass
class ParsedEntry:
    """Fields read from a primary entry page, before variants are merged in."""

    id: str
    link: str
    title: str
    kind: str
    body: str
    media: List[Dict[str, str]] = field(default_factory=list)
    variant_urls: List[str] = field(default_factory=list)


def extract_media(page: CachedDocument, base_url: str) -> List[Dict[str, str]]:
    """Every ``<video src>`` on the page, resolved against ``base_url``."""

    media: List[Dict[str, str]] = []
    for video in page.select(SEL_VIDEO):
        src = video.get("src")
        if not src:
            continue
        media.append({K_METHOD: MEDIA_METHOD_FETCH, K_URL: resolve(src, base_url)})
    return media


def _required_text(page: CachedDocument, selector: str, entry_url: str) -> str:
    node = page.select_one(selector)
    if node is None:
        raise ExtractionError(entry_url, f"missing {selector}")
    return node.get_text().strip()


def _required_attr(page: CachedDocument, selector: str, attr: str, entry_url: str) -> str:
    node = page.select_one(selector)
    if node is None or node.get(attr) is None:
        raise ExtractionError(entry_url, f"missing {selector} [{attr}]")
    return node[attr]


def parse_entry_page(page: CachedDocument, entry_url: str) -> ParsedEntry:
    entry_id = entry_id_from_url(entry_url)
    if entry_id is None:
        raise ExtractionError(entry_url, "no numeric id in URL")

    link = resolve(_required_attr(page, SEL_CANONICAL, "href", entry_url), entry_url)
    variant_urls = [
        resolve(anchor["href"], entry_url)
        for anchor in page.select(SEL_VARIANT_LINKS)
        if anchor.get("href")
    ]
    return ParsedEntry(
        id=entry_id,
        link=link,
        title=_required_text(page, SEL_TITLE, entry_url),
        kind=_required_text(page, SEL_KIND, entry_url),
        body=_required_attr(page, SEL_DESCRIPTION, "content", entry_url),
        media=extract_media(page, entry_url),
        variant_urls=variant_urls,
    )


async def _read_page(fetcher: PageFetcher, url: str) -> CachedDocument:
    page = await fetcher.fetch_document(url)
    if page is None:
        raise ExtractionError(url, "page unavailable")
    return page


async def extract_entry(
    entry_url: str,
    category: str,
    categories: CategoryIndex,
    dataset: Dataset,
    *,
    fetcher: PageFetcher,
    config: CrawlConfig,
) -> Optional[EntryRecord]:
    """Read one entry (plus its regional variants) and merge it into ``dataset``.

    Returns the stored record, or None when no video was found. Raises
    ExtractionError when the entry or a variant page cannot be read.
    """

    logger.debug("Reading %s", entry_url)
    page = await _read_page(fetcher, entry_url)
    parsed = parse_entry_page(page, entry_url)

    media = list(parsed.media)
    for variant_url in parsed.variant_urls:
        logger.debug("Reading variant page %s", variant_url)
        variant_page = await _read_page(fetcher, variant_url)
        # video sources on variant pages resolve against the primary entry URL
        media.extend(extract_media(variant_page, entry_url))

    if not media:
        logger.debug("No video for %s, skipping", entry_url)
        return None

    record = EntryRecord(
        id=parsed.id,
        title=parsed.title,
        link=parsed.link,
        nav=[
            (PROVIDER_LABEL, config.base_url),
            (category, categories.get(category, "")),
            (parsed.title, parsed.link),
        ],
        tags=[tagify(PROVIDER_ID), tagify(parsed.kind), tagify(category)],
        body=parsed.body,
        media=media,
        provider={
            K_PROVIDER_ID: PROVIDER_ID,
            K_PROVIDER_LINK: config.base_url,
            K_PROVIDER_VERB: PROVIDER_VERB,
        },
    )
    return merge_record(dataset, record)
