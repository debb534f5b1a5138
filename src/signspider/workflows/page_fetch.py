from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import aiohttp
from bs4 import BeautifulSoup

from .spider_config import CACHE_SUFFIX, CrawlConfig
from .url_utils import cache_key

logger = logging.getLogger(__name__)


def parse_html(text: str) -> BeautifulSoup:
    return BeautifulSoup(text, "lxml")


def cache_path_for(cache_folder: Path, url: str) -> Path:
    return cache_folder / f"{cache_key(url)}{CACHE_SUFFIX}"


def is_fresh(path: Path, ttl_ms: int, *, now_ms: Optional[float] = None) -> bool:
    """Return True when ``path`` was modified strictly after ``now - ttl``."""

    if now_ms is None:
        now_ms = time.time() * 1000
    try:
        mtime_ms = path.stat().st_mtime_ns / 1_000_000
    except OSError:
        return False
    return mtime_ms > now_ms - ttl_ms


@dataclass
class CachedDocument:
    """A parsed page plus the URL it was read from."""

    url: str
    soup: BeautifulSoup = field(repr=False)
    from_cache: bool = False

    def select(self, selector: str):
        return self.soup.select(selector)

    def select_one(self, selector: str):
        return self.soup.select_one(selector)


class PageFetcher:
    """Async page reader with an optional time-bounded on-disk HTML cache."""

    def __init__(
        self,
        config: CrawlConfig,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self.config = config
        self._session = session
        self._owns_session = session is None
        self.stats: Dict[str, int] = {
            "requests": 0,
            "cache_hits": 0,
            "unavailable": 0,
            "cache_write_errors": 0,
        }

    async def __aenter__(self) -> "PageFetcher":
        if self._session is None:
            connector = aiohttp.TCPConnector(limit=self.config.concurrency)
            headers = {"User-Agent": self.config.user_agent} if self.config.user_agent else None
            timeout = aiohttp.ClientTimeout(total=self.config.timeout)
            self._session = aiohttp.ClientSession(connector=connector, headers=headers, timeout=timeout)
            self._owns_session = True
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    async def fetch_document(self, url: str) -> Optional[CachedDocument]:
        """Return the parsed page at ``url``, or None when the server refuses it."""

        cache_folder = self.config.cache_folder
        if cache_folder is not None:
            cache_file = cache_path_for(cache_folder, url)
            if is_fresh(cache_file, self.config.cache_ttl_ms):
                self.stats["cache_hits"] += 1
                text = cache_file.read_text(encoding="utf-8", errors="replace")
                return CachedDocument(url=url, soup=parse_html(text), from_cache=True)

        self.stats["requests"] += 1
        status, text = await self._fetch_once(url)
        if not 200 <= status < 300:
            self.stats["unavailable"] += 1
            logger.debug("HTTP %s for %s", status, url)
            return None

        if cache_folder is not None:
            self._write_cache(cache_folder, url, text)
        return CachedDocument(url=url, soup=parse_html(text), from_cache=False)

    def _write_cache(self, cache_folder: Path, url: str, text: str) -> None:
        try:
            cache_folder.mkdir(parents=True, exist_ok=True)
            cache_path_for(cache_folder, url).write_text(text, encoding="utf-8")
        except OSError as exc:
            self.stats["cache_write_errors"] += 1
            logger.warning("Could not cache %s: %s", url, exc)

    async def _fetch_once(self, url: str) -> Tuple[int, str]:
        if self._session is None:
            raise RuntimeError("PageFetcher used outside of its async context")
        async with self._session.get(url) as resp:
            status = resp.status
            raw_bytes = await resp.read()
        return status, raw_bytes.decode("utf-8", "ignore")
