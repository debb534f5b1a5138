import asyncio
import os
import time

from signspider.workflows.page_fetch import cache_path_for, is_fresh
from signspider.workflows.spider_config import CrawlConfig

from conftest import FakeFetcher

PAGE_URL = "https://sts.example/en.au/sign/42/cat"


def _set_mtime_ms(path, mtime_ms: int) -> None:
    ns = mtime_ms * 1_000_000
    os.utime(path, ns=(ns, ns))


def test_is_fresh_boundary(tmp_path):
    path = tmp_path / "page.html"
    path.write_text("<html></html>", encoding="utf-8")
    now_ms = 1_700_000_000_000
    ttl_ms = 60_000

    _set_mtime_ms(path, now_ms - ttl_ms)
    assert is_fresh(path, ttl_ms, now_ms=now_ms) is False

    _set_mtime_ms(path, now_ms - ttl_ms + 1)
    assert is_fresh(path, ttl_ms, now_ms=now_ms) is True


def test_is_fresh_missing_file(tmp_path):
    assert is_fresh(tmp_path / "absent.html", 1000) is False


def test_cache_file_name_is_encoded_url(tmp_path):
    path = cache_path_for(tmp_path, "https://sts.example/a b")
    assert path.name == "https%3A%2F%2Fsts.example%2Fa%20b.html"


def test_fresh_cache_hit_skips_network(tmp_path):
    config = CrawlConfig(cache_folder=tmp_path, cache_ttl="1wk")
    cache_path_for(tmp_path, PAGE_URL).write_text("<h2>Cached</h2>", encoding="utf-8")
    fetcher = FakeFetcher(config, {PAGE_URL: "<h2>Live</h2>"})

    doc = asyncio.run(fetcher.fetch_document(PAGE_URL))

    assert doc is not None
    assert doc.from_cache is True
    assert doc.select_one("h2").get_text() == "Cached"
    assert fetcher.calls == []
    assert fetcher.stats["cache_hits"] == 1


def test_stale_cache_refetches_and_rewrites(tmp_path):
    config = CrawlConfig(cache_folder=tmp_path, cache_ttl="1h")
    cached = cache_path_for(tmp_path, PAGE_URL)
    cached.write_text("<h2>Old</h2>", encoding="utf-8")
    _set_mtime_ms(cached, int(time.time() * 1000) - 2 * 3_600_000)
    fetcher = FakeFetcher(config, {PAGE_URL: "<h2>Live</h2>"})

    doc = asyncio.run(fetcher.fetch_document(PAGE_URL))

    assert doc.from_cache is False
    assert doc.select_one("h2").get_text() == "Live"
    assert fetcher.calls == [PAGE_URL]
    assert cached.read_text(encoding="utf-8") == "<h2>Live</h2>"


def test_success_creates_cache_folder(tmp_path):
    cache_dir = tmp_path / "nested" / "cache"
    config = CrawlConfig(cache_folder=cache_dir)
    fetcher = FakeFetcher(config, {PAGE_URL: "<p>hello</p>"})

    asyncio.run(fetcher.fetch_document(PAGE_URL))

    assert cache_path_for(cache_dir, PAGE_URL).read_text(encoding="utf-8") == "<p>hello</p>"


def test_non_success_status_returns_none_without_caching(tmp_path):
    config = CrawlConfig(cache_folder=tmp_path)
    fetcher = FakeFetcher(config, {}, statuses={PAGE_URL: 503})

    doc = asyncio.run(fetcher.fetch_document(PAGE_URL))

    assert doc is None
    assert fetcher.stats["unavailable"] == 1
    assert not cache_path_for(tmp_path, PAGE_URL).exists()


def test_cache_write_failure_does_not_abort_fetch(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("occupied", encoding="utf-8")
    config = CrawlConfig(cache_folder=blocker)
    fetcher = FakeFetcher(config, {PAGE_URL: "<p>still here</p>"})

    doc = asyncio.run(fetcher.fetch_document(PAGE_URL))

    assert doc is not None
    assert doc.select_one("p").get_text() == "still here"
    assert fetcher.stats["cache_write_errors"] == 1


def test_no_cache_folder_always_fetches():
    fetcher = FakeFetcher(CrawlConfig(), {PAGE_URL: "<p>x</p>"})

    asyncio.run(fetcher.fetch_document(PAGE_URL))
    asyncio.run(fetcher.fetch_document(PAGE_URL))

    assert fetcher.calls == [PAGE_URL, PAGE_URL]
