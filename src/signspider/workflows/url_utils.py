"""URL helpers shared by the crawl phases."""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import quote, urljoin, urlparse

# Characters encodeURIComponent leaves untouched besides alphanumerics and "_.-~"
_COMPONENT_SAFE = "!*'()"
_NUMERIC_SEGMENT = re.compile(r"^[0-9]+$")


def resolve(href: str, base: str) -> str:
    """Return ``href`` as an absolute URL, resolved against ``base``."""

    return urljoin(base, (href or "").strip())


def encode_component(value: str) -> str:
    """Percent-encode a string the way JavaScript's encodeURIComponent does."""

    return quote(value, safe=_COMPONENT_SAFE)


def cache_key(url: str) -> str:
    """Filesystem-safe cache key for a URL."""

    return encode_component(url)


def entry_id_from_url(url: str) -> Optional[str]:
    """Return the first purely numeric path segment of ``url``, if any."""

    path = urlparse(url).path or ""
    for segment in path.split("/"):
        if _NUMERIC_SEGMENT.match(segment):
            return segment
    return None


def sanity_check() -> None:
    assert resolve("/sign/42", "https://example.com/cat/animals") == "https://example.com/sign/42"
    assert resolve("//cdn.example.com/v.mp4", "https://example.com/") == "https://cdn.example.com/v.mp4"
    assert encode_component("https://a.b/c d?x=1") == "https%3A%2F%2Fa.b%2Fc%20d%3Fx%3D1"
    assert entry_id_from_url("https://example.com/en.au/sign/42/cat") == "42"
    assert entry_id_from_url("https://example.com/en.au/sign/cat") is None


sanity_check()

__all__ = [
    "resolve",
    "encode_component",
    "cache_key",
    "entry_id_from_url",
    "sanity_check",
]
