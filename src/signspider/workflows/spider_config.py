"""Spider defaults (site, selectors, cache) and the run configuration.

Centralizes static defaults so the crawl modules have no embedded magic
strings. Callers build a CrawlConfig directly or via CrawlConfig.from_env().
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

# Site defaults
DEFAULT_BASE_URL = "https://www.spreadthesign.com"
DEFAULT_LANGUAGE = "en.au"
DEFAULT_DATA_PATH = Path("spread-the-sign-auslan.json")
DEFAULT_CACHE_TTL = "1wk"
DEFAULT_CONCURRENCY = 10
DEFAULT_TIMEOUT = 30.0
CATEGORY_INDEX_PATH = "search/by-category/"
CACHE_SUFFIX = ".html"

# Selectors
SEL_CATEGORY_LINKS = "#categories li a"
SEL_RESULT_LINKS = ".search-result-title a"
SEL_NEXT_PAGE = ".search-pager-next a"
SEL_CANONICAL = "link[rel=canonical]"
SEL_TITLE = ".search-result-content h2"
SEL_KIND = ".search-result.open small"
SEL_DESCRIPTION = "meta[name=description]"
SEL_VIDEO = "video"
SEL_VARIANT_LINKS = "#show-result ul.nav li:not(.active) a"

# Environment variables
ENV_BASE_URL = "SIGNSPIDER_BASE_URL"
ENV_LANGUAGE = "SIGNSPIDER_LANGUAGE"
ENV_CONCURRENCY = "SIGNSPIDER_CONCURRENCY"
ENV_CACHE_DIR = "SIGNSPIDER_CACHE_DIR"
ENV_CACHE_TTL = "SIGNSPIDER_CACHE_TTL"
ENV_TIMEOUT = "SIGNSPIDER_TIMEOUT"
ENV_USER_AGENT = "SIGNSPIDER_USER_AGENT"

_MS_PER_UNIT: Dict[str, float] = {
    "ns": 1e-6,
    "nanosecond": 1e-6,
    "us": 1e-3,
    "µs": 1e-3,
    "μs": 1e-3,
    "microsecond": 1e-3,
    "ms": 1.0,
    "millisecond": 1.0,
    "s": 1000.0,
    "sec": 1000.0,
    "second": 1000.0,
    "m": 60_000.0,
    "min": 60_000.0,
    "minute": 60_000.0,
    "h": 3_600_000.0,
    "hr": 3_600_000.0,
    "hour": 3_600_000.0,
    "d": 86_400_000.0,
    "day": 86_400_000.0,
    "w": 604_800_000.0,
    "wk": 604_800_000.0,
    "week": 604_800_000.0,
    "mo": 2_629_800_000.0,
    "month": 2_629_800_000.0,
    "y": 31_557_600_000.0,
    "yr": 31_557_600_000.0,
    "year": 31_557_600_000.0,
}

_DURATION_TERM = re.compile(r"(-?(?:\d+\.?\d*|\.\d+))\s*([^\d\s.,-]*)")


def _unit_ms(unit: str) -> Optional[float]:
    key = unit.strip().lower()
    if key in _MS_PER_UNIT:
        return _MS_PER_UNIT[key]
    if key.endswith("s") and key[:-1] in _MS_PER_UNIT:
        return _MS_PER_UNIT[key[:-1]]
    return None


def parse_duration(text: str) -> int:
    """Parse a human duration such as ``"1wk"`` or ``"2h 30m"`` into milliseconds.

    A bare number is taken as milliseconds. Months are 30.4375 days and years
    365.25 days.
    """

    raw = (text or "").strip()
    if not raw:
        raise ValueError("duration must be a non-empty string")
    total = 0.0
    matched = False
    pos = 0
    for match in _DURATION_TERM.finditer(raw):
        gap = raw[pos:match.start()]
        if gap.strip(" ,"):
            raise ValueError(f"Unrecognised duration: {text!r}")
        pos = match.end()
        number, unit = match.groups()
        factor = _unit_ms(unit) if unit else 1.0
        if factor is None:
            raise ValueError(f"Unknown duration unit {unit!r} in {text!r}")
        total += float(number) * factor
        matched = True
    if not matched or raw[pos:].strip(" ,"):
        raise ValueError(f"Unrecognised duration: {text!r}")
    return int(round(total))


def _env_int(name: str, default: int) -> int:
    try:
        raw = os.getenv(name, "")
        return int(raw) if raw.strip() else default
    except (TypeError, ValueError):
        return default


def _env_float(name: str, default: float) -> float:
    try:
        raw = os.getenv(name, "")
        return float(raw) if raw.strip() else default
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True, slots=True)
class CrawlConfig:
    """Settings for one crawl run."""

    base_url: str = DEFAULT_BASE_URL
    language: str = DEFAULT_LANGUAGE
    concurrency: int = DEFAULT_CONCURRENCY
    cache_folder: Optional[Path] = None
    cache_ttl: str = DEFAULT_CACHE_TTL
    timeout: float = DEFAULT_TIMEOUT
    user_agent: Optional[str] = None
    cache_ttl_ms: int = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.concurrency, int) or self.concurrency < 1:
            raise ValueError(f"concurrency must be a positive integer, got {self.concurrency!r}")
        if not (self.base_url or "").strip():
            raise ValueError("base_url must be a non-empty string")
        object.__setattr__(self, "base_url", self.base_url.strip().rstrip("/"))
        if self.cache_folder is not None and not isinstance(self.cache_folder, Path):
            object.__setattr__(self, "cache_folder", Path(self.cache_folder))
        object.__setattr__(self, "cache_ttl_ms", parse_duration(self.cache_ttl))

    @property
    def caching(self) -> bool:
        return self.cache_folder is not None

    @classmethod
    def from_env(cls, **overrides) -> "CrawlConfig":
        """Build a config from SIGNSPIDER_* variables; non-None overrides win."""

        cache_dir = os.getenv(ENV_CACHE_DIR, "").strip()
        values = {
            "base_url": os.getenv(ENV_BASE_URL, "").strip() or DEFAULT_BASE_URL,
            "language": os.getenv(ENV_LANGUAGE, "").strip() or DEFAULT_LANGUAGE,
            "concurrency": _env_int(ENV_CONCURRENCY, DEFAULT_CONCURRENCY),
            "cache_folder": Path(cache_dir) if cache_dir else None,
            "cache_ttl": os.getenv(ENV_CACHE_TTL, "").strip() or DEFAULT_CACHE_TTL,
            "timeout": _env_float(ENV_TIMEOUT, DEFAULT_TIMEOUT),
            "user_agent": os.getenv(ENV_USER_AGENT, "").strip() or None,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)
