from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .spider_config import CrawlConfig


def _check_writable(path: Path) -> bool:
    """True when ``path`` (or its nearest existing ancestor) is writable."""

    try:
        candidate = path
        while not candidate.exists():
            if candidate.parent == candidate:
                return False
            candidate = candidate.parent
        return candidate.is_dir() and os.access(candidate, os.W_OK)
    except OSError:
        return False


def _check_lxml_available() -> bool:
    try:
        import lxml  # noqa: F401
    except ImportError:
        return False
    return True


def build_doctor_report(config: CrawlConfig, *, data_path: Optional[Path] = None) -> Dict[str, Any]:
    report: Dict[str, Any] = {
        "generated_at": datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z"),
        "ok": True,
        "checks": [],
        "config": {
            "base_url": config.base_url,
            "language": config.language,
            "concurrency": config.concurrency,
            "cache_folder": str(config.cache_folder) if config.cache_folder else None,
            "cache_ttl": config.cache_ttl,
            "cache_ttl_ms": config.cache_ttl_ms,
            "timeout": config.timeout,
        },
    }

    def add_check(
        name: str,
        status: bool,
        *,
        detail: Optional[str] = None,
        remedy: Optional[str] = None,
        level: str = "warn",
    ) -> None:
        entry = {
            "name": name,
            "status": "ok" if status else "missing",
            "level": level,
            "detail": detail,
        }
        if remedy:
            entry["remedy"] = remedy
        report["checks"].append(entry)
        if not status and level == "warn":
            report["ok"] = False

    add_check(
        "lxml",
        _check_lxml_available(),
        detail="HTML parser backend",
        remedy="Install lxml (`pip install lxml`).",
    )

    if config.cache_folder is None:
        add_check("cache_folder", True, detail="HTML cache disabled", level="info")
    else:
        add_check(
            "cache_folder",
            _check_writable(config.cache_folder),
            detail=str(config.cache_folder),
            remedy="Create the cache folder or point --cache-folder at a writable location.",
        )

    if data_path is not None:
        add_check(
            "data_path",
            _check_writable(data_path.parent),
            detail=str(data_path),
            remedy="Choose an output path inside a writable directory.",
        )

    return report


def format_doctor_report(report: Dict[str, Any]) -> str:
    lines: List[str] = []
    lines.append("signspider doctor")
    lines.append(f"Generated: {report.get('generated_at')}")
    lines.append("")
    for key, value in (report.get("config") or {}).items():
        lines.append(f"{key}: {value}")
    lines.append("")
    for check in report.get("checks", []):
        name = check.get("name", "check")
        status = check.get("status", "unknown")
        level = check.get("level", "info")
        lines.append(f"- [{level}] {name}: {status}")
        detail = check.get("detail")
        if detail:
            lines.append(f"  detail: {detail}")
        remedy = check.get("remedy")
        if remedy:
            lines.append(f"  remedy: {remedy}")
    return "\n".join(lines).rstrip() + "\n"
