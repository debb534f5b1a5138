"""Entry records, tag normalization and the merged dataset."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple

from ..core.keys import (
    K_BODY,
    K_LINK,
    K_MEDIA,
    K_NAV,
    K_PROVIDER,
    K_TAGS,
    K_TITLE,
)

_NON_TAG_CHARS = re.compile(r"[^a-zA-Z_-]+")
_DOTS = re.compile(r"\.+")
_UNDERSCORES = re.compile(r"_+")
_DASHES = re.compile(r"-+")


def tagify(value: str) -> str:
    """Normalize a label into a tag: ``"Noun (verb)"`` -> ``"noun.verb."``."""

    tag = _NON_TAG_CHARS.sub(".", value or "").lower()
    tag = _DOTS.sub(".", tag)
    tag = _UNDERSCORES.sub("_", tag)
    return _DASHES.sub("-", tag)


def union_tags(*groups: Iterable[str]) -> List[str]:
    """Concatenate tag groups, dropping repeats and keeping first occurrences."""

    merged: Dict[str, None] = {}
    for group in groups:
        for tag in group:
            merged.setdefault(tag, None)
    return list(merged)


@dataclass
class EntryRecord:
    id: str
    title: str
    link: str
    nav: List[Tuple[str, str]]
    tags: List[str]
    body: str
    media: List[Dict[str, str]]
    provider: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            K_TITLE: self.title,
            K_LINK: self.link,
            K_NAV: [[label, url] for label, url in self.nav],
            K_TAGS: list(self.tags),
            K_BODY: self.body,
            K_MEDIA: [dict(item) for item in self.media],
            K_PROVIDER: dict(self.provider),
        }


Dataset = Dict[str, EntryRecord]


def merge_record(dataset: Dataset, record: EntryRecord) -> EntryRecord:
    """Store ``record`` under its id, keeping every tag an earlier record had.

    All other fields come from the newest record.
    """

    existing = dataset.get(record.id)
    prior_tags = existing.tags if existing is not None else []
    merged = replace(record, tags=union_tags(record.tags, prior_tags))
    dataset[record.id] = merged
    return merged


def dataset_to_dict(dataset: Dataset) -> Dict[str, Dict[str, Any]]:
    return {entry_id: record.to_dict() for entry_id, record in dataset.items()}


def write_dataset(dataset: Dataset, output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as fh:
        json.dump(dataset_to_dict(dataset), fh, ensure_ascii=False)
