from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from enum import Enum

TAG_CATEGORIES: tuple[str, ...] = ("character", "artist", "rarity")

DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 20
MAX_PER_PAGE = 100

CACHE_KEY_PREFIX = "gallery_images"


class CombinationMode(str, Enum):
    ALL = "ALL"
    ANY = "ANY"

    @classmethod
    def from_filter_logic(cls, value: str | None) -> "CombinationMode":
        raw = (value or "").strip().upper()
        if raw in {"", "OR", "ANY"}:
            return cls.ANY
        if raw in {"AND", "ALL"}:
            return cls.ALL
        raise ValueError(f"unsupported filter logic: {value!r}")


def parse_slug_list(raw: str | None) -> tuple[str, ...]:
    """Split a comma-separated slug list, dropping blanks and duplicates.

    The result is sorted so that the same set of slugs always produces the
    same filter, whatever order the client sent it in.
    """
    seen: set[str] = set()
    for part in (raw or "").split(","):
        slug = part.strip().lower()
        if slug:
            seen.add(slug)
    return tuple(sorted(seen))


@dataclass(frozen=True, slots=True)
class FilterQuery:
    gallery_id: int
    tags: dict[str, tuple[str, ...]] = field(default_factory=dict)
    mode: CombinationMode = CombinationMode.ANY
    page: int = DEFAULT_PAGE
    per_page: int = DEFAULT_PER_PAGE

    def __post_init__(self) -> None:
        if int(self.gallery_id) <= 0:
            raise ValueError("gallery_id must be positive")
        if int(self.page) < 1:
            raise ValueError("page must be >= 1")
        if not 1 <= int(self.per_page) <= MAX_PER_PAGE:
            raise ValueError(f"per_page must be within 1..{MAX_PER_PAGE}")
        unknown = set(self.tags) - set(TAG_CATEGORIES)
        if unknown:
            raise ValueError(f"unknown tag categories: {sorted(unknown)}")

    def slugs_for(self, category: str) -> tuple[str, ...]:
        return tuple(self.tags.get(category) or ())

    @property
    def requested_categories(self) -> tuple[str, ...]:
        """Categories the caller filtered on, whether or not their slugs resolve."""
        return tuple(c for c in TAG_CATEGORIES if self.slugs_for(c))

    @property
    def offset(self) -> int:
        return (int(self.page) - 1) * int(self.per_page)


def fingerprint(query: FilterQuery, *, version: int) -> str:
    payload = {
        "gallery_id": int(query.gallery_id),
        "version": int(version),
        "tags": {c: sorted(query.slugs_for(c)) for c in TAG_CATEGORIES},
        "mode": query.mode.value,
        "page": int(query.page),
        "per_page": int(query.per_page),
    }
    raw = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    digest = hashlib.sha256(raw).hexdigest()
    return f"{CACHE_KEY_PREFIX}:{int(query.gallery_id)}:{digest}"
