"""JSON-backed document store for content items and publish intents.

Records are held in memory keyed by ``base_path`` and, when a path is
given, saved to a JSON file after every write.  Each write replaces the
whole record under a lock, so an upsert is atomic per call; sequences of
calls are not.  Queries iterate a snapshot taken under the same lock.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import ClassVar, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from content_store.content.models import NON_RENDERABLE_FORMATS, ContentItem, PublishIntent

logger = logging.getLogger(__name__)

CONTENT_ITEMS_FILENAME = "content-items.json"
PUBLISH_INTENTS_FILENAME = "publish-intents.json"

ASCENDING = 1
DESCENDING = -1

# Alias to avoid shadowing by the ``list`` methods below
_list = list

R = TypeVar("R", ContentItem, PublishIntent)


class _JsonCollection(Generic[R]):
    """Records of one model type keyed by ``base_path``."""

    model: ClassVar[type[BaseModel]]

    def __init__(self, path: Path | None = None) -> None:
        self._path = path
        self._lock = threading.Lock()
        self._records: dict[str, R] = self._load()

    # ── Private helpers ──────────────────────────────────────────

    def _load(self) -> dict[str, R]:
        if self._path is None or not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            records = [self.model.model_validate(r) for r in raw.get("records", [])]
        except (json.JSONDecodeError, ValidationError, AttributeError):
            logger.warning("Corrupt store file at %s, starting fresh", self._path)
            return {}
        return {r.base_path: r for r in records}  # type: ignore[attr-defined]

    def _save(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"records": [r.model_dump(mode="json") for r in self._records.values()]}
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        os.replace(tmp, self._path)

    # ── Operations ───────────────────────────────────────────────

    def get(self, base_path: str) -> R | None:
        """Return the record at *base_path*, or None."""
        return self._records.get(base_path)

    def exists(self, base_path: str) -> bool:
        return base_path in self._records

    def upsert(self, record: R, now: datetime | None = None) -> R:
        """Insert or replace *record* by base path, stamping ``updated_at``."""
        stamped = record.model_copy(update={"updated_at": now or datetime.now(tz=UTC)})
        with self._lock:
            self._records[stamped.base_path] = stamped
            self._save()
        return stamped

    def delete(self, base_path: str) -> bool:
        """Remove the record at *base_path*; True if one existed."""
        with self._lock:
            existed = self._records.pop(base_path, None) is not None
            if existed:
                self._save()
        return existed

    def list(self) -> _list[R]:
        with self._lock:
            return _list(self._records.values())

    def count(self) -> int:
        return len(self._records)


def _sorted(records: Iterable[R], sort: Sequence[tuple[str, int]]) -> _list[R]:
    """Multi-key sort; missing values order before present ones."""
    results = _list(records)
    for field, direction in reversed(sort):
        results.sort(
            key=lambda r: (getattr(r, field) is not None, getattr(r, field)),
            reverse=direction == DESCENDING,
        )
    return results


class ContentItemRepository(_JsonCollection[ContentItem]):
    """Content items, with the queries link resolution needs."""

    model = ContentItem

    def find(
        self,
        *,
        content_ids: Iterable[str] | None = None,
        locales: Iterable[str] | None = None,
        renderable_only: bool = False,
        sort: Sequence[tuple[str, int]] = (),
    ) -> _list[ContentItem]:
        """Filter by content id and locale, then sort.

        Args:
            content_ids: Keep only items whose ``content_id`` is in this set.
            locales: Keep only items in one of these locales.
            renderable_only: Drop redirect and gone items.
            sort: ``(field, ASCENDING|DESCENDING)`` pairs, most significant first.
        """
        id_set = set(content_ids) if content_ids is not None else None
        locale_set = set(locales) if locales is not None else None

        results: _list[ContentItem] = []
        for item in self.list():
            if renderable_only and item.format in NON_RENDERABLE_FORMATS:
                continue
            if id_set is not None and item.content_id not in id_set:
                continue
            if locale_set is not None and item.locale not in locale_set:
                continue
            results.append(item)
        return _sorted(results, sort)


class PublishIntentRepository(_JsonCollection[PublishIntent]):
    """Publish intents keyed by base path."""

    model = PublishIntent


def open_repositories(directory: Path) -> tuple[ContentItemRepository, PublishIntentRepository]:
    """Open the file-backed stores under *directory*."""
    return (
        ContentItemRepository(directory / CONTENT_ITEMS_FILENAME),
        PublishIntentRepository(directory / PUBLISH_INTENTS_FILENAME),
    )
