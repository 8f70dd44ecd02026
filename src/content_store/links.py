"""Resolve an item's links and translations to concrete content items.

Links are stored as ``link_type -> [content_id, ...]``.  Several items can
share a content id (one per locale, and older versions); resolution picks
one per id, preferring the linking item's own locale and falling back to
the default locale.
"""

from __future__ import annotations

import logging
from collections import defaultdict

from content_store.content.models import ContentItem
from content_store.content.store import ASCENDING, DESCENDING, ContentItemRepository
from content_store.content.validation import RESERVED_LINK_TYPE

logger = logging.getLogger(__name__)


class LinkResolver:
    """Read-only resolution of links and available translations."""

    def __init__(self, repository: ContentItemRepository, default_locale: str) -> None:
        self.repository = repository
        self.default_locale = default_locale

    def linked_items(self, item: ContentItem) -> dict[str, list[ContentItem]]:
        """Map each link type to the items it resolves to, in link order.

        Ids with no renderable item in a usable locale are dropped.  The
        item's translations are added under ``available_translations``.
        """
        resolved = self._resolve_content_ids(item)

        result: dict[str, list[ContentItem]] = {}
        for link_type, content_ids in item.links.items():
            result[link_type] = [resolved[cid] for cid in content_ids if cid in resolved]

        translations = self.available_translations(item)
        if translations:
            result[RESERVED_LINK_TYPE] = translations
        return result

    def available_translations(self, item: ContentItem) -> list[ContentItem]:
        """The newest renderable item per locale sharing *item*'s content id.

        Ordered by locale.  An item without a content id is its own only
        translation.
        """
        if item.content_id is None:
            return [item]

        candidates = self.repository.find(
            content_ids=[item.content_id],
            renderable_only=True,
            sort=[("locale", ASCENDING), ("updated_at", ASCENDING)],
        )
        latest: dict[str, ContentItem] = {}
        for candidate in candidates:
            latest[candidate.locale] = candidate
        return list(latest.values())

    def _locale_preference(self, item: ContentItem) -> list[str]:
        return list(dict.fromkeys([item.locale, self.default_locale]))

    def _resolve_content_ids(self, item: ContentItem) -> dict[str, ContentItem]:
        """Pick one item per linked content id.

        First pass groups candidates by content id, newest first; second
        pass takes the first candidate in each locale of preference.
        """
        content_ids = {cid for ids in item.links.values() for cid in ids}
        if not content_ids:
            return {}

        preference = self._locale_preference(item)
        candidates = self.repository.find(
            content_ids=content_ids,
            locales=preference,
            renderable_only=True,
            sort=[("updated_at", DESCENDING)],
        )

        groups: dict[str, list[ContentItem]] = defaultdict(list)
        for candidate in candidates:
            groups[candidate.content_id].append(candidate)

        resolved: dict[str, ContentItem] = {}
        for content_id, group in groups.items():
            for locale in preference:
                match = next((c for c in group if c.locale == locale), None)
                if match is not None:
                    resolved[content_id] = match
                    break

        unresolved = content_ids - resolved.keys()
        if unresolved:
            logger.debug("No renderable item for linked ids %s", sorted(unresolved))
        return resolved
