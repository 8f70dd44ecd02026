"""Field validation for content items and publish intents.

Every rule runs and every failure is collected, so one response can
report all of a payload's problems.
"""

from __future__ import annotations

import re
from collections.abc import Collection
from typing import Any

from content_store.content.models import (
    REDIRECT_KEYS,
    ROUTE_KEYS,
    ContentItem,
    PublishIntent,
)
from content_store.routes.models import is_absolute_path
from content_store.routes.route_set import (
    REDIRECTS_FIELD,
    ROUTES_FIELD,
    from_content_item,
    from_publish_intent,
    validate_route_set,
)

BLANK = "can't be blank"
INVALID = "is invalid"
RESERVED_LINK_TYPE = "available_translations"

_UUID = re.compile(
    r"\A[a-f0-9]{8}-[a-f0-9]{4}-[1-5][a-f0-9]{3}-[89ab][a-f0-9]{3}-[a-f0-9]{12}\Z",
    re.IGNORECASE,
)
_IDENTIFIER = re.compile(r"\A[a-z0-9_]+\Z", re.IGNORECASE)
_APP_NAME = re.compile(r"\A[a-z0-9-]*\Z")
_LINK_TYPE = re.compile(r"\A[a-z0-9_]+\Z")


def is_uuid(value: object) -> bool:
    return isinstance(value, str) and bool(_UUID.match(value))


def _blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _to_sentence(words: list[str]) -> str:
    if len(words) <= 2:
        return " and ".join(words)
    return f"{', '.join(words[:-1])}, and {words[-1]}"


class _Errors:
    """Ordered ``field -> [messages]`` accumulator."""

    def __init__(self) -> None:
        self.messages: dict[str, list[str]] = {}

    def add(self, field: str, message: str) -> None:
        self.messages.setdefault(field, []).append(message)

    def extend(self, other: dict[str, list[str]]) -> None:
        for field, messages in other.items():
            for message in messages:
                self.add(field, message)


def _validate_base_path(errors: _Errors, base_path: str) -> None:
    if not is_absolute_path(base_path):
        errors.add("base_path", "is not a valid absolute URL path")


def _validate_extra_route_keys(errors: _Errors, routes: list[dict], redirects: list[dict]) -> None:
    if any(set(route) - set(ROUTE_KEYS) for route in routes):
        errors.add(ROUTES_FIELD, "are invalid")
    if any(set(redirect) - set(REDIRECT_KEYS) for redirect in redirects):
        errors.add(REDIRECTS_FIELD, "are invalid")


def _validate_links(errors: _Errors, links: dict[str, Any]) -> None:
    if not links:
        return

    bad_keys = [
        key for key in links
        if not (isinstance(key, str) and _LINK_TYPE.match(key) and key != RESERVED_LINK_TYPE)
    ]
    if bad_keys:
        errors.add("links", f"Invalid link types: {_to_sentence(bad_keys)}")

    bad_values = [
        value for value in links.values()
        if not (isinstance(value, list) and all(is_uuid(v) for v in value))
    ]
    if bad_values:
        errors.add("links", "must map to lists of UUIDs")


def validate_content_item(
    item: ContentItem,
    *,
    available_locales: Collection[str],
) -> dict[str, list[str]]:
    """Validate *item*, returning ``field -> [messages]`` (empty when valid).

    Every write announces a change, so ``update_type`` is required even
    when no stored field differs.

    Args:
        item: The candidate item.
        available_locales: Locales a renderable item may use.
    """
    errors = _Errors()

    _validate_base_path(errors, item.base_path)

    if item.content_id is not None and not is_uuid(item.content_id):
        errors.add("content_id", "must be a UUID")

    if _blank(item.format):
        errors.add("format", BLANK)
    if _blank(item.publishing_app):
        errors.add("publishing_app", BLANK)

    if _blank(item.update_type):
        errors.add("update_type", BLANK)

    for field in ("format", "update_type"):
        value = getattr(item, field)
        if not _blank(value) and not _IDENTIFIER.match(value):
            errors.add(field, INVALID)

    if item.is_renderable:
        if _blank(item.title):
            errors.add("title", BLANK)
        if _blank(item.rendering_app):
            errors.add("rendering_app", BLANK)
        if not _APP_NAME.match(item.rendering_app or ""):
            errors.add("rendering_app", INVALID)
        if item.public_updated_at is None:
            errors.add("public_updated_at", BLANK)

    if not _blank(item.base_path):
        errors.extend(validate_route_set(from_content_item(item)))

    _validate_extra_route_keys(errors, item.routes, item.redirects)
    _validate_links(errors, item.links)

    if item.is_renderable and item.locale not in available_locales:
        errors.add("locale", "must be a supported locale")

    return errors.messages


def validate_publish_intent(
    intent: PublishIntent,
    content_item: ContentItem | None = None,
) -> dict[str, list[str]]:
    """Validate *intent*, returning ``field -> [messages]`` (empty when valid).

    The route set is checked the way it will be registered: supplementary
    when *content_item* already exists at the same base path.
    """
    errors = _Errors()

    _validate_base_path(errors, intent.base_path)

    if intent.publish_time is None:
        errors.add("publish_time", BLANK)
    if _blank(intent.rendering_app):
        errors.add("rendering_app", BLANK)
    elif not _APP_NAME.match(intent.rendering_app or ""):
        errors.add("rendering_app", INVALID)

    if not _blank(intent.base_path):
        errors.extend(validate_route_set(from_publish_intent(intent, content_item)))

    _validate_extra_route_keys(errors, intent.routes, intent.redirects)

    return errors.messages
