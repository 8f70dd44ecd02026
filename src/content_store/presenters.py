"""Wire representations of content items, publish intents and errors."""

from __future__ import annotations

from typing import Any

from content_store.config import APIConfig
from content_store.content.models import ContentItem, PublishIntent

# Fields the public read API leaves out; routing detail is internal.
PRIVATE_FIELDS = {"routes", "redirects", "update_type"}


def present_content_item(item: ContentItem) -> dict[str, Any]:
    """The stored representation, keyed by ``base_path``."""
    return item.model_dump(mode="json")


def present_queue_message(item: ContentItem) -> dict[str, Any]:
    data = present_content_item(item)
    data["update_type"] = item.update_type
    return data


def present_publish_intent(intent: PublishIntent) -> dict[str, Any]:
    return intent.model_dump(mode="json")


def present_errors(errors: dict[str, list[str]]) -> dict[str, Any]:
    return {"errors": errors}


class URLBuilder:
    """Builds API and website URLs for a base path."""

    def __init__(self, config: APIConfig, public_api: bool = False) -> None:
        self.config = config
        self.public_api = public_api

    def api_url(self, base_path: str) -> str:
        prefix = "/api/content" if self.public_api else "/content"
        return f"{self.config.base_url.rstrip('/')}{prefix}{base_path}"

    def web_url(self, base_path: str) -> str:
        return f"{self.config.website_root.rstrip('/')}{base_path}"


def present_linked_item(item: ContentItem, urls: URLBuilder) -> dict[str, Any]:
    return {
        "content_id": item.content_id,
        "title": item.title,
        "base_path": item.base_path,
        "description": item.description,
        "api_url": urls.api_url(item.base_path),
        "web_url": urls.web_url(item.base_path),
        "locale": item.locale,
    }


def present_public_item(
    item: ContentItem,
    linked_items: dict[str, list[ContentItem]],
    urls: URLBuilder,
) -> dict[str, Any]:
    """Public read representation with ``links`` expanded to linked items."""
    data = item.model_dump(mode="json", exclude=PRIVATE_FIELDS)
    data["links"] = {
        link_type: [present_linked_item(linked, urls) for linked in items]
        for link_type, items in linked_items.items()
    }
    return data
