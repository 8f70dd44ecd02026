"""Content domain — content item and publish intent models, storage and writes."""

from content_store.content.models import (
    ContentItem,
    PublishIntent,
    WriteOutcome,
)

__all__ = [
    "ContentItem",
    "PublishIntent",
    "WriteOutcome",
]
