"""Message publishing — tells downstream consumers that an item changed.

Delivery is at-least-once: consumers must treat repeated messages for
the same item as idempotent.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from typing import Protocol

from content_store.config import NotificationConfig
from content_store.content.models import ContentItem
from content_store.errors import PublishError
from content_store.presenters import present_queue_message

logger = logging.getLogger(__name__)


class MessagePublisher(Protocol):
    def publish(self, item: ContentItem) -> None: ...


def routing_key(item: ContentItem) -> str:
    """``<format>.<update_type>``, the key consumers bind on."""
    return f"{item.format}.{item.update_type}"


class HTTPMessagePublisher:
    """POSTs each message as JSON to the configured endpoint."""

    def __init__(self, config: NotificationConfig) -> None:
        self.config = config

    def publish(self, item: ContentItem) -> None:
        """Send *item*; raises PublishError on any delivery failure."""
        key = routing_key(item)
        body = json.dumps(present_queue_message(item)).encode("utf-8")
        try:
            req = urllib.request.Request(
                self.config.url,
                data=body,
                method="POST",
                headers={
                    "Content-Type": "application/json",
                    "X-Routing-Key": key,
                },
            )
            with urllib.request.urlopen(req, timeout=self.config.timeout):
                pass
        except (urllib.error.URLError, OSError, ValueError) as exc:
            raise PublishError(f"Failed to publish {item.base_path} ({key}): {exc}") from exc
        logger.debug("Published %s with routing key %s", item.base_path, key)


class NullPublisher:
    """Used when no notification endpoint is configured."""

    def publish(self, item: ContentItem) -> None:
        logger.debug("Notifications disabled, not publishing %s", item.base_path)


def build_publisher(config: NotificationConfig) -> MessagePublisher:
    if config.is_configured:
        return HTTPMessagePublisher(config)
    return NullPublisher()
