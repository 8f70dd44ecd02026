"""Request surface for the content store, independent of any web framework.

Paths look like ``/content<base_path>``, ``/api/content<base_path>`` (public,
read-only) and ``/publish-intent<base_path>``.  A request path without a
base path after the namespace is not routable.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any
from urllib.parse import quote

from pydantic import BaseModel, Field

from content_store.cache import cache_expiry, cache_headers
from content_store.config import ContentStoreConfig
from content_store.content.models import WriteOutcome
from content_store.content.service import ContentItemStore, PublishIntentStore, WriteResult
from content_store.content.store import open_repositories
from content_store.errors import MalformedInputError, RegistrationError
from content_store.integrations.publisher import build_publisher
from content_store.integrations.router import RouterAPIClient
from content_store.links import LinkResolver
from content_store.presenters import (
    URLBuilder,
    present_errors,
    present_publish_intent,
    present_public_item,
)
from content_store.routes.registration import RouteRegistrationCoordinator, RouterClient

logger = logging.getLogger(__name__)

CONTENT_PREFIX = "/content"
PUBLIC_CONTENT_PREFIX = "/api/content"
PUBLISH_INTENT_PREFIX = "/publish-intent"

# Characters left alone when encoding a path; "%" keeps existing escapes.
_PATH_SAFE = "/%:@!$&'()*+,;=-._~"

_STATUS_BY_OUTCOME = {
    WriteOutcome.CREATED: 201,
    WriteOutcome.REPLACED: 200,
    WriteOutcome.FAILED: 422,
}


class ApiResponse(BaseModel):
    """Status, JSON body and headers of a handled request."""

    status: int
    body: dict[str, Any] = Field(default_factory=dict)
    headers: dict[str, str] = Field(default_factory=dict)


NOT_FOUND = ApiResponse(status=404, body={"message": "Not found"})


def encode_path(path: str) -> str:
    """Percent-encode non-ASCII and unsafe characters, keeping existing escapes."""
    return quote(path, safe=_PATH_SAFE)


def base_path_from(request_path: str, prefix: str) -> str | None:
    """Extract the base path following *prefix*, or None if not routable."""
    if not request_path.startswith(prefix + "/"):
        return None
    base_path = request_path[len(prefix):]
    if base_path == "/":
        return None
    return encode_path(base_path)


def parse_body(body: str | bytes) -> dict[str, Any]:
    """Parse a request body that must be a JSON object.

    Raises:
        MalformedInputError: the body is not JSON or not an object.
    """
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise MalformedInputError(f"Request body is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise MalformedInputError("Request body must be a JSON object")
    return data


def _write_response(result: WriteResult) -> ApiResponse:
    body = present_errors(result.errors) if result.errors else {}
    return ApiResponse(status=_STATUS_BY_OUTCOME[result.outcome], body=body)


def _malformed(exc: MalformedInputError) -> ApiResponse:
    return ApiResponse(status=400, body={"message": str(exc)})


def _registration_failed(exc: RegistrationError) -> ApiResponse:
    logger.error("Write failed during route registration: %s", exc)
    return ApiResponse(status=500, body={"message": str(exc)})


class ContentStoreAPI:
    """Handle reads and writes of content items and publish intents."""

    def __init__(
        self,
        content_items: ContentItemStore,
        publish_intents: PublishIntentStore,
        links: LinkResolver,
        config: ContentStoreConfig,
    ) -> None:
        self.content_items = content_items
        self.publish_intents = publish_intents
        self.links = links
        self.config = config

    # ── Content items ────────────────────────────────────────────

    def show_content_item(self, request_path: str, now: datetime | None = None) -> ApiResponse:
        """GET ``/content<base_path>`` or ``/api/content<base_path>``."""
        now = now or datetime.now(tz=UTC)
        public_api = request_path.startswith(PUBLIC_CONTENT_PREFIX)
        prefix = PUBLIC_CONTENT_PREFIX if public_api else CONTENT_PREFIX
        base_path = base_path_from(request_path, prefix)
        if base_path is None:
            return NOT_FOUND

        item = self.content_items.get(base_path)
        if item is None:
            return NOT_FOUND

        intent = self.publish_intents.get(base_path)
        expires_at = cache_expiry(
            now,
            intent,
            self.config.cache.default_ttl_delta,
            self.config.cache.minimum_ttl_delta,
        )
        urls = URLBuilder(self.config.api, public_api=public_api)
        return ApiResponse(
            status=200,
            body=present_public_item(item, self.links.linked_items(item), urls),
            headers=cache_headers(now, expires_at),
        )

    def update_content_item(self, request_path: str, body: str | bytes) -> ApiResponse:
        """PUT ``/content<base_path>``."""
        base_path = base_path_from(request_path, CONTENT_PREFIX)
        if base_path is None:
            return NOT_FOUND
        try:
            attributes = parse_body(body)
            result = self.content_items.create_or_replace(base_path, attributes)
        except MalformedInputError as exc:
            return _malformed(exc)
        except RegistrationError as exc:
            return _registration_failed(exc)
        return _write_response(result)

    # ── Publish intents ──────────────────────────────────────────

    def show_publish_intent(self, request_path: str) -> ApiResponse:
        """GET ``/publish-intent<base_path>``."""
        base_path = base_path_from(request_path, PUBLISH_INTENT_PREFIX)
        intent = self.publish_intents.get(base_path) if base_path else None
        if intent is None:
            return NOT_FOUND
        return ApiResponse(status=200, body=present_publish_intent(intent))

    def update_publish_intent(self, request_path: str, body: str | bytes) -> ApiResponse:
        """PUT ``/publish-intent<base_path>``."""
        base_path = base_path_from(request_path, PUBLISH_INTENT_PREFIX)
        if base_path is None:
            return NOT_FOUND
        try:
            attributes = parse_body(body)
            result = self.publish_intents.create_or_replace(base_path, attributes)
        except MalformedInputError as exc:
            return _malformed(exc)
        except RegistrationError as exc:
            return _registration_failed(exc)
        return _write_response(result)

    def destroy_publish_intent(self, request_path: str) -> ApiResponse:
        """DELETE ``/publish-intent<base_path>``."""
        base_path = base_path_from(request_path, PUBLISH_INTENT_PREFIX)
        if base_path is None or not self.publish_intents.delete(base_path):
            return NOT_FOUND
        return ApiResponse(status=200)


def build_api(config: ContentStoreConfig, router: RouterClient | None = None) -> ContentStoreAPI:
    """Wire the stores, router client and publisher described by *config*."""
    items_repo, intents_repo = open_repositories(config.store_directory)
    if router is None:
        if not config.router.is_configured:
            logger.warning("Router API URL not configured; route registration will fail")
        router = RouterAPIClient(config.router)
    registration = RouteRegistrationCoordinator(router, config.router.backend_url)

    content_items = ContentItemStore(
        items_repo,
        registration,
        build_publisher(config.notifications),
        config.locales.available,
    )
    publish_intents = PublishIntentStore(intents_repo, items_repo, registration)
    links = LinkResolver(items_repo, config.locales.default)
    return ContentStoreAPI(content_items, publish_intents, links, config)
