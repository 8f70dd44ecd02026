"""Write pipelines for content items and publish intents.

A content item write runs four stages in a fixed order:

1. decode and validate the payload (nothing is written on failure)
2. upsert the item by base path
3. register its routes with the routing tier and commit
4. publish a change message

Stage 3 runs before the write is reported complete.  If it fails the
item stays persisted: the store and the router are separate systems and
nothing rolls the upsert back.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Mapping
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from content_store.content.decode import decode_content_item, decode_publish_intent
from content_store.content.models import ContentItem, PublishIntent, WriteOutcome
from content_store.content.store import ContentItemRepository, PublishIntentRepository
from content_store.content.validation import validate_content_item, validate_publish_intent
from content_store.errors import PublishError, RegistrationError
from content_store.errors import ValidationError as ContentValidationError
from content_store.integrations.publisher import MessagePublisher
from content_store.routes.registration import RouteRegistrationCoordinator
from content_store.routes.route_set import from_content_item, from_publish_intent

logger = logging.getLogger(__name__)


class WriteResult(BaseModel):
    """Outcome of a create-or-replace call.

    ``record`` is None when the payload could not be decoded at all.
    """

    outcome: WriteOutcome
    record: ContentItem | PublishIntent | None = None
    errors: dict[str, list[str]] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.outcome != WriteOutcome.FAILED


class ContentItemStore:
    """Create-or-replace semantics for content items."""

    def __init__(
        self,
        repository: ContentItemRepository,
        registration: RouteRegistrationCoordinator,
        publisher: MessagePublisher,
        available_locales: Collection[str],
    ) -> None:
        self.repository = repository
        self.registration = registration
        self.publisher = publisher
        self.available_locales = available_locales

    def get(self, base_path: str) -> ContentItem | None:
        return self.repository.get(base_path)

    def create_or_replace(
        self,
        base_path: str,
        attributes: Mapping[str, Any],
        now: datetime | None = None,
    ) -> WriteResult:
        """Validate, persist, register and announce the item at *base_path*.

        Returns a FAILED result carrying field errors when the payload is
        invalid; nothing is persisted or registered in that case.

        Raises:
            RegistrationError: the routing tier rejected the routes.  The
                item has already been persisted.
        """
        outcome = (
            WriteOutcome.REPLACED if self.repository.exists(base_path) else WriteOutcome.CREATED
        )

        try:
            item = decode_content_item(base_path, attributes)
        except ContentValidationError as exc:
            logger.info("Rejected payload for %s: %s", base_path, exc)
            return WriteResult(outcome=WriteOutcome.FAILED, errors=exc.errors)

        errors = validate_content_item(item, available_locales=self.available_locales)
        if errors:
            logger.info("Invalid content item at %s: %s", base_path, errors)
            return WriteResult(outcome=WriteOutcome.FAILED, record=item, errors=errors)

        stored = self.repository.upsert(item.model_copy(update={"update_type": None}), now)
        stored = stored.model_copy(update={"update_type": item.update_type})
        logger.info("%s content item %s", outcome.value.capitalize(), base_path)

        if stored.is_placeholder:
            logger.debug("Not registering routes for placeholder %s", base_path)
        else:
            try:
                self.registration.register(from_content_item(stored))
            except RegistrationError:
                logger.error("Route registration failed for persisted item %s", base_path)
                raise

        self._notify(stored)
        return WriteResult(outcome=outcome, record=stored)

    def _notify(self, item: ContentItem) -> None:
        try:
            self.publisher.publish(item)
        except PublishError:
            logger.warning("Change message for %s not sent", item.base_path, exc_info=True)


class PublishIntentStore:
    """Create, replace and delete publish intents.

    An intent's routes are registered as soon as it is saved so they are
    live before the scheduled publish.
    """

    def __init__(
        self,
        repository: PublishIntentRepository,
        content_items: ContentItemRepository,
        registration: RouteRegistrationCoordinator,
    ) -> None:
        self.repository = repository
        self.content_items = content_items
        self.registration = registration

    def get(self, base_path: str) -> PublishIntent | None:
        return self.repository.get(base_path)

    def create_or_replace(
        self,
        base_path: str,
        attributes: Mapping[str, Any],
        now: datetime | None = None,
    ) -> WriteResult:
        """Validate, persist and register the intent at *base_path*.

        Raises:
            RegistrationError: the routing tier rejected the routes.  The
                intent has already been persisted.
        """
        outcome = (
            WriteOutcome.REPLACED if self.repository.exists(base_path) else WriteOutcome.CREATED
        )

        try:
            intent = decode_publish_intent(base_path, attributes)
        except ContentValidationError as exc:
            logger.info("Rejected publish intent payload for %s: %s", base_path, exc)
            return WriteResult(outcome=WriteOutcome.FAILED, errors=exc.errors)

        content_item = self.content_items.get(base_path)
        errors = validate_publish_intent(intent, content_item)
        if errors:
            return WriteResult(outcome=WriteOutcome.FAILED, record=intent, errors=errors)

        stored = self.repository.upsert(intent, now)
        logger.info("%s publish intent %s", outcome.value.capitalize(), base_path)
        self.registration.register(from_publish_intent(stored, content_item))
        return WriteResult(outcome=outcome, record=stored)

    def delete(self, base_path: str) -> bool:
        """Remove the intent at *base_path*; False if there was none."""
        deleted = self.repository.delete(base_path)
        if deleted:
            logger.info("Deleted publish intent %s", base_path)
        return deleted
