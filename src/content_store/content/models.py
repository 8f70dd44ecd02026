"""Content domain models — pure Pydantic v2 data types.

A ContentItem is keyed by its ``base_path`` and describes one renderable
(or redirect/gone) page.  A PublishIntent records routes to provision
ahead of a scheduled publish at the same ``base_path``.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_LOCALE = "en"

REDIRECT_FORMAT = "redirect"
GONE_FORMAT = "gone"
NON_RENDERABLE_FORMATS = frozenset({REDIRECT_FORMAT, GONE_FORMAT})
PLACEHOLDER_PREFIX = "placeholder"

ROUTE_KEYS = ("path", "type")
REDIRECT_KEYS = ("path", "type", "destination")


def _assume_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class WriteOutcome(StrEnum):
    """Result of a create-or-replace call."""

    CREATED = "created"
    REPLACED = "replaced"
    FAILED = "failed"


class ContentItem(BaseModel):
    """A content document keyed by its canonical ``base_path``.

    ``routes`` and ``redirects`` are kept as the plain mappings that were
    submitted so extra keys can be reported by validation rather than
    dropped, and so publish intents can compare them structurally.
    ``update_type`` is transient: it is accepted on write but never
    persisted or serialized.
    """

    model_config = ConfigDict(extra="forbid", coerce_numbers_to_str=True)

    base_path: str
    content_id: str | None = None
    title: str | None = None
    description: str | None = None
    format: str | None = None
    locale: str | None = DEFAULT_LOCALE
    need_ids: list[str] = Field(default_factory=list)
    public_updated_at: datetime | None = None
    details: dict[str, Any] = Field(default_factory=dict)
    publishing_app: str | None = None
    rendering_app: str | None = None
    routes: list[dict[str, Any]] = Field(default_factory=list)
    redirects: list[dict[str, Any]] = Field(default_factory=list)
    links: dict[str, Any] = Field(default_factory=dict)
    updated_at: datetime | None = None
    update_type: str | None = Field(default=None, exclude=True)

    @field_validator("public_updated_at", "updated_at")
    @classmethod
    def _timestamps_in_utc(cls, value: datetime | None) -> datetime | None:
        return _assume_utc(value)

    @property
    def is_redirect(self) -> bool:
        return self.format == REDIRECT_FORMAT

    @property
    def is_gone(self) -> bool:
        return self.format == GONE_FORMAT

    @property
    def is_renderable(self) -> bool:
        return self.format not in NON_RENDERABLE_FORMATS

    @property
    def is_placeholder(self) -> bool:
        return (self.format or "").startswith(PLACEHOLDER_PREFIX)

    def persisted_fields(self) -> dict[str, Any]:
        """Fields compared to decide whether a write changes anything."""
        return self.model_dump(exclude={"updated_at", "update_type"})


class PublishIntent(BaseModel):
    """Routes to provision ahead of a scheduled publish at ``base_path``."""

    model_config = ConfigDict(extra="forbid", coerce_numbers_to_str=True)

    base_path: str
    publish_time: datetime | None = None
    publishing_app: str | None = None
    rendering_app: str | None = None
    routes: list[dict[str, Any]] = Field(default_factory=list)
    redirects: list[dict[str, Any]] = Field(default_factory=list)
    updated_at: datetime | None = None

    @field_validator("publish_time", "updated_at")
    @classmethod
    def _timestamps_in_utc(cls, value: datetime | None) -> datetime | None:
        return _assume_utc(value)

    def past(self, now: datetime) -> bool:
        """True once the publish time is no longer in the future."""
        return self.publish_time is None or self.publish_time <= now


# Keys a write payload may carry.  ``updated_at`` is stamped by the store.
CONTENT_ITEM_FIELDS = tuple(f for f in ContentItem.model_fields if f != "updated_at")
PUBLISH_INTENT_FIELDS = tuple(f for f in PublishIntent.model_fields if f != "updated_at")
