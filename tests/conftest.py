"""Shared fixtures: an in-memory router and ready-wired stores."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

import pytest

from content_store.config import DEFAULT_LOCALES, RouterConfig
from content_store.content.service import ContentItemStore, PublishIntentStore
from content_store.content.store import ContentItemRepository, PublishIntentRepository
from content_store.errors import RegistrationError
from content_store.routes.registration import RouteRegistrationCoordinator


class FakeRouter:
    """Records router calls; optionally fails a named operation."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.fail_on: str | None = None

    def _record(self, *call: object) -> None:
        if call[0] == self.fail_on:
            raise RegistrationError(str(call[0]), "boom", 500)
        self.calls.append(call)

    def add_backend(self, name: str, url: str) -> None:
        self._record("add_backend", name, url)

    def add_route(self, path: str, type: str, backend: str) -> None:
        self._record("add_route", path, type, backend)

    def add_redirect(self, path: str, type: str, destination: str) -> None:
        self._record("add_redirect", path, type, destination)

    def add_gone_route(self, path: str, type: str) -> None:
        self._record("add_gone_route", path, type)

    def commit(self) -> None:
        self._record("commit")

    def names(self) -> list[str]:
        return [c[0] for c in self.calls]


class FakePublisher:
    def __init__(self) -> None:
        self.published: list = []

    def publish(self, item) -> None:
        self.published.append(item)


@pytest.fixture
def router() -> FakeRouter:
    return FakeRouter()


@pytest.fixture
def publisher() -> FakePublisher:
    return FakePublisher()


@pytest.fixture
def registration(router: FakeRouter) -> RouteRegistrationCoordinator:
    return RouteRegistrationCoordinator(router, RouterConfig().backend_url)


@pytest.fixture
def repository() -> ContentItemRepository:
    return ContentItemRepository()


@pytest.fixture
def intent_repository() -> PublishIntentRepository:
    return PublishIntentRepository()


@pytest.fixture
def content_items(repository, registration, publisher) -> ContentItemStore:
    return ContentItemStore(repository, registration, publisher, DEFAULT_LOCALES)


@pytest.fixture
def publish_intents(intent_repository, repository, registration) -> PublishIntentStore:
    return PublishIntentStore(intent_repository, repository, registration)


@pytest.fixture
def payload() -> dict:
    """A complete, valid content item write payload."""
    return {
        "base_path": "/vat-rates",
        "content_id": str(uuid.uuid4()),
        "title": "VAT rates",
        "description": "Current VAT rates",
        "format": "answer",
        "need_ids": ["100123", "100124"],
        "locale": "en",
        "public_updated_at": "2014-05-14T13:00:06Z",
        "update_type": "major",
        "publishing_app": "publisher",
        "rendering_app": "frontend",
        "details": {"body": "<p>Some body text</p>\n"},
        "routes": [{"path": "/vat-rates", "type": "exact"}],
    }


@pytest.fixture
def now() -> datetime:
    return datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
