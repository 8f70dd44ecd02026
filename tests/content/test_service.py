"""Tests for the content item and publish intent write pipelines."""

from datetime import UTC, datetime

import pytest

from content_store.config import DEFAULT_LOCALES
from content_store.content.models import WriteOutcome
from content_store.content.service import ContentItemStore
from content_store.errors import PublishError, RegistrationError
from content_store.integrations.publisher import routing_key

BACKEND = ("add_backend", "frontend", "http://frontend.dev.gov.uk/")


class FailingPublisher:
    def __init__(self) -> None:
        self.attempts = 0

    def publish(self, item) -> None:
        self.attempts += 1
        raise PublishError("queue unavailable")


class TestCreateOrReplace:
    def test_creates_and_registers(self, content_items, router, publisher, payload, now):
        result = content_items.create_or_replace("/vat-rates", payload, now=now)

        assert result.outcome == WriteOutcome.CREATED
        assert result.ok
        assert result.errors == {}
        assert router.calls == [
            BACKEND,
            ("add_route", "/vat-rates", "exact", "frontend"),
            ("commit",),
        ]

    def test_persists_without_update_type(self, content_items, repository, payload, now):
        content_items.create_or_replace("/vat-rates", payload, now=now)

        stored = repository.get("/vat-rates")
        assert stored.title == "VAT rates"
        assert stored.updated_at == now
        assert stored.update_type is None

    def test_publishes_with_update_type(self, content_items, publisher, payload):
        content_items.create_or_replace("/vat-rates", payload)

        assert len(publisher.published) == 1
        assert publisher.published[0].base_path == "/vat-rates"
        assert publisher.published[0].update_type == "major"

    def test_second_write_replaces(self, content_items, repository, router, payload):
        content_items.create_or_replace("/vat-rates", payload)
        result = content_items.create_or_replace("/vat-rates", {**payload, "title": "New"})

        assert result.outcome == WriteOutcome.REPLACED
        assert repository.get("/vat-rates").title == "New"
        assert repository.count() == 1
        assert router.names().count("commit") == 2

    def test_identical_write_twice(self, content_items, repository, payload):
        first = content_items.create_or_replace("/vat-rates", payload)
        stored_first = repository.get("/vat-rates").persisted_fields()
        second = content_items.create_or_replace("/vat-rates", payload)

        assert first.outcome == WriteOutcome.CREATED
        assert second.outcome == WriteOutcome.REPLACED
        assert repository.get("/vat-rates").persisted_fields() == stored_first
        assert repository.count() == 1

    def test_published_routing_key(self, content_items, publisher, payload):
        content_items.create_or_replace("/vat-rates", payload)
        content_items.create_or_replace("/vat-rates", {**payload, "update_type": "minor"})

        assert [routing_key(item) for item in publisher.published] == [
            "answer.major",
            "answer.minor",
        ]

    def test_path_argument_wins(self, content_items, repository, payload):
        payload["routes"] = [{"path": "/other", "type": "exact"}]
        result = content_items.create_or_replace("/other", payload)

        assert result.ok
        assert repository.get("/other") is not None
        assert repository.get("/vat-rates") is None


class TestRejectedWrites:
    def test_missing_title(self, content_items, repository, router, publisher, payload):
        del payload["title"]
        result = content_items.create_or_replace("/vat-rates", payload)

        assert result.outcome == WriteOutcome.FAILED
        assert result.errors == {"title": ["can't be blank"]}
        assert repository.count() == 0
        assert router.calls == []
        assert publisher.published == []

    def test_failed_replace_keeps_stored_item(self, content_items, repository, payload):
        content_items.create_or_replace("/vat-rates", payload)
        result = content_items.create_or_replace("/vat-rates", {**payload, "title": ""})

        assert result.outcome == WriteOutcome.FAILED
        assert repository.get("/vat-rates").title == "VAT rates"

    def test_unchanged_rewrite_still_needs_update_type(
        self, content_items, router, publisher, payload
    ):
        content_items.create_or_replace("/vat-rates", payload)
        router.calls.clear()
        del payload["update_type"]

        result = content_items.create_or_replace("/vat-rates", payload)

        assert result.outcome == WriteOutcome.FAILED
        assert result.errors == {"update_type": ["can't be blank"]}
        assert router.calls == []
        assert len(publisher.published) == 1

    def test_unrecognised_field(self, content_items, repository, payload):
        result = content_items.create_or_replace("/vat-rates", {**payload, "foo": "bar"})

        assert result.outcome == WriteOutcome.FAILED
        assert result.record is None
        assert result.errors == {"base": ["unrecognised field(s) foo in input"]}
        assert repository.count() == 0

    def test_type_mismatch(self, content_items, payload):
        result = content_items.create_or_replace("/vat-rates", {**payload, "routes": 12})

        assert result.outcome == WriteOutcome.FAILED
        assert result.errors == {
            "base": ["Value of type int cannot be written to a field of type list"]
        }

    def test_invalid_result_carries_record(self, content_items, payload):
        result = content_items.create_or_replace("/vat-rates", {**payload, "locale": "xx"})

        assert result.record is not None
        assert result.record.locale == "xx"
        assert result.errors == {"locale": ["must be a supported locale"]}


class TestSpecialFormats:
    def test_redirect_item(self, content_items, router):
        result = content_items.create_or_replace(
            "/old",
            {
                "format": "redirect",
                "publishing_app": "publisher",
                "update_type": "major",
                "redirects": [{"path": "/old", "type": "exact", "destination": "/new"}],
            },
        )

        assert result.ok
        assert router.calls == [("add_redirect", "/old", "exact", "/new"), ("commit",)]

    def test_gone_item(self, content_items, router):
        result = content_items.create_or_replace(
            "/old",
            {
                "format": "gone",
                "publishing_app": "publisher",
                "update_type": "major",
                "routes": [{"path": "/old", "type": "exact"}],
            },
        )

        assert result.ok
        assert router.calls == [("add_gone_route", "/old", "exact"), ("commit",)]

    def test_placeholder_is_not_registered(self, content_items, repository, router, publisher, payload):
        result = content_items.create_or_replace(
            "/vat-rates", {**payload, "format": "placeholder_answer"}
        )

        assert result.outcome == WriteOutcome.CREATED
        assert router.calls == []
        assert repository.exists("/vat-rates")
        assert len(publisher.published) == 1


class TestFailures:
    def test_registration_failure_leaves_item_persisted(
        self, content_items, repository, router, publisher, payload
    ):
        router.fail_on = "add_route"

        with pytest.raises(RegistrationError) as exc_info:
            content_items.create_or_replace("/vat-rates", payload)

        assert exc_info.value.operation == "add_route"
        assert exc_info.value.status == 500
        assert repository.exists("/vat-rates")
        assert publisher.published == []
        assert "commit" not in router.names()

    def test_publish_failure_is_not_fatal(self, repository, registration, payload):
        failing = FailingPublisher()
        store = ContentItemStore(repository, registration, failing, DEFAULT_LOCALES)

        result = store.create_or_replace("/vat-rates", payload)

        assert result.outcome == WriteOutcome.CREATED
        assert failing.attempts == 1
        assert repository.exists("/vat-rates")


def _intent(**overrides: object) -> dict:
    data = {
        "publish_time": "2026-03-01T12:10:00Z",
        "publishing_app": "publisher",
        "rendering_app": "frontend",
        "routes": [{"path": "/vat-rates", "type": "exact"}],
    }
    data.update(overrides)
    return data


class TestPublishIntents:
    def test_create_registers_routes(self, publish_intents, intent_repository, router):
        result = publish_intents.create_or_replace("/vat-rates", _intent())

        assert result.outcome == WriteOutcome.CREATED
        assert intent_repository.get("/vat-rates").publish_time == datetime(
            2026, 3, 1, 12, 10, tzinfo=UTC
        )
        assert router.calls == [
            BACKEND,
            ("add_route", "/vat-rates", "exact", "frontend"),
            ("commit",),
        ]

    def test_replace(self, publish_intents):
        publish_intents.create_or_replace("/vat-rates", _intent())
        result = publish_intents.create_or_replace("/vat-rates", _intent())
        assert result.outcome == WriteOutcome.REPLACED

    def test_only_new_routes_registered_for_existing_item(
        self, content_items, publish_intents, router, payload
    ):
        content_items.create_or_replace("/vat-rates", payload)
        router.calls.clear()

        publish_intents.create_or_replace(
            "/vat-rates",
            _intent(
                routes=[
                    {"path": "/vat-rates", "type": "exact"},
                    {"path": "/vat-rates.json", "type": "exact"},
                ]
            ),
        )

        assert router.calls == [
            BACKEND,
            ("add_route", "/vat-rates.json", "exact", "frontend"),
            ("commit",),
        ]

    def test_invalid_intent(self, publish_intents, intent_repository, router):
        result = publish_intents.create_or_replace("/vat-rates", _intent(publish_time=None))

        assert result.outcome == WriteOutcome.FAILED
        assert result.errors == {"publish_time": ["can't be blank"]}
        assert intent_repository.count() == 0
        assert router.calls == []

    def test_unrecognised_field(self, publish_intents):
        result = publish_intents.create_or_replace("/vat-rates", _intent(title="x"))
        assert result.errors == {"base": ["unrecognised field(s) title in input"]}

    def test_delete(self, publish_intents):
        publish_intents.create_or_replace("/vat-rates", _intent())
        assert publish_intents.delete("/vat-rates") is True
        assert publish_intents.get("/vat-rates") is None
        assert publish_intents.delete("/vat-rates") is False
