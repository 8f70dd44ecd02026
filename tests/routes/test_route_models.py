"""Tests for route value objects."""

import pytest

from content_store.routes.models import (
    RegisterableRedirect,
    RegisterableRoute,
    RouteKind,
    is_absolute_path,
)


class TestIsAbsolutePath:
    @pytest.mark.parametrize(
        "path",
        ["/", "/vat-rates", "/a/b/c", "/vat-rates.json", "/news/%D7%91%D7%95%D7%98"],
    )
    def test_accepts(self, path):
        assert is_absolute_path(path)

    @pytest.mark.parametrize(
        "path",
        [None, "", "vat-rates", "/with space", "/query?x=1", "/frag#top", "//host/path", "/ünï"],
    )
    def test_rejects(self, path):
        assert not is_absolute_path(path)


class TestRegisterableRoute:
    def test_valid_exact_route(self):
        assert RegisterableRoute(path="/foo", type="exact").is_valid()

    def test_valid_prefix_route(self):
        assert RegisterableRoute(path="/foo", type="prefix").is_valid()

    def test_missing_path_is_invalid(self):
        assert not RegisterableRoute(type="exact").is_valid()

    def test_relative_path_is_invalid(self):
        assert not RegisterableRoute(path="foo", type="exact").is_valid()

    def test_unknown_type_is_invalid(self):
        assert not RegisterableRoute(path="/foo", type="fuzzy").is_valid()

    def test_missing_type_is_invalid(self):
        assert not RegisterableRoute(path="/foo").is_valid()

    def test_defaults_to_backend_kind(self):
        route = RegisterableRoute(path="/foo", type="exact")
        assert route.kind == RouteKind.BACKEND
        assert not route.is_gone

    def test_gone_route_carries_tag(self):
        route = RegisterableRoute.gone("/foo", "exact")
        assert route.kind == RouteKind.GONE
        assert route.is_gone
        assert route.is_valid()

    def test_is_immutable(self):
        route = RegisterableRoute(path="/foo", type="exact")
        with pytest.raises(Exception):
            route.path = "/bar"  # type: ignore[misc]


class TestRegisterableRedirect:
    def test_valid_redirect(self):
        redirect = RegisterableRedirect(path="/foo", type="exact", destination="/bar")
        assert redirect.is_valid()

    def test_missing_destination_is_invalid(self):
        assert not RegisterableRedirect(path="/foo", type="exact").is_valid()

    def test_relative_destination_is_invalid(self):
        redirect = RegisterableRedirect(path="/foo", type="exact", destination="bar")
        assert not redirect.is_valid()

    def test_invalid_type(self):
        redirect = RegisterableRedirect(path="/foo", type="other", destination="/bar")
        assert not redirect.is_valid()
