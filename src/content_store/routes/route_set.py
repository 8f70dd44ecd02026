"""Route sets derived from content items and publish intents.

A RegisterableRouteSet is built fresh for every validation or
registration attempt and never mutated afterwards.  ``routes`` entries
are plain ``{"path", "type"}`` mappings on the source document; e.g.::

    [{"path": "/content", "type": "exact"},
     {"path": "/content.json", "type": "exact"},
     {"path": "/content/subpath", "type": "prefix"}]

Every path must be the base path, the base path plus an extension, or
beneath the base path.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict

from content_store.content.models import ContentItem, PublishIntent
from content_store.routes.models import RegisterableRedirect, RegisterableRoute

ROUTES_FIELD = "routes"
REDIRECTS_FIELD = "redirects"


class RegisterableRouteSet(BaseModel):
    """Routes and redirects for one base path, ready for the routing tier."""

    model_config = ConfigDict(frozen=True)

    base_path: str | None = None
    rendering_app: str | None = None
    routes: tuple[RegisterableRoute, ...] = ()
    redirects: tuple[RegisterableRedirect, ...] = ()
    is_redirect: bool = False
    is_gone: bool = False
    is_supplementary: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.routes and not self.redirects

    def is_valid(self) -> bool:
        return not validate_route_set(self)


# -- Building ----------------------------------------------------------------


def _str_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _route(attrs: dict[str, Any], gone: bool = False) -> RegisterableRoute:
    path, type_ = _str_or_none(attrs.get("path")), _str_or_none(attrs.get("type"))
    if gone:
        return RegisterableRoute.gone(path, type_)
    return RegisterableRoute(path=path, type=type_)


def _redirect(attrs: dict[str, Any]) -> RegisterableRedirect:
    return RegisterableRedirect(
        path=_str_or_none(attrs.get("path")),
        type=_str_or_none(attrs.get("type")),
        destination=_str_or_none(attrs.get("destination")),
    )


def from_content_item(item: ContentItem) -> RegisterableRouteSet:
    """Derive the full route set for a content item.

    Routes on a ``gone`` item become gone routes; only ``path``/``type``
    (and ``destination`` for redirects) are carried over.
    """
    return RegisterableRouteSet(
        base_path=item.base_path,
        rendering_app=item.rendering_app,
        routes=tuple(_route(attrs, gone=item.is_gone) for attrs in item.routes),
        redirects=tuple(_redirect(attrs) for attrs in item.redirects),
        is_redirect=item.is_redirect,
        is_gone=item.is_gone,
    )


def from_publish_intent(
    intent: PublishIntent,
    content_item: ContentItem | None = None,
) -> RegisterableRouteSet:
    """Derive the route set a publish intent should provision.

    When a content item already lives at the intent's base path only the
    routes it does not already have are registered, and the set is marked
    supplementary so it need not include the base path itself.
    """
    route_attrs = list(intent.routes)
    is_supplementary = False
    if content_item is not None:
        route_attrs = [attrs for attrs in route_attrs if attrs not in content_item.routes]
        is_supplementary = True

    return RegisterableRouteSet(
        base_path=intent.base_path,
        rendering_app=intent.rendering_app,
        routes=tuple(_route(attrs) for attrs in route_attrs),
        is_supplementary=is_supplementary,
    )


# -- Validation --------------------------------------------------------------


def _segments(path: str) -> list[str]:
    return [segment for segment in path.split("/") if segment]


def _contained_by(path: str | None, base_path: str) -> bool:
    if path is None:
        return False
    if re.fullmatch(re.escape(base_path) + r"\.\w+", path, flags=re.ASCII):
        return True
    base_segments = _segments(base_path)
    return _segments(path)[: len(base_segments)] == base_segments


def _has_duplicates(paths: list[str | None]) -> bool:
    return len(paths) != len(set(paths))


def validate_route_set(route_set: RegisterableRouteSet) -> dict[str, list[str]]:
    """Check the structural rules of a route set.

    Every check runs; failures are collected under ``routes`` and
    ``redirects``.  Returns an empty mapping when the set is valid.
    """
    errors: dict[str, list[str]] = {}

    def add(field: str, message: str) -> None:
        errors.setdefault(field, []).append(message)

    routes, redirects = route_set.routes, route_set.redirects
    base_path = route_set.base_path or ""

    if not all(route.is_valid() for route in routes):
        add(ROUTES_FIELD, "are invalid")
    if not all(redirect.is_valid() for redirect in redirects):
        add(REDIRECTS_FIELD, "are invalid")

    if not all(_contained_by(route.path, base_path) for route in routes):
        add(ROUTES_FIELD, "must be below the base path")
    if not all(_contained_by(redirect.path, base_path) for redirect in redirects):
        add(REDIRECTS_FIELD, "must be below the base path")

    if _has_duplicates([route.path for route in routes]):
        add(ROUTES_FIELD, "must have unique paths")
    if _has_duplicates([redirect.path for redirect in redirects]):
        add(REDIRECTS_FIELD, "must have unique paths")

    if route_set.is_redirect and routes:
        add(ROUTES_FIELD, "redirect items cannot have routes")

    if not route_set.is_redirect and not route_set.is_supplementary:
        if base_path not in [route.path for route in routes]:
            add(ROUTES_FIELD, "must include the base_path")

    if route_set.is_redirect:
        if base_path not in [redirect.path for redirect in redirects]:
            add(REDIRECTS_FIELD, "must include the base_path")

    return errors
