"""Route value objects handed to the routing tier.

Each value is immutable and validates independently of the route set it
belongs to.  Plain and "gone" routes share one type and are told apart by
``kind`` so the registration coordinator can dispatch on the tag.
"""

from __future__ import annotations

import re
from enum import StrEnum
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict

_PRINTABLE_ASCII = re.compile(r"\A[\x21-\x7e]+\Z")


class RouteType(StrEnum):
    """Match mode for a route."""

    EXACT = "exact"
    PREFIX = "prefix"


class RouteKind(StrEnum):
    """What the routing tier should do with a matched route."""

    BACKEND = "backend"
    GONE = "gone"


ROUTE_TYPES = frozenset(t.value for t in RouteType)


def is_absolute_path(value: object) -> bool:
    """True when *value* is a bare absolute URL path.

    Non-ASCII characters must already be percent-encoded; query strings
    and fragments are not part of a path.
    """
    if not isinstance(value, str) or not value.startswith("/"):
        return False
    if not _PRINTABLE_ASCII.match(value):
        return False
    parts = urlsplit(value)
    return not parts.scheme and not parts.netloc and parts.path == value


class RegisterableRoute(BaseModel):
    """A path plus match mode, served by a backend or marked gone."""

    model_config = ConfigDict(frozen=True)

    path: str | None = None
    type: str | None = None
    kind: RouteKind = RouteKind.BACKEND

    @classmethod
    def gone(cls, path: str | None, type: str | None) -> RegisterableRoute:
        """Build a route the routing tier should answer with 410 Gone."""
        return cls(path=path, type=type, kind=RouteKind.GONE)

    @property
    def is_gone(self) -> bool:
        return self.kind == RouteKind.GONE

    def is_valid(self) -> bool:
        return bool(self.path) and is_absolute_path(self.path) and self.type in ROUTE_TYPES


class RegisterableRedirect(BaseModel):
    """A path plus match mode that redirects to *destination*."""

    model_config = ConfigDict(frozen=True)

    path: str | None = None
    type: str | None = None
    destination: str | None = None

    def is_valid(self) -> bool:
        return (
            bool(self.path)
            and is_absolute_path(self.path)
            and self.type in ROUTE_TYPES
            and bool(self.destination)
            and is_absolute_path(self.destination)
        )
