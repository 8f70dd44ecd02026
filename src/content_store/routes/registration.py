"""Push a route set to the routing tier and commit it."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol

from content_store.routes.route_set import RegisterableRouteSet

logger = logging.getLogger(__name__)


class RouterClient(Protocol):
    """The calls the routing tier must accept.

    Adds are staged; nothing is guaranteed visible until ``commit``.
    """

    def add_backend(self, name: str, url: str) -> None: ...

    def add_route(self, path: str, type: str, backend: str) -> None: ...

    def add_redirect(self, path: str, type: str, destination: str) -> None: ...

    def add_gone_route(self, path: str, type: str) -> None: ...

    def commit(self) -> None: ...


class RouteRegistrationCoordinator:
    """Stage a route set's changes against the router and commit them.

    No retries and no locking: any router failure propagates to the
    caller, leaving earlier staged calls uncommitted.
    """

    def __init__(self, router: RouterClient, backend_url_for: Callable[[str], str]) -> None:
        self.router = router
        self.backend_url_for = backend_url_for

    def register(self, route_set: RegisterableRouteSet) -> None:
        """Register every route or redirect in *route_set*, then commit."""
        if route_set.is_empty:
            logger.debug("No routes to register for %s", route_set.base_path)
            return

        if route_set.is_redirect:
            for redirect in route_set.redirects:
                self.router.add_redirect(redirect.path, redirect.type, redirect.destination)
        else:
            app = route_set.rendering_app
            if any(not route.is_gone for route in route_set.routes):
                self.router.add_backend(app, self.backend_url_for(app))
            for route in route_set.routes:
                if route.is_gone:
                    self.router.add_gone_route(route.path, route.type)
                else:
                    self.router.add_route(route.path, route.type, app)

        self.router.commit()
        logger.info(
            "Committed %d route(s) and %d redirect(s) for %s",
            len(route_set.routes),
            len(route_set.redirects),
            route_set.base_path,
        )
