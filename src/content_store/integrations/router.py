"""Router API integration — HTTP client for the routing tier.

Speaks the router-api JSON protocol: backends and routes are PUT
individually and become live only after ``POST /routes/commit``.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from urllib.parse import quote

from content_store.config import RouterConfig
from content_store.errors import RegistrationError

logger = logging.getLogger(__name__)


class RouterAPIClient:
    """Client for the router API.

    Every call raises RegistrationError on HTTP or connection failure;
    nothing is retried.
    """

    def __init__(self, config: RouterConfig) -> None:
        self.config = config
        self.base_url = config.url.rstrip("/")

    def _request(self, operation: str, method: str, path: str, data: dict | None = None) -> dict:
        """Make a JSON request to the router API."""
        url = f"{self.base_url}{path}"
        body = json.dumps(data).encode("utf-8") if data is not None else None
        try:
            req = urllib.request.Request(
                url,
                data=body,
                method=method,
                headers={
                    "Accept": "application/json",
                    "Content-Type": "application/json",
                },
            )
            with urllib.request.urlopen(req, timeout=self.config.timeout) as resp:
                raw = resp.read().decode("utf-8")
        except urllib.error.HTTPError as exc:
            raise RegistrationError(operation, f"HTTP {exc.code} from {url}", exc.code) from exc
        except (urllib.error.URLError, OSError, ValueError) as exc:
            raise RegistrationError(operation, f"{url}: {exc}") from exc

        logger.debug("router %s %s %s", method, path, data)
        return json.loads(raw) if raw.strip() else {}

    def add_backend(self, name: str, url: str) -> None:
        """Create or update the backend *name* pointing at *url*."""
        self._request(
            "add_backend",
            "PUT",
            f"/backends/{quote(name, safe='')}",
            {"backend": {"backend_url": url}},
        )

    def add_route(self, path: str, type: str, backend: str) -> None:
        """Stage a route handled by *backend*."""
        self._put_route(
            "add_route",
            {
                "incoming_path": path,
                "route_type": type,
                "handler": "backend",
                "backend_id": backend,
            },
        )

    def add_redirect(self, path: str, type: str, destination: str) -> None:
        """Stage a permanent redirect from *path* to *destination*."""
        self._put_route(
            "add_redirect",
            {
                "incoming_path": path,
                "route_type": type,
                "handler": "redirect",
                "redirect_to": destination,
                "redirect_type": "permanent",
            },
        )

    def add_gone_route(self, path: str, type: str) -> None:
        """Stage a route answered with 410 Gone."""
        self._put_route(
            "add_gone_route",
            {"incoming_path": path, "route_type": type, "handler": "gone"},
        )

    def commit(self) -> None:
        """Make every staged change live."""
        self._request("commit", "POST", "/routes/commit", {})

    def _put_route(self, operation: str, route: dict) -> None:
        self._request(operation, "PUT", "/routes", {"route": route})
