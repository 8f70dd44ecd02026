"""Cache lifetimes for content item responses.

Content with a publish scheduled soon gets a short lifetime so the new
version is picked up promptly, bounded below by a minimum TTL.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime, timedelta
from email.utils import format_datetime

from content_store.content.models import PublishIntent


def cache_expiry(
    now: datetime,
    intent: PublishIntent | None,
    default_ttl: timedelta,
    minimum_ttl: timedelta,
) -> datetime:
    """When a response served at *now* should expire.

    Without a publish intent, or once its publish time has passed, this is
    ``now + default_ttl``.  Otherwise the earlier of that and the publish
    time, but never sooner than ``now + minimum_ttl``.
    """
    default_expiry = now + default_ttl
    if intent is None or intent.past(now):
        return default_expiry

    expiry = min(default_expiry, intent.publish_time)
    return max(expiry, now + minimum_ttl)


def cache_headers(now: datetime, expires_at: datetime) -> dict[str, str]:
    """``Cache-Control`` and ``Expires`` headers for an expiry time."""
    max_age = max(0, math.ceil((expires_at - now).total_seconds()))
    return {
        "Cache-Control": f"max-age={max_age}, public",
        "Expires": format_datetime(expires_at.astimezone(UTC), usegmt=True),
    }
