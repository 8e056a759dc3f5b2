from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

from trustimonials.db.models import RequestLink, as_utc, utcnow

SLUG_PATTERN = re.compile(r"^[a-z0-9_-]{3,50}$")
DEFAULT_FORM_CONFIG = {"fields": ["authorName", "content", "rating"]}


class RequestLinkUnavailableError(RuntimeError):
    pass


def normalize_slug(value: str) -> str:
    return (value or "").strip().lower()


def is_valid_slug(value: str) -> bool:
    return bool(SLUG_PATTERN.match(value or ""))


def is_link_valid(link: RequestLink, *, now: Optional[datetime] = None) -> bool:
    """Active, not past its expiry date, and with uses left."""
    if not link.is_active:
        return False
    current = now or utcnow()
    expiry = as_utc(link.expiry_date)
    if expiry is not None and expiry <= current:
        return False
    if link.max_uses is not None and (link.uses or 0) >= link.max_uses:
        return False
    return True


def require_valid_link(link: Optional[RequestLink]) -> RequestLink:
    if link is None or not is_link_valid(link):
        raise RequestLinkUnavailableError("Invalid or expired testimonial link")
    return link
