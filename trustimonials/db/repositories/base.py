from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session


def coerce_uuid(value) -> Optional[UUID]:
    """Parse an id from a path or payload; malformed ids resolve to nothing."""
    if value is None:
        return None
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        return None


class Repository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def save(self, obj):
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj
