from typing import List, Optional

from sqlalchemy import func, select

from trustimonials.db.models import Space
from trustimonials.db.repositories.base import Repository, coerce_uuid


class SpacesRepository(Repository):
    def list_active(self, *, owner_id, limit: int = 10, offset: int = 0) -> List[Space]:
        stmt = (
            select(Space)
            .where(Space.owner_id == coerce_uuid(owner_id), Space.is_active.is_(True))
            .order_by(Space.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(self.session.scalars(stmt).all())

    def count_active(self, *, owner_id) -> int:
        stmt = select(func.count(Space.id)).where(
            Space.owner_id == coerce_uuid(owner_id), Space.is_active.is_(True)
        )
        return int(self.session.scalar(stmt) or 0)

    def get(self, space_id) -> Optional[Space]:
        parsed = coerce_uuid(space_id)
        if parsed is None:
            return None
        return self.session.get(Space, parsed)

    def get_owned(self, *, owner_id, space_id, active_only: bool = True) -> Optional[Space]:
        parsed = coerce_uuid(space_id)
        if parsed is None:
            return None
        stmt = select(Space).where(Space.id == parsed, Space.owner_id == coerce_uuid(owner_id))
        if active_only:
            stmt = stmt.where(Space.is_active.is_(True))
        return self.session.scalars(stmt).first()

    def get_public(self, space_id) -> Optional[Space]:
        parsed = coerce_uuid(space_id)
        if parsed is None:
            return None
        stmt = select(Space).where(Space.id == parsed, Space.is_active.is_(True))
        return self.session.scalars(stmt).first()

    def create(self, *, owner_id, name: str, **fields) -> Space:
        return self.save(Space(owner_id=coerce_uuid(owner_id), name=name, **fields))

    def update(self, space: Space, **fields) -> Space:
        for key, value in fields.items():
            setattr(space, key, value)
        self.session.commit()
        self.session.refresh(space)
        return space

    def deactivate(self, space: Space) -> Space:
        return self.update(space, is_active=False)
