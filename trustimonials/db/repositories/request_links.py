from typing import List, Optional

from sqlalchemy import func, select, update

from trustimonials.db.models import RequestLink
from trustimonials.db.repositories.base import Repository, coerce_uuid


class RequestLinksRepository(Repository):
    def list_for_owner(self, *, owner_id) -> List[RequestLink]:
        stmt = (
            select(RequestLink)
            .where(RequestLink.owner_id == coerce_uuid(owner_id))
            .order_by(RequestLink.created_at.desc())
        )
        return list(self.session.scalars(stmt).all())

    def count_active(self, *, owner_id) -> int:
        stmt = select(func.count(RequestLink.id)).where(
            RequestLink.owner_id == coerce_uuid(owner_id), RequestLink.is_active.is_(True)
        )
        return int(self.session.scalar(stmt) or 0)

    def get(self, link_id) -> Optional[RequestLink]:
        parsed = coerce_uuid(link_id)
        if parsed is None:
            return None
        return self.session.get(RequestLink, parsed)

    def get_by_slug(self, slug: str) -> Optional[RequestLink]:
        stmt = select(RequestLink).where(RequestLink.slug == slug.strip().lower())
        return self.session.scalars(stmt).first()

    def create(self, *, owner_id, slug: str, **fields) -> RequestLink:
        return self.save(RequestLink(owner_id=coerce_uuid(owner_id), slug=slug, **fields))

    def update(self, link: RequestLink, **fields) -> RequestLink:
        for key, value in fields.items():
            setattr(link, key, value)
        self.session.commit()
        self.session.refresh(link)
        return link

    def delete(self, link: RequestLink) -> None:
        self.session.delete(link)
        self.session.commit()

    def increment_uses(self, slug: str) -> None:
        # Plain increment: validity was checked before the testimonial was stored, not here.
        stmt = (
            update(RequestLink)
            .where(RequestLink.slug == slug.strip().lower())
            .values(uses=RequestLink.uses + 1)
        )
        self.session.execute(stmt)
        self.session.commit()
