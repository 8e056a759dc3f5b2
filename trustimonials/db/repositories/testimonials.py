from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import func, select, update

from trustimonials.db.enums import TestimonialStatusEnum, TestimonialTypeEnum
from trustimonials.db.models import Testimonial
from trustimonials.db.repositories.base import Repository, coerce_uuid

INBOX_FILTERS = {"all", "video", "text", "linked", "archived", "spam"}


class TestimonialsRepository(Repository):
    def get(self, testimonial_id) -> Optional[Testimonial]:
        parsed = coerce_uuid(testimonial_id)
        if parsed is None:
            return None
        return self.session.get(Testimonial, parsed)

    def get_in_space(self, *, space_id, testimonial_id) -> Optional[Testimonial]:
        parsed = coerce_uuid(testimonial_id)
        if parsed is None:
            return None
        stmt = select(Testimonial).where(
            Testimonial.id == parsed, Testimonial.space_id == coerce_uuid(space_id)
        )
        return self.session.scalars(stmt).first()

    def list_approved(self, *, space_id) -> List[Testimonial]:
        stmt = select(Testimonial).where(
            Testimonial.space_id == coerce_uuid(space_id),
            Testimonial.status == TestimonialStatusEnum.approved,
        )
        return list(self.session.scalars(stmt).all())

    def _inbox_statement(self, *, space_id, inbox_filter: str):
        stmt = select(Testimonial).where(Testimonial.space_id == coerce_uuid(space_id))
        if inbox_filter in {"video", "text", "linked"}:
            stmt = stmt.where(Testimonial.type == TestimonialTypeEnum(inbox_filter))
        elif inbox_filter in {"archived", "spam"}:
            stmt = stmt.where(Testimonial.status == TestimonialStatusEnum(inbox_filter))
        return stmt

    def list_inbox(
        self,
        *,
        space_id,
        inbox_filter: str = "all",
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[List[Testimonial], int]:
        stmt = self._inbox_statement(space_id=space_id, inbox_filter=inbox_filter)
        total = int(self.session.scalar(select(func.count()).select_from(stmt.subquery())) or 0)
        items = self.session.scalars(
            stmt.order_by(Testimonial.submitted_at.desc()).limit(limit).offset(offset)
        ).all()
        return list(items), total

    def list_public(
        self,
        *,
        status: Optional[TestimonialStatusEnum],
        rating: Optional[int] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[List[Testimonial], int]:
        stmt = select(Testimonial)
        if status is not None:
            stmt = stmt.where(Testimonial.status == status)
        if rating is not None:
            stmt = stmt.where(Testimonial.rating == rating)
        total = int(self.session.scalar(select(func.count()).select_from(stmt.subquery())) or 0)
        items = self.session.scalars(
            stmt.order_by(Testimonial.submitted_at.desc()).limit(limit).offset(offset)
        ).all()
        return list(items), total

    def count_for_space(self, *, space_id, testimonial_type: Optional[TestimonialTypeEnum] = None,
                        exclude_deleted: bool = False) -> int:
        stmt = select(func.count(Testimonial.id)).where(Testimonial.space_id == coerce_uuid(space_id))
        if testimonial_type is not None:
            stmt = stmt.where(Testimonial.type == testimonial_type)
        if exclude_deleted:
            stmt = stmt.where(Testimonial.status != TestimonialStatusEnum.deleted)
        return int(self.session.scalar(stmt) or 0)

    def count_created_by(self, *, user_id, testimonial_type: Optional[TestimonialTypeEnum] = None) -> int:
        stmt = select(func.count(Testimonial.id)).where(Testimonial.created_by == coerce_uuid(user_id))
        if testimonial_type is not None:
            stmt = stmt.where(Testimonial.type == testimonial_type)
        return int(self.session.scalar(stmt) or 0)

    def count_with_images(self, *, space_id=None, created_by=None) -> int:
        # JSON emptiness is not portable across backends; count on the loaded column.
        stmt = select(Testimonial.images)
        if space_id is not None:
            stmt = stmt.where(Testimonial.space_id == coerce_uuid(space_id))
        if created_by is not None:
            stmt = stmt.where(Testimonial.created_by == coerce_uuid(created_by))
        return sum(1 for images in self.session.scalars(stmt).all() if images)

    def create(self, **fields) -> Testimonial:
        return self.save(Testimonial(**fields))

    def update(self, testimonial: Testimonial, **fields) -> Testimonial:
        for key, value in fields.items():
            setattr(testimonial, key, value)
        self.session.commit()
        self.session.refresh(testimonial)
        return testimonial

    def delete(self, testimonial: Testimonial) -> None:
        self.session.delete(testimonial)
        self.session.commit()

    def bulk_set_status(
        self,
        *,
        space_id,
        testimonial_ids: Iterable,
        status: TestimonialStatusEnum,
        from_statuses: Iterable[TestimonialStatusEnum],
        approved_at: Optional[datetime] = None,
    ) -> int:
        """Move every listed testimonial of the space that is in an eligible status; return the row count."""
        ids = [parsed for parsed in (coerce_uuid(value) for value in testimonial_ids) if parsed is not None]
        if not ids:
            return 0
        values: dict = {"status": status}
        if approved_at is not None:
            values["approved_at"] = approved_at
        stmt = (
            update(Testimonial)
            .where(
                Testimonial.id.in_(ids),
                Testimonial.space_id == coerce_uuid(space_id),
                Testimonial.status.in_(list(from_statuses)),
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        self.session.commit()
        return int(result.rowcount or 0)
