from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from trustimonials.db.enums import ModerationActionEnum, TestimonialStatusEnum
from trustimonials.db.models import Testimonial, utcnow
from trustimonials.db.repositories.testimonials import TestimonialsRepository

logger = logging.getLogger(__name__)


class ModerationError(RuntimeError):
    pass


class IllegalTransitionError(ModerationError):
    def __init__(self, action: ModerationActionEnum, current: TestimonialStatusEnum) -> None:
        super().__init__(f"Cannot {action.value} a testimonial that is {current.value}")
        self.action = action
        self.current = current


_NOT_DELETED = frozenset(status for status in TestimonialStatusEnum if status != TestimonialStatusEnum.deleted)

# action -> (target status, statuses it may be applied from)
TRANSITIONS: dict[ModerationActionEnum, tuple[TestimonialStatusEnum, frozenset[TestimonialStatusEnum]]] = {
    ModerationActionEnum.approve: (TestimonialStatusEnum.approved, frozenset({TestimonialStatusEnum.pending})),
    ModerationActionEnum.reject: (TestimonialStatusEnum.rejected, frozenset({TestimonialStatusEnum.pending})),
    ModerationActionEnum.archive: (TestimonialStatusEnum.archived, _NOT_DELETED),
    ModerationActionEnum.unarchive: (TestimonialStatusEnum.pending, frozenset({TestimonialStatusEnum.archived})),
    ModerationActionEnum.spam: (TestimonialStatusEnum.spam, _NOT_DELETED),
    ModerationActionEnum.delete: (TestimonialStatusEnum.deleted, frozenset(TestimonialStatusEnum)),
}


_PAST_TENSE = {
    ModerationActionEnum.approve: "approved",
    ModerationActionEnum.reject: "rejected",
    ModerationActionEnum.archive: "archived",
    ModerationActionEnum.unarchive: "unarchived",
    ModerationActionEnum.spam: "marked as spam",
    ModerationActionEnum.delete: "deleted",
}


def past_tense(action: ModerationActionEnum) -> str:
    return _PAST_TENSE[action]


def parse_action(value: str) -> ModerationActionEnum:
    try:
        return ModerationActionEnum(value)
    except ValueError as exc:
        raise ModerationError(f"Invalid action: {value}") from exc


def target_status(action: ModerationActionEnum, current: TestimonialStatusEnum) -> TestimonialStatusEnum:
    """Status reached by applying ``action`` from ``current``; raises if the move is not allowed."""
    target, sources = TRANSITIONS[action]
    if current not in sources:
        raise IllegalTransitionError(action, current)
    return target


def apply_action(session: Session, testimonial: Testimonial, action: ModerationActionEnum) -> Testimonial:
    previous = testimonial.status
    target = target_status(action, previous)
    fields: dict = {"status": target}
    if target == TestimonialStatusEnum.approved:
        fields["approved_at"] = utcnow()
    updated = TestimonialsRepository(session).update(testimonial, **fields)
    logger.info(
        "Testimonial moderated",
        extra={
            "testimonial_id": str(testimonial.id),
            "action": action.value,
            "from_status": previous.value,
            "to_status": target.value,
        },
    )
    return updated


def apply_bulk_action(
    session: Session,
    *,
    space_id,
    testimonial_ids: Iterable[str],
    action: ModerationActionEnum,
) -> int:
    target, sources = TRANSITIONS[action]
    approved_at: Optional[datetime] = utcnow() if target == TestimonialStatusEnum.approved else None
    modified = TestimonialsRepository(session).bulk_set_status(
        space_id=space_id,
        testimonial_ids=testimonial_ids,
        status=target,
        from_statuses=sources,
        approved_at=approved_at,
    )
    logger.info(
        "Bulk moderation applied",
        extra={"space_id": str(space_id), "action": action.value, "modified_count": modified},
    )
    return modified
