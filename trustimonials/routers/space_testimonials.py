from __future__ import annotations

import logging
import math

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from trustimonials.auth.dependencies import AuthContext, get_current_user
from trustimonials.db.deps import get_session
from trustimonials.db.enums import ModerationActionEnum, TestimonialStatusEnum
from trustimonials.db.models import utcnow
from trustimonials.db.repositories.base import coerce_uuid
from trustimonials.db.repositories.testimonials import INBOX_FILTERS, TestimonialsRepository
from trustimonials.routers.spaces import get_owned_space_or_404
from trustimonials.schemas.testimonials import (
    BulkModerationRequest,
    ModerationActionRequest,
    SpaceTestimonialCreateRequest,
)
from trustimonials.services.moderation import (
    IllegalTransitionError,
    ModerationError,
    apply_action,
    apply_bulk_action,
    parse_action,
    past_tense,
)
from trustimonials.services.serialization import serialize_testimonial

router = APIRouter(prefix="/api/spaces/{space_id}/testimonials", tags=["moderation"])
logger = logging.getLogger(__name__)


def _parse_action_or_400(value: str) -> ModerationActionEnum:
    try:
        return parse_action(value)
    except ModerationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Validation failed", "errors": [str(exc)]},
        ) from exc


@router.get("")
def list_space_testimonials(
    space_id: str,
    filter: str = Query(default="all"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    if filter not in INBOX_FILTERS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid filter: {filter}")
    space = get_owned_space_or_404(session, auth, space_id)
    items, total = TestimonialsRepository(session).list_inbox(
        space_id=space.id, inbox_filter=filter, limit=limit, offset=(page - 1) * limit
    )
    return {
        "testimonials": [serialize_testimonial(item) for item in items],
        "pagination": {
            "currentPage": page,
            "totalPages": math.ceil(total / limit) if total else 0,
            "totalItems": total,
            "hasNext": page * limit < total,
            "hasPrev": page > 1,
        },
    }


@router.post("", status_code=status.HTTP_201_CREATED)
def create_space_testimonial(
    space_id: str,
    payload: SpaceTestimonialCreateRequest,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    space = get_owned_space_or_404(session, auth, space_id)
    responses = []
    for index, response in enumerate(payload.questionResponses):
        entry = {"questionIndex": index, "question": response.question, "answer": response.answer}
        if response.rating is not None:
            entry["rating"] = response.rating
        responses.append(entry)
    if not (payload.content or "").strip() and not responses:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "message": "Validation failed",
                "errors": ["Either content or question responses are required"],
            },
        )

    testimonial = TestimonialsRepository(session).create(
        space_id=space.id,
        type=payload.type,
        author_name=payload.authorName,
        author_email=payload.authorEmail,
        content=payload.content,
        rating=payload.rating,
        media_url=payload.mediaUrl,
        thumbnail_url=payload.thumbnailUrl,
        question_responses=responses,
        collected_via=payload.collectedVia,
        status=TestimonialStatusEnum.pending,
        created_by=coerce_uuid(auth.user_id),
        submitted_at=utcnow(),
    )
    return {"message": "Testimonial created successfully", "testimonial": serialize_testimonial(testimonial)}


@router.post("/bulk")
def bulk_moderate_testimonials(
    space_id: str,
    payload: BulkModerationRequest,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    action = _parse_action_or_400(payload.action)
    space = get_owned_space_or_404(session, auth, space_id)
    modified = apply_bulk_action(session, space_id=space.id, testimonial_ids=payload.testimonialIds, action=action)
    return {
        "message": f"{modified} testimonials {past_tense(action)} successfully",
        "modifiedCount": modified,
    }


@router.post("/{testimonial_id}/actions")
def moderate_testimonial(
    space_id: str,
    testimonial_id: str,
    payload: ModerationActionRequest,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    action = _parse_action_or_400(payload.action)
    space = get_owned_space_or_404(session, auth, space_id)
    testimonial = TestimonialsRepository(session).get_in_space(space_id=space.id, testimonial_id=testimonial_id)
    if not testimonial:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Testimonial not found")

    try:
        updated = apply_action(session, testimonial, action)
    except IllegalTransitionError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    return {
        "message": f"Testimonial {past_tense(action)} successfully",
        "testimonial": {"id": str(updated.id), "status": updated.status.value},
    }
