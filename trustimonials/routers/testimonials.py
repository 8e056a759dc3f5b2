from __future__ import annotations

import logging
import math
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from trustimonials.auth.dependencies import AuthContext, get_current_user, get_optional_user, require_admin
from trustimonials.db.deps import get_session
from trustimonials.db.enums import (
    ModerationActionEnum,
    TestimonialStatusEnum,
    TestimonialTypeEnum,
)
from trustimonials.db.models import Testimonial, utcnow
from trustimonials.db.repositories.base import coerce_uuid
from trustimonials.db.repositories.request_links import RequestLinksRepository
from trustimonials.db.repositories.testimonials import TestimonialsRepository
from trustimonials.schemas.testimonials import LegacyTestimonialCreateRequest, LegacyTestimonialUpdateRequest
from trustimonials.services.moderation import IllegalTransitionError, apply_action
from trustimonials.services.request_links import (
    RequestLinkUnavailableError,
    normalize_slug,
    require_valid_link,
)
from trustimonials.services.serialization import serialize_testimonial

router = APIRouter(prefix="/api/testimonials", tags=["testimonials"])
logger = logging.getLogger(__name__)

LISTABLE_STATUSES = {
    TestimonialStatusEnum.pending,
    TestimonialStatusEnum.approved,
    TestimonialStatusEnum.rejected,
}


def _get_testimonial_or_404(session: Session, testimonial_id: str) -> Testimonial:
    testimonial = TestimonialsRepository(session).get(testimonial_id)
    if not testimonial:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Testimonial not found")
    return testimonial


def _require_editor(auth: AuthContext, testimonial: Testimonial, verb: str) -> None:
    if not auth.is_admin and testimonial.created_by != coerce_uuid(auth.user_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Not authorized to {verb} this testimonial",
        )


@router.post("", status_code=status.HTTP_201_CREATED)
def submit_testimonial(
    payload: LegacyTestimonialCreateRequest,
    auth: Optional[AuthContext] = Depends(get_optional_user),
    session: Session = Depends(get_session),
):
    links = RequestLinksRepository(session)
    source_link = normalize_slug(payload.sourceLink) if payload.sourceLink else None
    if source_link:
        try:
            require_valid_link(links.get_by_slug(source_link))
        except RequestLinkUnavailableError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    fields = {
        "type": TestimonialTypeEnum.linked if source_link else TestimonialTypeEnum.text,
        "author_name": payload.authorName.strip(),
        "author_email": payload.authorEmail,
        "content": payload.content.strip(),
        "rating": payload.rating,
        "images": list(payload.images),
        "source_link": source_link,
        "submitted_at": utcnow(),
    }
    if auth is not None:
        fields["created_by"] = coerce_uuid(auth.user_id)
        if auth.is_admin:
            fields["status"] = TestimonialStatusEnum.approved
            fields["approved_at"] = utcnow()

    testimonial = TestimonialsRepository(session).create(**fields)
    if source_link:
        links.increment_uses(source_link)

    logger.info(
        "Testimonial submitted",
        extra={"testimonial_id": str(testimonial.id), "source_link": source_link},
    )
    return {
        "message": "Testimonial submitted successfully",
        "testimonial": {
            "id": str(testimonial.id),
            "authorName": testimonial.author_name,
            "content": testimonial.content,
            "rating": testimonial.rating,
            "status": testimonial.status.value,
            "submittedAt": serialize_testimonial(testimonial)["submittedAt"],
        },
    }


@router.get("")
def list_testimonials(
    status_filter: Optional[TestimonialStatusEnum] = Query(default=None, alias="status"),
    rating: Optional[int] = Query(default=None, ge=1, le=5),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    auth: Optional[AuthContext] = Depends(get_optional_user),
    session: Session = Depends(get_session),
):
    if status_filter is not None and status_filter not in LISTABLE_STATUSES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid status filter")

    effective_status = status_filter if auth is not None and auth.is_admin else TestimonialStatusEnum.approved
    items, total = TestimonialsRepository(session).list_public(
        status=effective_status,
        rating=rating,
        limit=limit,
        offset=(page - 1) * limit,
    )
    return {
        "testimonials": [serialize_testimonial(item, include_private=False) for item in items],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit) if total else 0,
        },
    }


@router.get("/{testimonial_id}")
def get_testimonial(
    testimonial_id: str,
    auth: Optional[AuthContext] = Depends(get_optional_user),
    session: Session = Depends(get_session),
):
    testimonial = _get_testimonial_or_404(session, testimonial_id)
    is_admin = auth is not None and auth.is_admin
    if not is_admin and testimonial.status != TestimonialStatusEnum.approved:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Testimonial not found")
    return {"testimonial": serialize_testimonial(testimonial, include_private=is_admin)}


@router.put("/{testimonial_id}")
def update_testimonial(
    testimonial_id: str,
    payload: LegacyTestimonialUpdateRequest,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    testimonial = _get_testimonial_or_404(session, testimonial_id)
    _require_editor(auth, testimonial, "edit")
    fields = {}
    if payload.authorName is not None:
        fields["author_name"] = payload.authorName.strip()
    if payload.content is not None:
        fields["content"] = payload.content.strip()
    if payload.rating is not None:
        fields["rating"] = payload.rating
    updated = TestimonialsRepository(session).update(testimonial, **fields)
    return {"message": "Testimonial updated successfully", "testimonial": serialize_testimonial(updated)}


@router.delete("/{testimonial_id}")
def delete_testimonial(
    testimonial_id: str,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    testimonial = _get_testimonial_or_404(session, testimonial_id)
    _require_editor(auth, testimonial, "delete")
    apply_action(session, testimonial, ModerationActionEnum.delete)
    return {"message": "Testimonial deleted successfully"}


@router.post("/{testimonial_id}/approve")
def approve_testimonial(
    testimonial_id: str,
    auth: AuthContext = Depends(require_admin),
    session: Session = Depends(get_session),
):
    testimonial = _get_testimonial_or_404(session, testimonial_id)
    try:
        updated = apply_action(session, testimonial, ModerationActionEnum.approve)
    except IllegalTransitionError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return {"message": "Testimonial approved successfully", "testimonial": serialize_testimonial(updated)}
