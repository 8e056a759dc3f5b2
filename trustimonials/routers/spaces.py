from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from trustimonials.auth.dependencies import AuthContext, get_current_user
from trustimonials.db.deps import get_session
from trustimonials.db.enums import TestimonialTypeEnum
from trustimonials.db.models import Space, as_utc, utcnow
from trustimonials.db.repositories.request_links import RequestLinksRepository
from trustimonials.db.repositories.spaces import SpacesRepository
from trustimonials.db.repositories.templates import TemplatesRepository
from trustimonials.db.repositories.testimonials import TestimonialsRepository
from trustimonials.schemas.spaces import SPACE_FIELD_MAP, SpaceCreateRequest, SpaceUpdateRequest
from trustimonials.services.serialization import serialize_space

router = APIRouter(prefix="/api/spaces", tags=["spaces"])
logger = logging.getLogger(__name__)

VIDEO_CREDIT_ALLOWANCE = 10
TEXT_CREDIT_ALLOWANCE = 100

INTEGRATIONS = [
    {
        "id": "social-media",
        "name": "Social Media",
        "description": "Import testimonials from social media platforms",
    },
    {
        "id": "external-videos",
        "name": "External Videos",
        "description": "Import video testimonials from external sources",
    },
    {
        "id": "email-assistant",
        "name": "Email Assistant",
        "description": "Automated email testimonial collection",
    },
]


def get_owned_space_or_404(session: Session, auth: AuthContext, space_id: str) -> Space:
    space = SpacesRepository(session).get_owned(owner_id=auth.user_id, space_id=space_id)
    if not space:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Space not found")
    return space


def _require_future(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    normalized = as_utc(value)
    if normalized <= utcnow():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Expiry date must be in the future")
    return normalized


def _require_template(session: Session, auth: AuthContext, template_id: Optional[str]):
    if not template_id:
        return None
    template = TemplatesRepository(session).get_accessible(user_id=auth.user_id, template_id=template_id)
    if not template:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Template not found or not accessible",
        )
    return template.id


def _space_fields(session: Session, auth: AuthContext, data: dict[str, Any]) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    for key, value in data.items():
        column = SPACE_FIELD_MAP[key]
        if key == "collectExtras":
            value = sorted({getattr(extra, "value", extra) for extra in value})
        elif key == "templateId":
            value = _require_template(session, auth, value)
        elif key == "expiryDate":
            value = _require_future(value)
        elif key == "language" and isinstance(value, str):
            value = value.lower()
        elif key in {"name", "description", "headerTitle", "headerMessage"} and isinstance(value, str):
            value = value.strip()
        fields[column] = value
    return fields


def _space_stats(session: Session, auth: AuthContext, space: Space) -> dict[str, int]:
    return {
        "videos": TestimonialsRepository(session).count_with_images(space_id=space.id),
        "testimonials": TestimonialsRepository(session).count_for_space(space_id=space.id),
        "activeShareLinks": RequestLinksRepository(session).count_active(owner_id=auth.user_id),
    }


@router.get("")
def list_spaces(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    repo = SpacesRepository(session)
    total = repo.count_active(owner_id=auth.user_id)
    spaces = repo.list_active(owner_id=auth.user_id, limit=limit, offset=(page - 1) * limit)
    return {
        "spaces": [serialize_space(space, stats=_space_stats(session, auth, space)) for space in spaces],
        "pagination": {
            "currentPage": page,
            "totalPages": math.ceil(total / limit) if total else 0,
            "totalItems": total,
            "hasNext": page * limit < total,
            "hasPrev": page > 1,
        },
    }


@router.post("", status_code=status.HTTP_201_CREATED)
def create_space(
    payload: SpaceCreateRequest,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    fields = _space_fields(session, auth, payload.model_dump())
    fields.pop("name")
    space = SpacesRepository(session).create(owner_id=auth.user_id, name=payload.name.strip(), **fields)
    logger.info("Space created", extra={"space_id": str(space.id), "owner_id": auth.user_id})
    return {"message": "Space created successfully", "space": serialize_space(space)}


@router.get("/{space_id}")
def get_space(
    space_id: str,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    space = get_owned_space_or_404(session, auth, space_id)
    testimonials = TestimonialsRepository(session)
    video_count = testimonials.count_for_space(
        space_id=space.id, testimonial_type=TestimonialTypeEnum.video, exclude_deleted=True
    )
    text_count = testimonials.count_for_space(
        space_id=space.id, testimonial_type=TestimonialTypeEnum.text, exclude_deleted=True
    )
    return {
        "space": serialize_space(space, stats=_space_stats(session, auth, space)),
        "credits": {
            "videoCredits": max(0, VIDEO_CREDIT_ALLOWANCE - video_count),
            "textCredits": max(0, TEXT_CREDIT_ALLOWANCE - text_count),
        },
    }


@router.put("/{space_id}")
def update_space(
    space_id: str,
    payload: SpaceUpdateRequest,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    space = get_owned_space_or_404(session, auth, space_id)
    data = payload.model_dump(exclude_unset=True)
    # Required columns cannot be cleared.
    for key in ("name", "questionList", "collectionType", "theme", "buttonColor", "language", "autoTranslate"):
        if key in data and data[key] is None:
            data.pop(key)
    updated = SpacesRepository(session).update(space, **_space_fields(session, auth, data))
    return {"message": "Space updated successfully", "space": serialize_space(updated)}


@router.delete("/{space_id}")
def delete_space(
    space_id: str,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    space = get_owned_space_or_404(session, auth, space_id)
    SpacesRepository(session).deactivate(space)
    logger.info("Space deactivated", extra={"space_id": str(space.id), "owner_id": auth.user_id})
    return {"message": "Space deleted successfully"}


@router.get("/{space_id}/integrations")
def list_integrations(
    space_id: str,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    get_owned_space_or_404(session, auth, space_id)
    return {
        "integrations": [{**integration, "connected": False, "lastSync": None} for integration in INTEGRATIONS]
    }
