from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from trustimonials.auth.dependencies import AuthContext, get_current_user
from trustimonials.db.deps import get_session
from trustimonials.db.models import RequestLink, as_utc, utcnow
from trustimonials.db.repositories.base import coerce_uuid
from trustimonials.db.repositories.request_links import RequestLinksRepository
from trustimonials.db.repositories.templates import TemplatesRepository
from trustimonials.schemas.links import RequestLinkCreateRequest, RequestLinkUpdateRequest
from trustimonials.services.request_links import is_valid_slug
from trustimonials.services.serialization import serialize_request_link

router = APIRouter(prefix="/api/links", tags=["links"])
logger = logging.getLogger(__name__)


def _get_link_or_404(session: Session, auth: AuthContext, link_id: str) -> RequestLink:
    link = RequestLinksRepository(session).get(link_id)
    if not link:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Link not found")
    if not auth.is_admin and link.owner_id != coerce_uuid(auth.user_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to access this link")
    return link


def _future_or_400(value):
    if value is None:
        return None
    normalized = as_utc(value)
    if normalized <= utcnow():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Expiry date must be in the future")
    return normalized


@router.post("", status_code=status.HTTP_201_CREATED)
def create_link(
    payload: RequestLinkCreateRequest,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    if not is_valid_slug(payload.slug):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "message": "Validation failed",
                "errors": ["Slug can only contain lowercase letters, numbers, hyphens, and underscores"],
            },
        )
    repo = RequestLinksRepository(session)
    if repo.get_by_slug(payload.slug):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Slug already exists")

    template_id = None
    if payload.templateId:
        template = TemplatesRepository(session).get_accessible(user_id=auth.user_id, template_id=payload.templateId)
        if not template:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Template not found or not accessible",
            )
        template_id = template.id

    link = repo.create(
        owner_id=auth.user_id,
        slug=payload.slug,
        template_id=template_id,
        expiry_date=_future_or_400(payload.expiryDate),
        max_uses=payload.maxUses,
    )
    logger.info("Request link created", extra={"link_id": str(link.id), "slug": link.slug})
    return {"message": "Link created successfully", "link": serialize_request_link(link)}


@router.get("")
def list_links(
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    links = RequestLinksRepository(session).list_for_owner(owner_id=auth.user_id)
    return {"links": [serialize_request_link(link) for link in links]}


@router.get("/{link_id}")
def get_link(
    link_id: str,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    link = _get_link_or_404(session, auth, link_id)
    return {"link": serialize_request_link(link)}


@router.put("/{link_id}")
def update_link(
    link_id: str,
    payload: RequestLinkUpdateRequest,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    link = _get_link_or_404(session, auth, link_id)
    data = payload.model_dump(exclude_unset=True)
    fields: dict = {}
    if data.get("isActive") is not None:
        fields["is_active"] = data["isActive"]
    if "expiryDate" in data:
        fields["expiry_date"] = _future_or_400(data["expiryDate"])
    if "maxUses" in data:
        fields["max_uses"] = data["maxUses"]
    updated = RequestLinksRepository(session).update(link, **fields)
    return {"message": "Link updated successfully", "link": serialize_request_link(updated)}


@router.delete("/{link_id}")
def delete_link(
    link_id: str,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    link = _get_link_or_404(session, auth, link_id)
    RequestLinksRepository(session).delete(link)
    return {"message": "Link deleted successfully"}
