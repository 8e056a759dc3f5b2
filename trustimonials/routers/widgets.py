from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from trustimonials.auth.dependencies import AuthContext, get_current_user
from trustimonials.config import settings
from trustimonials.db.deps import get_session
from trustimonials.db.models import Widget
from trustimonials.db.repositories.base import coerce_uuid
from trustimonials.db.repositories.spaces import SpacesRepository
from trustimonials.db.repositories.widgets import WidgetsRepository
from trustimonials.routers.spaces import get_owned_space_or_404
from trustimonials.schemas.widgets import WidgetCreateRequest, WidgetUpdateRequest
from trustimonials.services.serialization import serialize_testimonial, serialize_widget
from trustimonials.services.testimonial_selection import select_for_widget
from trustimonials.services.widget_settings import WidgetSettingsError, prepare_widget_settings
from trustimonials.widget_renderer.loader import resolve_base_url

router = APIRouter(prefix="/api", tags=["widgets"])
logger = logging.getLogger(__name__)


def _base_url(request: Request) -> str:
    return resolve_base_url(str(request.base_url), settings.PUBLIC_BASE_URL)


def _invalid_settings(exc: WidgetSettingsError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"message": str(exc), "errors": [str(exc)]},
    )


def _get_widget_or_404(session: Session, auth: AuthContext, widget_id: str) -> Widget:
    widget = WidgetsRepository(session).get(widget_id)
    if not widget:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Widget not found")
    space = SpacesRepository(session).get(widget.space_id)
    if space is None or space.owner_id != coerce_uuid(auth.user_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to access this widget")
    return widget


@router.post("/spaces/{space_id}/widgets", status_code=status.HTTP_201_CREATED)
def create_widget(
    space_id: str,
    payload: WidgetCreateRequest,
    request: Request,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    space = get_owned_space_or_404(session, auth, space_id)
    widget_settings = prepare_widget_settings(design_template=payload.designTemplate, settings=payload.settings)
    try:
        widget = WidgetsRepository(session).create(
            space_id=space.id,
            created_by=auth.user_id,
            name=payload.name.strip(),
            widget_type=payload.type,
            design_template=payload.designTemplate,
            settings=widget_settings,
            meta=payload.metadata,
        )
    except WidgetSettingsError as exc:
        raise _invalid_settings(exc) from exc

    logger.info(
        "Widget created",
        extra={"widget_id": str(widget.id), "space_id": str(space.id), "type": widget.type.value},
    )
    return {"message": "Widget created successfully", "widget": serialize_widget(widget, base_url=_base_url(request))}


@router.get("/spaces/{space_id}/widgets")
def list_widgets(
    space_id: str,
    request: Request,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    space = get_owned_space_or_404(session, auth, space_id)
    base_url = _base_url(request)
    widgets = WidgetsRepository(session).list_for_space(space_id=space.id)
    return {"widgets": [serialize_widget(widget, base_url=base_url) for widget in widgets]}


@router.get("/widgets/{widget_id}")
def get_widget(
    widget_id: str,
    request: Request,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    widget = _get_widget_or_404(session, auth, widget_id)
    return {"widget": serialize_widget(widget, base_url=_base_url(request))}


@router.get("/widgets/{widget_id}/preview")
def preview_widget(
    widget_id: str,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    widget = _get_widget_or_404(session, auth, widget_id)
    selected = select_for_widget(session, widget)
    return {
        "widget": serialize_widget(widget),
        "testimonials": [serialize_testimonial(item, include_private=False) for item in selected],
    }


@router.put("/widgets/{widget_id}")
def update_widget(
    widget_id: str,
    payload: WidgetUpdateRequest,
    request: Request,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    widget = _get_widget_or_404(session, auth, widget_id)
    fields: dict = {}
    if payload.name is not None:
        fields["name"] = payload.name.strip()
    if payload.status is not None:
        fields["status"] = payload.status
    if payload.metadata is not None:
        fields["meta"] = payload.metadata

    design_template = payload.designTemplate or widget.design_template
    if payload.designTemplate is not None:
        fields["design_template"] = payload.designTemplate
    if payload.settings is not None:
        fields["settings"] = prepare_widget_settings(design_template=design_template, settings=payload.settings)
    elif payload.designTemplate is not None:
        fields["settings"] = {**(widget.settings or {}), "designTemplate": payload.designTemplate}

    try:
        updated = WidgetsRepository(session).update(widget, **fields)
    except WidgetSettingsError as exc:
        raise _invalid_settings(exc) from exc
    return {"message": "Widget updated successfully", "widget": serialize_widget(updated, base_url=_base_url(request))}


@router.delete("/widgets/{widget_id}")
def delete_widget(
    widget_id: str,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    widget = _get_widget_or_404(session, auth, widget_id)
    WidgetsRepository(session).delete(widget)
    logger.info("Widget deleted", extra={"widget_id": widget_id})
    return {"message": "Widget deleted successfully"}
