from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, Response
from sqlalchemy.orm import Session

from trustimonials.config import settings
from trustimonials.db.deps import get_session
from trustimonials.db.enums import WidgetStatusEnum, WidgetTypeEnum
from trustimonials.db.models import Widget
from trustimonials.db.repositories.testimonials import TestimonialsRepository
from trustimonials.db.repositories.widgets import WidgetsRepository
from trustimonials.services.testimonial_selection import (
    sanitize_testimonial,
    select_single_testimonial,
    select_wall_testimonials,
)
from trustimonials.services.widget_settings import parse_stored_settings
from trustimonials.widget_renderer.loader import (
    ERROR_SCRIPT,
    NOT_FOUND_SCRIPT,
    render_loader_script,
    resolve_base_url,
)
from trustimonials.widget_renderer.pages import render_message_page, render_single_page, render_wall_page
from trustimonials.widget_renderer.palette import resolve_theme

router = APIRouter(prefix="/embed", tags=["embeds"])
logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Widget not found or not available"
ACCESS_DENIED_MESSAGE = "Access denied"
ERROR_MESSAGE = "Error loading widget"
NO_TESTIMONIAL_MESSAGE = "No testimonial available"

FRAME_HEADERS = {"X-Frame-Options": "ALLOWALL"}


def _html(content: str, status_code: int = 200) -> HTMLResponse:
    return HTMLResponse(content=content, status_code=status_code, headers=FRAME_HEADERS)


def _message(message: str, status_code: int) -> HTMLResponse:
    return _html(render_message_page(message), status_code=status_code)


def _get_public_widget(session: Session, widget_id: str, widget_type: Optional[WidgetTypeEnum]) -> Optional[Widget]:
    """Missing, private, disabled and wrong-type widgets all look the same to the caller."""
    widget = WidgetsRepository(session).get(widget_id)
    if widget is None or not (widget.settings or {}).get("isPublic"):
        return None
    if widget.status != WidgetStatusEnum.active:
        return None
    if widget_type is not None and widget.type != widget_type:
        return None
    return widget


def _origin_allowed(request: Request, allowed_origins: list[str]) -> bool:
    if not allowed_origins:
        return True
    origin = request.headers.get("origin") or request.headers.get("referer")
    if not origin:
        return True
    return origin in allowed_origins


@router.get("/wall/{widget_id}", response_class=HTMLResponse)
def embed_wall(
    widget_id: str,
    request: Request,
    theme: Optional[str] = None,
    session: Session = Depends(get_session),
):
    try:
        widget = _get_public_widget(session, widget_id, WidgetTypeEnum.wall)
        if widget is None:
            return _message(NOT_FOUND_MESSAGE, 404)

        wall_settings = parse_stored_settings(widget.type, widget.settings)
        if not _origin_allowed(request, wall_settings.allowed_origins):
            logger.warning("Embed origin denied", extra={"widget_id": widget_id, "type": "wall"})
            return _message(ACCESS_DENIED_MESSAGE, 403)

        approved = TestimonialsRepository(session).list_approved(space_id=widget.space_id)
        selected = select_wall_testimonials(
            wall_settings,
            space_id=widget.space_id,
            testimonials=approved,
            default_limit=settings.DEFAULT_WALL_ITEMS,
        )
        html = render_wall_page(
            widget_id=str(widget.id),
            widget_name=widget.name,
            settings=wall_settings,
            testimonials=[sanitize_testimonial(item) for item in selected],
            theme=resolve_theme(theme, wall_settings.theme.value),
        )
        return _html(html)
    except Exception:
        logger.exception("Wall embed failed", extra={"widget_id": widget_id})
        return _message(ERROR_MESSAGE, 500)


@router.get("/single/{widget_id}", response_class=HTMLResponse)
def embed_single(
    widget_id: str,
    request: Request,
    theme: Optional[str] = None,
    session: Session = Depends(get_session),
):
    try:
        widget = _get_public_widget(session, widget_id, WidgetTypeEnum.single)
        if widget is None:
            return _message(NOT_FOUND_MESSAGE, 404)

        single_settings = parse_stored_settings(widget.type, widget.settings)
        if not _origin_allowed(request, single_settings.allowed_origins):
            logger.warning("Embed origin denied", extra={"widget_id": widget_id, "type": "single"})
            return _message(ACCESS_DENIED_MESSAGE, 403)

        approved = TestimonialsRepository(session).list_approved(space_id=widget.space_id)
        chosen = select_single_testimonial(single_settings, space_id=widget.space_id, testimonials=approved)
        if chosen is None:
            return _message(NO_TESTIMONIAL_MESSAGE, 404)

        html = render_single_page(
            widget_id=str(widget.id),
            widget_name=widget.name,
            settings=single_settings,
            testimonial=sanitize_testimonial(chosen),
            theme=resolve_theme(theme, single_settings.theme.value),
        )
        return _html(html)
    except Exception:
        logger.exception("Single embed failed", extra={"widget_id": widget_id})
        return _message(ERROR_MESSAGE, 500)


@router.get("/config/{widget_id}.js")
def embed_loader(widget_id: str, request: Request, session: Session = Depends(get_session)):
    media_type = "application/javascript"
    try:
        widget = _get_public_widget(session, widget_id, None)
        if widget is None:
            return Response(content=NOT_FOUND_SCRIPT, status_code=404, media_type=media_type)
        script = render_loader_script(
            widget_id=str(widget.id),
            widget_type=widget.type.value,
            base_url=resolve_base_url(str(request.base_url), settings.PUBLIC_BASE_URL),
        )
        return Response(
            content=script,
            media_type=media_type,
            headers={"Cache-Control": f"public, max-age={settings.EMBED_SCRIPT_CACHE_SECONDS}"},
        )
    except Exception:
        logger.exception("Embed loader failed", extra={"widget_id": widget_id})
        return Response(content=ERROR_SCRIPT, status_code=500, media_type=media_type)
