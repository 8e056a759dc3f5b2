from __future__ import annotations

import random
from dataclasses import dataclass, field
from datetime import datetime
from html import escape
from typing import Any, Iterable, Optional, Sequence

from sqlalchemy.orm import Session

from trustimonials.config import settings as app_settings
from trustimonials.db.enums import SingleSelectionEnum, TestimonialStatusEnum, WallSortOrderEnum, WidgetTypeEnum
from trustimonials.db.models import Testimonial, Widget, as_utc
from trustimonials.db.repositories.testimonials import TestimonialsRepository
from trustimonials.schemas.widget_settings import SingleWidgetSettings, WallWidgetSettings
from trustimonials.services.widget_settings import parse_stored_settings

ANONYMOUS_AUTHOR = "Anonymous"


def sanitize_html(value: Optional[str]) -> str:
    """Entity-escape the five HTML metacharacters plus the forward slash."""
    if not value:
        return ""
    return escape(value, quote=True).replace("/", "&#x2F;")


@dataclass(frozen=True)
class SanitizedQuestionResponse:
    question_index: int
    question: str
    answer: str
    rating: Optional[int] = None


@dataclass(frozen=True)
class SanitizedTestimonial:
    id: str
    type: str
    author_name: str
    content: str
    rating: Optional[int]
    media_url: Optional[str]
    thumbnail_url: Optional[str]
    submitted_at: Optional[datetime]
    question_responses: list[SanitizedQuestionResponse] = field(default_factory=list)


def sanitize_testimonial(testimonial: Testimonial) -> SanitizedTestimonial:
    responses = []
    for index, response in enumerate(testimonial.question_responses or []):
        if not isinstance(response, dict):
            continue
        responses.append(
            SanitizedQuestionResponse(
                question_index=int(response.get("questionIndex", index)),
                question=sanitize_html(response.get("question")),
                answer=sanitize_html(response.get("answer")),
                rating=response.get("rating"),
            )
        )
    return SanitizedTestimonial(
        id=str(testimonial.id),
        type=getattr(testimonial.type, "value", testimonial.type),
        author_name=sanitize_html(testimonial.author_name or ANONYMOUS_AUTHOR),
        content=sanitize_html(testimonial.content or ""),
        rating=testimonial.rating,
        media_url=testimonial.media_url,
        thumbnail_url=testimonial.thumbnail_url,
        submitted_at=as_utc(testimonial.submitted_at),
        question_responses=responses,
    )


def _is_displayable(testimonial: Testimonial, space_id: Any) -> bool:
    return testimonial.space_id == space_id and testimonial.status == TestimonialStatusEnum.approved


def _submitted_key(testimonial: Testimonial) -> float:
    submitted = as_utc(testimonial.submitted_at)
    return submitted.timestamp() if submitted else 0.0


def _has_media(testimonial: Testimonial) -> bool:
    return bool(testimonial.media_url) or bool(testimonial.thumbnail_url)


def select_wall_testimonials(
    settings: WallWidgetSettings,
    *,
    space_id: Any,
    testimonials: Iterable[Testimonial],
    default_limit: Optional[int] = None,
) -> list[Testimonial]:
    candidates = [item for item in testimonials if _is_displayable(item, space_id)]

    wall_filter = settings.filter
    if wall_filter is not None:
        if wall_filter.minRating:
            threshold = wall_filter.minRating
            candidates = [item for item in candidates if item.rating is not None and item.rating >= threshold]
        if wall_filter.hasMedia:
            candidates = [item for item in candidates if _has_media(item)]

    if settings.sortOrder == WallSortOrderEnum.random:
        random.shuffle(candidates)
    elif settings.sortOrder == WallSortOrderEnum.highest_rating:
        # Unrated testimonials sort after every rated one.
        candidates.sort(
            key=lambda item: (item.rating if item.rating is not None else 0, _submitted_key(item)),
            reverse=True,
        )
    else:
        candidates.sort(key=_submitted_key, reverse=True)

    limit = settings.itemsToShow or default_limit or app_settings.DEFAULT_WALL_ITEMS
    return candidates[:limit]


def select_single_testimonial(
    settings: SingleWidgetSettings,
    *,
    space_id: Any,
    testimonials: Iterable[Testimonial],
) -> Optional[Testimonial]:
    candidates = [item for item in testimonials if _is_displayable(item, space_id)]
    if not candidates:
        return None

    if settings.selectTestimonial == SingleSelectionEnum.manual_select:
        wanted = (settings.manualTestimonialId or "").strip().lower()
        if not wanted:
            return None
        return next((item for item in candidates if str(item.id).lower() == wanted), None)
    if settings.selectTestimonial == SingleSelectionEnum.auto_latest:
        return max(candidates, key=_submitted_key)
    if settings.selectTestimonial == SingleSelectionEnum.auto_random:
        return random.choice(candidates)
    return None


def select_for_widget(session: Session, widget: Widget) -> list[Testimonial]:
    """Approved testimonials of the widget's space, chosen and ordered per its settings."""
    widget_settings = parse_stored_settings(widget.type, widget.settings)
    approved: Sequence[Testimonial] = TestimonialsRepository(session).list_approved(space_id=widget.space_id)

    if widget.type == WidgetTypeEnum.wall:
        return select_wall_testimonials(widget_settings, space_id=widget.space_id, testimonials=approved)

    chosen = select_single_testimonial(widget_settings, space_id=widget.space_id, testimonials=approved)
    return [chosen] if chosen is not None else []
