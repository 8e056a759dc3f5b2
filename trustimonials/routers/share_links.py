from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import ORJSONResponse
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile

from trustimonials.config import settings
from trustimonials.db.deps import get_session
from trustimonials.db.repositories.spaces import SpacesRepository
from trustimonials.db.repositories.testimonials import TestimonialsRepository
from trustimonials.services.rate_limit import FixedWindowRateLimiter
from trustimonials.services.serialization import serialize_public_space
from trustimonials.services.submissions import (
    SubmissionValidationError,
    normalize_public_submission,
    parse_form_data,
)

router = APIRouter(prefix="/s", tags=["share-links"])
logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many submissions from this IP, please try again later."

submission_limiter = FixedWindowRateLimiter(
    limit=settings.PUBLIC_SUBMISSION_RATE_LIMIT,
    window_seconds=settings.PUBLIC_SUBMISSION_RATE_WINDOW_SECONDS,
)


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _bad_submission(exc: SubmissionValidationError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"message": exc.message, "errors": exc.errors},
    )


async def _read_submission(request: Request) -> tuple[dict[str, Any], bool]:
    """Submission payload plus whether a media file came with it."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("multipart/form-data"):
        form = await request.form()
        media = form.get("mediaFile")
        has_media = isinstance(media, UploadFile) and bool(media.filename)
        raw = form.get("data")
        if not isinstance(raw, str):
            raise SubmissionValidationError("Invalid submission data format")
        return parse_form_data(raw), has_media

    try:
        payload = await request.json()
    except ValueError as exc:
        raise SubmissionValidationError("Invalid submission data format") from exc
    if not isinstance(payload, dict):
        raise SubmissionValidationError("Invalid submission data format")
    return payload, False


@router.get("/{space_id}")
def get_public_space(space_id: str, session: Session = Depends(get_session)):
    space = SpacesRepository(session).get_public(space_id)
    if not space:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Space not found or not active")
    return {"space": serialize_public_space(space)}


@router.post("/{space_id}/submissions", status_code=status.HTTP_201_CREATED)
async def submit_testimonial(
    space_id: str,
    request: Request,
    session: Session = Depends(get_session),
):
    space = SpacesRepository(session).get_public(space_id)
    if not space:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Space not found or not active")

    ip_address = _client_ip(request)
    # Keyed on the stored id so every spelling of it shares one window.
    limiter_key = (ip_address, str(space.id))
    retry_after = submission_limiter.retry_after(limiter_key)
    if retry_after:
        logger.warning("Public submission rate limited", extra={"ip": ip_address, "space_id": str(space.id)})
        return ORJSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content={"error": RATE_LIMIT_MESSAGE, "retryAfter": retry_after},
            headers={"Retry-After": str(retry_after)},
        )

    try:
        payload, has_media = await _read_submission(request)
        submission = normalize_public_submission(
            payload,
            space=space,
            has_media=has_media,
            ip_address=ip_address,
            user_agent=request.headers.get("user-agent"),
        )
    except SubmissionValidationError as exc:
        raise _bad_submission(exc) from exc

    testimonial = TestimonialsRepository(session).create(**submission.as_testimonial_fields())
    submission_limiter.record(limiter_key)
    logger.info(
        "Public submission accepted",
        extra={"space_id": str(space.id), "testimonial_id": str(testimonial.id), "type": testimonial.type.value},
    )
    return {
        "message": "Testimonial submitted successfully",
        "submissionId": str(testimonial.id),
        "status": testimonial.status.value,
    }
