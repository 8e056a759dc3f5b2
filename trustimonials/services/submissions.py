"""
Validation and normalisation of anonymous submissions from a Space's public form.

A submission carries free text, structured question/answer pairs, or both. Every
problem found is reported at once so the form can show them together.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional

from trustimonials.db.enums import (
    CollectedViaEnum,
    CollectionTypeEnum,
    TestimonialStatusEnum,
    TestimonialTypeEnum,
)
from trustimonials.db.models import Space

MAX_ANSWER_LENGTH = 2000
MAX_CONTENT_LENGTH = 2000
MAX_NAME_LENGTH = 100


class SubmissionValidationError(ValueError):
    def __init__(self, message: str, errors: Optional[list[str]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors = list(errors or [])


@dataclass
class NormalizedSubmission:
    space_id: Any
    type: TestimonialTypeEnum
    author_name: Optional[str]
    author_email: Optional[str]
    content: str
    rating: Optional[int]
    question_responses: list[dict[str, Any]] = field(default_factory=list)
    collected_via: CollectedViaEnum = CollectedViaEnum.link
    status: TestimonialStatusEnum = TestimonialStatusEnum.pending
    meta: dict[str, Any] = field(default_factory=dict)

    def as_testimonial_fields(self) -> dict[str, Any]:
        return {
            "space_id": self.space_id,
            "type": self.type,
            "author_name": self.author_name,
            "author_email": self.author_email,
            "content": self.content,
            "rating": self.rating,
            "question_responses": self.question_responses,
            "collected_via": self.collected_via,
            "status": self.status,
            "meta": self.meta,
        }


def parse_form_data(raw: str) -> dict[str, Any]:
    """Decode the JSON ``data`` field of a multipart submission."""
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise SubmissionValidationError("Invalid submission data format") from exc
    if not isinstance(parsed, dict):
        raise SubmissionValidationError("Invalid submission data format")
    return parsed


def _is_rating(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 1 <= value <= 5


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _collect_errors(payload: dict[str, Any]) -> list[str]:
    errors: list[str] = []
    content = _text(payload.get("content"))
    responses = payload.get("questionResponses")

    if responses is not None and not isinstance(responses, list):
        errors.append("Question responses must be a list")
        responses = []
    responses = responses or []

    if not content and not responses:
        errors.append("Either content or question responses are required")
    if len(content) > MAX_CONTENT_LENGTH:
        errors.append(f"Content must be at most {MAX_CONTENT_LENGTH} characters")

    name = payload.get("name")
    if name is not None and (not isinstance(name, str) or len(name.strip()) > MAX_NAME_LENGTH):
        errors.append(f"Name must be at most {MAX_NAME_LENGTH} characters")

    email = payload.get("email")
    if email not in (None, "") and (not isinstance(email, str) or "@" not in email):
        errors.append("Please provide a valid email")

    rating = payload.get("rating")
    if rating is not None and not _is_rating(rating):
        errors.append("Rating must be between 1 and 5")

    meta = payload.get("meta")
    if meta is not None and not isinstance(meta, dict):
        errors.append("Meta must be an object")

    for index, response in enumerate(responses, start=1):
        if not isinstance(response, dict):
            errors.append(f"Question {index} is missing question or answer")
            continue
        question = _text(response.get("question"))
        answer = response.get("answer")
        answer_text = answer if isinstance(answer, str) else ""
        if not question or not answer_text.strip():
            errors.append(f"Question {index} is missing question or answer")
        if len(answer_text) > MAX_ANSWER_LENGTH:
            errors.append(f"Question {index} answer is too long")
        item_rating = response.get("rating")
        if item_rating not in (None, 0) and not _is_rating(item_rating):
            errors.append(f"Question {index} rating must be between 1 and 5")
    return errors


def _normalize_responses(responses: list[Any]) -> list[dict[str, Any]]:
    normalized = []
    for index, response in enumerate(responses):
        if not isinstance(response, dict):
            continue
        question = _text(response.get("question"))
        answer = _text(response.get("answer"))
        if not question or not answer:
            continue
        entry: dict[str, Any] = {"questionIndex": index, "question": question, "answer": answer}
        if _is_rating(response.get("rating")):
            entry["rating"] = response["rating"]
        normalized.append(entry)
    return normalized


def synthesize_content(responses: list[dict[str, Any]]) -> str:
    return "\n\n".join(f"Q: {item['question']}\nA: {item['answer']}" for item in responses)


def normalize_public_submission(
    payload: dict[str, Any],
    *,
    space: Space,
    has_media: bool = False,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> NormalizedSubmission:
    errors = _collect_errors(payload)
    if errors:
        raise SubmissionValidationError("Validation failed", errors)

    responses = _normalize_responses(payload.get("questionResponses") or [])
    content = _text(payload.get("content")) or synthesize_content(responses)

    testimonial_type = TestimonialTypeEnum.text
    if space.collection_type == CollectionTypeEnum.text_and_video and has_media:
        testimonial_type = TestimonialTypeEnum.video

    name = _text(payload.get("name")) or None
    email = _text(payload.get("email")) or None
    meta = {"ipAddress": ip_address, "userAgent": user_agent, **(payload.get("meta") or {})}

    return NormalizedSubmission(
        space_id=space.id,
        type=testimonial_type,
        author_name=name,
        author_email=email,
        content=content,
        rating=payload.get("rating"),
        question_responses=responses,
        meta=meta,
    )
