from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from trustimonials.db.enums import CollectedViaEnum, TestimonialTypeEnum


class QuestionResponseIn(BaseModel):
    question: str = Field(min_length=1)
    answer: str = Field(min_length=1, max_length=2000)
    rating: Optional[int] = Field(default=None, ge=1, le=5)


class SpaceTestimonialCreateRequest(BaseModel):
    type: TestimonialTypeEnum
    authorName: Optional[str] = Field(default=None, max_length=100)
    authorEmail: Optional[str] = None
    content: Optional[str] = Field(default=None, max_length=2000)
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    mediaUrl: Optional[str] = None
    thumbnailUrl: Optional[str] = None
    questionResponses: list[QuestionResponseIn] = Field(default_factory=list)
    collectedVia: CollectedViaEnum = CollectedViaEnum.link


class ModerationActionRequest(BaseModel):
    action: str


class BulkModerationRequest(BaseModel):
    testimonialIds: list[str] = Field(min_length=1)
    action: str


class LegacyTestimonialCreateRequest(BaseModel):
    authorName: str = Field(min_length=1, max_length=100)
    authorEmail: Optional[str] = None
    content: str = Field(min_length=10, max_length=2000)
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    images: list[str] = Field(default_factory=list)
    sourceLink: Optional[str] = None


class LegacyTestimonialUpdateRequest(BaseModel):
    authorName: Optional[str] = Field(default=None, min_length=1, max_length=100)
    content: Optional[str] = Field(default=None, min_length=10, max_length=2000)
    rating: Optional[int] = Field(default=None, ge=1, le=5)
