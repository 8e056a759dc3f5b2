from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from trustimonials.db.enums import CollectExtraEnum, CollectionTypeEnum, ThemeEnum

MAX_QUESTION_LENGTH = 100
HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"
LANGUAGE_PATTERN = r"^[A-Za-z]{2}$"


def _clean_questions(value: Optional[list[str]]) -> Optional[list[str]]:
    if value is None:
        return None
    questions = [question.strip() for question in value if isinstance(question, str) and question.strip()]
    if not questions:
        raise ValueError("At least one question is required")
    for question in questions:
        if len(question) > MAX_QUESTION_LENGTH:
            raise ValueError(f"Each question must be at most {MAX_QUESTION_LENGTH} characters")
    return questions


def _check_logo(value: Optional[str]) -> Optional[str]:
    if value is None or value == "":
        return None
    if not (value.startswith("http://") or value.startswith("https://")):
        raise ValueError("Logo must be a valid URL")
    return value


class SpaceCreateRequest(BaseModel):
    name: str = Field(min_length=3, max_length=60)
    description: Optional[str] = Field(default=None, max_length=500)
    logo: Optional[str] = None
    headerTitle: Optional[str] = Field(default=None, max_length=80)
    headerMessage: Optional[str] = Field(default=None, max_length=300)
    questionList: list[str] = Field(min_length=1)
    collectExtras: list[CollectExtraEnum] = Field(default_factory=list)
    collectionType: CollectionTypeEnum = CollectionTypeEnum.text_and_video
    theme: ThemeEnum = ThemeEnum.light
    buttonColor: str = Field(default="#00A676", pattern=HEX_COLOR_PATTERN)
    language: str = Field(default="en", pattern=LANGUAGE_PATTERN)
    autoTranslate: bool = False
    templateId: Optional[str] = None
    expiryDate: Optional[datetime] = None
    maxUses: Optional[int] = Field(default=None, ge=1)

    @field_validator("questionList")
    @classmethod
    def validate_questions(cls, value: list[str]) -> list[str]:
        return _clean_questions(value)

    @field_validator("logo")
    @classmethod
    def validate_logo(cls, value: Optional[str]) -> Optional[str]:
        return _check_logo(value)


class SpaceUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=3, max_length=60)
    description: Optional[str] = Field(default=None, max_length=500)
    logo: Optional[str] = None
    headerTitle: Optional[str] = Field(default=None, max_length=80)
    headerMessage: Optional[str] = Field(default=None, max_length=300)
    questionList: Optional[list[str]] = None
    collectExtras: Optional[list[CollectExtraEnum]] = None
    collectionType: Optional[CollectionTypeEnum] = None
    theme: Optional[ThemeEnum] = None
    buttonColor: Optional[str] = Field(default=None, pattern=HEX_COLOR_PATTERN)
    language: Optional[str] = Field(default=None, pattern=LANGUAGE_PATTERN)
    autoTranslate: Optional[bool] = None
    templateId: Optional[str] = None
    expiryDate: Optional[datetime] = None
    maxUses: Optional[int] = Field(default=None, ge=1)

    @field_validator("questionList")
    @classmethod
    def validate_questions(cls, value: Optional[list[str]]) -> Optional[list[str]]:
        return _clean_questions(value)

    @field_validator("logo")
    @classmethod
    def validate_logo(cls, value: Optional[str]) -> Optional[str]:
        return _check_logo(value)


# request field -> Space column
SPACE_FIELD_MAP = {
    "name": "name",
    "description": "description",
    "logo": "logo",
    "headerTitle": "header_title",
    "headerMessage": "header_message",
    "questionList": "question_list",
    "collectExtras": "collect_extras",
    "collectionType": "collection_type",
    "theme": "theme",
    "buttonColor": "button_color",
    "language": "language",
    "autoTranslate": "auto_translate",
    "templateId": "template_id",
    "expiryDate": "expiry_date",
    "maxUses": "max_uses",
}
