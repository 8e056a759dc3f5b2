from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class RequestLinkCreateRequest(BaseModel):
    slug: str = Field(min_length=3, max_length=50)
    templateId: Optional[str] = None
    expiryDate: Optional[datetime] = None
    maxUses: Optional[int] = Field(default=None, ge=1)

    @field_validator("slug")
    @classmethod
    def normalize_slug(cls, value: str) -> str:
        return value.strip().lower()


class RequestLinkUpdateRequest(BaseModel):
    isActive: Optional[bool] = None
    expiryDate: Optional[datetime] = None
    maxUses: Optional[int] = Field(default=None, ge=1)
