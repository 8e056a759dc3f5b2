from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from trustimonials.db.enums import WidgetStatusEnum, WidgetTypeEnum


class WidgetCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=60)
    type: WidgetTypeEnum
    designTemplate: str
    settings: dict[str, Any] = Field(default_factory=dict)
    metadata: dict[str, Any] = Field(default_factory=dict)


class WidgetUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=60)
    designTemplate: Optional[str] = None
    settings: Optional[dict[str, Any]] = None
    status: Optional[WidgetStatusEnum] = None
    metadata: Optional[dict[str, Any]] = None
