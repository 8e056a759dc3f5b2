from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class TemplateCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    formConfig: dict[str, Any]
    emailSubject: Optional[str] = Field(default=None, max_length=200)
    emailBody: Optional[str] = Field(default=None, max_length=5000)
    isPublic: bool = False

    @field_validator("formConfig")
    @classmethod
    def validate_form_config(cls, value: dict[str, Any]) -> dict[str, Any]:
        if not isinstance(value.get("fields"), list):
            raise ValueError("Form configuration must include fields array")
        return value


class TemplateUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    formConfig: Optional[dict[str, Any]] = None
    emailSubject: Optional[str] = Field(default=None, max_length=200)
    emailBody: Optional[str] = Field(default=None, max_length=5000)
    isPublic: Optional[bool] = None

    @field_validator("formConfig")
    @classmethod
    def validate_form_config(cls, value: Optional[dict[str, Any]]) -> Optional[dict[str, Any]]:
        if value is not None and not isinstance(value.get("fields"), list):
            raise ValueError("Form configuration must include fields array")
        return value
