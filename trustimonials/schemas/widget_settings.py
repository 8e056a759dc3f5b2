"""
Typed views of a widget's stored settings map.

The map is persisted as JSON exactly as the owner supplied it; these models are what
the selection engine and the renderer read, one variant per widget type.
"""
from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from trustimonials.db.enums import (
    SingleDesignTemplateEnum,
    SingleSelectionEnum,
    ThemeEnum,
    WallDesignTemplateEnum,
    WallSortOrderEnum,
)

DEFAULT_GAP_PX = 16
DEFAULT_CARD_RADIUS_PX = 8


class WidgetFilter(BaseModel):
    model_config = ConfigDict(extra="allow")

    minRating: Optional[int] = None
    hasMedia: bool = False


class SpacingAndGutter(BaseModel):
    model_config = ConfigDict(extra="allow")

    gapPx: Optional[int] = Field(default=None, ge=0)
    cardRadiusPx: Optional[int] = Field(default=None, ge=0)

    @property
    def gap(self) -> int:
        return self.gapPx or DEFAULT_GAP_PX

    @property
    def card_radius(self) -> int:
        return self.cardRadiusPx or DEFAULT_CARD_RADIUS_PX


class CallToAction(BaseModel):
    model_config = ConfigDict(extra="allow")

    text: Optional[str] = None
    url: Optional[str] = None


class AccessControl(BaseModel):
    model_config = ConfigDict(extra="allow")

    allowedOrigins: list[str] = Field(default_factory=list)


class BaseWidgetSettings(BaseModel):
    model_config = ConfigDict(extra="allow")

    theme: ThemeEnum
    isPublic: bool = True
    showRating: bool = False
    cta: Optional[CallToAction] = None
    accessControl: Optional[AccessControl] = None

    @property
    def allowed_origins(self) -> list[str]:
        if self.accessControl is None:
            return []
        return list(self.accessControl.allowedOrigins)


class WallWidgetSettings(BaseWidgetSettings):
    designTemplate: WallDesignTemplateEnum
    itemsToShow: Optional[int] = Field(default=None, ge=1, le=50)
    sortOrder: Optional[WallSortOrderEnum] = None
    showAuthor: bool = False
    filter: Optional[WidgetFilter] = None
    spacingAndGutter: SpacingAndGutter = Field(default_factory=SpacingAndGutter)


class SingleWidgetSettings(BaseWidgetSettings):
    designTemplate: SingleDesignTemplateEnum
    selectTestimonial: SingleSelectionEnum
    manualTestimonialId: Optional[str] = None
    showAuthorDetails: bool = False
    showDate: bool = False


WidgetSettings = Union[WallWidgetSettings, SingleWidgetSettings]
