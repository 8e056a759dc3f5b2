from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from trustimonials.db.enums import (
    SingleDesignTemplateEnum,
    SingleSelectionEnum,
    ThemeEnum,
    WallDesignTemplateEnum,
    WallSortOrderEnum,
    WidgetTypeEnum,
)
from trustimonials.schemas.widget_settings import (
    SingleWidgetSettings,
    WallWidgetSettings,
    WidgetSettings,
)


class WidgetSettingsError(ValueError):
    pass


_THEMES = {theme.value for theme in ThemeEnum}
_WALL_TEMPLATES = {template.value for template in WallDesignTemplateEnum}
_SINGLE_TEMPLATES = {template.value for template in SingleDesignTemplateEnum}
_WALL_SORT_ORDERS = {order.value for order in WallSortOrderEnum}
_SINGLE_SELECTIONS = {selection.value for selection in SingleSelectionEnum}


def design_templates_for(widget_type: WidgetTypeEnum | str) -> set[str]:
    if WidgetTypeEnum(widget_type) == WidgetTypeEnum.wall:
        return set(_WALL_TEMPLATES)
    return set(_SINGLE_TEMPLATES)


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid widget settings"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"Invalid widget settings: {location}: {first.get('msg')}" if location else first.get("msg")


def _validate_wall_settings(settings: dict[str, Any]) -> WallWidgetSettings:
    if settings.get("designTemplate") not in _WALL_TEMPLATES:
        raise WidgetSettingsError("Invalid design template for wall widget")
    if settings.get("theme") not in _THEMES:
        raise WidgetSettingsError("Invalid theme for wall widget")

    items = settings.get("itemsToShow")
    if items is not None:
        if not isinstance(items, int) or isinstance(items, bool) or items < 1 or items > 50:
            raise WidgetSettingsError("Items to show must be between 1 and 50")

    sort_order = settings.get("sortOrder")
    if sort_order is not None and sort_order not in _WALL_SORT_ORDERS:
        raise WidgetSettingsError("Invalid sort order for wall widget")

    try:
        return WallWidgetSettings.model_validate(settings)
    except ValidationError as exc:
        raise WidgetSettingsError(_first_error(exc)) from exc


def _validate_single_settings(settings: dict[str, Any]) -> SingleWidgetSettings:
    if settings.get("designTemplate") not in _SINGLE_TEMPLATES:
        raise WidgetSettingsError("Invalid design template for single widget")
    if settings.get("theme") not in _THEMES:
        raise WidgetSettingsError("Invalid theme for single widget")

    selection = settings.get("selectTestimonial")
    if selection not in _SINGLE_SELECTIONS:
        raise WidgetSettingsError("Invalid testimonial selection method for single widget")
    if selection == SingleSelectionEnum.manual_select.value and not settings.get("manualTestimonialId"):
        raise WidgetSettingsError("Manual testimonial ID is required when using manual-select")

    try:
        return SingleWidgetSettings.model_validate(settings)
    except ValidationError as exc:
        raise WidgetSettingsError(_first_error(exc)) from exc


def validate_widget_settings(widget_type: WidgetTypeEnum | str, settings: Any) -> WidgetSettings:
    """Check a raw settings map against the rules of its widget type and return the typed view."""
    if not isinstance(settings, dict):
        raise WidgetSettingsError("Widget settings must be an object")
    try:
        kind = WidgetTypeEnum(widget_type)
    except ValueError as exc:
        raise WidgetSettingsError("Widget type must be wall or single") from exc

    if kind == WidgetTypeEnum.wall:
        return _validate_wall_settings(settings)
    return _validate_single_settings(settings)


def parse_stored_settings(widget_type: WidgetTypeEnum | str, settings: dict[str, Any]) -> WidgetSettings:
    """Typed view of settings that were validated when they were written."""
    return validate_widget_settings(widget_type, settings or {})


def prepare_widget_settings(
    *,
    design_template: str,
    settings: dict[str, Any],
) -> dict[str, Any]:
    """Fill the defaults applied when a widget is written; the widget's own design template always wins."""
    prepared = dict(settings)
    prepared["designTemplate"] = design_template
    if not prepared.get("theme"):
        prepared["theme"] = ThemeEnum.light.value
    prepared["isPublic"] = prepared.get("isPublic") is not False
    return prepared
