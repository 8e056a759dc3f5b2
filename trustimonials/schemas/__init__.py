from trustimonials.schemas.widget_settings import (
    BaseWidgetSettings,
    SingleWidgetSettings,
    WallWidgetSettings,
    WidgetSettings,
)

__all__ = [
    "BaseWidgetSettings",
    "SingleWidgetSettings",
    "WallWidgetSettings",
    "WidgetSettings",
]
