from typing import Any, List, Optional

from sqlalchemy import select

from trustimonials.db.enums import WidgetTypeEnum
from trustimonials.db.models import Widget
from trustimonials.db.repositories.base import Repository, coerce_uuid
from trustimonials.services.widget_settings import WidgetSettingsError, design_templates_for, validate_widget_settings


def _check_widget(widget_type, design_template: str, settings: Any) -> None:
    if design_template not in design_templates_for(widget_type):
        raise WidgetSettingsError(f"Invalid design template for {WidgetTypeEnum(widget_type).value} widget")
    validate_widget_settings(widget_type, settings)


class WidgetsRepository(Repository):
    """Widget persistence; settings are validated before anything reaches the session."""

    def list_for_space(self, *, space_id) -> List[Widget]:
        stmt = (
            select(Widget)
            .where(Widget.space_id == coerce_uuid(space_id))
            .order_by(Widget.created_at.desc())
        )
        return list(self.session.scalars(stmt).all())

    def get(self, widget_id) -> Optional[Widget]:
        parsed = coerce_uuid(widget_id)
        if parsed is None:
            return None
        return self.session.get(Widget, parsed)

    def create(
        self,
        *,
        space_id,
        created_by,
        name: str,
        widget_type: WidgetTypeEnum,
        design_template: str,
        settings: dict[str, Any],
        **fields,
    ) -> Widget:
        _check_widget(widget_type, design_template, settings)
        widget = Widget(
            space_id=coerce_uuid(space_id),
            created_by=coerce_uuid(created_by),
            name=name,
            type=WidgetTypeEnum(widget_type),
            design_template=design_template,
            settings=settings,
            **fields,
        )
        return self.save(widget)

    def update(self, widget: Widget, **fields) -> Widget:
        design_template = fields.get("design_template", widget.design_template)
        settings = fields.get("settings", widget.settings)
        _check_widget(widget.type, design_template, settings)
        for key, value in fields.items():
            setattr(widget, key, value)
        self.session.commit()
        self.session.refresh(widget)
        return widget

    def delete(self, widget: Widget) -> None:
        self.session.delete(widget)
        self.session.commit()
