from typing import List, Optional

from sqlalchemy import or_, select

from trustimonials.db.models import Template
from trustimonials.db.repositories.base import Repository, coerce_uuid


class TemplatesRepository(Repository):
    def list_visible(self, *, user_id) -> List[Template]:
        stmt = (
            select(Template)
            .where(or_(Template.is_public.is_(True), Template.created_by == coerce_uuid(user_id)))
            .order_by(Template.created_at.desc())
        )
        return list(self.session.scalars(stmt).all())

    def get(self, template_id) -> Optional[Template]:
        parsed = coerce_uuid(template_id)
        if parsed is None:
            return None
        return self.session.get(Template, parsed)

    def get_accessible(self, *, user_id, template_id) -> Optional[Template]:
        """A template the user created, or any public one."""
        template = self.get(template_id)
        if template is None:
            return None
        if template.is_public or template.created_by == coerce_uuid(user_id):
            return template
        return None

    def create(self, *, created_by, name: str, form_config: dict, **fields) -> Template:
        return self.save(Template(created_by=coerce_uuid(created_by), name=name, form_config=form_config, **fields))

    def update(self, template: Template, **fields) -> Template:
        for key, value in fields.items():
            setattr(template, key, value)
        self.session.commit()
        self.session.refresh(template)
        return template

    def delete(self, template: Template) -> None:
        self.session.delete(template)
        self.session.commit()
