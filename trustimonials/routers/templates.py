from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from trustimonials.auth.dependencies import AuthContext, get_current_user
from trustimonials.db.deps import get_session
from trustimonials.db.models import Template
from trustimonials.db.repositories.base import coerce_uuid
from trustimonials.db.repositories.templates import TemplatesRepository
from trustimonials.schemas.templates import TemplateCreateRequest, TemplateUpdateRequest
from trustimonials.services.serialization import serialize_template

router = APIRouter(prefix="/api/templates", tags=["templates"])

_TEMPLATE_FIELDS = {
    "name": "name",
    "formConfig": "form_config",
    "emailSubject": "email_subject",
    "emailBody": "email_body",
    "isPublic": "is_public",
}


def _get_own_template_or_404(session: Session, auth: AuthContext, template_id: str) -> Template:
    template = TemplatesRepository(session).get(template_id)
    if not template:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Template not found")
    if template.created_by != coerce_uuid(auth.user_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to modify this template")
    return template


@router.get("")
def list_templates(
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    templates = TemplatesRepository(session).list_visible(user_id=auth.user_id)
    return {"templates": [serialize_template(template) for template in templates]}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_template(
    payload: TemplateCreateRequest,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    template = TemplatesRepository(session).create(
        created_by=auth.user_id,
        name=payload.name.strip(),
        form_config=payload.formConfig,
        email_subject=payload.emailSubject,
        email_body=payload.emailBody,
        is_public=payload.isPublic,
    )
    return {"message": "Template created successfully", "template": serialize_template(template)}


@router.get("/{template_id}")
def get_template(
    template_id: str,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    template = TemplatesRepository(session).get_accessible(user_id=auth.user_id, template_id=template_id)
    if not template:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Template not found")
    return {"template": serialize_template(template)}


@router.put("/{template_id}")
def update_template(
    template_id: str,
    payload: TemplateUpdateRequest,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    template = _get_own_template_or_404(session, auth, template_id)
    fields = {
        _TEMPLATE_FIELDS[key]: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if not (value is None and key in {"name", "formConfig", "isPublic"})
    }
    updated = TemplatesRepository(session).update(template, **fields)
    return {"message": "Template updated successfully", "template": serialize_template(updated)}


@router.delete("/{template_id}")
def delete_template(
    template_id: str,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    template = _get_own_template_or_404(session, auth, template_id)
    TemplatesRepository(session).delete(template)
    return {"message": "Template deleted successfully"}
