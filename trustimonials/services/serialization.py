"""Camel-cased JSON views of stored records, as returned by the dashboard API."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from trustimonials.config import settings
from trustimonials.db.models import RequestLink, Space, Template, Testimonial, Widget, as_utc
from trustimonials.services.request_links import is_link_valid
from trustimonials.widget_renderer.loader import container_id


def iso(value: Optional[datetime]) -> Optional[str]:
    normalized = as_utc(value)
    return normalized.isoformat() if normalized else None


def _value(member: Any) -> Any:
    return getattr(member, "value", member)


def _id(value: Any) -> Optional[str]:
    return str(value) if value is not None else None


def public_space_link(space: Space) -> str:
    return f"{settings.frontend_url}/t/{space.id}"


def serialize_space(space: Space, *, stats: Optional[dict[str, int]] = None) -> dict[str, Any]:
    return {
        "id": str(space.id),
        "ownerId": _id(space.owner_id),
        "name": space.name,
        "description": space.description,
        "logo": space.logo,
        "headerTitle": space.header_title,
        "headerMessage": space.header_message,
        "questionList": list(space.question_list or []),
        "collectExtras": list(space.collect_extras or []),
        "collectionType": _value(space.collection_type),
        "theme": _value(space.theme),
        "buttonColor": space.button_color,
        "language": space.language,
        "autoTranslate": space.auto_translate,
        "templateId": _id(space.template_id),
        "expiryDate": iso(space.expiry_date),
        "maxUses": space.max_uses,
        "isActive": space.is_active,
        "publicLink": public_space_link(space),
        "stats": stats or {"videos": 0, "testimonials": 0, "activeShareLinks": 0},
        "createdAt": iso(space.created_at),
        "updatedAt": iso(space.updated_at),
    }


def serialize_public_space(space: Space) -> dict[str, Any]:
    return {
        "id": str(space.id),
        "name": space.name,
        "description": space.description,
        "logo": space.logo,
        "headerTitle": space.header_title,
        "headerMessage": space.header_message,
        "questionList": list(space.question_list or []),
        "theme": _value(space.theme),
        "buttonColor": space.button_color,
        "collectExtras": list(space.collect_extras or []),
        "collectionType": _value(space.collection_type),
        "language": space.language,
        "autoTranslate": space.auto_translate,
    }


def serialize_testimonial(testimonial: Testimonial, *, include_private: bool = True) -> dict[str, Any]:
    payload = {
        "id": str(testimonial.id),
        "spaceId": _id(testimonial.space_id),
        "type": _value(testimonial.type),
        "authorName": testimonial.author_name,
        "content": testimonial.content,
        "rating": testimonial.rating,
        "mediaUrl": testimonial.media_url,
        "thumbnailUrl": testimonial.thumbnail_url,
        "images": list(testimonial.images or []),
        "questionResponses": list(testimonial.question_responses or []),
        "collectedVia": _value(testimonial.collected_via),
        "status": _value(testimonial.status),
        "submittedAt": iso(testimonial.submitted_at),
        "approvedAt": iso(testimonial.approved_at),
        "sourceLink": testimonial.source_link,
        "createdBy": _id(testimonial.created_by),
        "createdAt": iso(testimonial.created_at),
        "updatedAt": iso(testimonial.updated_at),
    }
    if include_private:
        payload["authorEmail"] = testimonial.author_email
        payload["metadata"] = dict(testimonial.meta or {})
    return payload


def embed_snippets(widget: Widget, base_url: str) -> dict[str, str]:
    base = base_url.rstrip("/")
    widget_type = _value(widget.type)
    iframe_url = f"{base}/embed/{widget_type}/{widget.id}"
    return {
        "iframeUrl": iframe_url,
        "iframe": (
            f'<iframe src="{iframe_url}" width="100%" height="400" frameborder="0" '
            'loading="lazy" style="border: none;"></iframe>'
        ),
        "script": (
            f'<div id="{container_id(widget_type, str(widget.id))}"></div>\n'
            f'<script src="{base}/embed/config/{widget.id}.js" async></script>'
        ),
    }


def serialize_widget(widget: Widget, *, base_url: Optional[str] = None) -> dict[str, Any]:
    payload = {
        "id": str(widget.id),
        "spaceId": _id(widget.space_id),
        "name": widget.name,
        "type": _value(widget.type),
        "designTemplate": widget.design_template,
        "settings": dict(widget.settings or {}),
        "status": _value(widget.status),
        "createdBy": _id(widget.created_by),
        "metadata": dict(widget.meta or {}),
        "createdAt": iso(widget.created_at),
        "updatedAt": iso(widget.updated_at),
    }
    if base_url:
        payload["embed"] = embed_snippets(widget, base_url)
    return payload


def serialize_request_link(link: RequestLink) -> dict[str, Any]:
    return {
        "id": str(link.id),
        "slug": link.slug,
        "ownerId": _id(link.owner_id),
        "templateId": _id(link.template_id),
        "expiryDate": iso(link.expiry_date),
        "maxUses": link.max_uses,
        "uses": link.uses,
        "isActive": link.is_active,
        "isValid": is_link_valid(link),
        "url": f"{settings.frontend_url}/t/{link.slug}",
        "createdAt": iso(link.created_at),
        "updatedAt": iso(link.updated_at),
    }


def serialize_template(template: Template) -> dict[str, Any]:
    return {
        "id": str(template.id),
        "name": template.name,
        "formConfig": dict(template.form_config or {}),
        "emailSubject": template.email_subject,
        "emailBody": template.email_body,
        "createdBy": _id(template.created_by),
        "isPublic": template.is_public,
        "createdAt": iso(template.created_at),
        "updatedAt": iso(template.updated_at),
    }
