from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from trustimonials.db.deps import get_session
from trustimonials.db.repositories.request_links import RequestLinksRepository
from trustimonials.db.repositories.templates import TemplatesRepository
from trustimonials.services.request_links import DEFAULT_FORM_CONFIG, is_link_valid
from trustimonials.services.serialization import iso

router = APIRouter(prefix="/t", tags=["public"])


@router.get("/{slug}")
def get_public_link(slug: str, session: Session = Depends(get_session)):
    link = RequestLinksRepository(session).get_by_slug(slug)
    if not link:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Testimonial link not found")
    if not is_link_valid(link):
        raise HTTPException(
            status_code=status.HTTP_410_GONE,
            detail="This testimonial link has expired or reached its usage limit",
        )

    template = TemplatesRepository(session).get(link.template_id) if link.template_id else None
    form_config = dict(template.form_config) if template else dict(DEFAULT_FORM_CONFIG)
    return {
        "link": {
            "slug": link.slug,
            "formConfig": form_config,
            "emailSubject": template.email_subject if template else None,
            "expiryDate": iso(link.expiry_date),
            "maxUses": link.max_uses,
            "uses": link.uses,
        }
    }
