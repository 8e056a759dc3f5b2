from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from trustimonials.auth.dependencies import AuthContext, get_current_user
from trustimonials.db.deps import get_session
from trustimonials.db.repositories.request_links import RequestLinksRepository
from trustimonials.db.repositories.spaces import SpacesRepository
from trustimonials.db.repositories.testimonials import TestimonialsRepository

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])

# Static until billing exists.
PLAN_NAME = "Starter"
VIDEO_LIMIT = 2
PLAN_FEATURES = [
    "2 videos total",
    "basic widgets",
    "unlimited text testimonials",
    "custom branding",
]


@router.get("/overview")
def get_overview(
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    testimonials = TestimonialsRepository(session)
    total_videos = testimonials.count_with_images(created_by=auth.user_id)
    return {
        "overview": {
            "totalVideos": total_videos,
            "videoLimit": VIDEO_LIMIT,
            "totalSpaces": SpacesRepository(session).count_active(owner_id=auth.user_id),
            "totalTestimonials": testimonials.count_created_by(user_id=auth.user_id),
            "activeShareLinks": RequestLinksRepository(session).count_active(owner_id=auth.user_id),
            "planName": PLAN_NAME,
            "planFeatures": list(PLAN_FEATURES),
            "videoUsagePercent": round(total_videos / VIDEO_LIMIT * 100),
        }
    }
