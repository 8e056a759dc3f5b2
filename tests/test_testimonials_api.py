from sqlalchemy import select

from trustimonials.db.enums import TestimonialStatusEnum
from trustimonials.db.models import RequestLink
from trustimonials.db.repositories.request_links import RequestLinksRepository
from trustimonials.db.repositories.testimonials import TestimonialsRepository

PAYLOAD = {"authorName": "Ana", "content": "This product changed how we onboard.", "rating": 5}


def test_anonymous_submission_is_pending(api_client, login):
    login(None)

    resp = api_client.post("/api/testimonials", json=PAYLOAD)

    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "Testimonial submitted successfully"
    assert body["testimonial"]["status"] == "pending"
    assert set(body["testimonial"]) == {"id", "authorName", "content", "rating", "status", "submittedAt"}


def test_admin_submission_is_auto_approved(api_client, login, admin_user):
    login(admin_user)

    resp = api_client.post("/api/testimonials", json=PAYLOAD)

    assert resp.json()["testimonial"]["status"] == "approved"


def test_submission_validates_length(api_client):
    resp = api_client.post("/api/testimonials", json={**PAYLOAD, "content": "short"})

    assert resp.status_code == 422


def test_submission_through_link_consumes_a_use(api_client, db_session, test_user, login):
    RequestLinksRepository(db_session).create(owner_id=test_user.id, slug="one-shot", max_uses=1)
    login(None)

    first = api_client.post("/api/testimonials", json={**PAYLOAD, "sourceLink": "one-shot"})
    second = api_client.post("/api/testimonials", json={**PAYLOAD, "sourceLink": "one-shot"})

    assert first.status_code == 201
    assert second.status_code == 400
    assert second.json()["detail"] == "Invalid or expired testimonial link"
    db_session.expire_all()
    link = db_session.scalars(select(RequestLink).where(RequestLink.slug == "one-shot")).one()
    assert link.uses == 1


def test_submission_with_unknown_link_is_rejected(api_client):
    resp = api_client.post("/api/testimonials", json={**PAYLOAD, "sourceLink": "ghost"})

    assert resp.status_code == 400


def test_listing_shows_only_approved_to_non_admins(api_client, login, admin_user, seed_data):
    login(None)
    public = api_client.get("/api/testimonials").json()

    assert [item["id"] for item in public["testimonials"]] == [str(seed_data["approved"].id)]
    assert public["pagination"] == {"page": 1, "limit": 10, "total": 1, "pages": 1}
    assert "authorEmail" not in public["testimonials"][0]

    login(admin_user)
    pending = api_client.get("/api/testimonials", params={"status": "pending"}).json()
    assert [item["id"] for item in pending["testimonials"]] == [str(seed_data["pending"].id)]


def test_listing_filters_by_rating_and_rejects_unknown_status(api_client, login, admin_user, seed_data):
    login(admin_user)

    rated = api_client.get("/api/testimonials", params={"rating": 4}).json()
    archived = api_client.get("/api/testimonials", params={"status": "archived"})

    assert [item["rating"] for item in rated["testimonials"]] == [4]
    assert archived.status_code == 400


def test_unapproved_testimonial_is_hidden_from_public(api_client, login, seed_data):
    login(None)

    assert api_client.get(f"/api/testimonials/{seed_data['pending'].id}").status_code == 404
    assert api_client.get(f"/api/testimonials/{seed_data['approved'].id}").status_code == 200


def test_only_creator_or_admin_can_edit(api_client, login, other_user, admin_user):
    created = api_client.post("/api/testimonials", json=PAYLOAD).json()["testimonial"]
    url = f"/api/testimonials/{created['id']}"

    login(other_user)
    forbidden = api_client.put(url, json={"rating": 3})
    login(admin_user)
    allowed = api_client.put(url, json={"rating": 3})

    assert forbidden.status_code == 403
    assert forbidden.json()["detail"] == "Not authorized to edit this testimonial"
    assert allowed.status_code == 200
    assert allowed.json()["testimonial"]["rating"] == 3


def test_delete_marks_testimonial_deleted(api_client, db_session):
    created = api_client.post("/api/testimonials", json=PAYLOAD).json()["testimonial"]

    resp = api_client.delete(f"/api/testimonials/{created['id']}")

    assert resp.status_code == 200
    db_session.expire_all()
    assert TestimonialsRepository(db_session).get(created["id"]).status == TestimonialStatusEnum.deleted


def test_approve_requires_admin(api_client, login, admin_user, seed_data):
    url = f"/api/testimonials/{seed_data['pending'].id}/approve"

    forbidden = api_client.post(url)
    login(admin_user)
    approved = api_client.post(url)
    again = api_client.post(url)

    assert forbidden.status_code == 403
    assert forbidden.json()["detail"] == "Admin access required"
    assert approved.status_code == 200
    assert approved.json()["testimonial"]["status"] == "approved"
    assert again.status_code == 409
