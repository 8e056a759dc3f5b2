from datetime import datetime, timedelta, timezone

from trustimonials.db.enums import TestimonialStatusEnum, TestimonialTypeEnum

SPACE_PAYLOAD = {
    "name": "Acme Reviews",
    "headerTitle": "Tell us how it went",
    "questionList": ["  What did you like?  ", "", "Would you recommend us?"],
    "collectExtras": ["email", "name", "email"],
    "language": "EN",
}


def test_create_space(api_client):
    resp = api_client.post("/api/spaces", json=SPACE_PAYLOAD)

    assert resp.status_code == 201
    assert resp.json()["message"] == "Space created successfully"
    space = resp.json()["space"]
    assert space["questionList"] == ["What did you like?", "Would you recommend us?"]
    assert space["collectExtras"] == ["email", "name"]
    assert space["language"] == "en"
    assert space["collectionType"] == "text-and-video"
    assert space["theme"] == "light"
    assert space["buttonColor"] == "#00A676"
    assert space["publicLink"] == f"https://app.trustimonials.test/t/{space['id']}"
    assert space["stats"] == {"videos": 0, "testimonials": 0, "activeShareLinks": 0}


def test_create_space_validation(api_client):
    no_questions = api_client.post("/api/spaces", json={**SPACE_PAYLOAD, "questionList": ["  "]})
    bad_color = api_client.post("/api/spaces", json={**SPACE_PAYLOAD, "buttonColor": "green"})
    bad_logo = api_client.post("/api/spaces", json={**SPACE_PAYLOAD, "logo": "ftp://x"})
    past = (datetime.now(timezone.utc) - timedelta(days=1)).isoformat()
    expired = api_client.post("/api/spaces", json={**SPACE_PAYLOAD, "expiryDate": past})

    assert no_questions.status_code == 422
    assert bad_color.status_code == 422
    assert bad_logo.status_code == 422
    assert expired.status_code == 400
    assert expired.json()["detail"] == "Expiry date must be in the future"


def test_list_spaces_paginates_active_spaces(api_client, make_space, other_user):
    for index in range(3):
        make_space(name=f"Space {index}")
    make_space(name="Closed", is_active=False)
    make_space(name="Foreign", owner=other_user)

    resp = api_client.get("/api/spaces", params={"page": 2, "limit": 2})

    body = resp.json()
    assert len(body["spaces"]) == 1
    assert body["pagination"] == {
        "currentPage": 2,
        "totalPages": 2,
        "totalItems": 3,
        "hasNext": False,
        "hasPrev": True,
    }


def test_get_space_with_stats_and_credits(api_client, make_space, make_testimonial):
    space = make_space()
    make_testimonial(space, type=TestimonialTypeEnum.video, images=["https://cdn.test/1.jpg"])
    make_testimonial(space, type=TestimonialTypeEnum.text)
    make_testimonial(space, type=TestimonialTypeEnum.text, status=TestimonialStatusEnum.deleted)

    body = api_client.get(f"/api/spaces/{space.id}").json()

    assert body["space"]["stats"]["testimonials"] == 3
    assert body["space"]["stats"]["videos"] == 1
    assert body["credits"] == {"videoCredits": 9, "textCredits": 99}


def test_update_space(api_client, make_space):
    space = make_space()

    resp = api_client.put(
        f"/api/spaces/{space.id}",
        json={"name": "Renamed", "theme": "dark", "collectionType": "text-only", "headerMessage": None},
    )

    assert resp.status_code == 200
    updated = resp.json()["space"]
    assert updated["name"] == "Renamed"
    assert updated["theme"] == "dark"
    assert updated["collectionType"] == "text-only"
    assert updated["questionList"] == ["What did you like?", "Would you recommend us?"]


def test_delete_space_is_soft(api_client, db_session, make_space):
    space = make_space()

    assert api_client.delete(f"/api/spaces/{space.id}").status_code == 200
    assert api_client.get(f"/api/spaces/{space.id}").status_code == 404
    db_session.refresh(space)
    assert space.is_active is False


def test_spaces_of_other_owners_are_not_found(api_client, make_space, other_user):
    foreign = make_space(owner=other_user)

    assert api_client.get(f"/api/spaces/{foreign.id}").status_code == 404
    assert api_client.put(f"/api/spaces/{foreign.id}", json={"name": "Taken"}).status_code == 404
    assert api_client.get("/api/spaces/not-a-uuid").status_code == 404


def test_space_integrations(api_client, make_space):
    space = make_space()

    integrations = api_client.get(f"/api/spaces/{space.id}/integrations").json()["integrations"]

    assert [item["id"] for item in integrations] == ["social-media", "external-videos", "email-assistant"]
    assert all(item["connected"] is False for item in integrations)


def test_dashboard_overview(api_client, make_space, make_testimonial, test_user):
    space = make_space()
    make_space(name="Closed", is_active=False)
    make_testimonial(space, created_by=test_user.id, images=["https://cdn.test/a.jpg"])
    make_testimonial(space, created_by=test_user.id)
    api_client.post("/api/links", json={"slug": "overview-link"})

    overview = api_client.get("/api/dashboard/overview").json()["overview"]

    assert overview == {
        "totalVideos": 1,
        "videoLimit": 2,
        "totalSpaces": 1,
        "totalTestimonials": 2,
        "activeShareLinks": 1,
        "planName": "Starter",
        "planFeatures": ["2 videos total", "basic widgets", "unlimited text testimonials", "custom branding"],
        "videoUsagePercent": 50,
    }
