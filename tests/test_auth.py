from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import select

from trustimonials.auth.tokens import create_access_token
from trustimonials.db.deps import get_session
from trustimonials.db.enums import TestimonialStatusEnum, UserRoleEnum
from trustimonials.db.models import User
from trustimonials.main import app


def _session_only(db_session):
    app.dependency_overrides.clear()

    def get_session_override():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_session] = get_session_override


def test_health_endpoints():
    with TestClient(app) as client:
        health = client.get("/health")
        db_health = client.get("/health/db")

    assert health.status_code == 200
    assert health.json() == {"ok": True}
    assert db_health.json() == {"db": "ok"}


def test_protected_routes_require_bearer_token(db_session):
    _session_only(db_session)
    try:
        with TestClient(app) as client:
            missing = client.get("/api/spaces")
            invalid = client.get("/api/spaces", headers={"Authorization": "Bearer not-a-jwt"})
    finally:
        app.dependency_overrides.clear()

    assert missing.status_code == 401
    assert missing.json()["detail"] == "Missing bearer token"
    assert invalid.status_code == 401
    assert invalid.json()["detail"] == "Invalid token"


def test_token_signed_with_other_secret_is_rejected(db_session):
    _session_only(db_session)
    token = jwt.encode({"sub": "intruder"}, "some-other-secret", algorithm="HS256")
    try:
        with TestClient(app) as client:
            resp = client.get("/api/spaces", headers={"Authorization": f"Bearer {token}"})
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 401


def test_valid_token_provisions_user_and_allows_access(db_session):
    _session_only(db_session)
    token = create_access_token({"sub": "ext-user-1", "email": "owner@example.com", "name": "Owner"})
    try:
        with TestClient(app) as client:
            created = client.post(
                "/api/spaces",
                headers={"Authorization": f"Bearer {token}"},
                json={"name": "Token Space", "questionList": ["How was it?"]},
            )
            listed = client.get("/api/spaces", headers={"Authorization": f"Bearer {token}"})
    finally:
        app.dependency_overrides.clear()

    assert created.status_code == 201
    assert listed.json()["pagination"]["totalItems"] == 1
    users = db_session.scalars(select(User).where(User.external_id == "ext-user-1")).all()
    assert len(users) == 1
    assert users[0].email == "owner@example.com"
    assert created.json()["space"]["ownerId"] == str(users[0].id)


def test_admin_role_claim_grants_admin_routes(db_session, make_space, make_testimonial):
    pending = make_testimonial(make_space(), status=TestimonialStatusEnum.pending)
    _session_only(db_session)
    user_token = create_access_token({"sub": "plain-user"})
    admin_token = create_access_token({"sub": "site-admin", "role": UserRoleEnum.admin.value})
    try:
        with TestClient(app) as client:
            denied = client.post(
                f"/api/testimonials/{pending.id}/approve", headers={"Authorization": f"Bearer {user_token}"}
            )
            granted = client.post(
                f"/api/testimonials/{pending.id}/approve", headers={"Authorization": f"Bearer {admin_token}"}
            )
    finally:
        app.dependency_overrides.clear()

    assert denied.status_code == 403
    assert granted.status_code == 200
