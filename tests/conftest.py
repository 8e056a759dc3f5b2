import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTH_JWT_SECRET"] = "test-secret"
os.environ["FRONTEND_URL"] = "https://app.trustimonials.test"
os.environ.pop("PUBLIC_BASE_URL", None)
os.environ.pop("AUTH_JWT_AUDIENCE", None)

ROOT_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT_DIR))

from alembic import command
from alembic.config import Config
from fastapi.testclient import TestClient

from trustimonials.auth.dependencies import AuthContext, get_current_user, get_optional_user
from trustimonials.db.base import Base, SessionLocal, engine
from trustimonials.db.deps import get_session
from trustimonials.db.enums import (
    CollectionTypeEnum,
    TestimonialStatusEnum,
    TestimonialTypeEnum,
    UserRoleEnum,
    WidgetTypeEnum,
)
from trustimonials.db.models import Space, Testimonial, User
from trustimonials.db.repositories.widgets import WidgetsRepository
from trustimonials.main import app
from trustimonials.routers import share_links as share_links_router


@pytest.fixture(scope="session", autouse=True)
def apply_migrations() -> None:
    alembic_cfg = Config(str(ROOT_DIR / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(ROOT_DIR / "alembic"))
    alembic_cfg.attributes["configure_logger"] = False
    command.upgrade(alembic_cfg, "head")


@pytest.fixture(autouse=True)
def reset_submission_limiter():
    share_links_router.submission_limiter.reset()
    yield
    share_links_router.submission_limiter.reset()


@pytest.fixture()
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        with engine.begin() as connection:
            for table in reversed(Base.metadata.sorted_tables):
                connection.execute(table.delete())


def _make_user(session, external_id: str, role: UserRoleEnum = UserRoleEnum.user) -> User:
    user = User(external_id=external_id, email=f"{external_id}@example.com", name=external_id, role=role)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def _context(user: User) -> AuthContext:
    return AuthContext(user_id=str(user.id), role=user.role, email=user.email, name=user.name)


@pytest.fixture()
def test_user(db_session) -> User:
    return _make_user(db_session, "owner")


@pytest.fixture()
def other_user(db_session) -> User:
    return _make_user(db_session, "stranger")


@pytest.fixture()
def admin_user(db_session) -> User:
    return _make_user(db_session, "moderator", role=UserRoleEnum.admin)


@pytest.fixture()
def auth_context(test_user) -> AuthContext:
    return _context(test_user)


@pytest.fixture()
def override_dependencies(db_session, auth_context):
    def get_session_override():
        try:
            yield db_session
        finally:
            pass

    def get_user_override():
        return auth_context

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_current_user] = get_user_override
    app.dependency_overrides[get_optional_user] = get_user_override
    try:
        yield
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def login(override_dependencies):
    """Switch the authenticated caller for the rest of the test; ``None`` means anonymous."""

    def _login(user):
        context = _context(user) if user is not None else None

        def get_user_override():
            return context

        if context is None:
            app.dependency_overrides.pop(get_current_user, None)
        else:
            app.dependency_overrides[get_current_user] = get_user_override
        app.dependency_overrides[get_optional_user] = get_user_override
        return context

    return _login


@pytest.fixture()
def api_client(override_dependencies):
    with TestClient(app) as client:
        yield client


@pytest.fixture()
def make_space(db_session, test_user):
    def _make_space(owner=None, **fields) -> Space:
        values = {
            "name": "Acme Reviews",
            "question_list": ["What did you like?", "Would you recommend us?"],
            "collect_extras": [],
            "collection_type": CollectionTypeEnum.text_and_video,
        }
        values.update(fields)
        space = Space(owner_id=(owner or test_user).id, **values)
        db_session.add(space)
        db_session.commit()
        db_session.refresh(space)
        return space

    return _make_space


@pytest.fixture()
def make_testimonial(db_session):
    base_time = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _make_testimonial(space, *, days: int = 0, **fields) -> Testimonial:
        values = {
            "type": TestimonialTypeEnum.text,
            "author_name": "Ana",
            "content": "Solid product",
            "status": TestimonialStatusEnum.approved,
            "submitted_at": base_time + timedelta(days=days),
        }
        values.update(fields)
        testimonial = Testimonial(space_id=space.id if space is not None else None, **values)
        db_session.add(testimonial)
        db_session.commit()
        db_session.refresh(testimonial)
        return testimonial

    return _make_testimonial


@pytest.fixture()
def make_widget(db_session, test_user):
    def _make_widget(space, widget_type=WidgetTypeEnum.wall, design_template=None, **settings):
        if design_template is None:
            design_template = "grid-cards" if widget_type == WidgetTypeEnum.wall else "card-compact"
        values = {"designTemplate": design_template, "theme": "light", "isPublic": True}
        if widget_type == WidgetTypeEnum.single:
            values["selectTestimonial"] = "auto-latest"
        values.update(settings)
        return WidgetsRepository(db_session).create(
            space_id=space.id,
            created_by=test_user.id,
            name="Homepage widget",
            widget_type=widget_type,
            design_template=design_template,
            settings=values,
        )

    return _make_widget


@pytest.fixture()
def seed_data(make_space, make_testimonial):
    space = make_space()
    approved = make_testimonial(space, days=1, author_name="O'Brien", content="Great tool", rating=4)
    pending = make_testimonial(space, days=2, status=TestimonialStatusEnum.pending, content="Waiting", rating=5)
    archived = make_testimonial(space, days=3, status=TestimonialStatusEnum.archived, content="Old", rating=3)
    return {"space": space, "approved": approved, "pending": pending, "archived": archived}
