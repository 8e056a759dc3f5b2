from uuid import uuid4

from trustimonials.db.enums import TestimonialStatusEnum, WidgetStatusEnum, WidgetTypeEnum
from trustimonials.db.repositories.widgets import WidgetsRepository


def test_wall_embed_renders_sanitized_approved_testimonials(api_client, make_space, make_testimonial, make_widget):
    space = make_space()
    make_testimonial(space, days=1, author_name="O'Brien", content="<script>alert(1)</script>", rating=5)
    make_testimonial(space, days=2, content="Still pending", status=TestimonialStatusEnum.pending)
    widget = make_widget(space, showAuthor=True, showRating=True)

    resp = api_client.get(f"/embed/wall/{widget.id}")

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/html")
    assert resp.headers["x-frame-options"] == "ALLOWALL"
    body = resp.text
    assert "O&#x27;Brien" in body
    assert "O'Brien" not in body
    assert "&lt;script&gt;alert(1)&lt;&#x2F;script&gt;" in body
    assert "<script>alert(1)" not in body
    assert "Still pending" not in body
    assert "★★★★★" in body


def test_wall_embed_theme_query_overrides_stored_theme(api_client, make_space, make_widget):
    space = make_space()
    widget = make_widget(space, theme="light")

    dark = api_client.get(f"/embed/wall/{widget.id}", params={"theme": "dark"})
    unknown = api_client.get(f"/embed/wall/{widget.id}", params={"theme": "neon"})

    assert "#1a1a1a" in dark.text
    assert "#f8f9fa" in unknown.text


def test_single_embed_shows_rating_stars(api_client, make_space, make_testimonial, make_widget):
    space = make_space()
    make_testimonial(space, content="Great tool", rating=4, author_name="Ana")
    widget = make_widget(space, WidgetTypeEnum.single, showRating=True, showAuthorDetails=True)

    resp = api_client.get(f"/embed/single/{widget.id}")

    assert resp.status_code == 200
    assert '"Great tool"' in resp.text
    assert "★★★★" in resp.text
    assert "★★★★★" not in resp.text
    assert "— Ana" in resp.text


def test_single_embed_without_candidate_is_not_found(api_client, make_space, make_testimonial, make_widget):
    space = make_space()
    make_testimonial(space, status=TestimonialStatusEnum.pending)
    widget = make_widget(space, WidgetTypeEnum.single)

    resp = api_client.get(f"/embed/single/{widget.id}")

    assert resp.status_code == 404
    assert "No testimonial available" in resp.text


def test_private_widget_is_indistinguishable_from_missing(api_client, make_space, make_widget):
    space = make_space()
    private = make_widget(space, isPublic=False)

    private_resp = api_client.get(f"/embed/wall/{private.id}")
    missing_resp = api_client.get(f"/embed/wall/{uuid4()}")
    malformed_resp = api_client.get("/embed/wall/not-a-uuid")

    assert private_resp.status_code == missing_resp.status_code == malformed_resp.status_code == 404
    assert private_resp.text == missing_resp.text == malformed_resp.text
    assert "Widget not found or not available" in private_resp.text


def test_disabled_or_wrong_type_widget_is_not_found(db_session, api_client, make_space, make_widget):
    space = make_space()
    wall = make_widget(space)
    disabled = make_widget(space)
    WidgetsRepository(db_session).update(disabled, status=WidgetStatusEnum.disabled)

    assert api_client.get(f"/embed/single/{wall.id}").status_code == 404
    assert api_client.get(f"/embed/wall/{disabled.id}").status_code == 404


def test_embed_origin_allow_list(api_client, make_space, make_widget):
    space = make_space()
    widget = make_widget(space, accessControl={"allowedOrigins": ["https://acme.test"]})

    allowed = api_client.get(f"/embed/wall/{widget.id}", headers={"Origin": "https://acme.test"})
    denied = api_client.get(f"/embed/wall/{widget.id}", headers={"Origin": "https://evil.test"})

    assert allowed.status_code == 200
    assert denied.status_code == 403
    assert "Access denied" in denied.text


def test_embed_origin_allow_list_falls_back_to_referer(api_client, make_space, make_widget):
    space = make_space()
    widget = make_widget(space, accessControl={"allowedOrigins": ["https://acme.test"]})

    allowed = api_client.get(f"/embed/wall/{widget.id}", headers={"Referer": "https://acme.test"})
    denied = api_client.get(f"/embed/wall/{widget.id}", headers={"Referer": "https://evil.test/page"})

    assert allowed.status_code == 200
    assert denied.status_code == 403
    assert "Access denied" in denied.text


def test_embed_without_origin_passes_allow_list(api_client, make_space, make_widget):
    space = make_space()
    widget = make_widget(space, accessControl={"allowedOrigins": ["https://acme.test"]})

    resp = api_client.get(f"/embed/wall/{widget.id}")

    assert resp.status_code == 200
    assert "Access denied" not in resp.text


def test_loader_script_for_public_widget(api_client, make_space, make_widget):
    space = make_space()
    widget = make_widget(space, WidgetTypeEnum.single)

    resp = api_client.get(f"/embed/config/{widget.id}.js")

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("application/javascript")
    assert resp.headers["cache-control"] == "public, max-age=3600"
    assert str(widget.id) in resp.text
    assert '"single"' in resp.text
    assert '"http://testserver"' in resp.text


def test_loader_script_for_unknown_widget(api_client, make_space, make_widget):
    private = make_widget(make_space(), isPublic=False)

    for widget_id in (uuid4(), private.id):
        resp = api_client.get(f"/embed/config/{widget_id}.js")
        assert resp.status_code == 404
        assert resp.text == "// Widget not found"


def test_embed_errors_render_error_page(api_client, make_space, make_widget, monkeypatch):
    from trustimonials.routers import embeds

    widget = make_widget(make_space())

    def _explode(*_args, **_kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(embeds, "select_wall_testimonials", _explode)

    resp = api_client.get(f"/embed/wall/{widget.id}")

    assert resp.status_code == 500
    assert "Error loading widget" in resp.text
