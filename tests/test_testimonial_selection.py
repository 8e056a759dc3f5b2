from datetime import datetime, timedelta, timezone
from uuid import uuid4

from trustimonials.db.enums import TestimonialStatusEnum, TestimonialTypeEnum, WidgetTypeEnum
from trustimonials.db.models import Testimonial
from trustimonials.schemas.widget_settings import SingleWidgetSettings, WallWidgetSettings
from trustimonials.services.testimonial_selection import (
    ANONYMOUS_AUTHOR,
    sanitize_html,
    sanitize_testimonial,
    select_for_widget,
    select_single_testimonial,
    select_wall_testimonials,
)

SPACE_ID = uuid4()
START = datetime(2024, 5, 1, tzinfo=timezone.utc)


def _testimonial(days=0, rating=None, status=TestimonialStatusEnum.approved, space_id=SPACE_ID, **fields):
    return Testimonial(
        id=uuid4(),
        space_id=space_id,
        type=TestimonialTypeEnum.text,
        author_name=fields.pop("author_name", "Ana"),
        content=fields.pop("content", "Nice"),
        rating=rating,
        status=status,
        submitted_at=START + timedelta(days=days),
        question_responses=fields.pop("question_responses", []),
        **fields,
    )


def _wall(**settings):
    return WallWidgetSettings.model_validate({"designTemplate": "grid-cards", "theme": "light", **settings})


def _single(**settings):
    return SingleWidgetSettings.model_validate({"designTemplate": "hero", "theme": "light", **settings})


def test_sanitize_html_escapes_markup_quotes_and_slashes():
    assert sanitize_html("O'Brien & <b>\"x\"</b>") == "O&#x27;Brien &amp; &lt;b&gt;&quot;x&quot;&lt;&#x2F;b&gt;"
    assert sanitize_html(None) == ""
    assert sanitize_html("") == ""


def test_sanitize_testimonial_escapes_every_text_field():
    testimonial = _testimonial(
        author_name=None,
        content="<img src=x onerror=alert(1)>",
        question_responses=[{"questionIndex": 0, "question": "Why <us>?", "answer": "a/b", "rating": 5}],
    )

    sanitized = sanitize_testimonial(testimonial)

    assert sanitized.author_name == ANONYMOUS_AUTHOR
    assert sanitized.content == "&lt;img src=x onerror=alert(1)&gt;"
    assert sanitized.question_responses[0].question == "Why &lt;us&gt;?"
    assert sanitized.question_responses[0].answer == "a&#x2F;b"
    assert sanitized.question_responses[0].rating == 5


def test_wall_defaults_to_newest_first():
    items = [_testimonial(days=1), _testimonial(days=3), _testimonial(days=2)]

    selected = select_wall_testimonials(_wall(), space_id=SPACE_ID, testimonials=items)

    assert [item.submitted_at for item in selected] == sorted((item.submitted_at for item in items), reverse=True)


def test_wall_only_shows_approved_testimonials_of_the_space():
    approved = _testimonial(days=1)
    items = [
        approved,
        _testimonial(days=2, status=TestimonialStatusEnum.pending),
        _testimonial(days=3, status=TestimonialStatusEnum.archived),
        _testimonial(days=4, space_id=uuid4()),
    ]

    assert select_wall_testimonials(_wall(), space_id=SPACE_ID, testimonials=items) == [approved]


def test_highest_rating_order_is_non_increasing_with_unrated_last():
    items = [_testimonial(rating=3), _testimonial(rating=None, days=9), _testimonial(rating=5), _testimonial(rating=4)]

    selected = select_wall_testimonials(_wall(sortOrder="highest_rating"), space_id=SPACE_ID, testimonials=items)

    ratings = [item.rating for item in selected]
    assert ratings == [5, 4, 3, None]


def test_min_rating_excludes_lower_and_unrated():
    items = [_testimonial(rating=5), _testimonial(rating=3), _testimonial(rating=None), _testimonial(rating=4)]

    selected = select_wall_testimonials(
        _wall(filter={"minRating": 4}), space_id=SPACE_ID, testimonials=items
    )

    assert sorted(item.rating for item in selected) == [4, 5]


def test_zero_min_rating_does_not_filter():
    items = [_testimonial(rating=None), _testimonial(rating=2)]

    selected = select_wall_testimonials(_wall(filter={"minRating": 0}), space_id=SPACE_ID, testimonials=items)

    assert len(selected) == 2


def test_has_media_filter_keeps_testimonials_with_media():
    with_media = _testimonial(media_url="https://cdn.example.com/v.mp4")
    thumb_only = _testimonial(thumbnail_url="https://cdn.example.com/t.jpg")
    items = [with_media, thumb_only, _testimonial()]

    selected = select_wall_testimonials(_wall(filter={"hasMedia": True}), space_id=SPACE_ID, testimonials=items)

    assert set(item.id for item in selected) == {with_media.id, thumb_only.id}


def test_min_rating_and_has_media_filters_combine():
    video_rated = _testimonial(rating=5, media_url="https://cdn.example.com/v.mp4")
    thumb_rated = _testimonial(rating=4, thumbnail_url="https://cdn.example.com/t.jpg")
    thumb_low = _testimonial(rating=2, thumbnail_url="https://cdn.example.com/low.jpg")
    text_rated = _testimonial(rating=5)
    items = [video_rated, thumb_rated, thumb_low, text_rated]

    selected = select_wall_testimonials(
        _wall(filter={"minRating": 4, "hasMedia": True}), space_id=SPACE_ID, testimonials=items
    )

    assert set(item.id for item in selected) == {video_rated.id, thumb_rated.id}


def test_items_to_show_truncates_after_sorting():
    items = [_testimonial(days=day) for day in range(5)]

    selected = select_wall_testimonials(_wall(itemsToShow=2), space_id=SPACE_ID, testimonials=items)

    assert [item.submitted_at for item in selected] == [START + timedelta(days=4), START + timedelta(days=3)]


def test_default_limit_applies_when_items_to_show_missing():
    items = [_testimonial(days=day) for day in range(5)]

    assert len(select_wall_testimonials(_wall(), space_id=SPACE_ID, testimonials=items, default_limit=3)) == 3


def test_random_order_is_a_permutation_of_candidates():
    items = [_testimonial(days=day) for day in range(6)]

    selected = select_wall_testimonials(_wall(sortOrder="random"), space_id=SPACE_ID, testimonials=items)

    assert sorted(item.id for item in selected) == sorted(item.id for item in items)


def test_single_auto_latest_picks_most_recent():
    newest = _testimonial(days=10)
    items = [_testimonial(days=1), newest, _testimonial(days=5)]

    assert select_single_testimonial(_single(selectTestimonial="auto-latest"), space_id=SPACE_ID, testimonials=items) is newest


def test_single_manual_select_matches_id_case_insensitively():
    wanted = _testimonial()
    items = [_testimonial(), wanted]
    settings = _single(selectTestimonial="manual-select", manualTestimonialId=str(wanted.id).upper())

    assert select_single_testimonial(settings, space_id=SPACE_ID, testimonials=items) is wanted


def test_single_manual_select_ignores_unapproved_target():
    pending = _testimonial(status=TestimonialStatusEnum.pending)
    settings = _single(selectTestimonial="manual-select", manualTestimonialId=str(pending.id))

    assert select_single_testimonial(settings, space_id=SPACE_ID, testimonials=[pending, _testimonial()]) is None


def test_single_auto_random_returns_a_candidate():
    items = [_testimonial(days=day) for day in range(4)]

    chosen = select_single_testimonial(_single(selectTestimonial="auto-random"), space_id=SPACE_ID, testimonials=items)

    assert chosen in items


def test_single_with_no_candidates_returns_none():
    assert select_single_testimonial(_single(selectTestimonial="auto-latest"), space_id=SPACE_ID, testimonials=[]) is None


def test_select_for_widget_reads_approved_testimonials(db_session, make_space, make_testimonial, make_widget):
    space = make_space()
    make_testimonial(space, days=1, rating=2)
    best = make_testimonial(space, days=2, rating=5)
    make_testimonial(space, days=3, rating=5, status=TestimonialStatusEnum.pending)

    wall = make_widget(space, sortOrder="highest_rating", itemsToShow=1)
    single = make_widget(space, WidgetTypeEnum.single)

    assert [item.id for item in select_for_widget(db_session, wall)] == [best.id]
    assert [item.id for item in select_for_widget(db_session, single)] == [best.id]
