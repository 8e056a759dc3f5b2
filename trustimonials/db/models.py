from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID, uuid4

import sqlalchemy as sa
from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from trustimonials.db.base import Base
from trustimonials.db.enums import (
    CollectedViaEnum,
    CollectionTypeEnum,
    TestimonialStatusEnum,
    TestimonialTypeEnum,
    ThemeEnum,
    UserRoleEnum,
    WidgetStatusEnum,
    WidgetTypeEnum,
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands timestamps back naive; treat those as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _enum(enum_cls, name: str) -> sa.Enum:
    return sa.Enum(
        enum_cls,
        name=name,
        native_enum=False,
        length=32,
        values_callable=lambda members: [member.value for member in members],
    )


class User(Base):
    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid4)
    external_id: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    email: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    role: Mapped[UserRoleEnum] = mapped_column(
        _enum(UserRoleEnum, "user_role"), nullable=False, default=UserRoleEnum.user
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


class Template(Base):
    __tablename__ = "templates"
    __table_args__ = (
        sa.Index("idx_templates_created_by", "created_by"),
        sa.Index("idx_templates_is_public", "is_public"),
    )

    id: Mapped[UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(length=100), nullable=False)
    form_config: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    email_subject: Mapped[Optional[str]] = mapped_column(String(length=200), nullable=True)
    email_body: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_by: Mapped[UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )


class Space(Base):
    __tablename__ = "spaces"
    __table_args__ = (
        sa.Index("idx_spaces_owner", "owner_id"),
        sa.Index("idx_spaces_is_active", "is_active"),
    )

    id: Mapped[UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid4)
    owner_id: Mapped[UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(length=60), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(length=500), nullable=True)
    logo: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    header_title: Mapped[Optional[str]] = mapped_column(String(length=80), nullable=True)
    header_message: Mapped[Optional[str]] = mapped_column(String(length=300), nullable=True)
    question_list: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    collect_extras: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    collection_type: Mapped[CollectionTypeEnum] = mapped_column(
        _enum(CollectionTypeEnum, "collection_type"),
        nullable=False,
        default=CollectionTypeEnum.text_and_video,
    )
    theme: Mapped[ThemeEnum] = mapped_column(_enum(ThemeEnum, "space_theme"), nullable=False, default=ThemeEnum.light)
    button_color: Mapped[str] = mapped_column(String(length=7), nullable=False, default="#00A676")
    language: Mapped[str] = mapped_column(String(length=2), nullable=False, default="en")
    auto_translate: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    template_id: Mapped[Optional[UUID]] = mapped_column(
        ForeignKey("templates.id", ondelete="SET NULL"), nullable=True
    )
    expiry_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    max_uses: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )


class RequestLink(Base):
    __tablename__ = "request_links"
    __table_args__ = (
        sa.Index("idx_request_links_owner", "owner_id"),
        sa.Index("idx_request_links_is_active", "is_active"),
    )

    id: Mapped[UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid4)
    owner_id: Mapped[UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    slug: Mapped[str] = mapped_column(String(length=50), unique=True, nullable=False)
    template_id: Mapped[Optional[UUID]] = mapped_column(
        ForeignKey("templates.id", ondelete="SET NULL"), nullable=True
    )
    expiry_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    max_uses: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    uses: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )


class Testimonial(Base):
    __tablename__ = "testimonials"
    __table_args__ = (
        sa.Index("idx_testimonials_space_status", "space_id", "status"),
        sa.Index("idx_testimonials_space_type", "space_id", "type"),
        sa.Index("idx_testimonials_status_submitted", "status", "submitted_at"),
        sa.Index("idx_testimonials_created_by", "created_by"),
        sa.Index("idx_testimonials_source_link", "source_link"),
    )

    id: Mapped[UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid4)
    space_id: Mapped[Optional[UUID]] = mapped_column(ForeignKey("spaces.id", ondelete="CASCADE"), nullable=True)
    type: Mapped[TestimonialTypeEnum] = mapped_column(_enum(TestimonialTypeEnum, "testimonial_type"), nullable=False)
    author_name: Mapped[Optional[str]] = mapped_column(String(length=100), nullable=True)
    author_email: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    rating: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    media_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    thumbnail_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    images: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    question_responses: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    collected_via: Mapped[CollectedViaEnum] = mapped_column(
        _enum(CollectedViaEnum, "collected_via"), nullable=False, default=CollectedViaEnum.link
    )
    status: Mapped[TestimonialStatusEnum] = mapped_column(
        _enum(TestimonialStatusEnum, "testimonial_status"),
        nullable=False,
        default=TestimonialStatusEnum.pending,
    )
    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_by: Mapped[Optional[UUID]] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    source_link: Mapped[Optional[str]] = mapped_column(String(length=50), nullable=True)
    meta: Mapped[dict[str, Any]] = mapped_column("metadata", JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )


class Widget(Base):
    __tablename__ = "widgets"
    __table_args__ = (
        sa.Index("idx_widgets_space_status", "space_id", "status"),
        sa.Index("idx_widgets_space_type", "space_id", "type"),
        sa.Index("idx_widgets_created_by", "created_by"),
    )

    id: Mapped[UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid4)
    space_id: Mapped[UUID] = mapped_column(ForeignKey("spaces.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(length=60), nullable=False)
    type: Mapped[WidgetTypeEnum] = mapped_column(_enum(WidgetTypeEnum, "widget_type"), nullable=False)
    design_template: Mapped[str] = mapped_column(String(length=32), nullable=False)
    settings: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    status: Mapped[WidgetStatusEnum] = mapped_column(
        _enum(WidgetStatusEnum, "widget_status"), nullable=False, default=WidgetStatusEnum.active
    )
    created_by: Mapped[UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    meta: Mapped[dict[str, Any]] = mapped_column("metadata", JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
