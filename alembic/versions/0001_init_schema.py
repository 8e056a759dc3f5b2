"""Initial schema"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_init_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    enum_type = sa.String(length=32)

    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("external_id", sa.Text(), nullable=False, unique=True),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("name", sa.Text(), nullable=True),
        sa.Column("role", enum_type, nullable=False, server_default="User"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "templates",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("form_config", sa.JSON(), nullable=False),
        sa.Column("email_subject", sa.String(length=200), nullable=True),
        sa.Column("email_body", sa.Text(), nullable=True),
        sa.Column("created_by", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("idx_templates_created_by", "templates", ["created_by"])
    op.create_index("idx_templates_is_public", "templates", ["is_public"])

    op.create_table(
        "spaces",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("owner_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=60), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=True),
        sa.Column("logo", sa.Text(), nullable=True),
        sa.Column("header_title", sa.String(length=80), nullable=True),
        sa.Column("header_message", sa.String(length=300), nullable=True),
        sa.Column("question_list", sa.JSON(), nullable=False),
        sa.Column("collect_extras", sa.JSON(), nullable=False),
        sa.Column("collection_type", enum_type, nullable=False, server_default="text-and-video"),
        sa.Column("theme", enum_type, nullable=False, server_default="light"),
        sa.Column("button_color", sa.String(length=7), nullable=False, server_default="#00A676"),
        sa.Column("language", sa.String(length=2), nullable=False, server_default="en"),
        sa.Column("auto_translate", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("template_id", sa.Uuid(), sa.ForeignKey("templates.id", ondelete="SET NULL"), nullable=True),
        sa.Column("expiry_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("max_uses", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("idx_spaces_owner", "spaces", ["owner_id"])
    op.create_index("idx_spaces_is_active", "spaces", ["is_active"])

    op.create_table(
        "request_links",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("owner_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("slug", sa.String(length=50), nullable=False, unique=True),
        sa.Column("template_id", sa.Uuid(), sa.ForeignKey("templates.id", ondelete="SET NULL"), nullable=True),
        sa.Column("expiry_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("max_uses", sa.Integer(), nullable=True),
        sa.Column("uses", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("idx_request_links_owner", "request_links", ["owner_id"])
    op.create_index("idx_request_links_is_active", "request_links", ["is_active"])

    op.create_table(
        "testimonials",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("space_id", sa.Uuid(), sa.ForeignKey("spaces.id", ondelete="CASCADE"), nullable=True),
        sa.Column("type", enum_type, nullable=False),
        sa.Column("author_name", sa.String(length=100), nullable=True),
        sa.Column("author_email", sa.Text(), nullable=True),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("rating", sa.Integer(), nullable=True),
        sa.Column("media_url", sa.Text(), nullable=True),
        sa.Column("thumbnail_url", sa.Text(), nullable=True),
        sa.Column("images", sa.JSON(), nullable=False),
        sa.Column("question_responses", sa.JSON(), nullable=False),
        sa.Column("collected_via", enum_type, nullable=False, server_default="link"),
        sa.Column("status", enum_type, nullable=False, server_default="pending"),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("source_link", sa.String(length=50), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=False),
        *_timestamps(),
    )
    op.create_index("idx_testimonials_space_status", "testimonials", ["space_id", "status"])
    op.create_index("idx_testimonials_space_type", "testimonials", ["space_id", "type"])
    op.create_index("idx_testimonials_status_submitted", "testimonials", ["status", "submitted_at"])
    op.create_index("idx_testimonials_created_by", "testimonials", ["created_by"])
    op.create_index("idx_testimonials_source_link", "testimonials", ["source_link"])

    op.create_table(
        "widgets",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("space_id", sa.Uuid(), sa.ForeignKey("spaces.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=60), nullable=False),
        sa.Column("type", enum_type, nullable=False),
        sa.Column("design_template", sa.String(length=32), nullable=False),
        sa.Column("settings", sa.JSON(), nullable=False),
        sa.Column("status", enum_type, nullable=False, server_default="active"),
        sa.Column("created_by", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("metadata", sa.JSON(), nullable=False),
        *_timestamps(),
    )
    op.create_index("idx_widgets_space_status", "widgets", ["space_id", "status"])
    op.create_index("idx_widgets_space_type", "widgets", ["space_id", "type"])
    op.create_index("idx_widgets_created_by", "widgets", ["created_by"])


def downgrade() -> None:
    op.drop_table("widgets")
    op.drop_table("testimonials")
    op.drop_table("request_links")
    op.drop_table("spaces")
    op.drop_table("templates")
    op.drop_table("users")
