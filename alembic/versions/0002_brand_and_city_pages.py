"""brand and city pages

Revision ID: 0002_brand_and_city_pages
Revises: 0001_initial_schema
Create Date: 2026-10-19 15:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0002_brand_and_city_pages"
down_revision: str | None = "0001_initial_schema"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _content_edit_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("field", sa.String(length=50), nullable=False),
        sa.Column("original_value", sa.Text(), server_default="", nullable=False),
        sa.Column("suggested_value", sa.Text(), nullable=False),
        sa.Column("reason", sa.String(length=1000), nullable=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("status", sa.String(length=20), server_default="pending", nullable=False),
        sa.Column("trusted_contribution", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("auto_applied", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("needs_review", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("reviewed_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("review_note", sa.String(length=1000), nullable=True),
    ]


def _index(table: str, *columns: str, unique: bool = False) -> None:
    for column in columns:
        op.create_index(op.f(f"ix_{table}_{column}"), table, [column], unique=unique)


def upgrade() -> None:
    op.create_table(
        "brand_pages",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("brand_name", sa.String(length=255), nullable=False, unique=True),
        sa.Column("slug", sa.String(length=255), nullable=False),
        sa.Column("display_name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("logo_url", sa.String(length=1000), nullable=True),
        sa.Column("website_url", sa.String(length=1000), nullable=True),
        sa.Column("parent_brand_id", sa.Integer(), sa.ForeignKey("brand_pages.id"), nullable=True),
        sa.Column("is_official", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("updated_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        *_timestamps(),
    )
    _index("brand_pages", "id", "parent_brand_id", "is_official", "is_active")
    _index("brand_pages", "slug", unique=True)

    op.create_table(
        "brand_content_edits",
        *_content_edit_columns(),
        sa.Column("brand_page_id", sa.Integer(), sa.ForeignKey("brand_pages.id"), nullable=False),
        sa.Column("brand_name", sa.String(length=255), nullable=False),
        sa.Column("brand_slug", sa.String(length=255), nullable=False),
        *_timestamps(),
    )
    _index("brand_content_edits", "id", "user_id", "status", "brand_page_id", "brand_name", "brand_slug")

    op.create_table(
        "city_landing_pages",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("slug", sa.String(length=255), nullable=False),
        sa.Column("city_name", sa.String(length=255), nullable=False),
        sa.Column("state", sa.String(length=10), nullable=False),
        sa.Column("headline", sa.String(length=500), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("featured_store_ids", sa.JSON(), nullable=False),
        *_timestamps(),
    )
    _index("city_landing_pages", "id", "is_active")
    _index("city_landing_pages", "slug", unique=True)

    op.create_table(
        "city_content_edits",
        *_content_edit_columns(),
        sa.Column("city_page_id", sa.Integer(), sa.ForeignKey("city_landing_pages.id"), nullable=False),
        sa.Column("city_slug", sa.String(length=255), nullable=False),
        *_timestamps(),
    )
    _index("city_content_edits", "id", "user_id", "status", "city_page_id", "city_slug")


def downgrade() -> None:
    for table in ("city_content_edits", "city_landing_pages", "brand_content_edits", "brand_pages"):
        op.drop_table(table)
