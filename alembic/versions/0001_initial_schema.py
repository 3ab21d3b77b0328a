"""initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _archive_columns() -> list[sa.Column]:
    return [
        sa.Column("archived", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("archived_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
    ]


def _product_columns() -> list[sa.Column]:
    return [
        sa.Column("name", sa.String(length=500), nullable=False),
        sa.Column("brand", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("size_or_variant", sa.String(length=255), server_default="Standard", nullable=False),
        sa.Column("categories", sa.JSON(), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("is_strict_vegan", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("image_url", sa.String(length=1000), nullable=True),
        sa.Column("nutrition_summary", sa.Text(), nullable=True),
        sa.Column("ingredient_summary", sa.Text(), nullable=True),
    ]


def _index(table: str, *columns: str, unique: bool = False) -> None:
    for column in columns:
        op.create_index(op.f(f"ix_{table}_{column}"), table, [column], unique=unique)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=True),
        sa.Column("display_name", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("role", sa.String(length=20), server_default="user", nullable=False),
        sa.Column("auth_provider", sa.String(length=20), server_default="local", nullable=False),
        sa.Column("provider_id", sa.String(length=255), nullable=True),
        sa.Column("profile_picture", sa.String(length=1000), nullable=True),
        sa.Column("trusted_contributor", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("trusted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("trusted_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("preferred_city", sa.String(length=255), nullable=True),
        sa.Column("preferred_state", sa.String(length=100), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    _index("users", "id", "role", "provider_id")
    _index("users", "email", unique=True)

    op.create_table(
        "password_reset_tokens",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("token_hash", sa.String(length=64), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("used_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    _index("password_reset_tokens", "id", "user_id")
    _index("password_reset_tokens", "token_hash", unique=True)

    op.create_table(
        "products",
        sa.Column("id", sa.String(length=36), primary_key=True),
        *_product_columns(),
        sa.Column("featured", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("featured_order", sa.Integer(), server_default="0", nullable=False),
        sa.Column("featured_at", sa.DateTime(timezone=True), nullable=True),
        *_archive_columns(),
        *_timestamps(),
    )
    _index("products", "name", "brand", "featured", "archived")

    op.create_table(
        "user_products",
        sa.Column("id", sa.String(length=36), primary_key=True),
        *_product_columns(),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("source_product_id", sa.String(length=36), nullable=True),
        sa.Column("status", sa.String(length=20), server_default="pending", nullable=False),
        sa.Column("trusted_contribution", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("needs_review", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("reviewed_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejection_reason", sa.String(length=1000), nullable=True),
        sa.Column("rejected_at", sa.DateTime(timezone=True), nullable=True),
        *_archive_columns(),
        *_timestamps(),
    )
    _index("user_products", "name", "brand", "user_id", "source_product_id", "status", "archived")

    op.create_table(
        "store_chains",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False, unique=True),
        sa.Column("slug", sa.String(length=255), nullable=False),
        sa.Column("logo_url", sa.String(length=1000), nullable=True),
        sa.Column("website_url", sa.String(length=1000), nullable=True),
        sa.Column("type", sa.String(length=20), server_default="regional", nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("location_count", sa.Integer(), server_default="0", nullable=False),
        *_timestamps(),
    )
    _index("store_chains", "id", "is_active")
    _index("store_chains", "slug", unique=True)

    op.create_table(
        "stores",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("type", sa.String(length=30), nullable=False),
        sa.Column("region_or_scope", sa.String(length=255), server_default="Unknown", nullable=False),
        sa.Column("website_url", sa.String(length=1000), nullable=True),
        sa.Column("address", sa.String(length=500), nullable=True),
        sa.Column("city", sa.String(length=255), nullable=True),
        sa.Column("state", sa.String(length=100), nullable=True),
        sa.Column("zip_code", sa.String(length=20), nullable=True),
        sa.Column("country", sa.String(length=10), server_default="US", nullable=False),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("google_place_id", sa.String(length=255), nullable=True),
        sa.Column("phone_number", sa.String(length=50), nullable=True),
        sa.Column("chain_id", sa.Integer(), sa.ForeignKey("store_chains.id"), nullable=True),
        sa.Column("location_identifier", sa.String(length=255), nullable=True),
        sa.Column("moderation_status", sa.String(length=20), server_default="confirmed", nullable=False),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("trusted_contribution", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("needs_review", sa.Boolean(), server_default=sa.false(), nullable=False),
        *_timestamps(),
    )
    _index("stores", "id", "name", "type", "city", "state", "google_place_id", "chain_id", "moderation_status")

    op.create_table(
        "availability",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("product_id", sa.String(length=36), nullable=False),
        sa.Column("store_id", sa.Integer(), sa.ForeignKey("stores.id"), nullable=False),
        sa.Column("status", sa.String(length=20), server_default="known", nullable=False),
        sa.Column("price_range", sa.String(length=100), nullable=True),
        sa.Column("source", sa.String(length=30), server_default="seed_data", nullable=False),
        sa.Column("last_confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_stale", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("moderation_status", sa.String(length=20), server_default="confirmed", nullable=False),
        sa.Column("reported_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("trusted_contribution", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("needs_review", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("reviewed_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("stock_status", sa.String(length=20), server_default="unknown", nullable=False),
        sa.Column("last_stock_report_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("recent_in_stock_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("recent_out_of_stock_count", sa.Integer(), server_default="0", nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("product_id", "store_id", name="uq_availability_product_store"),
    )
    _index("availability", "id", "product_id", "store_id", "moderation_status", "reported_by")

    op.create_table(
        "availability_reports",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("product_id", sa.String(length=36), nullable=False),
        sa.Column("store_id", sa.Integer(), sa.ForeignKey("stores.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("notes", sa.String(length=200), nullable=True),
        sa.Column("reported_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
    )
    _index("availability_reports", "id", "product_id", "store_id", "user_id", "reported_at")

    op.create_table(
        "shopping_lists",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        *_timestamps(),
    )
    _index("shopping_lists", "id", "user_id")

    op.create_table(
        "shopping_list_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("shopping_list_id", sa.Integer(), sa.ForeignKey("shopping_lists.id"), nullable=False),
        sa.Column("product_id", sa.String(length=36), nullable=False),
        sa.Column("quantity", sa.Integer(), server_default="1", nullable=False),
        sa.Column("note", sa.String(length=500), nullable=True),
        sa.Column("added_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
    )
    _index("shopping_list_items", "id", "shopping_list_id", "product_id")

    op.create_table(
        "reviews",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("product_id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=True),
        sa.Column("comment", sa.Text(), nullable=False),
        sa.Column("photo_urls", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(length=20), server_default="pending", nullable=False),
        sa.Column("trusted_contribution", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("needs_review", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("helpful_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("approved_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "product_id", name="uq_review_user_product"),
    )
    _index("reviews", "id", "product_id", "user_id", "rating", "status")

    op.create_table(
        "review_helpful_votes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("review_id", sa.Integer(), sa.ForeignKey("reviews.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("review_id", "user_id", name="uq_helpful_vote"),
    )
    _index("review_helpful_votes", "id", "review_id", "user_id")

    op.create_table(
        "archived_filters",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("value", sa.String(length=255), nullable=False),
        sa.Column("archived_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("type", "value", name="uq_archived_filter_type_value"),
    )
    _index("archived_filters", "id", "type", "value")

    op.create_table(
        "filter_display_names",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("value", sa.String(length=255), nullable=False),
        sa.Column("display_name", sa.String(length=255), nullable=False),
        sa.Column("updated_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("type", "value", name="uq_filter_display_type_value"),
    )
    _index("filter_display_names", "id", "type", "value")


def downgrade() -> None:
    # Reverse dependency order; indexes go with their tables
    for table in (
        "filter_display_names",
        "archived_filters",
        "review_helpful_votes",
        "reviews",
        "shopping_list_items",
        "shopping_lists",
        "availability_reports",
        "availability",
        "stores",
        "store_chains",
        "user_products",
        "products",
        "password_reset_tokens",
        "users",
    ):
        op.drop_table(table)
