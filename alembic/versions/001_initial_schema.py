"""Initial schema: users, catalogs, categories, menu items, variants, product images.

Revision ID: 001
Revises:
Create Date: 2026-10-19

One catalog per merchant; categories nest through parent_category_id (no cycle check in SQL).
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("CREATE TYPE user_role_enum AS ENUM ('merchant', 'admin')")
    op.execute("CREATE TYPE login_method_enum AS ENUM ('email', 'phone')")
    op.execute("CREATE TYPE catalog_plan_enum AS ENUM ('basic', 'pro', 'business')")

    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("login_method", postgresql.ENUM("email", "phone", name="login_method_enum", create_type=False), nullable=False, server_default="email"),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("role", postgresql.ENUM("merchant", "admin", name="user_role_enum", create_type=False), nullable=False, server_default="merchant"),
        sa.Column("email_confirmed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("otp_hash", sa.String(255), nullable=True),
        sa.Column("otp_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "catalogs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("display_name", sa.String(50), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("slogan", sa.String(120), nullable=True),
        sa.Column("logo_url", sa.String(1024), nullable=True),
        sa.Column("cover_url", sa.String(1024), nullable=True),
        sa.Column("whatsapp_number", sa.String(32), nullable=True),
        sa.Column("country_code", sa.String(8), nullable=True),
        sa.Column("theme", sa.String(32), nullable=False, server_default="default"),
        sa.Column("plan", postgresql.ENUM("basic", "pro", "business", name="catalog_plan_enum", create_type=False), nullable=False, server_default="basic"),
        sa.Column("enable_subcategories", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_open", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_catalogs_user_id", "catalogs", ["user_id"], unique=True)
    op.create_index("ix_catalogs_name", "catalogs", ["name"], unique=True)

    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("catalog_id", sa.Integer(), sa.ForeignKey("catalogs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("parent_category_id", sa.Integer(), sa.ForeignKey("categories.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_categories_catalog_id", "categories", ["catalog_id"])
    op.create_index("ix_categories_parent_category_id", "categories", ["parent_category_id"])

    op.create_table(
        "menu_items",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("catalog_id", sa.Integer(), sa.ForeignKey("catalogs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("categories.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("image_url", sa.String(1024), nullable=True),
        sa.Column("is_featured", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_popular", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("price >= 0", name="ck_menu_items_price_non_negative"),
    )
    op.create_index("ix_menu_items_catalog_id", "menu_items", ["catalog_id"])
    op.create_index("ix_menu_items_category_id", "menu_items", ["category_id"])

    op.create_table(
        "item_variants",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("menu_item_id", sa.Integer(), sa.ForeignKey("menu_items.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_item_variants_menu_item_id", "item_variants", ["menu_item_id"])

    op.create_table(
        "product_images",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("menu_item_id", sa.Integer(), sa.ForeignKey("menu_items.id", ondelete="CASCADE"), nullable=False),
        sa.Column("image_url", sa.String(1024), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_product_images_menu_item_id", "product_images", ["menu_item_id"])


def downgrade() -> None:
    op.drop_table("product_images")
    op.drop_table("item_variants")
    op.drop_table("menu_items")
    op.drop_table("categories")
    op.drop_table("catalogs")
    op.drop_table("users")
    op.execute("DROP TYPE IF EXISTS catalog_plan_enum")
    op.execute("DROP TYPE IF EXISTS login_method_enum")
    op.execute("DROP TYPE IF EXISTS user_role_enum")
