"""Menu catalog and per-customer assignments

Revision ID: 001
Revises:
Create Date: 2026-10-19

Creates: menu_items, user_menus
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "menu_items",
        sa.Column("id", UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("ingredients", sa.Text, nullable=False, server_default=""),
        sa.Column("unit_size", sa.String(50), nullable=False, server_default=""),
        sa.Column("abv", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("image_url", sa.Text, nullable=True),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("in_stock", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("is_draft", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("assignment_type", sa.String(20), nullable=False, server_default="all_users"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("abv >= 0 AND abv <= 100", name="ck_menu_items_abv_range"),
        sa.CheckConstraint("price > 0", name="ck_menu_items_price_positive"),
    )
    op.create_index("ix_menu_items_is_draft", "menu_items", ["is_draft"])
    op.create_index("ix_menu_items_assignment_type", "menu_items", ["assignment_type", "is_draft"])

    op.create_table(
        "user_menus",
        sa.Column("id", UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), nullable=False),
        sa.Column("menu_item_id", UUID(as_uuid=True), sa.ForeignKey("menu_items.id", ondelete="CASCADE"), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("user_id", "menu_item_id", name="uq_user_menus_user_item"),
    )
    op.create_index("ix_user_menus_user_id", "user_menus", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_user_menus_user_id", table_name="user_menus")
    op.drop_table("user_menus")
    op.drop_index("ix_menu_items_assignment_type", table_name="menu_items")
    op.drop_index("ix_menu_items_is_draft", table_name="menu_items")
    op.drop_table("menu_items")
