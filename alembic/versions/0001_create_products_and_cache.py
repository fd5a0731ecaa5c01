"""create products and cache_entries

Revision ID: 0001
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "products",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False, unique=True),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("old_price", sa.Numeric(12, 2), nullable=True),
        sa.Column("discount_percentage", sa.SmallInteger(), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("in_stock", sa.Boolean(), nullable=False),
        sa.Column("image_cover", sa.String(2048), nullable=True),
        sa.Column("image_thumbnail", sa.String(2048), nullable=True),
        sa.Column("container_type", sa.String(255), nullable=True),
        sa.Column("container_size", sa.String(255), nullable=True),
        sa.Column("production_year", sa.SmallInteger(), nullable=True),
        sa.Column("condition", sa.String(20), nullable=True),
        sa.Column("location_city", sa.String(255), nullable=True),
        sa.Column("location_district", sa.String(255), nullable=True),
        sa.Column("location_country", sa.String(255), nullable=True),
        sa.Column("type", sa.String(20), nullable=True),
        sa.Column("is_new", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_hot_sale", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_featured", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_bulk_sale", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("accept_offers", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("colors", sa.Text(), nullable=True),
        sa.Column("all_prices", sa.Text(), nullable=True),
        sa.Column("technical_specs", sa.Text(), nullable=True),
        sa.Column("user_info", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("idx_products_status", "products", ["status"])
    op.create_index("idx_products_stock_status", "products", ["in_stock", "status"])

    op.create_table(
        "cache_entries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("key", sa.String(255), nullable=False, unique=True),
        sa.Column("value", sa.JSON().with_variant(postgresql.JSONB(), "postgresql"), nullable=True),
        sa.Column("expires_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_cache_entries_expires_at", "cache_entries", ["expires_at"])


def downgrade():
    op.drop_index("ix_cache_entries_expires_at", table_name="cache_entries")
    op.drop_table("cache_entries")
    op.drop_index("idx_products_stock_status", table_name="products")
    op.drop_index("idx_products_status", table_name="products")
    op.drop_table("products")
