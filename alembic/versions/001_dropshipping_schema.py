"""dropshipping schema - suppliers, products, sync logs

Revision ID: 001_dropshipping
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_dropshipping"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "dropshipping_suppliers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("code", sa.String(50), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("base_url", sa.String(500)),
        sa.Column("api_key", sa.Text()),
        sa.Column("api_email", sa.String(255)),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("sync_status", sa.String(20), nullable=False, server_default="idle"),
        sa.Column("last_sync_at", sa.DateTime()),
        sa.Column("error_message", sa.String(1000)),
        sa.Column("created_at", sa.DateTime()),
        sa.Column("updated_at", sa.DateTime()),
    )
    op.create_index("ix_dropshipping_suppliers_code", "dropshipping_suppliers", ["code"], unique=True)

    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(500), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("price", sa.Float(), nullable=False, server_default="0"),
        sa.Column("image", sa.String(1000)),
        sa.Column("category", sa.String(255)),
        sa.Column("in_stock", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("source", sa.String(50), nullable=False, server_default="local"),
        sa.Column("external_id", sa.String(255)),
        sa.Column("sku", sa.String(255)),
        sa.Column("supplier_price", sa.Float()),
        sa.Column("shipping_cost", sa.Float()),
        sa.Column("processing_time", sa.Integer()),
        sa.Column("stock_quantity", sa.Integer()),
        sa.Column("last_synced_at", sa.DateTime()),
        sa.Column("created_at", sa.DateTime()),
        sa.UniqueConstraint("source", "external_id", name="uq_product_source_external"),
    )
    op.create_index("ix_products_source", "products", ["source"])

    op.create_table(
        "product_sync_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("supplier_id", sa.String(50), nullable=False),
        sa.Column("action", sa.String(20), nullable=False),
        sa.Column("product_id", sa.Integer()),
        sa.Column("external_id", sa.String(255)),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("items_processed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("items_failed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("error_message", sa.Text()),
        sa.Column("created_at", sa.DateTime()),
    )
    op.create_index("ix_sync_log_supplier_time", "product_sync_logs", ["supplier_id", "created_at"])


def downgrade() -> None:
    """Drop all dropshipping tables. ⚠️ DESTRUCTIVE — only for dev/test environments."""
    op.drop_index("ix_sync_log_supplier_time", table_name="product_sync_logs")
    op.drop_table("product_sync_logs")
    op.drop_index("ix_products_source", table_name="products")
    op.drop_table("products")
    op.drop_index("ix_dropshipping_suppliers_code", table_name="dropshipping_suppliers")
    op.drop_table("dropshipping_suppliers")
