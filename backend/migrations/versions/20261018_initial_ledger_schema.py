"""Initial franchise ledger schema

Revision ID: 20261018_ledger_initial
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261018_ledger_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
    ]


def upgrade():
    op.create_table(
        "franchises",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("code", sa.String(length=32), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_franchises_code", "franchises", ["code"], unique=True)
    op.create_index("ix_franchises_is_active", "franchises", ["is_active"], unique=False)

    op.create_table(
        "units",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("franchise_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("code", sa.String(length=32), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.ForeignKeyConstraint(["franchise_id"], ["franchises.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("franchise_id", "code", name="uq_units_franchise_code"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_units_franchise_id", "units", ["franchise_id"], unique=False)

    op.create_table(
        "document_sequences",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("unit_id", sa.Integer(), nullable=False),
        sa.Column("document_type", sa.String(length=32), nullable=False),
        sa.Column("next_number", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.ForeignKeyConstraint(["unit_id"], ["units.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("unit_id", "document_type", name="uq_doc_sequences_unit_type"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_document_sequences_unit_id", "document_sequences", ["unit_id"], unique=False)
    op.create_index("ix_document_sequences_document_type", "document_sequences", ["document_type"], unique=False)

    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("franchise_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(length=64), nullable=True),
        sa.Column("sku", sa.String(length=64), nullable=True),
        sa.Column("unit_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.CheckConstraint("unit_price >= 0", name="ck_products_unit_price_non_negative"),
        sa.ForeignKeyConstraint(["franchise_id"], ["franchises.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("franchise_id", "name", name="uq_products_franchise_name"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_products_franchise_id", "products", ["franchise_id"], unique=False)
    op.create_index("ix_products_franchise_status", "products", ["franchise_id", "status"], unique=False)

    op.create_table(
        "inventory_records",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("unit_id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("reorder_level", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("quantity >= 0", name="ck_inventory_quantity_non_negative"),
        sa.CheckConstraint("reorder_level >= 0", name="ck_inventory_reorder_non_negative"),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"]),
        sa.ForeignKeyConstraint(["unit_id"], ["units.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("unit_id", "product_id", name="uq_inventory_unit_product"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_inventory_records_unit_id", "inventory_records", ["unit_id"], unique=False)
    op.create_index("ix_inventory_records_product_id", "inventory_records", ["product_id"], unique=False)

    op.create_table(
        "revenue_entries",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("revenue_number", sa.String(length=64), nullable=False),
        sa.Column("franchise_id", sa.Integer(), nullable=False),
        sa.Column("unit_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("category", sa.String(length=32), nullable=False),
        sa.Column("amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("net_amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("revenue_date", sa.Date(), nullable=False),
        sa.Column("period_year", sa.Integer(), nullable=False),
        sa.Column("period_month", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("legacy_line_items", sa.JSON(), nullable=True),
        sa.Column("line_item_schema_version", sa.Integer(), nullable=False),
        sa.Column("recorded_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.Column("version_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["franchise_id"], ["franchises.id"]),
        sa.ForeignKeyConstraint(["unit_id"], ["units.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("unit_id", "revenue_number", name="uq_revenue_unit_number"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_revenue_entries_franchise_id", "revenue_entries", ["franchise_id"], unique=False)
    op.create_index("ix_revenue_entries_unit_id", "revenue_entries", ["unit_id"], unique=False)
    op.create_index("ix_revenue_entries_type", "revenue_entries", ["type"], unique=False)
    op.create_index("ix_revenue_entries_status", "revenue_entries", ["status"], unique=False)
    op.create_index("ix_revenue_unit_date", "revenue_entries", ["unit_id", "revenue_date"], unique=False)
    op.create_index(
        "ix_revenue_unit_period",
        "revenue_entries",
        ["unit_id", "type", "period_year", "period_month"],
        unique=False,
    )

    op.create_table(
        "revenue_line_items",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("revenue_id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=True),
        sa.Column("product_name", sa.String(length=255), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.CheckConstraint("quantity >= 0", name="ck_line_items_quantity_non_negative"),
        sa.ForeignKeyConstraint(["revenue_id"], ["revenue_entries.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_revenue_line_items_revenue_id", "revenue_line_items", ["revenue_id"], unique=False)
    op.create_index("ix_revenue_line_items_product_id", "revenue_line_items", ["product_id"], unique=False)

    op.create_table(
        "expense_entries",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("transaction_number", sa.String(length=64), nullable=False),
        sa.Column("franchise_id", sa.Integer(), nullable=False),
        sa.Column("unit_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("category", sa.String(length=32), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("transaction_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("recorded_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.Column("version_id", sa.Integer(), nullable=False),
        sa.CheckConstraint("amount > 0", name="ck_expense_amount_positive"),
        sa.ForeignKeyConstraint(["franchise_id"], ["franchises.id"]),
        sa.ForeignKeyConstraint(["unit_id"], ["units.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("unit_id", "transaction_number", name="uq_expense_unit_number"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_expense_entries_franchise_id", "expense_entries", ["franchise_id"], unique=False)
    op.create_index("ix_expense_entries_unit_id", "expense_entries", ["unit_id"], unique=False)
    op.create_index("ix_expense_unit_date", "expense_entries", ["unit_id", "transaction_date"], unique=False)

    op.create_table(
        "royalties",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("franchise_id", sa.Integer(), nullable=False),
        sa.Column("unit_id", sa.Integer(), nullable=True),
        sa.Column("period_year", sa.Integer(), nullable=False),
        sa.Column("period_month", sa.Integer(), nullable=False),
        sa.Column("period_start_date", sa.Date(), nullable=False),
        sa.Column("period_end_date", sa.Date(), nullable=False),
        sa.Column("gross_revenue", sa.Numeric(12, 2), nullable=False),
        sa.Column("royalty_percentage", sa.Numeric(5, 2), nullable=False),
        sa.Column("royalty_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.ForeignKeyConstraint(["franchise_id"], ["franchises.id"]),
        sa.ForeignKeyConstraint(["unit_id"], ["units.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_royalties_franchise_id", "royalties", ["franchise_id"], unique=False)
    op.create_index("ix_royalties_unit_id", "royalties", ["unit_id"], unique=False)
    op.create_index("ix_royalties_unit_period", "royalties", ["unit_id", "period_start_date"], unique=False)


def downgrade():
    op.drop_table("royalties")
    op.drop_table("expense_entries")
    op.drop_table("revenue_line_items")
    op.drop_table("revenue_entries")
    op.drop_table("inventory_records")
    op.drop_table("products")
    op.drop_table("document_sequences")
    op.drop_table("units")
    op.drop_table("franchises")
