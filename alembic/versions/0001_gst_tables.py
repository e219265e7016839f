from __future__ import annotations

import sqlalchemy as sa

from alembic import op

revision = "0001_gst_tables"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "tax_slab",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("rate", sa.Numeric(6, 3), nullable=False),
        sa.Column("category", sa.String(length=40), nullable=False),
        sa.Column("hsn_code", sa.String(length=20), nullable=False, server_default=""),
        sa.Column("type", sa.String(length=20), nullable=False, server_default="Regular"),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("status", sa.String(length=10), nullable=False, server_default="active"),
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_tax_slab"),
        sa.UniqueConstraint("name", name="uq_tax_slab_name"),
    )
    op.create_index("ix_tax_slab_status_rate", "tax_slab", ["status", "rate"])
    op.create_index("ix_tax_slab_is_default", "tax_slab", ["is_default"])

    op.create_table(
        "tax_entry",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("invoice_no", sa.String(length=60), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("customer", sa.String(length=200), nullable=False),
        sa.Column("gstin", sa.String(length=20), nullable=True),
        sa.Column("is_inter_state", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("taxable_value", sa.Numeric(), nullable=False),
        sa.Column("total_tax", sa.Numeric(), nullable=False),
        sa.Column("total_amount", sa.Numeric(), nullable=False),
        sa.Column("gst_return", sa.String(length=10), nullable=False),
        sa.Column("status", sa.String(length=10), nullable=False, server_default="Draft"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_tax_entry"),
    )
    op.create_index("ix_tax_entry_invoice_no", "tax_entry", ["invoice_no"], unique=True)
    op.create_index("ix_tax_entry_date", "tax_entry", ["date"])
    op.create_index("ix_tax_entry_gstin", "tax_entry", ["gstin"])
    op.create_index("ix_tax_entry_return_date", "tax_entry", ["gst_return", "date"])

    # tax_slab_id is a plain column; slab deletes leave it dangling
    op.create_table(
        "tax_entry_item",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("entry_id", sa.Integer(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("name", sa.String(length=200), nullable=True),
        sa.Column("quantity", sa.Numeric(), nullable=False),
        sa.Column("price", sa.Numeric(), nullable=False),
        sa.Column("tax_slab_id", sa.Integer(), nullable=True),
        sa.Column("hsn", sa.String(length=20), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_tax_entry_item"),
        sa.ForeignKeyConstraint(
            ["entry_id"],
            ["tax_entry.id"],
            name="fk_tax_entry_item_entry_id_tax_entry",
            ondelete="CASCADE",
        ),
    )
    op.create_index("ix_tax_entry_item_entry_id", "tax_entry_item", ["entry_id"])
    op.create_index("ix_tax_entry_item_tax_slab_id", "tax_entry_item", ["tax_slab_id"])


def downgrade() -> None:
    op.drop_index("ix_tax_entry_item_tax_slab_id", table_name="tax_entry_item")
    op.drop_index("ix_tax_entry_item_entry_id", table_name="tax_entry_item")
    op.drop_table("tax_entry_item")
    op.drop_index("ix_tax_entry_return_date", table_name="tax_entry")
    op.drop_index("ix_tax_entry_gstin", table_name="tax_entry")
    op.drop_index("ix_tax_entry_date", table_name="tax_entry")
    op.drop_index("ix_tax_entry_invoice_no", table_name="tax_entry")
    op.drop_table("tax_entry")
    op.drop_index("ix_tax_slab_is_default", table_name="tax_slab")
    op.drop_index("ix_tax_slab_status_rate", table_name="tax_slab")
    op.drop_table("tax_slab")
