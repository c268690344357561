from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    # epoch milliseconds
    return [
        sa.Column("created_at", sa.BigInteger(), nullable=False),
        sa.Column("updated_at", sa.BigInteger(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "shipping_companies",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "company_warehouses",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("company_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("shipping_companies.id"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("province_code", sa.String(length=16), nullable=False),
        sa.Column("city_code", sa.String(length=16), nullable=False),
        sa.Column("detail_address", sa.String(length=512)),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("ix_company_warehouses_company_id", "company_warehouses", ["company_id"])

    op.create_table(
        "shipping_rate_types",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("company_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("shipping_companies.id"), nullable=False),
        sa.Column("warehouse_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("company_warehouses.id"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="USD"),
        sa.Column("unit_type", sa.Enum("CBM", "KG", name="unittype"), nullable=False, server_default="CBM"),
        sa.Column("rounding_granularity", sa.Numeric(10, 4)),
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("ix_shipping_rate_types_company_id", "shipping_rate_types", ["company_id"])
    op.create_index("ix_shipping_rate_types_warehouse_id", "shipping_rate_types", ["warehouse_id"])

    op.create_table(
        "international_shipping_rates",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "rate_type_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("shipping_rate_types.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("cbm", sa.Numeric(12, 4), nullable=False),
        sa.Column("unit_price", sa.Numeric(18, 4), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("rate_type_id", "cbm", name="uq_rate_bracket_cbm"),
    )
    op.create_index("ix_international_shipping_rates_rate_type_id", "international_shipping_rates", ["rate_type_id"])

    op.create_table(
        "factories",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )

    op.create_table(
        "factory_cost_items",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("factory_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("factories.id"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("amount", sa.Numeric(18, 4), nullable=False),
        sa.Column(
            "charge_type",
            sa.Enum("ONCE", "PER_QUANTITY", name="chargetype"),
            nullable=False,
            server_default="ONCE",
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("ix_factory_cost_items_factory_id", "factory_cost_items", ["factory_id"])

    op.create_table(
        "factory_presets",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("slots", postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "fx_rates_daily",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("quote", sa.String(length=3), nullable=False),
        sa.Column("rate", sa.Numeric(18, 8), nullable=False),
        sa.Column("rate_date", sa.Date(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("currency", "quote", "rate_date", name="uq_fx_rates_daily"),
    )


def downgrade() -> None:
    op.drop_table("fx_rates_daily")
    op.drop_table("factory_presets")
    op.drop_index("ix_factory_cost_items_factory_id", table_name="factory_cost_items")
    op.drop_table("factory_cost_items")
    op.drop_table("factories")
    op.drop_index("ix_international_shipping_rates_rate_type_id", table_name="international_shipping_rates")
    op.drop_table("international_shipping_rates")
    op.drop_index("ix_shipping_rate_types_warehouse_id", table_name="shipping_rate_types")
    op.drop_index("ix_shipping_rate_types_company_id", table_name="shipping_rate_types")
    op.drop_table("shipping_rate_types")
    op.drop_index("ix_company_warehouses_company_id", table_name="company_warehouses")
    op.drop_table("company_warehouses")
    op.drop_table("shipping_companies")
    sa.Enum(name="chargetype").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="unittype").drop(op.get_bind(), checkfirst=True)
