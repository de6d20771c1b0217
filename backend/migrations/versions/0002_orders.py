"""Catalogue and order tables

Revision ID: 0002_orders
Revises: 0001_initial
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa

revision = "0002_orders"
down_revision = "0001_initial"
branch_labels = None
depends_on = None


def _catalogue_table(name: str, *extra: sa.Column) -> None:
    op.create_table(
        name,
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        *extra,
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
    )


def upgrade() -> None:
    op.create_table(
        "couriers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(32), nullable=True),
    )
    _catalogue_table("products")
    _catalogue_table("hampers")
    _catalogue_table("consignment_products", sa.Column("consignor", sa.String(255), nullable=True))

    # -- orders ---------------------------------------------------------
    op.create_table(
        "orders",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "courier_id",
            sa.Integer(),
            sa.ForeignKey("couriers.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("invoice_number", sa.String(64), nullable=False, unique=True),
        sa.Column("status", sa.String(32), nullable=False, server_default="pending"),
        sa.Column("delivery_method", sa.String(32), nullable=False, server_default="pickup"),
        sa.Column("shipping_cost", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("total", sa.Numeric(12, 2), nullable=False),
        sa.Column(
            "ordered_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_orders_user_id", "orders", ["user_id"])

    # -- order_details --------------------------------------------------
    op.create_table(
        "order_details",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "order_id",
            sa.Integer(),
            sa.ForeignKey("orders.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id"), nullable=True),
        sa.Column("hamper_id", sa.Integer(), sa.ForeignKey("hampers.id"), nullable=True),
        sa.Column(
            "consignment_product_id",
            sa.Integer(),
            sa.ForeignKey("consignment_products.id"),
            nullable=True,
        ),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("subtotal", sa.Numeric(12, 2), nullable=False),
    )
    op.create_index("ix_order_details_order_id", "order_details", ["order_id"])


def downgrade() -> None:
    op.drop_index("ix_order_details_order_id", table_name="order_details")
    op.drop_table("order_details")
    op.drop_index("ix_orders_user_id", table_name="orders")
    op.drop_table("orders")
    op.drop_table("consignment_products")
    op.drop_table("hampers")
    op.drop_table("products")
    op.drop_table("couriers")
