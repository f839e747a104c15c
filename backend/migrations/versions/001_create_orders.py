"""
Alembic migration: Create orders and order_items tables.

Creates the order_status enum type, the orders table and the order_items
table holding per-item catalog snapshots. Item order within an order is
kept through the position column.

Revision ID: 001
Revises:
Create Date: 2024-01-01 00:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# Revision identifiers, used by Alembic
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ORDER_STATUS_VALUES = ('pending', 'processing', 'shipped', 'delivered', 'cancelled')


def upgrade() -> None:
    """
    Create order storage.

    Money columns are unscaled NUMERIC so stored amounts match the
    values the order total was computed from. Quantities must be positive and
    amounts non-negative.
    """
    order_status = postgresql.ENUM(*ORDER_STATUS_VALUES, name='order_status')
    order_status.create(op.get_bind(), checkfirst=True)

    op.create_table(
        'orders',
        sa.Column(
            'id',
            postgresql.UUID(as_uuid=True),
            primary_key=True,
            nullable=False,
            comment='Unique identifier',
        ),
        sa.Column(
            'user_id',
            sa.String(length=255),
            nullable=False,
            comment='User who placed the order (owned by the user service)',
        ),
        sa.Column(
            'status',
            postgresql.ENUM(*ORDER_STATUS_VALUES, name='order_status', create_type=False),
            nullable=False,
            server_default='pending',
            comment='Current order status',
        ),
        sa.Column(
            'total_amount',
            sa.Numeric(),
            nullable=False,
            comment='Order total computed at creation',
        ),
        sa.Column(
            'shipping_address',
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=True,
            comment='Shipping address (street, city, state, zipCode, country)',
        ),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text('now()'),
            comment='Record creation timestamp',
        ),
        sa.Column(
            'updated_at',
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text('now()'),
            comment='Record last update timestamp',
        ),
        sa.CheckConstraint(
            'total_amount >= 0',
            name='ck_orders_total_amount_non_negative',
        ),
        comment='Customer orders',
    )

    op.create_index('ix_orders_user_id', 'orders', ['user_id'])
    op.create_index('ix_orders_status', 'orders', ['status'])
    op.create_index('ix_orders_created_at', 'orders', ['created_at'])

    op.create_table(
        'order_items',
        sa.Column(
            'id',
            postgresql.UUID(as_uuid=True),
            primary_key=True,
            nullable=False,
            comment='Unique identifier',
        ),
        sa.Column(
            'order_id',
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey('orders.id', ondelete='CASCADE'),
            nullable=False,
            comment='Parent order identifier',
        ),
        sa.Column(
            'position',
            sa.Integer(),
            nullable=False,
            server_default='0',
            comment='Position of the item within the order',
        ),
        sa.Column(
            'product_id',
            sa.String(length=255),
            nullable=False,
            comment='Catalog product identifier',
        ),
        sa.Column(
            'product_name',
            sa.String(length=255),
            nullable=False,
            comment='Product name at time of order',
        ),
        sa.Column(
            'quantity',
            sa.Integer(),
            nullable=False,
            comment='Quantity ordered',
        ),
        sa.Column(
            'price',
            sa.Numeric(),
            nullable=False,
            comment='Unit price at time of order',
        ),
        sa.CheckConstraint(
            'quantity >= 1',
            name='ck_order_items_quantity_positive',
        ),
        sa.CheckConstraint(
            'price >= 0',
            name='ck_order_items_price_non_negative',
        ),
        comment='Items of an order with product snapshots',
    )

    op.create_index(
        'ix_order_items_order_position',
        'order_items',
        ['order_id', 'position'],
    )


def downgrade() -> None:
    """Drop order storage and the order_status enum type."""
    op.drop_index('ix_order_items_order_position', table_name='order_items')
    op.drop_table('order_items')

    op.drop_index('ix_orders_created_at', table_name='orders')
    op.drop_index('ix_orders_status', table_name='orders')
    op.drop_index('ix_orders_user_id', table_name='orders')
    op.drop_table('orders')

    postgresql.ENUM(name='order_status').drop(op.get_bind(), checkfirst=True)
