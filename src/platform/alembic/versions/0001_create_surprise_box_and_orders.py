"""create_surprise_box_and_orders

Revision ID: 0001
Revises:
Create Date: 2025-06-01

Schema:
- surprise_box: listed boxes with reservation fields and denormalized store/category names
- orders: one order per box, unique pickup code
- payment: payment record per order
- delivery: delivery record for delivery orders
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'surprise_box',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('store_id', sa.Integer(), nullable=False),
        sa.Column('category_id', sa.Integer(), nullable=False),
        sa.Column('box_template_id', sa.Integer(), nullable=True),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('original_price', sa.Integer(), nullable=False),
        sa.Column('discounted_price', sa.Integer(), nullable=False),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        sa.Column('pickup_start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('pickup_end_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('sale_start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('sale_end_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('reserved_by', sa.Integer(), nullable=True),
        sa.Column('reserved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reservation_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('business_name', sa.String(length=255), nullable=True),
        sa.Column('store_address', sa.String(length=500), nullable=True),
        sa.Column('store_city', sa.String(length=100), nullable=True),
        sa.Column('category_name', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint(
            "(status = 'reserved') = (reserved_by IS NOT NULL AND reservation_expires_at IS NOT NULL)",
            name='ck_surprise_box_reservation_fields',
        ),
        sa.CheckConstraint(
            'pickup_start_time < pickup_end_time', name='ck_surprise_box_pickup_window'
        ),
        sa.CheckConstraint('sale_start_time < sale_end_time', name='ck_surprise_box_sale_window'),
    )
    op.create_index(
        'idx_surprise_box_reserved_expiry', 'surprise_box', ['status', 'reservation_expires_at']
    )
    op.create_index('idx_surprise_box_store_status', 'surprise_box', ['store_id', 'status'])
    op.create_index('ix_surprise_box_category_id', 'surprise_box', ['category_id'])

    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.Column('surprise_box_id', sa.Integer(), nullable=False),
        sa.Column('store_id', sa.Integer(), nullable=False),
        sa.Column('pickup_code', sa.String(length=16), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('payment_type', sa.String(length=10), nullable=False),
        sa.Column('fulfillment_type', sa.String(length=10), nullable=False),
        sa.Column('order_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('pickuped_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancelled_by', sa.String(length=10), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('refund_amount', sa.Integer(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['surprise_box_id'], ['surprise_box.id']),
        sa.UniqueConstraint('surprise_box_id', name='uq_orders_surprise_box_id'),
        sa.UniqueConstraint('pickup_code', name='uq_orders_pickup_code'),
    )
    op.create_index('ix_orders_customer_id', 'orders', ['customer_id'])
    op.create_index('ix_orders_store_id', 'orders', ['store_id'])

    op.create_table(
        'payment',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('payment_method', sa.String(length=20), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('transaction_id', sa.String(length=255), nullable=True),
        sa.Column('payment_gateway', sa.String(length=50), nullable=True),
        sa.Column('payment_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('refund_amount', sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id']),
    )
    op.create_index('ix_payment_order_id', 'payment', ['order_id'])

    op.create_table(
        'delivery',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('delivery_address', sa.String(length=500), nullable=False),
        sa.Column('delivery_service', sa.String(length=100), nullable=True),
        sa.Column('status', sa.String(length=30), nullable=False),
        sa.Column('estimated_delivery_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('tracking_code', sa.String(length=100), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id']),
        sa.UniqueConstraint('order_id', name='uq_delivery_order_id'),
    )


def downgrade() -> None:
    op.drop_table('delivery')
    op.drop_index('ix_payment_order_id', table_name='payment')
    op.drop_table('payment')
    op.drop_index('ix_orders_store_id', table_name='orders')
    op.drop_index('ix_orders_customer_id', table_name='orders')
    op.drop_table('orders')
    op.drop_index('ix_surprise_box_category_id', table_name='surprise_box')
    op.drop_index('idx_surprise_box_store_status', table_name='surprise_box')
    op.drop_index('idx_surprise_box_reserved_expiry', table_name='surprise_box')
    op.drop_table('surprise_box')
