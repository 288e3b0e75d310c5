"""create_dispatch_tables

Revision ID: 20261018_dispatch
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = '20261018_dispatch'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def table_exists(table_name):
    """Check if a table exists in the database"""
    bind = op.get_bind()
    inspector = inspect(bind)
    return table_name in inspector.get_table_names()


def index_exists(table_name, index_name):
    """Check if an index exists on a table"""
    bind = op.get_bind()
    inspector = inspect(bind)
    indexes = inspector.get_indexes(table_name)
    return any(idx['name'] == index_name for idx in indexes)


def upgrade():
    # 1. Customers
    if not table_exists('customers'):
        op.create_table(
            'customers',
            sa.Column('id', sa.String(), primary_key=True),
            sa.Column('name', sa.String(), nullable=False),
            sa.Column('address', sa.String(), nullable=True),
            sa.Column('phone', sa.String(), nullable=True),
            sa.Column('email', sa.String(), nullable=True),
            sa.Column('customer_type', sa.String(), nullable=False, server_default='retail'),
            sa.Column('notes', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        )

    if table_exists('customers'):
        if not index_exists('customers', 'idx_customers_name'):
            op.create_index('idx_customers_name', 'customers', ['name'])

    # 2. Recurring orders
    if not table_exists('recurring_orders'):
        op.create_table(
            'recurring_orders',
            sa.Column('id', sa.String(), primary_key=True),
            sa.Column('customer_id', sa.String(), sa.ForeignKey('customers.id', ondelete='SET NULL'), nullable=True),
            sa.Column('items', sa.Text(), nullable=False, server_default=''),
            sa.Column('frequency', sa.String(), nullable=True, server_default='weekly'),
            sa.Column('preferred_day', sa.String(), nullable=True),
            sa.Column('active_status', sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
        )

    if table_exists('recurring_orders'):
        if not index_exists('recurring_orders', 'idx_recurring_orders_day_active'):
            op.create_index('idx_recurring_orders_day_active', 'recurring_orders', ['preferred_day', 'active_status'])
        if not index_exists('recurring_orders', 'idx_recurring_orders_customer'):
            op.create_index('idx_recurring_orders_customer', 'recurring_orders', ['customer_id'])

    # 3. Dispatch schedules (one per date)
    if not table_exists('dispatch_schedules'):
        op.create_table(
            'dispatch_schedules',
            sa.Column('id', sa.String(), primary_key=True),
            sa.Column('schedule_number', sa.String(), nullable=False),
            sa.Column('schedule_date', sa.Date(), nullable=False),
            sa.Column('status', sa.String(), nullable=False, server_default='draft'),
            sa.Column('notes', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
            sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
            sa.UniqueConstraint('schedule_date', name='uq_dispatch_schedules_date'),
        )

    # 4. Delivery stops
    if not table_exists('delivery_stops'):
        op.create_table(
            'delivery_stops',
            sa.Column('id', sa.String(), primary_key=True),
            sa.Column('master_schedule_id', sa.String(), sa.ForeignKey('dispatch_schedules.id', ondelete='CASCADE'), nullable=False),
            sa.Column('customer_id', sa.String(), sa.ForeignKey('customers.id', ondelete='SET NULL'), nullable=True),
            sa.Column('customer_name', sa.String(), nullable=False),
            sa.Column('customer_address', sa.String(), nullable=False, server_default=''),
            sa.Column('customer_phone', sa.String(), nullable=False, server_default=''),
            sa.Column('items', sa.Text(), nullable=False, server_default=''),
            sa.Column('status', sa.String(), nullable=False, server_default='pending'),
            sa.Column('is_recurring', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('recurring_order_id', sa.String(), sa.ForeignKey('recurring_orders.id', ondelete='SET NULL'), nullable=True),
            sa.Column('stop_number', sa.Integer(), nullable=True),
            sa.Column('driver_name', sa.String(), nullable=True),
            sa.Column('notes', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
            sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
            sa.UniqueConstraint('master_schedule_id', 'recurring_order_id', name='uq_delivery_stops_schedule_recurring'),
        )

    if table_exists('delivery_stops'):
        if not index_exists('delivery_stops', 'idx_delivery_stops_schedule'):
            op.create_index('idx_delivery_stops_schedule', 'delivery_stops', ['master_schedule_id'])
        if not index_exists('delivery_stops', 'idx_delivery_stops_customer'):
            op.create_index('idx_delivery_stops_customer', 'delivery_stops', ['customer_id'])


def downgrade():
    if table_exists('delivery_stops'):
        op.drop_table('delivery_stops')
    if table_exists('dispatch_schedules'):
        op.drop_table('dispatch_schedules')
    if table_exists('recurring_orders'):
        op.drop_table('recurring_orders')
    if table_exists('customers'):
        op.drop_table('customers')
