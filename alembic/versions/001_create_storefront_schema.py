"""Create storefront schema

Revision ID: 001_storefront
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID, JSONB

# revision identifiers
revision = '001_storefront'
down_revision = None
branch_labels = None
depends_on = None


def _id():
    return sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()'))


def _created_at():
    return sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False)


def _updated_at():
    return sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False)


def upgrade():
    """Create order, shipment, buyer and site configuration tables"""

    # ====================
    # ORDERS
    # ====================
    op.create_table(
        'orders',
        _id(),
        sa.Column('order_number', sa.String(30), unique=True, nullable=False),
        sa.Column('user_id', UUID(as_uuid=True), nullable=False),
        sa.Column('product_name', sa.String(500), nullable=False),
        sa.Column('product_image', sa.String(1000), nullable=True),
        sa.Column('product_url', sa.String(1000), nullable=True),
        sa.Column('source_url', sa.String(1000), nullable=True),
        sa.Column('product_1688_id', sa.String(50), nullable=True),
        sa.Column('variant_id', sa.String(100), nullable=True),
        sa.Column('variant_name', sa.String(300), nullable=True),
        sa.Column('quantity', sa.Integer, server_default='1', nullable=False),
        sa.Column('unit_price', sa.Numeric(12, 2), server_default='0', nullable=False),
        sa.Column('total_price', sa.Numeric(12, 2), server_default='0', nullable=False),
        sa.Column('shipping_charges', sa.Numeric(12, 2), nullable=True),
        sa.Column('commission', sa.Numeric(12, 2), nullable=True),
        sa.Column('domestic_courier_charge', sa.Numeric(12, 2), nullable=True),
        sa.Column('tracking_number', sa.String(100), nullable=True),
        sa.Column('invoice_name', sa.String(200), nullable=True),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('status', sa.String(20), server_default='pending', nullable=False),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint('quantity > 0', name='ck_order_quantity_positive'),
    )
    op.create_index('ix_orders_order_number', 'orders', ['order_number'])
    op.create_index('ix_orders_user_id', 'orders', ['user_id'])
    op.create_index('ix_orders_status', 'orders', ['status'])
    op.create_index('ix_orders_product_1688_id', 'orders', ['product_1688_id'])
    op.create_index('ix_order_status_created', 'orders', ['status', 'created_at'])
    op.create_index('ix_order_user_created', 'orders', ['user_id', 'created_at'])

    op.create_table(
        'order_items',
        _id(),
        sa.Column('order_id', UUID(as_uuid=True), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('position', sa.Integer, server_default='0', nullable=False),
        sa.Column('name', sa.String(500), nullable=False),
        sa.Column('quantity', sa.Integer, nullable=False),
        sa.Column('unit_price', sa.Numeric(12, 2), nullable=False),
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])

    # ====================
    # SHIPMENTS
    # ====================
    op.create_table(
        'shipments',
        _id(),
        sa.Column('order_id', UUID(as_uuid=True), sa.ForeignKey('orders.id', ondelete='SET NULL'), unique=True, nullable=True),
        sa.Column('user_id', UUID(as_uuid=True), nullable=False),
        sa.Column('status', sa.String(50), server_default='Ordered', nullable=False),
        sa.Column('tracking_number', sa.String(100), nullable=True),
        sa.Column('carrier', sa.String(100), nullable=True),
        sa.Column('external_tracking_url', sa.String(1000), nullable=True),
        sa.Column('stage_notes', sa.Text, nullable=True),
        sa.Column('estimated_delivery', sa.Date, nullable=True),
        _created_at(),
        _updated_at(),
    )
    op.create_index('ix_shipments_order_id', 'shipments', ['order_id'])
    op.create_index('ix_shipments_user_id', 'shipments', ['user_id'])
    op.create_index('ix_shipments_status', 'shipments', ['status'])
    op.create_index('ix_shipments_tracking_number', 'shipments', ['tracking_number'])

    # ====================
    # BUYERS
    # ====================
    op.create_table(
        'profiles',
        _id(),
        sa.Column('user_id', UUID(as_uuid=True), unique=True, nullable=False),
        sa.Column('full_name', sa.String(200), nullable=True),
        sa.Column('phone', sa.String(30), nullable=True),
        sa.Column('address', sa.Text, nullable=True),
        sa.Column('avatar_url', sa.String(1000), nullable=True),
        _created_at(),
        _updated_at(),
    )
    op.create_index('ix_profiles_user_id', 'profiles', ['user_id'])

    op.create_table(
        'user_roles',
        _id(),
        sa.Column('user_id', UUID(as_uuid=True), nullable=False),
        sa.Column('role', sa.String(20), server_default='user', nullable=False),
        sa.UniqueConstraint('user_id', 'role', name='uq_user_roles_user_role'),
    )
    op.create_index('ix_user_roles_user_id', 'user_roles', ['user_id'])

    op.create_table(
        'wallets',
        _id(),
        sa.Column('user_id', UUID(as_uuid=True), unique=True, nullable=False),
        sa.Column('balance', sa.Numeric(12, 2), server_default='0', nullable=False),
        _created_at(),
        _updated_at(),
    )
    op.create_index('ix_wallets_user_id', 'wallets', ['user_id'])

    op.create_table(
        'transactions',
        _id(),
        sa.Column('user_id', UUID(as_uuid=True), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('type', sa.String(30), nullable=False),
        sa.Column('status', sa.String(30), server_default='pending', nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('reference_id', sa.String(100), nullable=True),
        _created_at(),
    )
    op.create_index('ix_transactions_user_id', 'transactions', ['user_id'])

    op.create_table(
        'refunds',
        _id(),
        sa.Column('user_id', UUID(as_uuid=True), nullable=False),
        sa.Column('order_id', UUID(as_uuid=True), sa.ForeignKey('orders.id', ondelete='SET NULL'), nullable=True),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('reason', sa.Text, nullable=True),
        sa.Column('status', sa.String(30), server_default='pending', nullable=False),
        _created_at(),
        _updated_at(),
    )
    op.create_index('ix_refunds_user_id', 'refunds', ['user_id'])
    op.create_index('ix_refunds_order_id', 'refunds', ['order_id'])

    op.create_table(
        'wishlist',
        _id(),
        sa.Column('user_id', UUID(as_uuid=True), nullable=False),
        sa.Column('product_id', sa.String(50), nullable=False),
        sa.Column('product_name', sa.String(500), nullable=False),
        sa.Column('product_image', sa.String(1000), nullable=True),
        sa.Column('product_price', sa.Numeric(12, 2), nullable=True),
        sa.Column('product_url', sa.String(1000), nullable=True),
        _created_at(),
        sa.UniqueConstraint('user_id', 'product_id', name='uq_wishlist_user_product'),
    )
    op.create_index('ix_wishlist_user_id', 'wishlist', ['user_id'])

    op.create_table(
        'notifications',
        _id(),
        sa.Column('user_id', UUID(as_uuid=True), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('message', sa.Text, nullable=False),
        sa.Column('type', sa.String(30), server_default='info', nullable=False),
        sa.Column('is_read', sa.Boolean, server_default='false', nullable=False),
        _created_at(),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])

    # ====================
    # SITE CONFIGURATION & CACHE
    # ====================
    op.create_table(
        'app_settings',
        _id(),
        sa.Column('key', sa.String(100), unique=True, nullable=False),
        sa.Column('value', sa.Text, server_default='', nullable=False),
        sa.Column('updated_by', UUID(as_uuid=True), nullable=True),
        _updated_at(),
    )
    op.create_index('ix_app_settings_key', 'app_settings', ['key'])

    op.create_table(
        'search_cache',
        _id(),
        sa.Column('query_key', sa.String(1000), nullable=False),
        sa.Column('page', sa.Integer, server_default='1', nullable=False),
        sa.Column('items', JSONB, server_default='[]', nullable=False),
        sa.Column('total_results', sa.Integer, server_default='0', nullable=False),
        sa.Column('translated', sa.Boolean, server_default='false', nullable=False),
        _created_at(),
        _updated_at(),
        sa.UniqueConstraint('query_key', 'page', name='uq_search_cache_query_page'),
    )
    op.create_index('ix_search_cache_query_key', 'search_cache', ['query_key'])
    op.create_index('ix_search_cache_updated_at', 'search_cache', ['updated_at'])


def downgrade():
    """Drop all storefront tables"""
    for table in (
        'search_cache',
        'app_settings',
        'notifications',
        'wishlist',
        'refunds',
        'transactions',
        'wallets',
        'user_roles',
        'profiles',
        'shipments',
        'order_items',
        'orders',
    ):
        op.drop_table(table)
