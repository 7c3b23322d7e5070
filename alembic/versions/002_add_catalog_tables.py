"""Add trending and category product shelves

Revision ID: 002_catalog
Revises: 001_storefront
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID, JSONB

# revision identifiers
revision = '002_catalog'
down_revision = '001_storefront'
branch_labels = None
depends_on = None


def _id():
    return sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()'))


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
    ]


def upgrade():
    """Create trending_products and category_products"""
    op.create_table(
        'trending_products',
        _id(),
        sa.Column('product_id', sa.String(50), nullable=False),
        sa.Column('title', sa.String(1000), nullable=False),
        sa.Column('image_url', sa.String(1000), nullable=False),
        sa.Column('price', sa.Numeric(12, 2), server_default='0', nullable=False),
        sa.Column('old_price', sa.Numeric(12, 2), nullable=True),
        sa.Column('sold', sa.Integer, nullable=True),
        sa.Column('position', sa.Integer, server_default='0', nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'category_products',
        _id(),
        sa.Column('category_query', sa.String(200), nullable=False),
        sa.Column('product_id', sa.String(50), nullable=False),
        sa.Column('title', sa.String(1000), nullable=False),
        sa.Column('image_url', sa.String(1000), server_default='', nullable=False),
        sa.Column('price', sa.Numeric(12, 2), server_default='0', nullable=False),
        sa.Column('sales', sa.Integer, nullable=True),
        sa.Column('detail_url', sa.String(1000), nullable=True),
        sa.Column('location', sa.String(200), nullable=True),
        sa.Column('vendor_name', sa.String(300), nullable=True),
        sa.Column('stock', sa.Integer, nullable=True),
        sa.Column('weight', sa.Numeric(10, 3), nullable=True),
        sa.Column('extra_images', JSONB, server_default='[]', nullable=False),
        sa.Column('position', sa.Integer, server_default='0', nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_category_products_category_query', 'category_products', ['category_query'])


def downgrade():
    """Drop the catalog shelves"""
    op.drop_index('ix_category_products_category_query', table_name='category_products')
    op.drop_table('category_products')
    op.drop_table('trending_products')
