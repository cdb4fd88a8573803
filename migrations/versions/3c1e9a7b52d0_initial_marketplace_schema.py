"""initial marketplace schema

Revision ID: 3c1e9a7b52d0
Revises:
Create Date: 2025-10-02 10:12:44.118203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3c1e9a7b52d0'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _uuid_pk():
    return sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()'))


def _timestamps():
    return [
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.execute('CREATE EXTENSION IF NOT EXISTS pgcrypto')

    op.create_table(
        'profiles',
        _uuid_pk(),
        sa.Column('external_user_id', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('display_name', sa.String(), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='retailer'),
        *_timestamps(),
        sa.CheckConstraint("role IN ('retailer', 'wholesaler', 'admin')", name='profiles_role_check'),
    )
    op.create_index('ix_profiles_external_user_id', 'profiles', ['external_user_id'], unique=True)
    op.create_index('ix_profiles_email', 'profiles', ['email'], unique=False)

    op.create_table(
        'wholesalers',
        _uuid_pk(),
        sa.Column('profile_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('business_name', sa.String(length=100), nullable=False),
        sa.Column('business_number', sa.String(length=20), nullable=False),
        sa.Column('representative', sa.String(length=50), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=False),
        sa.Column('address', sa.Text(), nullable=False),
        sa.Column('bank_account', sa.String(length=100), nullable=True),
        sa.Column('anonymous_code', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('approved_at', sa.TIMESTAMP(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'rejected', 'suspended')",
            name='wholesalers_status_check',
        ),
    )
    op.create_index('idx_wholesalers_status', 'wholesalers', ['status'], unique=False)

    op.create_table(
        'retailers',
        _uuid_pk(),
        sa.Column('profile_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('business_name', sa.String(length=100), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=False),
        sa.Column('address', sa.Text(), nullable=False),
        sa.Column('address_detail', sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'products',
        _uuid_pk(),
        sa.Column('wholesaler_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('wholesalers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('category', sa.String(length=20), nullable=False),
        sa.Column('specification', sa.String(length=100), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Integer(), nullable=False),
        sa.Column('moq', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('stock_quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('delivery_options', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('image_url', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        *_timestamps(),
        sa.CheckConstraint('price > 0', name='products_price_check'),
        sa.CheckConstraint('moq >= 1', name='products_moq_check'),
        sa.CheckConstraint('stock_quantity >= 0', name='products_stock_check'),
    )
    op.create_index('idx_products_wholesaler_id', 'products', ['wholesaler_id'], unique=False)
    op.create_index('idx_products_category', 'products', ['category'], unique=False)
    op.create_index('idx_products_is_active_created_at', 'products', ['is_active', 'created_at'], unique=False)

    op.create_table(
        'product_variants',
        _uuid_pk(),
        sa.Column('product_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('price', sa.Integer(), nullable=False),
        sa.Column('stock_quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('price > 0', name='product_variants_price_check'),
    )
    op.create_index('idx_product_variants_product_id', 'product_variants', ['product_id'], unique=False)

    op.create_table(
        'cart_items',
        _uuid_pk(),
        sa.Column('retailer_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('retailers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False),
        sa.Column('variant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('product_variants.id', ondelete='CASCADE'), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Integer(), nullable=False),
        sa.Column('delivery_method', sa.String(length=20), nullable=False, server_default='courier'),
        *_timestamps(),
        sa.CheckConstraint('quantity > 0', name='cart_items_quantity_check'),
    )
    op.create_index('idx_cart_items_retailer_id', 'cart_items', ['retailer_id'], unique=False)

    op.create_table(
        'orders',
        _uuid_pk(),
        sa.Column('order_number', sa.String(length=32), nullable=False, unique=True),
        sa.Column('retailer_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('retailers.id'), nullable=False),
        sa.Column('wholesaler_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('wholesalers.id'), nullable=False),
        sa.Column('product_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('products.id'), nullable=False),
        sa.Column('variant_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('product_variants.id'), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Integer(), nullable=False),
        sa.Column('total_amount', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('delivery_method', sa.String(length=20), nullable=False, server_default='courier'),
        sa.Column('delivery_address', sa.Text(), nullable=True),
        sa.Column('delivery_request', sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('pending', 'confirmed', 'shipped', 'completed', 'cancelled')",
            name='orders_status_check',
        ),
        sa.CheckConstraint(
            "delivery_method IN ('courier', 'direct', 'dawn')",
            name='orders_delivery_method_check',
        ),
        sa.CheckConstraint('quantity > 0', name='orders_quantity_check'),
    )
    op.create_index('idx_orders_wholesaler_id_created_at', 'orders', ['wholesaler_id', 'created_at'], unique=False)
    op.create_index('idx_orders_retailer_id_created_at', 'orders', ['retailer_id', 'created_at'], unique=False)
    op.create_index('idx_orders_status', 'orders', ['status'], unique=False)

    op.create_table(
        'payments',
        _uuid_pk(),
        sa.Column('order_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('method', sa.String(length=20), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('paid_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
    )
    op.create_index('idx_payments_order_id', 'payments', ['order_id'], unique=False)

    op.create_table(
        'settlements',
        _uuid_pk(),
        sa.Column('order_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('wholesaler_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('wholesalers.id'), nullable=False),
        sa.Column('order_amount', sa.Integer(), nullable=False),
        sa.Column('platform_fee_rate', sa.Numeric(5, 4), nullable=False),
        sa.Column('platform_fee', sa.Integer(), nullable=False),
        sa.Column('settlement_amount', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('scheduled_payout_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('completed_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint("status IN ('pending', 'completed')", name='settlements_status_check'),
    )
    op.create_index('idx_settlements_wholesaler_id_created_at', 'settlements', ['wholesaler_id', 'created_at'], unique=False)
    op.create_index('idx_settlements_status', 'settlements', ['status'], unique=False)

    op.create_table(
        'inquiries',
        _uuid_pk(),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='open'),
        sa.Column('admin_reply', sa.Text(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('replied_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.CheckConstraint("status IN ('open', 'answered', 'closed')", name='inquiries_status_check'),
    )
    op.create_index('idx_inquiries_user_id_created_at', 'inquiries', ['user_id', 'created_at'], unique=False)
    op.create_index('idx_inquiries_status', 'inquiries', ['status'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('inquiries')
    op.drop_table('settlements')
    op.drop_table('payments')
    op.drop_table('orders')
    op.drop_table('cart_items')
    op.drop_table('product_variants')
    op.drop_table('products')
    op.drop_table('retailers')
    op.drop_table('wholesalers')
    op.drop_index('ix_profiles_email', table_name='profiles')
    op.drop_index('ix_profiles_external_user_id', table_name='profiles')
    op.drop_table('profiles')
