"""product catalogue names, dawn delivery flag and trigram search

Revision ID: e41b7f92c8a6
Revises: d93a5c6e0b47
Create Date: 2025-10-24 17:05:31.208114

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'e41b7f92c8a6'
down_revision: Union[str, None] = 'd93a5c6e0b47'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.add_column('products', sa.Column('original_name', sa.String(length=100), nullable=True))
    op.add_column('products', sa.Column('standardized_name', sa.String(length=100), nullable=True))
    op.add_column(
        'products',
        sa.Column('delivery_dawn_available', sa.Boolean(), nullable=False, server_default=sa.text('false')),
    )
    op.execute("UPDATE products SET original_name = name WHERE original_name IS NULL")
    op.execute(
        "UPDATE products SET delivery_dawn_available = true "
        "WHERE (delivery_options ->> 'dawn_delivery_available')::boolean IS TRUE"
    )

    # ILIKE '%term%' catalogue search
    op.execute('CREATE EXTENSION IF NOT EXISTS pg_trgm')
    op.execute('CREATE INDEX IF NOT EXISTS idx_products_name_trgm ON products USING gin (name gin_trgm_ops)')
    op.execute(
        'CREATE INDEX IF NOT EXISTS idx_products_standardized_name_trgm '
        'ON products USING gin (standardized_name gin_trgm_ops)'
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.execute('DROP INDEX IF EXISTS idx_products_standardized_name_trgm')
    op.execute('DROP INDEX IF EXISTS idx_products_name_trgm')
    op.drop_column('products', 'delivery_dawn_available')
    op.drop_column('products', 'standardized_name')
    op.drop_column('products', 'original_name')
