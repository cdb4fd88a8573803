"""orders wholesaler_read_at for the seller notification bell

Revision ID: d93a5c6e0b47
Revises: c0e8b3f7d215
Create Date: 2025-10-21 11:48:06.770925

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'd93a5c6e0b47'
down_revision: Union[str, None] = 'c0e8b3f7d215'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.add_column('orders', sa.Column('wholesaler_read_at', sa.TIMESTAMP(timezone=True), nullable=True))
    # Orders placed before the bell existed count as seen
    op.execute("UPDATE orders SET wholesaler_read_at = created_at")
    op.create_index(
        'idx_orders_wholesaler_unread',
        'orders',
        ['wholesaler_id'],
        unique=False,
        postgresql_where=sa.text('wholesaler_read_at IS NULL'),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('idx_orders_wholesaler_unread', table_name='orders')
    op.drop_column('orders', 'wholesaler_read_at')
