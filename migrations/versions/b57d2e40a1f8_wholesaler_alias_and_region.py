"""wholesaler anonymous id, region and address detail

Revision ID: b57d2e40a1f8
Revises: 8a4f06c1d9e3
Create Date: 2025-10-14 09:03:27.904411

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'b57d2e40a1f8'
down_revision: Union[str, None] = '8a4f06c1d9e3'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.add_column('wholesalers', sa.Column('address_detail', sa.Text(), nullable=True))
    op.add_column('wholesalers', sa.Column('region', sa.String(length=50), nullable=True))
    op.add_column('wholesalers', sa.Column('anonymous_id', sa.String(length=50), nullable=True))
    op.create_unique_constraint('wholesalers_anonymous_code_key', 'wholesalers', ['anonymous_code'])
    op.create_unique_constraint('wholesalers_anonymous_id_key', 'wholesalers', ['anonymous_id'])
    op.create_index('idx_wholesalers_region', 'wholesalers', ['region'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('idx_wholesalers_region', table_name='wholesalers')
    op.drop_constraint('wholesalers_anonymous_id_key', 'wholesalers', type_='unique')
    op.drop_constraint('wholesalers_anonymous_code_key', 'wholesalers', type_='unique')
    op.drop_column('wholesalers', 'anonymous_id')
    op.drop_column('wholesalers', 'region')
    op.drop_column('wholesalers', 'address_detail')
