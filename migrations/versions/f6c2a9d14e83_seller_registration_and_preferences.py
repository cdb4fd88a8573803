"""seller registration fields and notification preferences

Revision ID: f6c2a9d14e83
Revises: e41b7f92c8a6
Create Date: 2025-10-30 13:37:19.482660

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = 'f6c2a9d14e83'
down_revision: Union[str, None] = 'e41b7f92c8a6'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.add_column('wholesalers', sa.Column('notification_preferences', postgresql.JSONB(astext_type=sa.Text()), nullable=True))
    op.add_column('wholesalers', sa.Column('seller_terms_agreed_at', sa.TIMESTAMP(timezone=True), nullable=True))
    op.add_column('wholesalers', sa.Column('toss_merchant_id', sa.String(length=100), nullable=True))
    op.add_column('wholesalers', sa.Column('contract_file_url', sa.Text(), nullable=True))
    op.add_column('wholesalers', sa.Column('contract_uploaded_at', sa.TIMESTAMP(timezone=True), nullable=True))
    op.add_column('wholesalers', sa.Column('seller_registered_at', sa.TIMESTAMP(timezone=True), nullable=True))


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_column('wholesalers', 'seller_registered_at')
    op.drop_column('wholesalers', 'contract_uploaded_at')
    op.drop_column('wholesalers', 'contract_file_url')
    op.drop_column('wholesalers', 'toss_merchant_id')
    op.drop_column('wholesalers', 'seller_terms_agreed_at')
    op.drop_column('wholesalers', 'notification_preferences')
