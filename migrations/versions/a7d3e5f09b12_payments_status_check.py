"""payments status check constraint

Revision ID: a7d3e5f09b12
Revises: f6c2a9d14e83
Create Date: 2025-11-21 10:12:44.203517

"""
from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = 'a7d3e5f09b12'
down_revision: Union[str, None] = 'f6c2a9d14e83'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_check_constraint(
        'payments_status_check',
        'payments',
        "status IN ('pending', 'paid', 'failed', 'cancelled', 'refunded')",
    )
    op.execute(
        "COMMENT ON COLUMN payments.status IS "
        "'pending(대기), paid(완료), failed(실패), cancelled(취소), refunded(환불)'"
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.execute("COMMENT ON COLUMN payments.status IS NULL")
    op.drop_constraint('payments_status_check', 'payments', type_='check')
