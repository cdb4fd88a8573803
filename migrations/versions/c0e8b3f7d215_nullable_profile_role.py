"""allow profiles without a role until role selection

Revision ID: c0e8b3f7d215
Revises: b57d2e40a1f8
Create Date: 2025-10-17 14:21:50.337012

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'c0e8b3f7d215'
down_revision: Union[str, None] = 'b57d2e40a1f8'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.drop_constraint('profiles_role_check', 'profiles', type_='check')
    op.alter_column('profiles', 'role', existing_type=sa.String(length=20), nullable=True, server_default=None)
    op.create_check_constraint(
        'profiles_role_check',
        'profiles',
        "role IS NULL OR role IN ('retailer', 'wholesaler', 'admin')",
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_constraint('profiles_role_check', 'profiles', type_='check')
    op.execute("UPDATE profiles SET role = 'retailer' WHERE role IS NULL")
    op.alter_column('profiles', 'role', existing_type=sa.String(length=20), nullable=False, server_default='retailer')
    op.create_check_constraint(
        'profiles_role_check',
        'profiles',
        "role IN ('retailer', 'wholesaler', 'admin')",
    )
