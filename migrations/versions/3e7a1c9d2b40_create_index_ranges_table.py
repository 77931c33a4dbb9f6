"""create index ranges table

Revision ID: 3e7a1c9d2b40
Revises:
Create Date: 2026-10-19 11:20:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3e7a1c9d2b40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'index_ranges',
        sa.Column('id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('index_name', sa.Text(), nullable=False),
        sa.Column('begin', sa.BigInteger(), nullable=True),
        sa.Column('end', sa.BigInteger(), nullable=True),
        sa.Column('calculated_at', sa.BigInteger(), nullable=True),
        sa.Column('took_ms', sa.Integer(), server_default='0', nullable=False),
        sa.Column('start', sa.BigInteger(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_index_ranges_index_name', 'index_ranges', ['index_name'], unique=False)
    op.create_index('ix_index_ranges_begin_end', 'index_ranges', ['begin', 'end'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_index_ranges_begin_end', table_name='index_ranges')
    op.drop_index('ix_index_ranges_index_name', table_name='index_ranges')
    op.drop_table('index_ranges')
