"""create events table

Revision ID: 3c9e1f2a7b10
Revises:
Create Date: 2026-10-18 09:12:41.208553

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c9e1f2a7b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'events',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('event', sa.String(length=64), nullable=False),
        sa.Column('url', sa.Text(), nullable=True),
        sa.Column('referrer', sa.Text(), nullable=True),
        sa.Column('user_agent', sa.String(length=512), nullable=True),
        sa.Column('ip', sa.String(length=128), nullable=True),
        sa.Column('received_at_ms', sa.BigInteger(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_events_event'), 'events', ['event'], unique=False)
    op.create_index(op.f('ix_events_received_at_ms'), 'events', ['received_at_ms'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_events_received_at_ms'), table_name='events')
    op.drop_index(op.f('ix_events_event'), table_name='events')
    op.drop_table('events')
