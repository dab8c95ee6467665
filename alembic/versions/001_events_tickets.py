"""create events and tickets

Revision ID: 001_events_tickets
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_events_tickets'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'events',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_events_id', 'events', ['id'])
    op.create_index('ix_events_date', 'events', ['date'])

    op.create_table(
        'tickets',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column(
            'event_id',
            sa.Integer(),
            sa.ForeignKey('events.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('owner', sa.String(length=255), nullable=False),
        sa.Column('code', sa.String(length=255), nullable=False),
        sa.Column('used', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.UniqueConstraint('event_id', 'code', name='uq_ticket_event_code'),
    )
    op.create_index('ix_tickets_id', 'tickets', ['id'])
    op.create_index('idx_ticket_event_used', 'tickets', ['event_id', 'used'])


def downgrade() -> None:
    op.drop_index('idx_ticket_event_used', table_name='tickets')
    op.drop_index('ix_tickets_id', table_name='tickets')
    op.drop_table('tickets')
    op.drop_index('ix_events_date', table_name='events')
    op.drop_index('ix_events_id', table_name='events')
    op.drop_table('events')
