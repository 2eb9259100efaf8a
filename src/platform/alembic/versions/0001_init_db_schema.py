"""init_db_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Schema:
- event: counter projection (tickets_total / tickets_remaining / sold_out)
- orders: sale ledger; completed rows are the source of truth for sold tickets

Constraints keep the projection inside 0 <= tickets_remaining <= tickets_total
even when a writer bypasses the service.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create event and orders tables."""

    op.create_table(
        'event',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('tickets_total', sa.Integer(), nullable=False),
        sa.Column('tickets_remaining', sa.Integer(), nullable=False),
        sa.Column('sold_out', sa.Boolean(), nullable=False),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            'updated_at',
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.CheckConstraint('tickets_total >= 0', name='ck_event_tickets_total_non_negative'),
        sa.CheckConstraint(
            'tickets_remaining >= 0', name='ck_event_tickets_remaining_non_negative'
        ),
        sa.CheckConstraint(
            'tickets_remaining <= tickets_total', name='ck_event_tickets_remaining_le_total'
        ),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'orders',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('event_id', sa.Uuid(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('channel', sa.String(length=20), nullable=False),
        sa.Column('external_session_id', sa.String(length=255), nullable=True),
        sa.Column('customer_email', sa.String(length=255), nullable=True),
        sa.Column('customer_name', sa.String(length=255), nullable=True),
        sa.Column('amount_total', sa.Integer(), nullable=True),
        sa.Column('user_id', sa.String(length=64), nullable=True),
        sa.Column('processed_by', sa.String(length=64), nullable=True),
        sa.Column('processing_location', sa.String(length=255), nullable=True),
        sa.Column('payment_method', sa.String(length=32), nullable=True),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            'updated_at',
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.CheckConstraint('quantity > 0', name='ck_orders_quantity_positive'),
        sa.ForeignKeyConstraint(['event_id'], ['event.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('external_session_id'),
    )
    op.create_index(op.f('ix_orders_event_id'), 'orders', ['event_id'], unique=False)
    op.create_index(op.f('ix_orders_status'), 'orders', ['status'], unique=False)

    # Reconciliation sums completed quantities per event
    op.create_index(
        'ix_orders_event_id_status_completed',
        'orders',
        ['event_id'],
        unique=False,
        postgresql_where=sa.text("status = 'completed'"),
        sqlite_where=sa.text("status = 'completed'"),
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index('ix_orders_event_id_status_completed', table_name='orders')
    op.drop_index(op.f('ix_orders_status'), table_name='orders')
    op.drop_index(op.f('ix_orders_event_id'), table_name='orders')
    op.drop_table('orders')
    op.drop_table('event')
