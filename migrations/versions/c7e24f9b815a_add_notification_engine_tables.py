"""add_notification_engine_tables

Revision ID: c7e24f9b815a
Revises: 4b1d9e7a20c3
Create Date: 2026-10-12 09:30:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = 'c7e24f9b815a'
down_revision: Union[str, Sequence[str], None] = '4b1d9e7a20c3'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create preference, notification, email log and activity event tables."""

    # --- notification_preferences (one row per tenant user) ---
    op.create_table('notification_preferences',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('tenant_id', sa.String(length=64), nullable=False),
        sa.Column('user_email', sa.String(length=255), nullable=False),
        sa.Column('in_app_enabled', sa.Boolean(), nullable=True,
                  server_default='true'),
        sa.Column('email_enabled', sa.Boolean(), nullable=True,
                  server_default='true'),
        sa.Column('critical_only', sa.Boolean(), nullable=True,
                  server_default='false'),
        # Category switches: NULL means "not set", which counts as enabled
        sa.Column('task_assigned', sa.Boolean(), nullable=True),
        sa.Column('task_completed', sa.Boolean(), nullable=True),
        sa.Column('comment_added', sa.Boolean(), nullable=True),
        sa.Column('mention', sa.Boolean(), nullable=True),
        sa.Column('project_updated', sa.Boolean(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tenant_id', 'user_email'),
    )

    # --- notifications (in-app feed) ---
    op.create_table('notifications',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('tenant_id', sa.String(length=64), nullable=False),
        sa.Column('recipient_email', sa.String(length=255), nullable=False),
        sa.Column('type', sa.String(length=50), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('entity_type', sa.String(length=50), nullable=False),
        sa.Column('entity_id', sa.String(length=64), nullable=False),
        sa.Column('project_id', sa.String(length=64), nullable=True),
        sa.Column('sender_name', sa.String(length=200), nullable=False,
                  server_default='System'),
        sa.Column('read', sa.Boolean(), nullable=False,
                  server_default='false'),
        sa.Column('created_at', sa.DateTime(), nullable=False,
                  server_default=sa.text('NOW()')),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_notifications_recipient_created', 'notifications',
                    ['tenant_id', 'recipient_email', 'created_at'])

    # --- email_notification_logs (email audit trail) ---
    op.create_table('email_notification_logs',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('tenant_id', sa.String(length=64), nullable=False),
        sa.Column('event_id', sa.UUID(), nullable=False),
        sa.Column('recipient_email', sa.String(length=255), nullable=False),
        sa.Column('subject', sa.String(length=500), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False,
                  server_default='pending'),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False,
                  server_default=sa.text('NOW()')),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint("status IN ('pending', 'sent', 'failed')",
                           name='ck_email_notification_logs_status'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_email_notification_logs_event_id'),
                    'email_notification_logs', ['event_id'])

    # --- activity_events (emitted business events) ---
    op.create_table('activity_events',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('tenant_id', sa.String(length=64), nullable=False),
        sa.Column('event_type', sa.String(length=50), nullable=False),
        sa.Column('entity_type', sa.String(length=50), nullable=False),
        sa.Column('entity_id', sa.String(length=64), nullable=False),
        sa.Column('entity_name', sa.String(length=500), nullable=True),
        sa.Column('actor_email', sa.String(length=255), nullable=True),
        sa.Column('actor_name', sa.String(length=200), nullable=True),
        sa.Column('metadata', postgresql.JSONB(), nullable=True,
                  server_default='{}'),
        sa.Column('notification_channels', postgresql.JSONB(), nullable=True,
                  server_default='["IN_APP"]'),
        sa.Column('processed', sa.Boolean(), nullable=False,
                  server_default='false'),
        sa.Column('processed_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False,
                  server_default=sa.text('NOW()')),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_activity_events_tenant_id'),
                    'activity_events', ['tenant_id'])
    op.create_index('idx_activity_events_unprocessed',
                    'activity_events', ['created_at'],
                    postgresql_where=sa.text('processed = false'))


def downgrade() -> None:
    """Drop notification engine tables."""
    op.drop_index('idx_activity_events_unprocessed',
                  table_name='activity_events')
    op.drop_index(op.f('ix_activity_events_tenant_id'),
                  table_name='activity_events')
    op.drop_table('activity_events')
    op.drop_index(op.f('ix_email_notification_logs_event_id'),
                  table_name='email_notification_logs')
    op.drop_table('email_notification_logs')
    op.drop_index('ix_notifications_recipient_created',
                  table_name='notifications')
    op.drop_table('notifications')
    op.drop_table('notification_preferences')
