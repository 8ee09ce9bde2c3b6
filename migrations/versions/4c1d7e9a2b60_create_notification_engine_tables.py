"""create_notification_engine_tables

Revision ID: 4c1d7e9a2b60
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '4c1d7e9a2b60'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create notifications, notification_preferences and notification_escalations."""

    # --- notifications (system of record, rows never deleted) ---
    op.create_table('notifications',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('recipient_id', sa.UUID(), nullable=False),
        sa.Column('sender_id', sa.UUID(), nullable=True),
        sa.Column('category', sa.String(length=20), nullable=False),
        sa.Column('priority', sa.String(length=10), nullable=False,
                  server_default='normal'),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('entity_type', sa.String(length=50), nullable=True),
        sa.Column('entity_id', sa.String(length=100), nullable=True),
        sa.Column('metadata', postgresql.JSONB(), nullable=True,
                  server_default='{}'),
        sa.Column('delivery_channels', postgresql.JSONB(), nullable=False,
                  server_default='[]'),
        sa.Column('deferred_channels', postgresql.JSONB(), nullable=False,
                  server_default='[]'),
        sa.Column('deferred_until', sa.DateTime(), nullable=True),
        sa.Column('include_in_digest', sa.Boolean(), nullable=False,
                  server_default='false'),
        sa.Column('escalation_eligible', sa.Boolean(), nullable=False,
                  server_default='false'),
        sa.Column('created_at', sa.DateTime(), nullable=False,
                  server_default=sa.text("(NOW() AT TIME ZONE 'utc')")),
        sa.Column('read_at', sa.DateTime(), nullable=True),
        sa.Column('acknowledged_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint(
            "category IN ('schedule', 'availability', 'assignment', "
            "'system', 'compliance', 'emergency')",
            name='ck_notifications_category',
        ),
        sa.CheckConstraint(
            "priority IN ('low', 'normal', 'high', 'critical')",
            name='ck_notifications_priority',
        ),
        sa.CheckConstraint(
            'acknowledged_at IS NULL OR '
            '(read_at IS NOT NULL AND read_at <= acknowledged_at)',
            name='ck_notifications_ack_after_read',
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_notifications_recipient_created',
                    'notifications', ['recipient_id', 'created_at'])
    op.create_index('idx_notifications_entity',
                    'notifications', ['entity_type', 'entity_id'])
    op.create_index('idx_notifications_recipient_unread',
                    'notifications', ['recipient_id'],
                    postgresql_where=sa.text('read_at IS NULL'))
    op.create_index('idx_notifications_escalation_candidates',
                    'notifications', ['priority', 'created_at'],
                    postgresql_where=sa.text(
                        'acknowledged_at IS NULL AND escalation_eligible'))

    # --- notification_preferences (one row per recipient) ---
    op.create_table('notification_preferences',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('recipient_id', sa.UUID(), nullable=False),
        sa.Column('channels', postgresql.JSONB(), nullable=False,
                  server_default='{}'),
        sa.Column('notification_frequency', sa.String(length=10), nullable=False,
                  server_default='immediate'),
        sa.Column('email_digest_enabled', sa.Boolean(), nullable=False,
                  server_default='true'),
        sa.Column('email_digest_frequency', sa.String(length=10), nullable=False,
                  server_default='daily'),
        sa.Column('minimum_priority', sa.String(length=10), nullable=False,
                  server_default='low'),
        sa.Column('quiet_hours_start', sa.String(length=5), nullable=True),
        sa.Column('quiet_hours_end', sa.String(length=5), nullable=True),
        sa.Column('weekend_notifications', sa.Boolean(), nullable=False,
                  server_default='true'),
        sa.Column('timezone', sa.String(length=64), nullable=False,
                  server_default='UTC'),
        sa.Column('created_at', sa.DateTime(), nullable=False,
                  server_default=sa.text("(NOW() AT TIME ZONE 'utc')")),
        sa.Column('updated_at', sa.DateTime(), nullable=False,
                  server_default=sa.text("(NOW() AT TIME ZONE 'utc')")),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('recipient_id'),
    )
    op.create_index('idx_notification_preferences_digest',
                    'notification_preferences',
                    ['email_digest_frequency'],
                    postgresql_where=sa.text('email_digest_enabled'))

    # --- notification_escalations (strictly increasing levels per notification) ---
    op.create_table('notification_escalations',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('original_notification_id', sa.UUID(), nullable=False),
        sa.Column('recipient_id', sa.UUID(), nullable=False),
        sa.Column('escalation_level', sa.Integer(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('escalated_to', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False,
                  server_default=sa.text("(NOW() AT TIME ZONE 'utc')")),
        sa.Column('resolved_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['original_notification_id'],
                                ['notifications.id']),
        sa.CheckConstraint('escalation_level BETWEEN 1 AND 5',
                           name='ck_escalations_level_range'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('original_notification_id', 'escalation_level',
                            name='uq_escalations_notification_level'),
    )
    op.create_index('ix_notification_escalations_original_notification_id',
                    'notification_escalations', ['original_notification_id'])


def downgrade() -> None:
    """Drop the notification engine tables."""
    op.drop_index('ix_notification_escalations_original_notification_id',
                  table_name='notification_escalations')
    op.drop_table('notification_escalations')
    op.drop_index('idx_notification_preferences_digest',
                  table_name='notification_preferences')
    op.drop_table('notification_preferences')
    op.drop_index('idx_notifications_escalation_candidates',
                  table_name='notifications')
    op.drop_index('idx_notifications_recipient_unread', table_name='notifications')
    op.drop_index('idx_notifications_entity', table_name='notifications')
    op.drop_index('idx_notifications_recipient_created', table_name='notifications')
    op.drop_table('notifications')
