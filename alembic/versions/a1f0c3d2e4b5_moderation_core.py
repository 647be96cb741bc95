"""moderation core tables

Revision ID: a1f0c3d2e4b5
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import mysql


# revision identifiers, used by Alembic.
revision: str = 'a1f0c3d2e4b5'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


TARGET_KINDS = ('user', 'post', 'comment', 'message', 'conversation')
REASONS = (
    'spam',
    'harassment',
    'hate_speech',
    'violence',
    'sexual_content',
    'misinformation',
    'copyright',
    'privacy',
    'impersonation',
    'other',
)
ACTIONS = ('none', 'warning', 'content_removal', 'temporary_ban', 'permanent_ban')


def _ts() -> sa.types.TypeEngine:
    return sa.DateTime(timezone=True).with_variant(mysql.DATETIME(fsp=6), 'mysql')


def _timestamps(updated: bool = True) -> list[sa.Column]:
    columns = [sa.Column('created_at', _ts(), nullable=False)]
    if updated:
        columns.append(sa.Column('updated_at', _ts(), nullable=False))
    return columns


def _removable() -> list[sa.Column]:
    return [
        sa.Column('is_removed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('removed_at', _ts(), nullable=True),
        sa.Column('removed_by', sa.String(length=255), nullable=True),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=255), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('username', sa.String(length=255), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('role', sa.Enum('user', 'moderator', 'admin', name='user_role'), nullable=False),
        sa.Column('is_banned', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('banned_at', _ts(), nullable=True),
        sa.Column('banned_until', _ts(), nullable=True),
        sa.Column('banned_by', sa.String(length=255), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_username', 'users', ['username'])

    op.create_table(
        'refresh_tokens',
        sa.Column('id', sa.String(length=255), primary_key=True),
        sa.Column('token', sa.String(length=512), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('expires_at', _ts(), nullable=False),
        *_timestamps(updated=False),
    )
    op.create_index('ix_refresh_tokens_token', 'refresh_tokens', ['token'], unique=True)
    op.create_index('ix_refresh_tokens_user_id', 'refresh_tokens', ['user_id'])

    op.create_table(
        'posts',
        sa.Column('id', sa.String(length=255), primary_key=True),
        sa.Column('author_id', sa.String(length=255), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        *_removable(),
        *_timestamps(),
    )
    op.create_index('ix_posts_author_id', 'posts', ['author_id'])

    op.create_table(
        'comments',
        sa.Column('id', sa.String(length=255), primary_key=True),
        sa.Column('author_id', sa.String(length=255), nullable=False),
        sa.Column('post_id', sa.String(length=255), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        *_removable(),
        *_timestamps(),
    )
    op.create_index('ix_comments_author_id', 'comments', ['author_id'])
    op.create_index('ix_comments_post_id', 'comments', ['post_id'])

    op.create_table(
        'conversations',
        sa.Column('id', sa.String(length=255), primary_key=True),
        sa.Column('title', sa.String(length=255), nullable=True),
        sa.Column('type', sa.String(length=64), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'messages',
        sa.Column('id', sa.String(length=255), primary_key=True),
        sa.Column('conversation_id', sa.String(length=255), nullable=False),
        sa.Column('sender_id', sa.String(length=255), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_messages_conversation_id', 'messages', ['conversation_id'])
    op.create_index('ix_messages_sender_id', 'messages', ['sender_id'])

    op.create_table(
        'reports',
        sa.Column('id', sa.String(length=255), primary_key=True),
        sa.Column('type', sa.Enum(*TARGET_KINDS, name='report_target_kind'), nullable=False),
        sa.Column('target_id', sa.String(length=255), nullable=False),
        sa.Column('reason', sa.Enum(*REASONS, name='report_reason'), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('evidence', sa.JSON(), nullable=False),
        sa.Column('priority', sa.Enum('low', 'medium', 'high', name='report_priority'), nullable=False),
        sa.Column(
            'status',
            sa.Enum('pending', 'investigating', 'resolved', 'dismissed', name='report_status'),
            nullable=False,
        ),
        sa.Column('reporter_id', sa.String(length=255), nullable=False),
        sa.Column('moderator_id', sa.String(length=255), nullable=True),
        sa.Column('moderator_notes', sa.Text(), nullable=True),
        sa.Column('action', sa.Enum(*ACTIONS, name='report_action'), nullable=True),
        sa.Column('action_taken_at', _ts(), nullable=True),
        sa.Column('action_expires_at', _ts(), nullable=True),
        sa.Column('target_data', sa.JSON(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('active_key', sa.String(length=255), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_reports_target_id', 'reports', ['target_id'])
    op.create_index('ix_reports_reporter_id', 'reports', ['reporter_id'])
    op.create_index('ix_reports_moderator_id', 'reports', ['moderator_id'])
    op.create_index('ix_reports_active_key', 'reports', ['active_key'], unique=True)

    op.create_table(
        'moderation_actions',
        sa.Column('id', sa.String(length=255), primary_key=True),
        sa.Column('type', sa.Enum(*ACTIONS, name='moderation_action_type'), nullable=False),
        sa.Column('target_type', sa.Enum(*TARGET_KINDS, name='moderation_target_kind'), nullable=False),
        sa.Column('target_id', sa.String(length=255), nullable=False),
        sa.Column('moderator_id', sa.String(length=255), nullable=False),
        sa.Column('reason', sa.String(length=255), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('expires_at', _ts(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(updated=False),
    )
    op.create_index('ix_moderation_actions_target_id', 'moderation_actions', ['target_id'])
    op.create_index('ix_moderation_actions_moderator_id', 'moderation_actions', ['moderator_id'])
    op.create_index('ix_moderation_actions_expires_at', 'moderation_actions', ['expires_at'])
    op.create_index('ix_moderation_actions_is_active', 'moderation_actions', ['is_active'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.String(length=255), primary_key=True),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column(
            'type',
            sa.Enum('moderation_report', 'report_update', name='notification_type'),
            nullable=False,
        ),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('message', sa.String(length=1024), nullable=False),
        sa.Column('data', sa.JSON(), nullable=False),
        sa.Column('read', sa.Boolean(), nullable=False),
        sa.Column('delivered_at', _ts(), nullable=True),
        *_timestamps(updated=False),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('notifications')
    op.drop_table('moderation_actions')
    op.drop_table('reports')
    op.drop_table('messages')
    op.drop_table('conversations')
    op.drop_table('comments')
    op.drop_table('posts')
    op.drop_table('refresh_tokens')
    op.drop_table('users')
