"""Baseline: actors, relationships, inbox and notifications.

Revision ID: 0001_actor_engine
Revises:
Create Date: 2026-10-19

Creates:
- humans, organizations, organization_managers (owner registries)
- actors
- follow_edges, follow_requests, block_edges
- conversations, conversation_members, inbox_entries
- notifications
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '0001_actor_engine'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _uuid_pk() -> sa.Column:
    return sa.Column(
        'id',
        postgresql.UUID(as_uuid=True),
        server_default=sa.text('gen_random_uuid()'),
        nullable=False,
    )


def _created_at(name: str = 'created_at') -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False)


def upgrade() -> None:
    op.execute('CREATE EXTENSION IF NOT EXISTS pgcrypto')  # For gen_random_uuid()

    # ==========================================================================
    # Owner registries
    # ==========================================================================
    op.create_table(
        'humans',
        _uuid_pk(),
        sa.Column('username', sa.String(50), nullable=False),
        sa.Column('display_name', sa.String(255), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('TRUE'), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username', name='uq_humans_username'),
    )

    op.create_table(
        'organizations',
        _uuid_pk(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(100), nullable=False),
        sa.Column('owner_human_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('TRUE'), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(['owner_human_id'], ['humans.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('slug', name='uq_organizations_slug'),
    )

    op.create_table(
        'organization_managers',
        _uuid_pk(),
        sa.Column('organization_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('human_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('TRUE'), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['human_id'], ['humans.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('organization_id', 'human_id', name='uq_org_manager'),
    )
    op.create_index(
        'idx_org_manager_org_active', 'organization_managers', ['organization_id', 'is_active']
    )

    # ==========================================================================
    # actors
    # ==========================================================================
    op.create_table(
        'actors',
        _uuid_pk(),
        sa.Column('kind', sa.String(20), nullable=False),
        sa.Column('owner_ref', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('is_sandboxed', sa.Boolean(), server_default=sa.text('FALSE'), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('TRUE'), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('kind', 'owner_ref', name='uq_actor_owner'),
    )

    # ==========================================================================
    # Relationships
    # ==========================================================================
    op.create_table(
        'follow_edges',
        _uuid_pk(),
        sa.Column('follower_actor_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('followed_actor_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('TRUE'), nullable=False),
        _created_at(),
        _created_at('updated_at'),
        sa.ForeignKeyConstraint(['follower_actor_id'], ['actors.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['followed_actor_id'], ['actors.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('follower_actor_id', 'followed_actor_id', name='uq_follow_edge_pair'),
        sa.CheckConstraint('follower_actor_id <> followed_actor_id', name='ck_follow_edge_not_self'),
    )
    op.create_index(
        'idx_follow_edge_followed_active', 'follow_edges', ['followed_actor_id', 'is_active']
    )

    op.create_table(
        'follow_requests',
        _uuid_pk(),
        sa.Column('requester_actor_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('target_actor_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('status', sa.String(20), server_default=sa.text("'pending'"), nullable=False),
        _created_at(),
        _created_at('updated_at'),
        sa.ForeignKeyConstraint(['requester_actor_id'], ['actors.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['target_actor_id'], ['actors.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('requester_actor_id', 'target_actor_id', name='uq_follow_request_pair'),
        sa.CheckConstraint('requester_actor_id <> target_actor_id', name='ck_follow_request_not_self'),
    )
    op.create_index(
        'idx_follow_request_target_status',
        'follow_requests',
        ['target_actor_id', 'status', 'created_at'],
    )

    op.create_table(
        'block_edges',
        _uuid_pk(),
        sa.Column('blocker_actor_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('blocked_actor_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(['blocker_actor_id'], ['actors.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['blocked_actor_id'], ['actors.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('blocker_actor_id', 'blocked_actor_id', name='uq_block_edge_pair'),
        sa.CheckConstraint('blocker_actor_id <> blocked_actor_id', name='ck_block_edge_not_self'),
    )
    op.create_index('idx_block_edge_blocked', 'block_edges', ['blocked_actor_id'])

    # ==========================================================================
    # Conversations and inbox
    # ==========================================================================
    op.create_table(
        'conversations',
        _uuid_pk(),
        sa.Column('is_group', sa.Boolean(), server_default=sa.text('FALSE'), nullable=False),
        sa.Column('pair_key', sa.String(100), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('pair_key', name='uq_conversations_pair_key'),
    )

    op.create_table(
        'conversation_members',
        _uuid_pk(),
        sa.Column('conversation_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('actor_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('TRUE'), nullable=False),
        _created_at('joined_at'),
        sa.ForeignKeyConstraint(['conversation_id'], ['conversations.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['actor_id'], ['actors.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('conversation_id', 'actor_id', name='uq_conversation_member'),
    )
    op.create_index(
        'idx_conversation_member_actor', 'conversation_members', ['actor_id', 'is_active']
    )

    op.create_table(
        'inbox_entries',
        _uuid_pk(),
        sa.Column('conversation_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('actor_id', postgresql.UUID(as_uuid=True), nullable=False),

        # Visibility flags
        sa.Column('archived', sa.Boolean(), server_default=sa.text('FALSE'), nullable=False),
        sa.Column('archived_until_new', sa.Boolean(), server_default=sa.text('FALSE'), nullable=False),
        sa.Column('pinned', sa.Boolean(), server_default=sa.text('FALSE'), nullable=False),
        sa.Column('muted', sa.Boolean(), server_default=sa.text('FALSE'), nullable=False),
        sa.Column('history_cutoff_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('folder', sa.String(20), server_default=sa.text("'inbox'"), nullable=False),

        # Read model
        sa.Column('last_message_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('last_message_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_read_message_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('last_read_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('unread_count', sa.Integer(), server_default=sa.text('0'), nullable=False),

        _created_at(),
        _created_at('updated_at'),
        sa.ForeignKeyConstraint(['conversation_id'], ['conversations.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['actor_id'], ['actors.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('conversation_id', 'actor_id', name='uq_inbox_entry'),
        sa.CheckConstraint('unread_count >= 0', name='ck_inbox_entry_unread_non_negative'),
    )
    op.create_index(
        'idx_inbox_entry_actor_last_message', 'inbox_entries', ['actor_id', 'last_message_at']
    )

    # ==========================================================================
    # notifications
    # ==========================================================================
    op.create_table(
        'notifications',
        _uuid_pk(),
        sa.Column('recipient_actor_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('actor_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('kind', sa.String(50), nullable=False),
        sa.Column('object_type', sa.String(50), nullable=True),
        sa.Column('object_id', sa.String(100), nullable=True),
        sa.Column('link_path', sa.String(500), nullable=True),
        sa.Column('context', postgresql.JSONB(astext_type=sa.Text()), server_default=sa.text("'{}'::jsonb"), nullable=False),
        sa.Column('is_seen', sa.Boolean(), server_default=sa.text('FALSE'), nullable=False),
        sa.Column('is_read', sa.Boolean(), server_default=sa.text('FALSE'), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(['recipient_actor_id'], ['actors.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['actor_id'], ['actors.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'idx_notif_recipient_created', 'notifications', ['recipient_actor_id', 'created_at']
    )
    op.create_index(
        'idx_notif_recipient_unread', 'notifications', ['recipient_actor_id', 'is_read']
    )


def downgrade() -> None:
    op.drop_table('notifications')
    op.drop_table('inbox_entries')
    op.drop_table('conversation_members')
    op.drop_table('conversations')
    op.drop_table('block_edges')
    op.drop_table('follow_requests')
    op.drop_table('follow_edges')
    op.drop_table('actors')
    op.drop_table('organization_managers')
    op.drop_table('organizations')
    op.drop_table('humans')
