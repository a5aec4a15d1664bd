"""initial_moderation_schema

Revision ID: 3a9f1c2d7e44
Revises:
Create Date: 2026-10-19 09:12:41.504117

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3a9f1c2d7e44'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


TARGET_KIND = sa.Enum('POST', 'COMMENT', 'USER', 'MESSAGE', 'CANDIDATE', name='targetkind')
MODERATION_ACTION = sa.Enum(
    'NO_ACTION',
    'CONTENT_HIDDEN',
    'CONTENT_DELETED',
    'USER_WARNED',
    'USER_SUSPENDED',
    'USER_BANNED',
    'SUSPENSION_LIFTED',
    'SUSPENSION_EXPIRED',
    'APPEAL_APPROVED',
    'APPEAL_DENIED',
    name='moderationaction',
)


def upgrade() -> None:
    """Upgrade schema."""
    # Mirrors of externally owned entities
    op.create_table(
        'users',
        sa.Column('user_id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('username', sa.String(length=30), nullable=False),
        sa.Column('email', sa.String(length=120), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('is_moderator', sa.Boolean(), nullable=False),
        sa.Column('is_admin', sa.Boolean(), nullable=False),
        sa.Column('is_suspended', sa.Boolean(), nullable=False),
        sa.Column('date_joined', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('user_id'),
    )
    op.create_index('username', 'users', ['username'], unique=True)
    op.create_index('idx_users_is_suspended', 'users', ['is_suspended'])

    op.create_table(
        'posts',
        sa.Column('post_id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('author_id', sa.Integer(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('is_hidden', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('post_id'),
        sa.ForeignKeyConstraint(['author_id'], ['users.user_id'], onupdate='CASCADE', ondelete='CASCADE'),
    )
    op.create_index('idx_posts_author_id', 'posts', ['author_id'])

    op.create_table(
        'comments',
        sa.Column('comment_id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('post_id', sa.Integer(), nullable=True),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('is_hidden', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('comment_id'),
        sa.ForeignKeyConstraint(['post_id'], ['posts.post_id'], onupdate='CASCADE', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.user_id'], onupdate='CASCADE', ondelete='CASCADE'),
    )
    op.create_index('idx_comments_user_id', 'comments', ['user_id'])
    op.create_index('idx_comments_post_id', 'comments', ['post_id'])

    op.create_table(
        'messages',
        sa.Column('message_id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('sender_id', sa.Integer(), nullable=False),
        sa.Column('recipient_id', sa.Integer(), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('is_hidden', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('message_id'),
        sa.ForeignKeyConstraint(['sender_id'], ['users.user_id'], onupdate='CASCADE', ondelete='CASCADE'),
    )
    op.create_index('idx_messages_sender_id', 'messages', ['sender_id'])

    op.create_table(
        'candidates',
        sa.Column('candidate_id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('office_title', sa.String(length=200), nullable=True),
        sa.Column('district', sa.String(length=100), nullable=True),
        sa.PrimaryKeyConstraint('candidate_id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.user_id'], onupdate='CASCADE', ondelete='SET NULL'),
    )

    # Reports
    # open_slot is 1 while the report is open and NULL once resolved, so the
    # unique index admits one open report per reporter and target
    op.create_table(
        'reports',
        sa.Column('report_id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('target_kind', TARGET_KIND, nullable=False),
        sa.Column('target_id', sa.Integer(), nullable=False),
        sa.Column(
            'reason',
            sa.Enum(
                'SPAM', 'HARASSMENT', 'HATE_SPEECH', 'MISINFORMATION', 'INAPPROPRIATE_CONTENT',
                'FAKE_ACCOUNT', 'IMPERSONATION', 'COPYRIGHT_VIOLATION', 'VIOLENCE_THREATS',
                'SELF_HARM', 'ILLEGAL_CONTENT', 'OTHER',
                name='reportreason',
            ),
            nullable=False,
        ),
        sa.Column('description', sa.String(length=1000), nullable=True),
        sa.Column(
            'status',
            sa.Enum('PENDING', 'IN_REVIEW', 'RESOLVED', name='reportstatus'),
            nullable=False,
        ),
        sa.Column(
            'priority',
            sa.Enum('LOW', 'MEDIUM', 'HIGH', 'URGENT', name='reportpriority'),
            nullable=False,
        ),
        sa.Column('reporter_id', sa.Integer(), nullable=False),
        sa.Column('open_slot', sa.Integer(), nullable=True),
        sa.Column('geographic_weight', sa.Float(), nullable=True),
        sa.Column(
            'ai_urgency',
            sa.Enum('LOW', 'MEDIUM', 'HIGH', 'CRITICAL', name='aiurgency'),
            nullable=True,
        ),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('claimed_by', sa.Integer(), nullable=True),
        sa.Column('claimed_at', sa.DateTime(), nullable=True),
        sa.Column('moderator_id', sa.Integer(), nullable=True),
        sa.Column('moderated_at', sa.DateTime(), nullable=True),
        sa.Column('moderator_notes', sa.Text(), nullable=True),
        sa.Column('action_taken', MODERATION_ACTION, nullable=True),
        sa.PrimaryKeyConstraint('report_id'),
        sa.ForeignKeyConstraint(['reporter_id'], ['users.user_id'], onupdate='CASCADE', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['moderator_id'], ['users.user_id'], onupdate='CASCADE', ondelete='SET NULL'),
    )
    op.create_index(
        'uq_reports_open_per_reporter_target',
        'reports',
        ['reporter_id', 'target_kind', 'target_id', 'open_slot'],
        unique=True,
    )
    op.create_index('idx_reports_target', 'reports', ['target_kind', 'target_id'])
    op.create_index('idx_reports_status_priority', 'reports', ['status', 'priority'])
    op.create_index('idx_reports_created_at', 'reports', ['created_at'])
    op.create_index('idx_reports_moderated_at', 'reports', ['moderated_at'])

    # Moderation log (append-only, no FK on moderator_id)
    op.create_table(
        'moderation_logs',
        sa.Column('log_id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('moderator_id', sa.Integer(), nullable=True),
        sa.Column('target_kind', TARGET_KIND, nullable=False),
        sa.Column('target_id', sa.Integer(), nullable=False),
        sa.Column('action', MODERATION_ACTION, nullable=False),
        sa.Column('reason', sa.String(length=500), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('log_id'),
    )
    op.create_index('idx_moderation_logs_moderator_id', 'moderation_logs', ['moderator_id'])
    op.create_index('idx_moderation_logs_target', 'moderation_logs', ['target_kind', 'target_id'])
    op.create_index('idx_moderation_logs_action', 'moderation_logs', ['action'])
    op.create_index('idx_moderation_logs_created_at', 'moderation_logs', ['created_at'])

    # Sanctions
    op.create_table(
        'user_warnings',
        sa.Column('warning_id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('moderator_id', sa.Integer(), nullable=True),
        sa.Column(
            'severity',
            sa.Enum('MINOR', 'MODERATE', 'MAJOR', 'FINAL', name='warningseverity'),
            nullable=False,
        ),
        sa.Column('reason', sa.String(length=500), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('warning_id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.user_id'], onupdate='CASCADE', ondelete='CASCADE'),
    )
    op.create_index('idx_user_warnings_user_id', 'user_warnings', ['user_id'])
    op.create_index('idx_user_warnings_severity', 'user_warnings', ['severity'])
    op.create_index('idx_user_warnings_created_at', 'user_warnings', ['created_at'])

    op.create_table(
        'user_suspensions',
        sa.Column('suspension_id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('moderator_id', sa.Integer(), nullable=True),
        sa.Column(
            'type',
            sa.Enum(
                'TEMPORARY', 'PERMANENT', 'POSTING_RESTRICTED', 'COMMENTING_RESTRICTED',
                name='suspensiontype',
            ),
            nullable=False,
        ),
        sa.Column('reason', sa.String(length=500), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('starts_at', sa.DateTime(), nullable=False),
        sa.Column('ends_at', sa.DateTime(), nullable=True),
        sa.Column('deactivated_at', sa.DateTime(), nullable=True),
        sa.Column('lifted_by', sa.Integer(), nullable=True),
        sa.Column('appealed', sa.Boolean(), nullable=False),
        sa.Column('appealed_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('suspension_id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.user_id'], onupdate='CASCADE', ondelete='CASCADE'),
    )
    op.create_index('idx_user_suspensions_user_active', 'user_suspensions', ['user_id', 'is_active'])
    op.create_index('idx_user_suspensions_sweep', 'user_suspensions', ['is_active', 'type', 'ends_at'])
    op.create_index('idx_user_suspensions_created_at', 'user_suspensions', ['created_at'])

    # Appeals (one per suspension)
    op.create_table(
        'appeals',
        sa.Column('appeal_id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('suspension_id', sa.Integer(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('additional_info', sa.Text(), nullable=True),
        sa.Column(
            'status',
            sa.Enum('PENDING', 'APPROVED', 'DENIED', name='appealstatus'),
            nullable=False,
        ),
        sa.Column('review_notes', sa.Text(), nullable=True),
        sa.Column('reviewed_by', sa.Integer(), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('appeal_id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.user_id'], onupdate='CASCADE', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(
            ['suspension_id'], ['user_suspensions.suspension_id'], onupdate='CASCADE', ondelete='CASCADE'
        ),
    )
    op.create_index('uq_appeals_suspension_id', 'appeals', ['suspension_id'], unique=True)
    op.create_index('idx_appeals_user_id', 'appeals', ['user_id'])
    op.create_index('idx_appeals_status_created_at', 'appeals', ['status', 'created_at'])

    # Content flags
    op.create_table(
        'content_flags',
        sa.Column('flag_id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('content_kind', TARGET_KIND, nullable=False),
        sa.Column('content_id', sa.Integer(), nullable=False),
        sa.Column(
            'flag_type',
            sa.Enum(
                'SPAM', 'TOXICITY', 'HATE_SPEECH', 'MISINFORMATION', 'INAPPROPRIATE_LANGUAGE',
                'FAKE_ENGAGEMENT', 'DUPLICATE_CONTENT', 'SUSPICIOUS_ACTIVITY', 'POTENTIAL_BRIGADING',
                name='flagtype',
            ),
            nullable=False,
        ),
        sa.Column('confidence', sa.Float(), nullable=False),
        sa.Column(
            'source',
            sa.Enum('AUTOMATED', 'USER_REPORT', 'MANUAL_REVIEW', name='flagsource'),
            nullable=False,
        ),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('resolved', sa.Boolean(), nullable=False),
        sa.Column('open_slot', sa.Integer(), nullable=True),
        sa.Column('resolved_by', sa.Integer(), nullable=True),
        sa.Column('resolved_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('flag_id'),
    )
    op.create_index('idx_content_flags_content', 'content_flags', ['content_kind', 'content_id'])
    op.create_index('idx_content_flags_type_resolved', 'content_flags', ['flag_type', 'resolved'])
    op.create_index('idx_content_flags_created_at', 'content_flags', ['created_at'])
    # One unresolved flag per content item and type; resolved rows carry NULL
    op.create_index(
        'uq_content_flags_open',
        'content_flags',
        ['content_kind', 'content_id', 'flag_type', 'open_slot'],
        unique=True,
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('content_flags')
    op.drop_table('appeals')
    op.drop_table('user_suspensions')
    op.drop_table('user_warnings')
    op.drop_table('moderation_logs')
    op.drop_table('reports')
    op.drop_table('candidates')
    op.drop_table('messages')
    op.drop_table('comments')
    op.drop_table('posts')
    op.drop_table('users')
