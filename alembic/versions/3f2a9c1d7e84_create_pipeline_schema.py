"""create_pipeline_schema

Revision ID: 3f2a9c1d7e84
Revises:
Create Date: 2026-10-19 09:12:40.512031

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f2a9c1d7e84'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Enum columns store member names
user_role = sa.Enum('ADMIN', 'HIRING_MANAGER', 'RECRUITER', name='userrole')
job_status = sa.Enum('DRAFT', 'ACTIVE', 'ON_HOLD', 'CLOSED', name='jobstatus')
activity_type = sa.Enum(
    'APPLICATION', 'STAGE_CHANGE', 'INTERVIEW_SCHEDULED', 'INTERVIEW_CANCELLED', 'FEEDBACK_SUBMITTED',
    name='activitytype'
)
notification_type = sa.Enum(
    'STAGE_CHANGE', 'INTERVIEW_SCHEDULED', 'INTERVIEW_CANCELLED', 'FEEDBACK_PENDING', 'SLA_BREACH',
    name='notificationtype'
)
interview_status = sa.Enum('SCHEDULED', 'IN_PROGRESS', 'COMPLETED', 'CANCELLED', 'NO_SHOW', name='interviewstatus')
interview_mode = sa.Enum('GOOGLE_MEET', 'MICROSOFT_TEAMS', 'IN_PERSON', 'CUSTOM_URL', 'PHONE', name='interviewmode')
recommendation = sa.Enum('STRONG_HIRE', 'HIRE', 'NO_HIRE', 'STRONG_NO_HIRE', name='recommendation')


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=nullable)


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'companies',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        _timestamp('created_at'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_companies_id', 'companies', ['id'])

    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('company_id', sa.Uuid(), sa.ForeignKey('companies.id'), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('role', user_role, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        _timestamp('created_at'),
        _timestamp('updated_at', nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_company_id', 'users', ['company_id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'candidates',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('company_id', sa.Uuid(), sa.ForeignKey('companies.id'), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('location', sa.String(), nullable=True),
        sa.Column('skills', sa.JSON(), nullable=False),
        sa.Column('experience_years', sa.Integer(), nullable=False),
        sa.Column('current_company', sa.String(), nullable=True),
        sa.Column('summary', sa.Text(), nullable=True),
        sa.Column('resume_url', sa.String(), nullable=True),
        sa.Column('source', sa.String(), nullable=True),
        _timestamp('created_at'),
        _timestamp('updated_at', nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_candidates_id', 'candidates', ['id'])
    op.create_index('ix_candidates_company_id', 'candidates', ['company_id'])
    op.create_index('ix_candidates_email', 'candidates', ['email'])

    op.create_table(
        'jobs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('company_id', sa.Uuid(), sa.ForeignKey('companies.id'), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('department', sa.String(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('location', sa.String(), nullable=True),
        sa.Column('openings', sa.Integer(), nullable=False),
        sa.Column('status', job_status, nullable=False),
        sa.Column('assigned_recruiter_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        _timestamp('created_at'),
        _timestamp('updated_at', nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_jobs_id', 'jobs', ['id'])
    op.create_index('ix_jobs_company_id', 'jobs', ['company_id'])
    op.create_index('ix_jobs_title', 'jobs', ['title'])
    op.create_index('ix_jobs_status', 'jobs', ['status'])

    op.create_table(
        'pipeline_stages',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('job_id', sa.Uuid(), sa.ForeignKey('jobs.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('is_default', sa.Boolean(), nullable=False),
        sa.Column('is_mandatory', sa.Boolean(), nullable=False),
        _timestamp('created_at'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_pipeline_stages_id', 'pipeline_stages', ['id'])
    op.create_index('ix_pipeline_stages_job_id', 'pipeline_stages', ['job_id'])

    op.create_table(
        'job_candidates',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('job_id', sa.Uuid(), sa.ForeignKey('jobs.id', ondelete='CASCADE'), nullable=False),
        sa.Column('candidate_id', sa.Uuid(), sa.ForeignKey('candidates.id', ondelete='CASCADE'), nullable=False),
        sa.Column('current_stage_id', sa.Uuid(), sa.ForeignKey('pipeline_stages.id'), nullable=False),
        _timestamp('applied_at'),
        _timestamp('updated_at', nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('job_id', 'candidate_id', name='uq_job_candidates_job_candidate'),
    )
    op.create_index('ix_job_candidates_id', 'job_candidates', ['id'])
    op.create_index('ix_job_candidates_job_id', 'job_candidates', ['job_id'])
    op.create_index('ix_job_candidates_candidate_id', 'job_candidates', ['candidate_id'])
    op.create_index('ix_job_candidates_current_stage_id', 'job_candidates', ['current_stage_id'])

    op.create_table(
        'stage_history',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column(
            'job_candidate_id', sa.Uuid(), sa.ForeignKey('job_candidates.id', ondelete='CASCADE'), nullable=False
        ),
        sa.Column('stage_id', sa.Uuid(), sa.ForeignKey('pipeline_stages.id', ondelete='SET NULL'), nullable=True),
        sa.Column('stage_name', sa.String(), nullable=False),
        _timestamp('entered_at'),
        _timestamp('exited_at', nullable=True),
        sa.Column('duration_hours', sa.Float(), nullable=True),
        sa.Column('comment', sa.Text(), nullable=True),
        sa.Column('moved_by', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_stage_history_id', 'stage_history', ['id'])
    op.create_index('ix_stage_history_job_candidate_id', 'stage_history', ['job_candidate_id'])
    op.create_index('ix_stage_history_open', 'stage_history', ['job_candidate_id', 'exited_at'])

    op.create_table(
        'candidate_activities',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('candidate_id', sa.Uuid(), sa.ForeignKey('candidates.id', ondelete='CASCADE'), nullable=False),
        sa.Column(
            'job_candidate_id', sa.Uuid(), sa.ForeignKey('job_candidates.id', ondelete='CASCADE'), nullable=True
        ),
        sa.Column('activity_type', activity_type, nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('created_by', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        _timestamp('created_at'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_candidate_activities_id', 'candidate_activities', ['id'])
    op.create_index('ix_candidate_activities_candidate_id', 'candidate_activities', ['candidate_id'])
    op.create_index('ix_candidate_activities_job_candidate_id', 'candidate_activities', ['job_candidate_id'])
    op.create_index('ix_candidate_activities_activity_type', 'candidate_activities', ['activity_type'])

    op.create_table(
        'sla_configs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('company_id', sa.Uuid(), sa.ForeignKey('companies.id', ondelete='CASCADE'), nullable=False),
        sa.Column('stage_name', sa.String(), nullable=False),
        sa.Column('threshold_days', sa.Integer(), nullable=False),
        _timestamp('created_at'),
        _timestamp('updated_at', nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_sla_configs_id', 'sla_configs', ['id'])
    op.create_index('ix_sla_configs_company_id', 'sla_configs', ['company_id'])
    op.create_index(
        'uq_sla_configs_company_stage',
        'sla_configs',
        ['company_id', sa.text('lower(stage_name)')],
        unique=True,
    )

    op.create_table(
        'notifications',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', notification_type, nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('entity_type', sa.String(), nullable=True),
        sa.Column('entity_id', sa.String(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        _timestamp('created_at'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_notifications_id', 'notifications', ['id'])
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])
    op.create_index('ix_notifications_created_at', 'notifications', ['created_at'])
    op.create_index('ix_notifications_user_unread', 'notifications', ['user_id', 'is_read'])

    op.create_table(
        'interviews',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column(
            'job_candidate_id', sa.Uuid(), sa.ForeignKey('job_candidates.id', ondelete='CASCADE'), nullable=False
        ),
        _timestamp('scheduled_at'),
        sa.Column('duration', sa.Integer(), nullable=False),
        sa.Column('timezone', sa.String(), nullable=False),
        sa.Column('mode', interview_mode, nullable=False),
        sa.Column('location', sa.String(), nullable=True),
        sa.Column('meeting_link', sa.String(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', interview_status, nullable=False),
        sa.Column('cancel_reason', sa.Text(), nullable=True),
        sa.Column('scheduled_by', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        _timestamp('created_at'),
        _timestamp('updated_at', nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_interviews_id', 'interviews', ['id'])
    op.create_index('ix_interviews_job_candidate_id', 'interviews', ['job_candidate_id'])
    op.create_index('ix_interviews_scheduled_at', 'interviews', ['scheduled_at'])
    op.create_index('ix_interviews_status', 'interviews', ['status'])

    op.create_table(
        'interview_panel_members',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('interview_id', sa.Uuid(), sa.ForeignKey('interviews.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('interview_id', 'user_id', name='uq_interview_panel_member'),
    )
    op.create_index('ix_interview_panel_members_interview_id', 'interview_panel_members', ['interview_id'])
    op.create_index('ix_interview_panel_members_user_id', 'interview_panel_members', ['user_id'])

    op.create_table(
        'interview_feedback',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('interview_id', sa.Uuid(), sa.ForeignKey('interviews.id', ondelete='CASCADE'), nullable=False),
        sa.Column('panel_member_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('recommendation', recommendation, nullable=False),
        sa.Column('comments', sa.Text(), nullable=True),
        _timestamp('submitted_at'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('interview_id', 'panel_member_id', name='uq_interview_feedback_member'),
    )
    op.create_index('ix_interview_feedback_interview_id', 'interview_feedback', ['interview_id'])


def downgrade() -> None:
    """Downgrade schema."""
    for table in (
        'interview_feedback',
        'interview_panel_members',
        'interviews',
        'notifications',
        'sla_configs',
        'candidate_activities',
        'stage_history',
        'job_candidates',
        'pipeline_stages',
        'jobs',
        'candidates',
        'users',
        'companies',
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for enum in (recommendation, interview_mode, interview_status, notification_type, activity_type, job_status, user_role):
        enum.drop(bind, checkfirst=True)
