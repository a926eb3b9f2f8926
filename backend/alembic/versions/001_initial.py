"""Initial schema

Revision ID: 001_initial
Revises: 
Create Date: 2026-10-19 09:30:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001_initial'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # Create projects table
    op.create_table(
        'projects',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('plan', sa.Text()),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('custom_slug', sa.String(length=255)),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_projects_slug', 'projects', ['slug'], unique=True)
    op.create_index('ix_projects_custom_slug', 'projects', ['custom_slug'], unique=True)
    op.create_index('ix_projects_user_id', 'projects', ['user_id'])

    # Create issues table
    op.create_table(
        'issues',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('severity', sa.String(length=50), nullable=False, server_default='medium'),
        sa.Column('status', sa.String(length=50), nullable=False, server_default='open'),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('project_id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_issues_status', 'issues', ['status'])
    op.create_index('ix_issues_project_id', 'issues', ['project_id'])
    op.create_index('ix_issues_user_id', 'issues', ['user_id'])

    # Create inquiries table
    op.create_table(
        'inquiries',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('content', sa.Text()),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('project_id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_inquiries_project_id', 'inquiries', ['project_id'])
    op.create_index('ix_inquiries_user_id', 'inquiries', ['user_id'])


def downgrade() -> None:
    op.drop_index('ix_inquiries_user_id', table_name='inquiries')
    op.drop_index('ix_inquiries_project_id', table_name='inquiries')
    op.drop_table('inquiries')

    op.drop_index('ix_issues_user_id', table_name='issues')
    op.drop_index('ix_issues_project_id', table_name='issues')
    op.drop_index('ix_issues_status', table_name='issues')
    op.drop_table('issues')

    op.drop_index('ix_projects_user_id', table_name='projects')
    op.drop_index('ix_projects_custom_slug', table_name='projects')
    op.drop_index('ix_projects_slug', table_name='projects')
    op.drop_table('projects')
