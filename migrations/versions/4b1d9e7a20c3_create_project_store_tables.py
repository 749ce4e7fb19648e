"""create_project_store_tables

Revision ID: 4b1d9e7a20c3
Revises:
Create Date: 2026-10-12 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '4b1d9e7a20c3'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the users, projects, team, task and project role tables."""
    op.create_table('users',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('tenant_id', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=200), nullable=True),
        sa.Column('role', sa.String(length=30), nullable=False,
                  server_default='member'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tenant_id', 'email'),
    )
    op.create_index(op.f('ix_users_tenant_id'), 'users', ['tenant_id'])

    op.create_table('projects',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('tenant_id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False,
                  server_default=''),
        sa.Column('owner', sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_projects_tenant_id'), 'projects', ['tenant_id'])

    op.create_table('project_team_members',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('project_id', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=50), nullable=True),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'],
                                ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('project_id', 'email'),
    )

    op.create_table('tasks',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('tenant_id', sa.String(length=64), nullable=False),
        sa.Column('project_id', sa.String(length=64), nullable=True),
        sa.Column('title', sa.String(length=500), nullable=False,
                  server_default=''),
        sa.Column('assigned_to', postgresql.JSONB(), nullable=True,
                  server_default='[]'),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'],
                                ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_tasks_tenant_id'), 'tasks', ['tenant_id'])
    op.create_index(op.f('ix_tasks_project_id'), 'tasks', ['project_id'])

    op.create_table('project_user_roles',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('project_id', sa.String(length=64), nullable=False),
        sa.Column('user_email', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=50), nullable=False),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'],
                                ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('project_id', 'user_email', 'role'),
    )
    op.create_index('ix_project_user_roles_project_role',
                    'project_user_roles', ['project_id', 'role'])


def downgrade() -> None:
    """Drop the project store tables."""
    op.drop_index('ix_project_user_roles_project_role',
                  table_name='project_user_roles')
    op.drop_table('project_user_roles')
    op.drop_index(op.f('ix_tasks_project_id'), table_name='tasks')
    op.drop_index(op.f('ix_tasks_tenant_id'), table_name='tasks')
    op.drop_table('tasks')
    op.drop_table('project_team_members')
    op.drop_index(op.f('ix_projects_tenant_id'), table_name='projects')
    op.drop_table('projects')
    op.drop_index(op.f('ix_users_tenant_id'), table_name='users')
    op.drop_table('users')
