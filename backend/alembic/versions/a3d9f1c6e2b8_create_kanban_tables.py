"""Create kanban tables (projects, columns, tasks, task_tags)

Revision ID: a3d9f1c6e2b8
Revises:
Create Date: 2026-03-02T09:15:41.337210
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = 'a3d9f1c6e2b8'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- projects ---
    op.create_table(
        'projects',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.current_timestamp()),
        sa.PrimaryKeyConstraint('id'),
    )

    # --- columns ---
    op.create_table(
        'columns',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('project_id', sa.String(), sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('color', sa.String(), nullable=False),
        sa.Column('order_index', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_columns_project_id', 'columns', ['project_id'])

    # --- tasks ---
    op.create_table(
        'tasks',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('column_id', sa.String(), sa.ForeignKey('columns.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('assignee', sa.String(), nullable=True),
        sa.Column('due_date', sa.String(), nullable=True),
        sa.Column('priority', sa.String(), nullable=False, server_default='medium'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.current_timestamp()),
        sa.Column('order_index', sa.Integer(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint("priority IN ('low', 'medium', 'high')", name='ck_tasks_priority'),
    )
    op.create_index('idx_tasks_column_id', 'tasks', ['column_id'])

    # --- task_tags ---
    op.create_table(
        'task_tags',
        sa.Column('task_id', sa.String(), sa.ForeignKey('tasks.id', ondelete='CASCADE'), nullable=False),
        sa.Column('tag_name', sa.String(), nullable=False),
        sa.PrimaryKeyConstraint('task_id', 'tag_name'),
    )
    op.create_index('idx_task_tags_task_id', 'task_tags', ['task_id'])


def downgrade() -> None:
    op.drop_index('idx_task_tags_task_id', table_name='task_tags')
    op.drop_table('task_tags')
    op.drop_index('idx_tasks_column_id', table_name='tasks')
    op.drop_table('tasks')
    op.drop_index('idx_columns_project_id', table_name='columns')
    op.drop_table('columns')
    op.drop_table('projects')
