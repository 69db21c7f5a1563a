"""create_progress_tables

Revision ID: a7c1d2e3f4b5
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
import sqlmodel


# revision identifiers, used by Alembic.
revision: str = 'a7c1d2e3f4b5'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('user',
        sa.Column('id', sqlmodel.sql.sqltypes.GUID(), nullable=False),
        sa.Column('username', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column('email', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('current_streak', sa.Integer(), nullable=False),
        sa.Column('last_active_date', sa.Date(), nullable=True),
        sa.Column('streak_dates', sa.JSON(), nullable=True),
        sa.Column('commitment_start_date', sa.DateTime(), nullable=False),
        sa.Column('streak_goal', sa.Integer(), nullable=False),
        sa.Column('streak_completions', sa.Integer(), nullable=False),
        sa.Column('daily_completions', sa.JSON(), nullable=True),
        sa.Column('weekly_goal', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('weekly_goal_status', sa.String(), nullable=False),
        sa.Column('weekly_goal_completions', sa.Integer(), nullable=False),
        sa.Column('weekly_goal_lock_in', sa.DateTime(), nullable=True),
        sa.Column('weekly_goal_lock_in_count', sa.Integer(), nullable=False),
        sa.Column('three_month_goal', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('three_month_goal_status', sa.String(), nullable=False),
        sa.Column('three_month_goal_completions', sa.Integer(), nullable=False),
        sa.Column('three_month_goal_lock_in', sa.DateTime(), nullable=True),
        sa.Column('three_month_goal_lock_in_count', sa.Integer(), nullable=False),
        sa.Column('badges', sa.JSON(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_user_username'), 'user', ['username'], unique=True)
    op.create_index(op.f('ix_user_email'), 'user', ['email'], unique=True)

    op.create_table('workout',
        sa.Column('id', sqlmodel.sql.sqltypes.GUID(), nullable=False),
        sa.Column('user_id', sqlmodel.sql.sqltypes.GUID(), nullable=False),
        sa.Column('day', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('title', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('activities', sa.JSON(), nullable=True),
        sa.Column('last_completed_date', sa.DateTime(), nullable=True),
        sa.Column('last_reset_date', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['user.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_workout_user_id'), 'workout', ['user_id'])

    op.create_table('badge',
        sa.Column('id', sqlmodel.sql.sqltypes.GUID(), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('description', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('icon', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('criteria_type', sa.String(), nullable=False),
        sa.Column('criteria_value', sa.Integer(), nullable=False),
        sa.Column('tier', sa.String(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_badge_name'), 'badge', ['name'], unique=True)
    op.create_index(op.f('ix_badge_position'), 'badge', ['position'])

    op.create_table('workoutlog',
        sa.Column('id', sqlmodel.sql.sqltypes.GUID(), nullable=False),
        sa.Column('user_id', sqlmodel.sql.sqltypes.GUID(), nullable=False),
        sa.Column('workout_id', sqlmodel.sql.sqltypes.GUID(), nullable=True),
        sa.Column('date', sa.DateTime(), nullable=False),
        sa.Column('workout_title', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('activity_name', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('parameter', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('value', sa.Float(), nullable=False),
        sa.Column('unit', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['user.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_workoutlog_user_id'), 'workoutlog', ['user_id'])
    op.create_index(op.f('ix_workoutlog_workout_id'), 'workoutlog', ['workout_id'])
    op.create_index(op.f('ix_workoutlog_date'), 'workoutlog', ['date'])


def downgrade() -> None:
    op.drop_index(op.f('ix_workoutlog_date'), table_name='workoutlog')
    op.drop_index(op.f('ix_workoutlog_workout_id'), table_name='workoutlog')
    op.drop_index(op.f('ix_workoutlog_user_id'), table_name='workoutlog')
    op.drop_table('workoutlog')
    op.drop_index(op.f('ix_badge_position'), table_name='badge')
    op.drop_index(op.f('ix_badge_name'), table_name='badge')
    op.drop_table('badge')
    op.drop_index(op.f('ix_workout_user_id'), table_name='workout')
    op.drop_table('workout')
    op.drop_index(op.f('ix_user_email'), table_name='user')
    op.drop_index(op.f('ix_user_username'), table_name='user')
    op.drop_table('user')
