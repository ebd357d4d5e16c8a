"""Initial journal schema: users, user_profiles, daily_reflections, ai_analysis

Revision ID: journal_001
Revises:
Create Date: 2026-10-19

One reflection per user per day is enforced by uq_daily_reflections_user_date.
ai_analysis rows cascade with their reflection.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'journal_001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('password_hash', sa.Text(), nullable=False),
        sa.Column('full_name', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )

    op.create_table(
        'user_profiles',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('self_introduction', sa.Text(), nullable=True),
        sa.Column('good_qualities', sa.Text(), nullable=True),
        sa.Column('bad_qualities', sa.Text(), nullable=True),
        sa.Column('life_goals', sa.Text(), nullable=True),
        sa.Column('challenges', sa.Text(), nullable=True),
        sa.Column('additional_info', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )

    op.create_table(
        'daily_reflections',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('reflection_date', sa.Date(), nullable=False),
        sa.Column('day_summary', sa.Text(), nullable=False),
        sa.Column('social_media_time', sa.Text(), nullable=False),
        sa.Column('truthfulness_kindness', sa.Text(), nullable=False),
        sa.Column('conscious_actions', sa.Text(), nullable=False),
        sa.Column('overthinking_stress', sa.Text(), nullable=False),
        sa.Column('gratitude_expression', sa.Text(), nullable=False),
        sa.Column('proud_moment', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'uq_daily_reflections_user_date',
        'daily_reflections',
        ['user_id', 'reflection_date'],
        unique=True,
    )

    op.create_table(
        'ai_analysis',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('reflection_id', sa.Uuid(), nullable=False),
        sa.Column('analysis_text', sa.Text(), nullable=False),
        sa.Column('recommendations', sa.Text(), nullable=False),
        sa.Column('motivational_message', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['reflection_id'], ['daily_reflections.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_ai_analysis_user_created', 'ai_analysis', ['user_id', 'created_at'])
    op.create_index('ix_ai_analysis_reflection_id', 'ai_analysis', ['reflection_id'])


def downgrade() -> None:
    op.drop_index('ix_ai_analysis_reflection_id', table_name='ai_analysis')
    op.drop_index('ix_ai_analysis_user_created', table_name='ai_analysis')
    op.drop_table('ai_analysis')
    op.drop_index('uq_daily_reflections_user_date', table_name='daily_reflections')
    op.drop_table('daily_reflections')
    op.drop_table('user_profiles')
    op.drop_table('users')
