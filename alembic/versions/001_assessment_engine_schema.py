"""Create assessment engine tables

Revision ID: 001_assessment_engine_schema
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '001_assessment_engine_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id_and_timestamps():
    return [
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    """
    Create the competency catalog, question bank, assessment settings and
    session tables.
    """
    op.create_table(
        'competency',
        *_id_and_timestamps(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
    )

    op.create_table(
        'competency_level',
        *_id_and_timestamps(),
        sa.Column('competency_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('competency.id'), nullable=False),
        sa.Column('level', sa.String(20), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.UniqueConstraint('competency_id', 'level', name='uq_competency_level'),
    )
    op.create_index('ix_competency_level_competency_id', 'competency_level', ['competency_id'])

    op.create_table(
        'question',
        *_id_and_timestamps(),
        sa.Column('competency_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('competency.id'), nullable=False),
        sa.Column(
            'competency_level_id',
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey('competency_level.id'),
            nullable=True,
        ),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('type', sa.String(30), nullable=False),
        sa.Column('points', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('explanation', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index('ix_question_competency_active', 'question', ['competency_id', 'is_active'])

    op.create_table(
        'question_option',
        *_id_and_timestamps(),
        sa.Column('question_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('question.id'), nullable=False),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('is_correct', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('order', sa.Integer(), nullable=False, server_default='0'),
    )
    op.create_index('ix_question_option_question_id', 'question_option', ['question_id'])

    op.create_table(
        'assessment',
        *_id_and_timestamps(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('competency_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('competency.id'), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('apply_to_all', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('num_questions', sa.Integer(), nullable=True),
        sa.Column('time_limit_minutes', sa.Integer(), nullable=True),
        sa.Column('selection_strategy', sa.String(20), nullable=False, server_default='RANDOM'),
        sa.Column('allow_multiple_attempts', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('max_attempts', sa.Integer(), nullable=True),
        sa.Column('show_timer', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('force_time_limit', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('show_dashboard', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('show_correct_answers', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('show_incorrect_answers', sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index('ix_assessment_competency_id', 'assessment', ['competency_id'])

    op.create_table(
        'assessment_session',
        *_id_and_timestamps(),
        sa.Column('user_id', sa.String(100), nullable=False),
        sa.Column('competency_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('competency.id'), nullable=False),
        sa.Column('assessment_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('assessment.id'), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='IN_PROGRESS'),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('score', sa.Integer(), nullable=True),
        sa.Column('percentage_score', sa.Integer(), nullable=True),
        sa.Column('correct_answers', sa.Integer(), nullable=True),
        sa.Column('total_questions', sa.Integer(), nullable=True),
        sa.Column('system_level', sa.String(20), nullable=True),
        sa.Column('user_confirmed_level', sa.String(20), nullable=True),
        sa.Column('manager_selected_level', sa.String(20), nullable=True),
    )
    op.create_index(
        'ix_assessment_session_user_competency_status',
        'assessment_session',
        ['user_id', 'competency_id', 'status'],
    )

    op.create_table(
        'assessment_response',
        *_id_and_timestamps(),
        sa.Column(
            'session_id',
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey('assessment_session.id'),
            nullable=False,
        ),
        sa.Column('question_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('question.id'), nullable=False),
        sa.Column(
            'selected_option_id',
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey('question_option.id'),
            nullable=True,
        ),
        sa.Column('answer_text', sa.Text(), nullable=True),
        sa.Column('is_correct', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('points_earned', sa.Integer(), nullable=False, server_default='0'),
        sa.UniqueConstraint('session_id', 'question_id', name='uq_assessment_response_session_question'),
    )
    op.create_index('ix_assessment_response_session_id', 'assessment_response', ['session_id'])


def downgrade() -> None:
    op.drop_index('ix_assessment_response_session_id', table_name='assessment_response')
    op.drop_table('assessment_response')
    op.drop_index('ix_assessment_session_user_competency_status', table_name='assessment_session')
    op.drop_table('assessment_session')
    op.drop_index('ix_assessment_competency_id', table_name='assessment')
    op.drop_table('assessment')
    op.drop_index('ix_question_option_question_id', table_name='question_option')
    op.drop_table('question_option')
    op.drop_index('ix_question_competency_active', table_name='question')
    op.drop_table('question')
    op.drop_index('ix_competency_level_competency_id', table_name='competency_level')
    op.drop_table('competency_level')
    op.drop_table('competency')
