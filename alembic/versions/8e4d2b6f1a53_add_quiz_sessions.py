"""add_quiz_sessions

Revision ID: 8e4d2b6f1a53
Revises: 3c1f0a7b9d24
Create Date: 2026-10-06 14:40:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8e4d2b6f1a53'
down_revision: Union[str, Sequence[str], None] = '3c1f0a7b9d24'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('quiz_sessions',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('employee_id', sa.String(64), nullable=False),
        sa.Column('module_id', sa.String(64), nullable=False),
        sa.Column('attempt_number', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('status', sa.String(20), nullable=False, server_default='in_progress'),
        sa.Column('current_index', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('pass_threshold', sa.Integer(), nullable=False, server_default='70'),
        sa.Column('time_limit_seconds', sa.Integer(), nullable=True),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('deadline_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('correct_count', sa.Integer(), nullable=True),
        sa.Column('total_count', sa.Integer(), nullable=True),
        sa.Column('percentage', sa.Integer(), nullable=True),
        sa.Column('passed', sa.Boolean(), nullable=True),
        sa.Column('questions_json', sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('employee_id', 'module_id', 'attempt_number', name='uq_session_attempt')
    )
    op.create_index('ix_quiz_sessions_id', 'quiz_sessions', ['id'])
    op.create_index('ix_quiz_sessions_employee_id', 'quiz_sessions', ['employee_id'])
    op.create_index('ix_quiz_sessions_module_id', 'quiz_sessions', ['module_id'])
    op.create_index('ix_quiz_sessions_status', 'quiz_sessions', ['status'])

    op.create_table('quiz_session_answers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.String(64), nullable=False),
        sa.Column('question_id', sa.String(64), nullable=False),
        sa.Column('value', sa.Text(), nullable=False),
        sa.Column('answered_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['session_id'], ['quiz_sessions.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('session_id', 'question_id', name='uq_session_question')
    )
    op.create_index('ix_quiz_session_answers_id', 'quiz_session_answers', ['id'])
    op.create_index('ix_quiz_session_answers_session_id', 'quiz_session_answers', ['session_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_quiz_session_answers_session_id', table_name='quiz_session_answers')
    op.drop_index('ix_quiz_session_answers_id', table_name='quiz_session_answers')
    op.drop_table('quiz_session_answers')
    op.drop_index('ix_quiz_sessions_status', table_name='quiz_sessions')
    op.drop_index('ix_quiz_sessions_module_id', table_name='quiz_sessions')
    op.drop_index('ix_quiz_sessions_employee_id', table_name='quiz_sessions')
    op.drop_index('ix_quiz_sessions_id', table_name='quiz_sessions')
    op.drop_table('quiz_sessions')
