"""add_training_modules

Revision ID: 3c1f0a7b9d24
Revises:
Create Date: 2026-10-05 10:12:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1f0a7b9d24'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('training_modules',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='draft'),
        sa.Column('time_limit_seconds', sa.Integer(), nullable=True),
        sa.Column('pass_threshold', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_training_modules_id', 'training_modules', ['id'])

    op.create_table('quiz_questions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('module_id', sa.String(64), nullable=False),
        sa.Column('question_text', sa.Text(), nullable=False),
        sa.Column('question_type', sa.String(20), nullable=False),
        sa.Column('options_json', sa.Text(), nullable=True),
        sa.Column('correct_answer', sa.Text(), nullable=False),
        sa.Column('explanation', sa.Text(), nullable=True),
        sa.Column('order', sa.Integer(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['module_id'], ['training_modules.id'], ondelete='CASCADE')
    )
    op.create_index('ix_quiz_questions_id', 'quiz_questions', ['id'])
    op.create_index('ix_quiz_questions_module_id', 'quiz_questions', ['module_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_quiz_questions_module_id', table_name='quiz_questions')
    op.drop_index('ix_quiz_questions_id', table_name='quiz_questions')
    op.drop_table('quiz_questions')
    op.drop_index('ix_training_modules_id', table_name='training_modules')
    op.drop_table('training_modules')
