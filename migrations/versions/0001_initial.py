"""create users, generations, generation error logs and flashcards

Revision ID: 0001_initial
Revises:
Create Date: 2025-10-01

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


flashcard_source = sa.Enum('ai-full', 'ai-edited', 'manual', name='flashcard_source')


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('password_hash', sa.String(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'generations',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('model', sa.String(), nullable=False),
        sa.Column('generated_count', sa.Integer(), nullable=False),
        sa.Column('source_text_hash', sa.String(length=64), nullable=False),
        sa.Column('source_text_length', sa.Integer(), nullable=False),
        sa.Column('generation_duration', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_generations_user_id', 'generations', ['user_id'])

    op.create_table(
        'generation_error_logs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('model', sa.String(), nullable=False),
        sa.Column('error_code', sa.String(length=100), nullable=False),
        sa.Column('error_message', sa.Text(), nullable=False),
        sa.Column('source_text_hash', sa.String(length=64), nullable=False),
        sa.Column('source_text_length', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_generation_error_logs_user_id', 'generation_error_logs', ['user_id'])

    op.create_table(
        'flashcards',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('front', sa.String(length=200), nullable=False),
        sa.Column('back', sa.String(length=500), nullable=False),
        sa.Column('source', flashcard_source, nullable=False),
        sa.Column('generation_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.CheckConstraint('length(front) BETWEEN 1 AND 200', name='ck_flashcards_front_length'),
        sa.CheckConstraint('length(back) BETWEEN 1 AND 500', name='ck_flashcards_back_length'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['generation_id'], ['generations.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_flashcards_user_id', 'flashcards', ['user_id'])
    op.create_index('ix_flashcards_generation_id', 'flashcards', ['generation_id'])


def downgrade() -> None:
    op.drop_index('ix_flashcards_generation_id', table_name='flashcards')
    op.drop_index('ix_flashcards_user_id', table_name='flashcards')
    op.drop_table('flashcards')
    flashcard_source.drop(op.get_bind(), checkfirst=True)
    op.drop_index('ix_generation_error_logs_user_id', table_name='generation_error_logs')
    op.drop_table('generation_error_logs')
    op.drop_index('ix_generations_user_id', table_name='generations')
    op.drop_table('generations')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
