"""create user, question and score tables

Revision ID: 4c2a9e7b1d30
Revises:
Create Date: 2025-03-02 18:20:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4c2a9e7b1d30'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'user' not in existing_tables:
        op.create_table(
            'user',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('username', sa.String(length=64), nullable=False),
            sa.Column('password_hash', sa.String(length=256), nullable=False),
            sa.Column('email', sa.String(length=255), nullable=False),
            sa.Column('bio', sa.Text(), nullable=True),
            sa.Column('profile_image', sa.String(length=255), nullable=True),
            sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        )
        op.create_index('ix_user_username', 'user', ['username'], unique=True)

    if 'question' not in existing_tables:
        op.create_table(
            'question',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('type', sa.String(length=16), nullable=False),
            sa.Column('mode', sa.String(length=16), nullable=False),
            sa.Column('content', sa.Text(), nullable=False),
            sa.Column('content_en', sa.Text(), nullable=True),
            sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        )
        op.create_index('ix_question_type', 'question', ['type'])
        op.create_index('ix_question_mode', 'question', ['mode'])

    if 'score' not in existing_tables:
        op.create_table(
            'score',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=True),
            sa.Column('player_name', sa.String(length=64), nullable=False),
            sa.Column('points', sa.Integer(), nullable=False),
            sa.Column('game_type', sa.String(length=32), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        )
        op.create_index('ix_score_user_id', 'score', ['user_id'])


def downgrade():
    op.drop_index('ix_score_user_id', table_name='score')
    op.drop_table('score')
    op.drop_index('ix_question_mode', table_name='question')
    op.drop_index('ix_question_type', table_name='question')
    op.drop_table('question')
    op.drop_index('ix_user_username', table_name='user')
    op.drop_table('user')
