"""create_users_and_contract_analyses

Revision ID: 3f1a9c2e7b10
Revises:
Create Date: 2026-10-18

Creates the users table (rows written by the OAuth sign-in flow) and the
contract_analyses table holding completed analyses.
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision = '3f1a9c2e7b10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    connection = op.get_bind()
    existing_tables = inspect(connection).get_table_names()

    if 'users' not in existing_tables:
        op.create_table(
            'users',
            sa.Column('id', sa.String(36), primary_key=True),
            sa.Column('google_id', sa.String(), nullable=True),
            sa.Column('email', sa.String(), nullable=False),
            sa.Column('name', sa.String(), nullable=True),
            sa.Column('picture', sa.String(), nullable=True),
            sa.Column('is_active', sa.Boolean(), nullable=True, server_default=sa.true()),
            sa.Column('is_premium', sa.Boolean(), nullable=True, server_default=sa.false()),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
        )
        op.create_index('ix_users_email', 'users', ['email'], unique=True)
        op.create_index('ix_users_google_id', 'users', ['google_id'], unique=True)

    if 'contract_analyses' not in existing_tables:
        op.create_table(
            'contract_analyses',
            sa.Column('id', sa.String(36), primary_key=True),
            sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id'), nullable=False),
            sa.Column('contract_text', sa.Text(), nullable=False),
            sa.Column('contract_type', sa.String(200), nullable=False),
            sa.Column('summary', sa.Text(), nullable=False),
            sa.Column('risks', sa.JSON(), nullable=False),
            sa.Column('opportunities', sa.JSON(), nullable=False),
            sa.Column('recommendations', sa.JSON(), nullable=False),
            sa.Column('key_clauses', sa.JSON(), nullable=False),
            sa.Column('overall_score', sa.Integer(), nullable=True),
            sa.Column('ai_model', sa.String(100), nullable=False),
            sa.Column('language', sa.String(16), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        )
        op.create_index('ix_contract_analyses_user_id', 'contract_analyses', ['user_id'])
        op.create_index('ix_contract_analyses_created_at', 'contract_analyses', ['created_at'])


def downgrade() -> None:
    op.drop_index('ix_contract_analyses_created_at', table_name='contract_analyses')
    op.drop_index('ix_contract_analyses_user_id', table_name='contract_analyses')
    op.drop_table('contract_analyses')
    op.drop_index('ix_users_google_id', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
