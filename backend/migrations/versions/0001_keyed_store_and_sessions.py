"""Keyed store table and session tokens

1. Creates 'store_entries': one row per persisted collection, payload is
   the canonical JSON text of the whole collection
2. Creates 'session_tokens' for bearer-token sessions

Revision ID: 0001_keyed_store
Revises:
Create Date: 2026-10-17
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_keyed_store'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('store_entries',
        sa.Column('key', sa.String(length=128), nullable=False),
        sa.Column('payload', sa.Text(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('key')
    )

    op.create_table('session_tokens',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('employee_id', sa.String(length=64), nullable=False),
        sa.Column('token_hash', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_revoked', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_session_tokens_employee_id', 'session_tokens', ['employee_id'])
    op.create_index('ix_session_tokens_token_hash', 'session_tokens', ['token_hash'], unique=True)
    op.create_index('ix_session_tokens_expires_at', 'session_tokens', ['expires_at'])
    op.create_index('ix_session_tokens_employee_active', 'session_tokens', ['employee_id', 'is_revoked'])


def downgrade():
    op.drop_index('ix_session_tokens_employee_active', table_name='session_tokens')
    op.drop_index('ix_session_tokens_expires_at', table_name='session_tokens')
    op.drop_index('ix_session_tokens_token_hash', table_name='session_tokens')
    op.drop_index('ix_session_tokens_employee_id', table_name='session_tokens')
    op.drop_table('session_tokens')
    op.drop_table('store_entries')
