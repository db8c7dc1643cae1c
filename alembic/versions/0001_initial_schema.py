"""initial schema: users, goals, transactions, notifications

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None

JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('is_superuser', sa.Boolean(), nullable=False),
        sa.Column('is_verified', sa.Boolean(), nullable=False),
        sa.Column('full_name', sa.String(), nullable=True),
        sa.Column('wallet_address', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    op.create_table(
        'goals',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('user_id', sa.Uuid(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('coin', sa.String(length=10), nullable=False),
        sa.Column('target_amount', sa.Float(), nullable=False),
        sa.Column('invested_amount', sa.Float(), nullable=False),
        sa.Column('contribution_amount', sa.Float(), nullable=False),
        sa.Column('frequency', sa.Enum('DAILY', 'WEEKLY', 'MONTHLY', name='frequency'), nullable=False),
        sa.Column('status', sa.Enum('ACTIVE', 'PAUSED', 'COMPLETED', name='goal_status'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(op.f('ix_goals_user_id'), 'goals', ['user_id'])
    op.create_index('ix_goals_user_status', 'goals', ['user_id', 'status'])

    op.create_table(
        'transactions',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('goal_id', sa.Uuid(as_uuid=True), sa.ForeignKey('goals.id', ondelete='CASCADE'), nullable=False),
        sa.Column('batch_id', sa.String(length=64), nullable=False),
        sa.Column('type', sa.Enum('ONRAMP', 'SWAP', name='transaction_type'), nullable=False),
        sa.Column('provider', sa.Enum('ONMETA', 'JUPITER', name='provider'), nullable=True),
        sa.Column('network', sa.Enum('DEVNET', 'MAINNET', name='network'), nullable=True),
        sa.Column('txn_hash', sa.String(), nullable=True),
        sa.Column('amount_reference', sa.Float(), nullable=True),
        sa.Column('amount_crypto', sa.Float(), nullable=True),
        sa.Column('token_mint', sa.String(), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('meta', JSON_TYPE, nullable=True),
        sa.UniqueConstraint('batch_id', 'type', name='uq_transactions_batch_id_type'),
    )
    op.create_index(op.f('ix_transactions_goal_id'), 'transactions', ['goal_id'])
    op.create_index(op.f('ix_transactions_batch_id'), 'transactions', ['batch_id'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('user_id', sa.Uuid(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('message', sa.String(), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('meta', sa.JSON(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(op.f('ix_notifications_user_id'), 'notifications', ['user_id'])


def downgrade():
    op.drop_index(op.f('ix_notifications_user_id'), table_name='notifications')
    op.drop_table('notifications')
    op.drop_index(op.f('ix_transactions_batch_id'), table_name='transactions')
    op.drop_index(op.f('ix_transactions_goal_id'), table_name='transactions')
    op.drop_table('transactions')
    op.drop_index('ix_goals_user_status', table_name='goals')
    op.drop_index(op.f('ix_goals_user_id'), table_name='goals')
    op.drop_table('goals')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_table('users')
    sa.Enum(name='network').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='provider').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='transaction_type').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='goal_status').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='frequency').drop(op.get_bind(), checkfirst=True)
