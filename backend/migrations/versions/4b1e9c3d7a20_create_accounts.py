"""create accounts

Revision ID: 4b1e9c3d7a20
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""
import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = '4b1e9c3d7a20'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'accounts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('account_id', sa.String(length=20), nullable=False),
        sa.Column('password_hash', sa.String(length=256), nullable=False),
        sa.Column('display_name', sa.String(length=30), nullable=False),
        sa.Column('nickname', sa.String(length=20), nullable=False),
        sa.Column('email', sa.String(length=254), nullable=False),
        sa.Column(
            'role',
            sa.Enum('USER', 'ADMIN', name='account_role', native_enum=False, length=16),
            nullable=False,
        ),
        sa.Column(
            'gender',
            sa.Enum('MALE', 'FEMALE', name='account_gender', native_enum=False, length=16),
            nullable=True,
        ),
        sa.Column('birth_date', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_accounts'),
        sa.UniqueConstraint('account_id', name='uq_accounts_account_id'),
        sa.UniqueConstraint('nickname', name='uq_accounts_nickname'),
        sa.UniqueConstraint('email', name='uq_accounts_email'),
    )


def downgrade():
    op.drop_table('accounts')
