"""
Add accounts and link ledger transactions to them

Revision ID: 0002_add_accounts
Revises: 0001_initial_schema
Create Date: 2025-07-01 00:00:00
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0002_add_accounts'
down_revision = '0001_initial_schema'
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'account',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
    )
    op.create_index('ix_account_user', 'account', ['user_id'])

    # batch mode so SQLite can add the foreign key
    with op.batch_alter_table('transaction') as batch:
        batch.add_column(sa.Column('account_id', sa.Integer(), nullable=True))
        batch.create_foreign_key(
            'fk_transaction_account_id', 'account', ['account_id'], ['id'], ondelete='SET NULL'
        )


def downgrade() -> None:
    with op.batch_alter_table('transaction') as batch:
        batch.drop_constraint('fk_transaction_account_id', type_='foreignkey')
        batch.drop_column('account_id')
    op.drop_index('ix_account_user', table_name='account')
    op.drop_table('account')
