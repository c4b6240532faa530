"""
Initial schema: users, categories, ledger, recurring obligations, budgets and templates

Revision ID: 0001_initial_schema
Revises:
Create Date: 2025-06-01 00:00:00
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
    ]


def upgrade() -> None:
    categorytype = sa.Enum('INCOME', 'EXPENSE', name='categorytype')
    recurringfrequency = sa.Enum('WEEKLY', 'MONTHLY', 'YEARLY', name='recurringfrequency')

    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False, unique=True),
        sa.Column('name', sa.String(length=100), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        'category',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('type', categorytype, nullable=False),
        sa.Column('color', sa.String(length=9), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'name', name='uq_category_user_name'),
    )

    op.create_table(
        'transaction',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        sa.Column('category_id', sa.Integer(), sa.ForeignKey('category.id', ondelete='SET NULL'), nullable=True),
        sa.Column('amount', sa.Numeric(18, 2), nullable=False),
        sa.Column('occurred_at', sa.Date(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_planned', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('external_id', sa.String(length=64), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'external_id', name='uq_transaction_external_id'),
    )
    op.create_index('ix_transaction_user_date', 'transaction', ['user_id', 'occurred_at'])

    op.create_table(
        'recurringtransaction',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        sa.Column('category_id', sa.Integer(), sa.ForeignKey('category.id', ondelete='SET NULL'), nullable=True),
        sa.Column('amount', sa.Numeric(18, 2), nullable=False),
        sa.Column('frequency', recurringfrequency, nullable=False),
        sa.Column('next_execution_date', sa.Date(), nullable=False),
        sa.Column('last_execution_date', sa.Date(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index('ix_recurring_due', 'recurringtransaction', ['is_active', 'next_execution_date'])
    op.create_index('ix_recurring_user', 'recurringtransaction', ['user_id'])

    op.create_table(
        'budget',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        sa.Column('category_id', sa.Integer(), sa.ForeignKey('category.id', ondelete='CASCADE'), nullable=False),
        sa.Column('month', sa.Date(), nullable=False),
        sa.Column('limit_amount', sa.Numeric(18, 2), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'category_id', 'month', name='uq_budget_user_category_month'),
    )

    op.create_table(
        'budgettemplate',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        sa.Column('category_id', sa.Integer(), sa.ForeignKey('category.id', ondelete='CASCADE'), nullable=False),
        sa.Column('amount', sa.Numeric(18, 2), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('start_month', sa.Date(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'category_id', name='uq_budget_template_user_category'),
    )
    op.create_index('ix_budget_template_active', 'budgettemplate', ['is_active'])


def downgrade() -> None:
    op.drop_index('ix_budget_template_active', table_name='budgettemplate')
    op.drop_table('budgettemplate')
    op.drop_table('budget')
    op.drop_index('ix_recurring_user', table_name='recurringtransaction')
    op.drop_index('ix_recurring_due', table_name='recurringtransaction')
    op.drop_table('recurringtransaction')
    op.drop_index('ix_transaction_user_date', table_name='transaction')
    op.drop_table('transaction')
    op.drop_table('category')
    op.drop_table('user')

    bind = op.get_bind()
    sa.Enum(name='recurringfrequency').drop(bind, checkfirst=True)
    sa.Enum(name='categorytype').drop(bind, checkfirst=True)
