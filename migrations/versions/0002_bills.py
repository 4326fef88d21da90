"""supplier bills

Revision ID: 0002_bills
Revises: 0001_initial_schema
Create Date: 2026-10-20 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0002_bills'
down_revision: Union[str, None] = '0001_initial_schema'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


bill_status_enum = sa.Enum(
    'DRAFT', 'SENT', 'PARTIAL', 'PAID', 'VOIDED', name='bill_status_enum',
)


def money_column(name: str, **kwargs) -> sa.Column:
    return sa.Column(name, sa.Numeric(19, 4), nullable=False, **kwargs)


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'bills',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('entity_id', sa.Integer(), sa.ForeignKey('entities.id'), nullable=False),
        sa.Column('contact_id', sa.Integer(), sa.ForeignKey('contacts.id'), nullable=False),
        sa.Column('number', sa.String(100), nullable=False),
        sa.Column('issue_date', sa.Date(), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('status', bill_status_enum, nullable=False),
        sa.Column('currency_code', sa.String(3), nullable=False),
        money_column('subtotal_amount'),
        money_column('tax_amount'),
        money_column('total_amount'),
        sa.Column('external_ref', sa.String(255), nullable=True),
        sa.Column(
            'journal_entry_id', sa.Integer(),
            sa.ForeignKey('journal_entries.id'), nullable=True,
        ),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('entity_id', 'number', name='uq_bills_entity_number'),
    )
    op.create_index('ix_bills_entity_id', 'bills', ['entity_id'])
    op.create_index('ix_bills_contact_id', 'bills', ['contact_id'])

    op.create_table(
        'bill_payments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('bill_id', sa.Integer(), sa.ForeignKey('bills.id'), nullable=False),
        sa.Column('payment_id', sa.Integer(), sa.ForeignKey('payments.id'), nullable=False),
        money_column('amount_applied'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_bill_payments_bill_id', 'bill_payments', ['bill_id'])
    op.create_index('ix_bill_payments_payment_id', 'bill_payments', ['payment_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('bill_payments')
    op.drop_table('bills')
    bill_status_enum.drop(op.get_bind(), checkfirst=True)
