"""initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


account_type_enum = sa.Enum(
    'ASSET', 'LIABILITY', 'EQUITY', 'REVENUE', 'EXPENSE',
    name='account_type_enum',
)
source_system_enum = sa.Enum(
    'BOOKING_APP', 'MANUAL', 'AI_CFO', 'XERO_SYNC', 'SYSTEM',
    name='source_system_enum',
)
journal_status_enum = sa.Enum(
    'DRAFT', 'POSTED', 'VOIDED', name='journal_status_enum',
)
contact_type_enum = sa.Enum(
    'CUSTOMER', 'SUPPLIER', 'INTERCOMPANY', name='contact_type_enum',
)
booking_status_enum = sa.Enum(
    'PENDING', 'CONFIRMED', 'CANCELLED', 'COMPLETED',
    name='booking_status_enum',
)
booking_event_type_enum = sa.Enum(
    'DEPOSIT', 'BALANCE', 'PAYOUT', 'MARGIN', 'CANCEL', 'REFUND',
    name='booking_event_type_enum',
)
invoice_status_enum = sa.Enum(
    'DRAFT', 'SENT', 'PARTIAL', 'PAID', 'VOIDED', name='invoice_status_enum',
)
payment_direction_enum = sa.Enum(
    'INCOMING', 'OUTGOING', name='payment_direction_enum',
)
payment_method_enum = sa.Enum(
    'STRIPE', 'BANK_TRANSFER', 'PAYPAL', 'CASH', 'OTHER',
    name='payment_method_enum',
)

ALL_ENUMS = (
    account_type_enum,
    source_system_enum,
    journal_status_enum,
    contact_type_enum,
    booking_status_enum,
    booking_event_type_enum,
    invoice_status_enum,
    payment_direction_enum,
    payment_method_enum,
)


def money_column(name: str, **kwargs) -> sa.Column:
    return sa.Column(name, sa.Numeric(19, 4), nullable=False, **kwargs)


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'entities',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('legal_identifier', sa.String(100), nullable=True),
        sa.Column('currency_code', sa.String(3), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'accounts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('entity_id', sa.Integer(), sa.ForeignKey('entities.id'), nullable=False),
        sa.Column('code', sa.String(50), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('account_type', account_type_enum, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('is_bank_account', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('entity_id', 'code', name='uq_accounts_entity_code'),
    )
    op.create_index('ix_accounts_entity_id', 'accounts', ['entity_id'])

    op.create_table(
        'tax_codes',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('entity_id', sa.Integer(), sa.ForeignKey('entities.id'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('rate', sa.Numeric(10, 4), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_tax_codes_entity_id', 'tax_codes', ['entity_id'])

    op.create_table(
        'journal_entries',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('entity_id', sa.Integer(), sa.ForeignKey('entities.id'), nullable=False),
        sa.Column('entry_date', sa.Date(), nullable=False),
        sa.Column('description', sa.String(500), nullable=False),
        sa.Column('source_system', source_system_enum, nullable=False),
        sa.Column('source_reference', sa.String(255), nullable=True),
        sa.Column('status', journal_status_enum, nullable=False),
        sa.Column('created_by', sa.String(255), nullable=True),
        sa.Column(
            'reverses_entry_id', sa.Integer(),
            sa.ForeignKey('journal_entries.id'), nullable=True,
        ),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_journal_entries_entity_id', 'journal_entries', ['entity_id'])
    op.create_index('ix_journal_entries_entry_date', 'journal_entries', ['entry_date'])
    op.create_index('ix_journal_entries_source_reference', 'journal_entries', ['source_reference'])
    op.create_index('ix_journal_entries_reverses_entry_id', 'journal_entries', ['reverses_entry_id'])

    op.create_table(
        'journal_lines',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column(
            'journal_entry_id', sa.Integer(),
            sa.ForeignKey('journal_entries.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column('account_id', sa.Integer(), sa.ForeignKey('accounts.id'), nullable=False),
        money_column('debit'),
        money_column('credit'),
        sa.Column('tax_code_id', sa.Integer(), sa.ForeignKey('tax_codes.id'), nullable=True),
        money_column('tax_amount'),
        sa.Column('memo', sa.String(500), nullable=True),
    )
    op.create_index('ix_journal_lines_journal_entry_id', 'journal_lines', ['journal_entry_id'])
    op.create_index('ix_journal_lines_account_id', 'journal_lines', ['account_id'])

    op.create_table(
        'contacts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('entity_id', sa.Integer(), sa.ForeignKey('entities.id'), nullable=False),
        sa.Column('contact_type', contact_type_enum, nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('external_ref', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_contacts_entity_id', 'contacts', ['entity_id'])

    op.create_table(
        'bookings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('entity_id', sa.Integer(), sa.ForeignKey('entities.id'), nullable=False),
        sa.Column('external_booking_id', sa.String(255), nullable=False),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('contacts.id'), nullable=False),
        sa.Column('supplier_id', sa.Integer(), sa.ForeignKey('contacts.id'), nullable=True),
        sa.Column('status', booking_status_enum, nullable=False),
        money_column('total_job_amount'),
        money_column('deposit_amount'),
        money_column('balance_amount'),
        money_column('margin_amount'),
        money_column('supplier_payout_amount'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint(
            'entity_id', 'external_booking_id',
            name='uq_bookings_entity_external_id',
        ),
    )
    op.create_index('ix_bookings_entity_id', 'bookings', ['entity_id'])
    op.create_index('ix_bookings_external_booking_id', 'bookings', ['external_booking_id'])
    op.create_index('ix_bookings_customer_id', 'bookings', ['customer_id'])
    op.create_index('ix_bookings_supplier_id', 'bookings', ['supplier_id'])

    op.create_table(
        'booking_events',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column(
            'booking_id', sa.Integer(),
            sa.ForeignKey('bookings.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column('event_type', booking_event_type_enum, nullable=False),
        money_column('amount'),
        sa.Column(
            'journal_entry_id', sa.Integer(),
            sa.ForeignKey('journal_entries.id'), nullable=True,
        ),
        sa.Column('details', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_booking_events_booking_id', 'booking_events', ['booking_id'])
    op.create_index('ix_booking_events_event_type', 'booking_events', ['event_type'])
    op.create_index('ix_booking_events_journal_entry_id', 'booking_events', ['journal_entry_id'])

    op.create_table(
        'invoices',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('entity_id', sa.Integer(), sa.ForeignKey('entities.id'), nullable=False),
        sa.Column('contact_id', sa.Integer(), sa.ForeignKey('contacts.id'), nullable=False),
        sa.Column('number', sa.String(100), nullable=False),
        sa.Column('issue_date', sa.Date(), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('status', invoice_status_enum, nullable=False),
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
        sa.UniqueConstraint('entity_id', 'number', name='uq_invoices_entity_number'),
    )
    op.create_index('ix_invoices_entity_id', 'invoices', ['entity_id'])
    op.create_index('ix_invoices_contact_id', 'invoices', ['contact_id'])

    op.create_table(
        'payments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('entity_id', sa.Integer(), sa.ForeignKey('entities.id'), nullable=False),
        sa.Column('contact_id', sa.Integer(), sa.ForeignKey('contacts.id'), nullable=False),
        sa.Column('direction', payment_direction_enum, nullable=False),
        money_column('amount'),
        sa.Column('currency_code', sa.String(3), nullable=False),
        sa.Column('payment_date', sa.Date(), nullable=False),
        sa.Column('method', payment_method_enum, nullable=False),
        sa.Column('external_ref', sa.String(255), nullable=True),
        sa.Column(
            'journal_entry_id', sa.Integer(),
            sa.ForeignKey('journal_entries.id'), nullable=True,
        ),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_payments_entity_id', 'payments', ['entity_id'])
    op.create_index('ix_payments_contact_id', 'payments', ['contact_id'])

    op.create_table(
        'invoice_payments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('invoice_id', sa.Integer(), sa.ForeignKey('invoices.id'), nullable=False),
        sa.Column('payment_id', sa.Integer(), sa.ForeignKey('payments.id'), nullable=False),
        money_column('amount_applied'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_invoice_payments_invoice_id', 'invoice_payments', ['invoice_id'])
    op.create_index('ix_invoice_payments_payment_id', 'invoice_payments', ['payment_id'])


def downgrade() -> None:
    """Downgrade schema."""
    for table in (
        'invoice_payments',
        'payments',
        'invoices',
        'booking_events',
        'bookings',
        'contacts',
        'journal_lines',
        'journal_entries',
        'tax_codes',
        'accounts',
        'entities',
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for enum in ALL_ENUMS:
        enum.drop(bind, checkfirst=True)
