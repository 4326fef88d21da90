"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata.
"""

from entity_ledger.models.base import Base
from entity_ledger.models.enums import (
    AccountType,
    SourceSystem,
    JournalStatus,
    ContactType,
    BookingStatus,
    BookingEventType,
    CancellationScenario,
    InvoiceStatus,
    BillStatus,
    PaymentDirection,
    PaymentMethod,
)
from entity_ledger.models.entity import Entity
from entity_ledger.models.account import Account
from entity_ledger.models.tax_code import TaxCode
from entity_ledger.models.journal_entry import JournalEntry, JournalLine
from entity_ledger.models.contact import Contact
from entity_ledger.models.booking import Booking, BookingEvent
from entity_ledger.models.invoice import Invoice, Payment, InvoicePayment
from entity_ledger.models.bill import Bill, BillPayment

__all__ = [
    "Base",
    "AccountType",
    "SourceSystem",
    "JournalStatus",
    "ContactType",
    "BookingStatus",
    "BookingEventType",
    "CancellationScenario",
    "InvoiceStatus",
    "BillStatus",
    "PaymentDirection",
    "PaymentMethod",
    "Entity",
    "Account",
    "TaxCode",
    "JournalEntry",
    "JournalLine",
    "Contact",
    "Booking",
    "BookingEvent",
    "Invoice",
    "Payment",
    "InvoicePayment",
    "Bill",
    "BillPayment",
]
