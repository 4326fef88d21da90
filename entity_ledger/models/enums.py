"""
Shared enumerations for database models.

Python enums mapped to database enums ensure only valid values
are stored.
"""

import enum


class AccountType(str, enum.Enum):
    """The five fundamental accounting categories."""
    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    REVENUE = "REVENUE"
    EXPENSE = "EXPENSE"


class SourceSystem(str, enum.Enum):
    """Which process originated a journal entry. Audit only."""
    BOOKING_APP = "BOOKING_APP"
    MANUAL = "MANUAL"
    AI_CFO = "AI_CFO"
    XERO_SYNC = "XERO_SYNC"
    SYSTEM = "SYSTEM"


class JournalStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    POSTED = "POSTED"
    VOIDED = "VOIDED"


class ContactType(str, enum.Enum):
    CUSTOMER = "CUSTOMER"
    SUPPLIER = "SUPPLIER"
    INTERCOMPANY = "INTERCOMPANY"


class BookingStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class BookingEventType(str, enum.Enum):
    DEPOSIT = "DEPOSIT"
    BALANCE = "BALANCE"
    PAYOUT = "PAYOUT"
    MARGIN = "MARGIN"
    CANCEL = "CANCEL"
    REFUND = "REFUND"


class CancellationScenario(str, enum.Enum):
    DEPOSIT_KEPT = "DEPOSIT_KEPT"
    DEPOSIT_REFUNDED = "DEPOSIT_REFUNDED"
    TRANSFER_TO_NEW_SUPPLIER = "TRANSFER_TO_NEW_SUPPLIER"


class InvoiceStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    SENT = "SENT"
    PARTIAL = "PARTIAL"
    PAID = "PAID"
    VOIDED = "VOIDED"


class BillStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    SENT = "SENT"
    PARTIAL = "PARTIAL"
    PAID = "PAID"
    VOIDED = "VOIDED"


class PaymentDirection(str, enum.Enum):
    INCOMING = "INCOMING"
    OUTGOING = "OUTGOING"


class PaymentMethod(str, enum.Enum):
    STRIPE = "STRIPE"
    BANK_TRANSFER = "BANK_TRANSFER"
    PAYPAL = "PAYPAL"
    CASH = "CASH"
    OTHER = "OTHER"
