"""
Pydantic schemas for invoices and their payments.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from entity_ledger.models.enums import (
    InvoiceStatus,
    PaymentDirection,
    PaymentMethod,
)


class InvoiceCreate(BaseModel):
    contact_id: int
    number: str = Field(min_length=1, max_length=100)
    issue_date: date
    due_date: date
    currency_code: str = Field(default="AUD", min_length=3, max_length=3)
    subtotal_amount: Decimal
    tax_amount: Decimal = Decimal("0")
    external_ref: str | None = Field(default=None, max_length=255)


class InvoicePostRequest(BaseModel):
    receivable_account_id: int
    revenue_account_id: int
    tax_liability_account_id: int | None = None


class InvoicePaymentRequest(BaseModel):
    amount: Decimal
    payment_date: date
    method: PaymentMethod = PaymentMethod.BANK_TRANSFER
    external_ref: str | None = Field(default=None, max_length=255)
    bank_account_id: int
    receivable_account_id: int


class InvoiceResponse(BaseModel):
    id: int
    entity_id: int
    contact_id: int
    number: str
    issue_date: date
    due_date: date
    status: InvoiceStatus
    currency_code: str
    subtotal_amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    external_ref: str | None
    journal_entry_id: int | None

    model_config = {"from_attributes": True}


class PaymentResponse(BaseModel):
    id: int
    entity_id: int
    contact_id: int
    direction: PaymentDirection
    amount: Decimal
    currency_code: str
    payment_date: date
    method: PaymentMethod
    external_ref: str | None
    journal_entry_id: int | None

    model_config = {"from_attributes": True}
