"""
Pydantic schemas for supplier bills.

Payments against a bill are returned as PaymentResponse from
entity_ledger.schemas.invoice.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from entity_ledger.models.enums import BillStatus, PaymentMethod


class BillCreate(BaseModel):
    contact_id: int
    number: str = Field(min_length=1, max_length=100)
    issue_date: date
    due_date: date
    currency_code: str = Field(default="AUD", min_length=3, max_length=3)
    subtotal_amount: Decimal
    tax_amount: Decimal = Decimal("0")
    external_ref: str | None = Field(default=None, max_length=255)


class BillPostRequest(BaseModel):
    payable_account_id: int
    expense_account_id: int
    tax_asset_account_id: int | None = None


class BillPaymentRequest(BaseModel):
    amount: Decimal
    payment_date: date
    method: PaymentMethod = PaymentMethod.BANK_TRANSFER
    external_ref: str | None = Field(default=None, max_length=255)
    bank_account_id: int
    payable_account_id: int


class BillResponse(BaseModel):
    id: int
    entity_id: int
    contact_id: int
    number: str
    issue_date: date
    due_date: date
    status: BillStatus
    currency_code: str
    subtotal_amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    external_ref: str | None
    journal_entry_id: int | None

    model_config = {"from_attributes": True}
