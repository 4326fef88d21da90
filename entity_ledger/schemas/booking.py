"""
Pydantic schemas for the booking workflow.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import AliasChoices, BaseModel, Field

from entity_ledger.models.enums import (
    BookingStatus,
    BookingEventType,
    CancellationScenario,
)


class BookingCreate(BaseModel):
    entity_id: int
    external_booking_id: str = Field(min_length=1, max_length=255)
    customer_name: str = Field(min_length=1, max_length=255)
    customer_email: str | None = Field(default=None, max_length=255)
    supplier_name: str | None = Field(default=None, max_length=255)
    supplier_email: str | None = Field(default=None, max_length=255)
    total_job_amount: Decimal
    deposit_amount: Decimal = Decimal("0")
    margin_amount: Decimal = Decimal("0")


class BookingAccountIds(BaseModel):
    """The accounts a booking posts against."""
    bank_account_id: int
    customer_deposits_held_account_id: int
    accounts_receivable_account_id: int
    margin_revenue_account_id: int
    supplier_payouts_account_id: int
    gst_on_income_account_id: int


class BookingAmountRequest(BaseModel):
    """Deposit, balance, payout or margin movement."""
    amount: Decimal
    entry_date: date = Field(
        validation_alias=AliasChoices("entry_date", "date")
    )
    accounts: BookingAccountIds
    include_gst: bool = True


class BookingCancelRequest(BaseModel):
    entry_date: date = Field(
        validation_alias=AliasChoices("entry_date", "date")
    )
    accounts: BookingAccountIds
    scenario: CancellationScenario
    new_supplier_id: int | None = None


class BookingRefundRequest(BaseModel):
    amount: Decimal
    entry_date: date = Field(
        validation_alias=AliasChoices("entry_date", "date")
    )
    accounts: BookingAccountIds
    refund_from_deposit: bool = True


class BookingEventResponse(BaseModel):
    id: int
    event_type: BookingEventType
    amount: Decimal
    journal_entry_id: int | None
    details: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class BookingResponse(BaseModel):
    id: int
    entity_id: int
    external_booking_id: str
    customer_id: int
    supplier_id: int | None
    status: BookingStatus
    total_job_amount: Decimal
    deposit_amount: Decimal
    balance_amount: Decimal
    margin_amount: Decimal
    supplier_payout_amount: Decimal
    created_at: datetime
    updated_at: datetime
    events: list[BookingEventResponse] = []

    model_config = {"from_attributes": True}
