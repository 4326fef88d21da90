"""
Pydantic schemas for journal operations.

These define the API contract. They are kept separate from the
database models because the API shape and the storage shape
differ (e.g. an entry and its lines are returned side by side).

Amounts are not range-checked here: the LedgerService owns the
line rules so that every caller, HTTP or not, gets the same
errors.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import AliasChoices, BaseModel, Field

from entity_ledger.models.enums import JournalStatus, SourceSystem


# --- Request Schemas ---

class JournalLineCreate(BaseModel):
    """A single debit or credit against an account."""
    account_id: int
    debit: Decimal = Decimal("0")
    credit: Decimal = Decimal("0")
    tax_code_id: int | None = None
    memo: str | None = Field(default=None, max_length=500)


class PostJournalRequest(BaseModel):
    """A proposed journal entry. Debits must equal credits."""
    entry_date: date = Field(
        validation_alias=AliasChoices("entry_date", "date")
    )
    description: str = Field(min_length=1, max_length=500)
    source_system: SourceSystem = SourceSystem.MANUAL
    source_reference: str | None = Field(default=None, max_length=255)
    lines: list[JournalLineCreate]
    created_by: str | None = Field(default=None, max_length=255)


class ReverseJournalRequest(BaseModel):
    entry_date: date = Field(
        validation_alias=AliasChoices("entry_date", "date")
    )
    reason: str = Field(min_length=1, max_length=255)
    created_by: str | None = Field(default=None, max_length=255)


# --- Response Schemas ---

class JournalLineResponse(BaseModel):
    id: int
    account_id: int
    debit: Decimal
    credit: Decimal
    tax_code_id: int | None
    tax_amount: Decimal
    memo: str | None

    model_config = {"from_attributes": True}


class JournalEntryResponse(BaseModel):
    id: int
    entity_id: int
    entry_date: date
    description: str
    source_system: SourceSystem
    source_reference: str | None
    status: JournalStatus
    created_by: str | None
    reverses_entry_id: int | None
    created_at: datetime

    model_config = {"from_attributes": True}


class JournalResultResponse(BaseModel):
    """A stored entry together with its lines."""
    entry: JournalEntryResponse
    lines: list[JournalLineResponse]
    total_debits: Decimal
    total_credits: Decimal


class AccountBalanceResponse(BaseModel):
    account_id: int
    account_code: str
    account_type: str
    as_of: date | None
    balance: Decimal
