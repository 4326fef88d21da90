"""
Pydantic schemas for intercompany loan transfers.
"""

from datetime import date
from decimal import Decimal

from pydantic import AliasChoices, BaseModel, Field


class LoanTransferRequest(BaseModel):
    from_entity_id: int
    to_entity_id: int
    amount: Decimal
    entry_date: date = Field(
        validation_alias=AliasChoices("entry_date", "date")
    )
    description: str = Field(min_length=1, max_length=400)
    # "Loan to Subsidiary" in the lender, "Loan from Parent" in the borrower
    from_loan_account_id: int
    to_loan_account_id: int
    from_bank_account_id: int
    to_bank_account_id: int
    created_by: str | None = Field(default=None, max_length=255)


class LoanTransferResponse(BaseModel):
    from_journal_entry_id: int
    to_journal_entry_id: int
    amount: Decimal
