"""
Intercompany service: loans between two entities.

A loan touches two ledgers, so it is two journal entries:
    lender:   DR Loan to Subsidiary / CR Bank
    borrower: DR Bank / CR Loan from Parent

The steps run in order and the lender entry is committed before
the borrower entry is attempted. If the lender entry fails nothing
has happened and its error propagates unchanged. If the borrower
entry fails, the lender entry stays on the books and a
PartialCompletionError names it so it can be reconciled.
"""

import logging

from sqlalchemy.orm import Session

from entity_ledger import money
from entity_ledger.errors import LedgerError, PartialCompletionError, ValidationError
from entity_ledger.models.enums import SourceSystem
from entity_ledger.schemas.intercompany import LoanTransferRequest, LoanTransferResponse
from entity_ledger.schemas.ledger import JournalLineCreate, PostJournalRequest
from entity_ledger.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)


def loan_reference(from_entity_id: int, to_entity_id: int) -> str:
    return f"INTERCOMPANY_LOAN_FROM_{from_entity_id}_TO_{to_entity_id}"


class IntercompanyService:

    def __init__(self, db: Session):
        self.db = db
        self.ledger = LedgerService(db)

    def create_loan_transfer(self, request: LoanTransferRequest) -> LoanTransferResponse:
        logger.info(
            "Creating intercompany loan transfer from_entity_id=%s "
            "to_entity_id=%s amount=%s",
            request.from_entity_id, request.to_entity_id, request.amount,
        )

        if request.from_entity_id == request.to_entity_id:
            raise ValidationError(
                "Cannot create loan transfer within the same entity"
            )

        amount = money.to_amount(request.amount)
        if amount <= 0:
            raise ValidationError("Loan amount must be positive")

        reference = loan_reference(request.from_entity_id, request.to_entity_id)

        # Step 1: lender
        from_entry = self.ledger.post_journal_entry(
            request.from_entity_id,
            PostJournalRequest(
                entry_date=request.entry_date,
                description=(
                    f"{request.description} - Loan to entity {request.to_entity_id}"
                ),
                source_system=SourceSystem.MANUAL,
                source_reference=reference,
                lines=[
                    JournalLineCreate(
                        account_id=request.from_loan_account_id,
                        debit=amount,
                        memo="Loan advanced to subsidiary",
                    ),
                    JournalLineCreate(
                        account_id=request.from_bank_account_id,
                        credit=amount,
                        memo="Cash transferred",
                    ),
                ],
                created_by=request.created_by,
            ),
        )
        from_entry_id = from_entry.id
        self.db.commit()

        # Step 2: borrower
        try:
            to_entry = self.ledger.post_journal_entry(
                request.to_entity_id,
                PostJournalRequest(
                    entry_date=request.entry_date,
                    description=(
                        f"{request.description} - Loan from entity "
                        f"{request.from_entity_id}"
                    ),
                    source_system=SourceSystem.MANUAL,
                    source_reference=reference,
                    lines=[
                        JournalLineCreate(
                            account_id=request.to_bank_account_id,
                            debit=amount,
                            memo="Cash received",
                        ),
                        JournalLineCreate(
                            account_id=request.to_loan_account_id,
                            credit=amount,
                            memo="Loan received from parent",
                        ),
                    ],
                    created_by=request.created_by,
                ),
            )
        except LedgerError as e:
            self.db.rollback()
            logger.error(
                "Intercompany loan transfer partially completed "
                "from_journal_entry_id=%s error=%s",
                from_entry_id, e.message,
            )
            raise PartialCompletionError(
                f"Borrower journal entry failed: {e.message}.",
                [from_entry_id],
            ) from e

        self.db.commit()

        logger.info(
            "Intercompany loan transfer created from_journal_entry_id=%s "
            "to_journal_entry_id=%s",
            from_entry_id, to_entry.id,
        )
        return LoanTransferResponse(
            from_journal_entry_id=from_entry_id,
            to_journal_entry_id=to_entry.id,
            amount=amount,
        )
