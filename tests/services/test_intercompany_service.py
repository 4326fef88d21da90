"""
Tests for the IntercompanyService loan transfer.

The transfer posts one entry per entity. The interesting cases
are the failures: nothing posted vs. half posted.
"""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import select

from entity_ledger.errors import (
    NotFoundError,
    PartialCompletionError,
    ValidationError,
)
from entity_ledger.models.journal_entry import JournalEntry
from entity_ledger.schemas.intercompany import LoanTransferRequest
from entity_ledger.services.intercompany_service import IntercompanyService
from entity_ledger.services.ledger_service import LedgerService


def loan_request(parent_accounts, sub_accounts, parent, sub, amount="25000", **overrides):
    fields = dict(
        from_entity_id=parent.id,
        to_entity_id=sub.id,
        amount=Decimal(amount),
        entry_date=date(2025, 5, 1),
        description="Working capital",
        from_loan_account_id=parent_accounts["1500"].id,
        to_loan_account_id=sub_accounts["2500"].id,
        from_bank_account_id=parent_accounts["1000"].id,
        to_bank_account_id=sub_accounts["1000"].id,
    )
    fields.update(overrides)
    return LoanTransferRequest(**fields)


def entries_of(db_session, entity):
    return db_session.execute(
        select(JournalEntry).where(JournalEntry.entity_id == entity.id)
    ).scalars().all()


class TestLoanTransfer:

    def test_posts_one_entry_in_each_entity(self, db_session, make_entity):
        parent, parent_accounts = make_entity("Parent")
        sub, sub_accounts = make_entity("Subsidiary")
        ledger = LedgerService(db_session)

        result = IntercompanyService(db_session).create_loan_transfer(
            loan_request(parent_accounts, sub_accounts, parent, sub)
        )

        assert result.amount == Decimal("25000.0000")
        assert ledger.get_account_balance(parent_accounts["1500"].id) == Decimal("25000.0000")
        assert ledger.get_account_balance(parent_accounts["1000"].id) == Decimal("-25000.0000")
        assert ledger.get_account_balance(sub_accounts["1000"].id) == Decimal("25000.0000")
        assert ledger.get_account_balance(sub_accounts["2500"].id) == Decimal("25000.0000")

        from_entry = ledger.get_journal_entry(result.from_journal_entry_id)
        to_entry = ledger.get_journal_entry(result.to_journal_entry_id)
        assert from_entry.entity_id == parent.id
        assert to_entry.entity_id == sub.id
        assert from_entry.source_reference == to_entry.source_reference

    def test_same_entity_rejected(self, db_session, make_entity):
        parent, parent_accounts = make_entity("Parent")

        with pytest.raises(ValidationError, match="same entity"):
            IntercompanyService(db_session).create_loan_transfer(
                loan_request(parent_accounts, parent_accounts, parent, parent)
            )

    def test_first_step_failure_posts_nothing(self, db_session, make_entity):
        parent, parent_accounts = make_entity("Parent")
        sub, sub_accounts = make_entity("Subsidiary")

        with pytest.raises(NotFoundError):
            IntercompanyService(db_session).create_loan_transfer(
                loan_request(
                    parent_accounts, sub_accounts, parent, sub,
                    from_loan_account_id=9999,
                )
            )

        assert entries_of(db_session, parent) == []
        assert entries_of(db_session, sub) == []

    def test_second_step_failure_is_partial_completion(self, db_session, make_entity):
        parent, parent_accounts = make_entity("Parent")
        sub, sub_accounts = make_entity("Subsidiary")

        # The borrower's loan account given from the wrong entity
        with pytest.raises(PartialCompletionError) as exc_info:
            IntercompanyService(db_session).create_loan_transfer(
                loan_request(
                    parent_accounts, sub_accounts, parent, sub,
                    to_loan_account_id=parent_accounts["2500"].id,
                )
            )

        error = exc_info.value
        assert error.status_code == 409
        assert "Manual reconciliation required" in str(error)

        kept = entries_of(db_session, parent)
        assert [e.id for e in kept] == error.completed_entry_ids
        assert entries_of(db_session, sub) == []
