"""
Tests for the BillService.
"""

from datetime import date
from decimal import Decimal

import pytest

from entity_ledger.errors import NotFoundError, ValidationError
from entity_ledger.models.enums import (
    AccountType,
    BillStatus,
    ContactType,
    PaymentDirection,
)
from entity_ledger.schemas.bill import (
    BillCreate,
    BillPaymentRequest,
    BillPostRequest,
)
from entity_ledger.schemas.chart import AccountCreate, ContactCreate
from entity_ledger.services.bill_service import BillService
from entity_ledger.services.entity_service import EntityService
from entity_ledger.services.ledger_service import LedgerService


@pytest.fixture
def payables_chart(db_session, entity_with_chart):
    """The standard chart plus GST paid and accounts payable."""
    entity, accounts = entity_with_chart
    service = EntityService(db_session)
    accounts["1200"] = service.create_account(entity.id, AccountCreate(
        code="1200", name="GST Paid", account_type=AccountType.ASSET,
    ))
    accounts["2200"] = service.create_account(entity.id, AccountCreate(
        code="2200", name="Accounts Payable", account_type=AccountType.LIABILITY,
    ))
    db_session.commit()
    return entity, accounts


def make_supplier(db_session, entity, contact_type=ContactType.SUPPLIER):
    contact = EntityService(db_session).create_contact(
        entity.id, ContactCreate(contact_type=contact_type, name="Big Lift Cranes")
    )
    db_session.commit()
    return contact


def make_bill(db_session, entity, contact, number="BILL-001", subtotal="2000", tax="200"):
    bill = BillService(db_session).create_bill(entity.id, BillCreate(
        contact_id=contact.id,
        number=number,
        issue_date=date(2025, 5, 1),
        due_date=date(2025, 5, 31),
        subtotal_amount=Decimal(subtotal),
        tax_amount=Decimal(tax),
    ))
    db_session.commit()
    return bill


def post_request(accounts):
    return BillPostRequest(
        payable_account_id=accounts["2200"].id,
        expense_account_id=accounts["6000"].id,
        tax_asset_account_id=accounts["1200"].id,
    )


def payment_request(accounts, amount):
    return BillPaymentRequest(
        amount=Decimal(amount),
        payment_date=date(2025, 5, 20),
        bank_account_id=accounts["1000"].id,
        payable_account_id=accounts["2200"].id,
    )


class TestCreateBill:

    def test_total_is_subtotal_plus_tax(self, db_session, payables_chart):
        entity, _ = payables_chart
        supplier = make_supplier(db_session, entity)

        bill = make_bill(db_session, entity, supplier)

        assert bill.status == BillStatus.DRAFT
        assert bill.total_amount == Decimal("2200.0000")
        assert bill.journal_entry_id is None

    def test_intercompany_contact_allowed(self, db_session, payables_chart):
        entity, _ = payables_chart
        group = make_supplier(db_session, entity, ContactType.INTERCOMPANY)

        bill = make_bill(db_session, entity, group)

        assert bill.contact_id == group.id

    def test_customer_contact_rejected(self, db_session, payables_chart):
        entity, _ = payables_chart
        customer = make_supplier(db_session, entity, ContactType.CUSTOMER)

        with pytest.raises(ValidationError, match="SUPPLIER or INTERCOMPANY"):
            make_bill(db_session, entity, customer)

    def test_duplicate_number_rejected(self, db_session, payables_chart):
        entity, _ = payables_chart
        supplier = make_supplier(db_session, entity)
        make_bill(db_session, entity, supplier)

        with pytest.raises(ValidationError, match="already exists"):
            make_bill(db_session, entity, supplier)

    def test_non_positive_subtotal_rejected(self, db_session, payables_chart):
        entity, _ = payables_chart
        supplier = make_supplier(db_session, entity)

        with pytest.raises(ValidationError, match="subtotal must be positive"):
            make_bill(db_session, entity, supplier, subtotal="0")


class TestPostBill:

    def test_posts_expense_tax_and_payable(self, db_session, payables_chart):
        entity, accounts = payables_chart
        supplier = make_supplier(db_session, entity)
        bill = make_bill(db_session, entity, supplier)

        bill = BillService(db_session).post_bill(
            entity.id, bill.id, post_request(accounts)
        )
        db_session.commit()

        assert bill.status == BillStatus.SENT
        entry = LedgerService(db_session).get_journal_entry(bill.journal_entry_id)
        assert entry.source_reference == f"BILL_{bill.id}"
        amounts = {line.account_id: (line.debit, line.credit) for line in entry.lines}
        assert amounts[accounts["6000"].id] == (Decimal("2000.0000"), Decimal("0.0000"))
        assert amounts[accounts["1200"].id] == (Decimal("200.0000"), Decimal("0.0000"))
        assert amounts[accounts["2200"].id] == (Decimal("0.0000"), Decimal("2200.0000"))

    def test_zero_tax_bill_has_two_lines(self, db_session, payables_chart):
        entity, accounts = payables_chart
        supplier = make_supplier(db_session, entity)
        bill = make_bill(db_session, entity, supplier, tax="0")

        bill = BillService(db_session).post_bill(entity.id, bill.id, BillPostRequest(
            payable_account_id=accounts["2200"].id,
            expense_account_id=accounts["6000"].id,
        ))

        entry = LedgerService(db_session).get_journal_entry(bill.journal_entry_id)
        assert len(entry.lines) == 2

    def test_tax_account_required_when_taxed(self, db_session, payables_chart):
        entity, accounts = payables_chart
        supplier = make_supplier(db_session, entity)
        bill = make_bill(db_session, entity, supplier)

        with pytest.raises(ValidationError, match="tax asset account"):
            BillService(db_session).post_bill(entity.id, bill.id, BillPostRequest(
                payable_account_id=accounts["2200"].id,
                expense_account_id=accounts["6000"].id,
            ))

    def test_only_draft_can_be_posted(self, db_session, payables_chart):
        entity, accounts = payables_chart
        supplier = make_supplier(db_session, entity)
        bill = make_bill(db_session, entity, supplier)
        service = BillService(db_session)
        service.post_bill(entity.id, bill.id, post_request(accounts))
        db_session.commit()

        with pytest.raises(ValidationError, match="Only DRAFT"):
            service.post_bill(entity.id, bill.id, post_request(accounts))

    def test_bill_of_other_entity_not_found(self, db_session, payables_chart, make_entity):
        entity, accounts = payables_chart
        other, _ = make_entity("Other")
        supplier = make_supplier(db_session, entity)
        bill = make_bill(db_session, entity, supplier)

        with pytest.raises(NotFoundError):
            BillService(db_session).post_bill(other.id, bill.id, post_request(accounts))


class TestRecordBillPayment:

    def _sent_bill(self, db_session, entity, accounts):
        supplier = make_supplier(db_session, entity)
        bill = make_bill(db_session, entity, supplier)
        BillService(db_session).post_bill(entity.id, bill.id, post_request(accounts))
        db_session.commit()
        return bill

    def test_partial_then_full_payment(self, db_session, payables_chart):
        entity, accounts = payables_chart
        bill = self._sent_bill(db_session, entity, accounts)
        service = BillService(db_session)

        payment = service.record_payment(
            entity.id, bill.id, payment_request(accounts, "1200")
        )
        db_session.commit()
        assert payment.direction == PaymentDirection.OUTGOING
        assert payment.journal_entry_id is not None
        assert service.get_bill(bill.id).status == BillStatus.PARTIAL

        service.record_payment(entity.id, bill.id, payment_request(accounts, "1000"))
        db_session.commit()

        assert service.get_bill(bill.id).status == BillStatus.PAID
        assert service.total_paid(bill.id) == Decimal("2200.0000")
        ledger = LedgerService(db_session)
        assert ledger.get_account_balance(accounts["2200"].id) == Decimal("0.0000")
        assert ledger.get_account_balance(accounts["1000"].id) == Decimal("-2200.0000")

    def test_payment_posts_payable_against_bank(self, db_session, payables_chart):
        entity, accounts = payables_chart
        bill = self._sent_bill(db_session, entity, accounts)

        payment = BillService(db_session).record_payment(
            entity.id, bill.id, payment_request(accounts, "500")
        )

        entry = LedgerService(db_session).get_journal_entry(payment.journal_entry_id)
        assert entry.source_reference == f"PAYMENT_{payment.id}"
        amounts = {line.account_id: (line.debit, line.credit) for line in entry.lines}
        assert amounts[accounts["2200"].id] == (Decimal("500.0000"), Decimal("0.0000"))
        assert amounts[accounts["1000"].id] == (Decimal("0.0000"), Decimal("500.0000"))

    def test_status_is_recomputed_from_payment_rows(self, db_session, payables_chart):
        entity, accounts = payables_chart
        bill = self._sent_bill(db_session, entity, accounts)
        service = BillService(db_session)
        service.record_payment(entity.id, bill.id, payment_request(accounts, "2200"))
        db_session.commit()

        bill = service.get_bill(bill.id)
        bill.status = BillStatus.SENT
        service.recompute_status(bill.id)

        assert bill.status == BillStatus.PAID

    def test_voided_bill_rejects_payment(self, db_session, payables_chart):
        entity, accounts = payables_chart
        bill = self._sent_bill(db_session, entity, accounts)
        bill.status = BillStatus.VOIDED
        db_session.commit()

        with pytest.raises(ValidationError, match="voided"):
            BillService(db_session).record_payment(
                entity.id, bill.id, payment_request(accounts, "100")
            )

    def test_non_positive_payment_rejected(self, db_session, payables_chart):
        entity, accounts = payables_chart
        bill = self._sent_bill(db_session, entity, accounts)

        with pytest.raises(ValidationError, match="positive"):
            BillService(db_session).record_payment(
                entity.id, bill.id, payment_request(accounts, "0")
            )
