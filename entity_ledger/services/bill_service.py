"""
Bill service: supplier bills and the payments made against them.

A bill is created as DRAFT, posted to the ledger (status SENT), then
paid in one or more outgoing payments. Like invoices, the status
after a payment is recomputed from every linked payment row.
"""

import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from entity_ledger import money
from entity_ledger.errors import NotFoundError, ValidationError
from entity_ledger.models.bill import Bill, BillPayment
from entity_ledger.models.contact import Contact
from entity_ledger.models.entity import Entity
from entity_ledger.models.enums import (
    BillStatus,
    ContactType,
    PaymentDirection,
    SourceSystem,
)
from entity_ledger.models.invoice import Payment
from entity_ledger.schemas.bill import (
    BillCreate,
    BillPaymentRequest,
    BillPostRequest,
)
from entity_ledger.schemas.ledger import JournalLineCreate, PostJournalRequest
from entity_ledger.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)

BILL_CONTACT_TYPES = (ContactType.SUPPLIER, ContactType.INTERCOMPANY)


class BillService:

    def __init__(self, db: Session):
        self.db = db
        self.ledger = LedgerService(db)

    def create_bill(self, entity_id: int, request: BillCreate) -> Bill:
        """Create a DRAFT bill from a supplier or a group entity."""
        logger.info("Creating bill entity_id=%s number=%s", entity_id, request.number)

        if not self.db.get(Entity, entity_id):
            raise NotFoundError("Entity")

        contact = self.db.get(Contact, request.contact_id)
        if not contact or contact.entity_id != entity_id:
            raise NotFoundError("Contact")
        if contact.contact_type not in BILL_CONTACT_TYPES:
            raise ValidationError(
                "Contact must be of type SUPPLIER or INTERCOMPANY for bills"
            )

        existing = self.db.execute(
            select(Bill).where(
                Bill.entity_id == entity_id,
                Bill.number == request.number,
            )
        ).scalar_one_or_none()
        if existing:
            raise ValidationError(
                f"Bill number {request.number} already exists for this entity"
            )

        subtotal = money.to_amount(request.subtotal_amount)
        tax = money.to_amount(request.tax_amount)
        if subtotal <= 0:
            raise ValidationError("Bill subtotal must be positive")
        if tax < 0:
            raise ValidationError("Bill tax must be non-negative")
        if request.due_date < request.issue_date:
            raise ValidationError("Due date cannot be before issue date")

        bill = Bill(
            entity_id=entity_id,
            contact_id=contact.id,
            number=request.number,
            issue_date=request.issue_date,
            due_date=request.due_date,
            status=BillStatus.DRAFT,
            currency_code=request.currency_code.upper(),
            subtotal_amount=subtotal,
            tax_amount=tax,
            total_amount=money.add(subtotal, tax),
            external_ref=request.external_ref,
        )
        self.db.add(bill)
        self.db.flush()

        logger.info("Bill created bill_id=%s", bill.id)
        return bill

    def post_bill(
        self, entity_id: int, bill_id: int, request: BillPostRequest
    ) -> Bill:
        """
        Post a DRAFT bill to the ledger.

        DR expense (subtotal) / DR tax asset (tax, when nonzero) /
        CR payable (total). Status becomes SENT.
        """
        logger.info("Posting bill to ledger bill_id=%s", bill_id)

        bill = self.get_bill(bill_id, entity_id)
        if bill.status != BillStatus.DRAFT:
            raise ValidationError("Only DRAFT bills can be posted")

        has_tax = not money.is_zero(bill.tax_amount)
        if has_tax and request.tax_asset_account_id is None:
            raise ValidationError("A tax asset account is required for a bill with tax")

        lines = [
            JournalLineCreate(
                account_id=request.expense_account_id,
                debit=bill.subtotal_amount,
                memo=f"Bill {bill.number} - Expense",
            ),
            JournalLineCreate(
                account_id=request.payable_account_id,
                credit=bill.total_amount,
                memo=f"Bill {bill.number}",
            ),
        ]
        if has_tax:
            lines.append(JournalLineCreate(
                account_id=request.tax_asset_account_id,
                debit=bill.tax_amount,
                memo=f"Bill {bill.number} - GST on Expenses",
            ))

        entry = self.ledger.post_journal_entry(
            bill.entity_id,
            PostJournalRequest(
                entry_date=bill.issue_date,
                description=f"Bill {bill.number}",
                source_system=SourceSystem.MANUAL,
                source_reference=f"BILL_{bill.id}",
                lines=lines,
            ),
        )

        bill.journal_entry_id = entry.id
        bill.status = BillStatus.SENT
        self.db.flush()

        logger.info(
            "Bill posted bill_id=%s journal_entry_id=%s", bill.id, entry.id
        )
        return bill

    def record_payment(
        self, entity_id: int, bill_id: int, request: BillPaymentRequest
    ) -> Payment:
        """Pay a bill: an OUTGOING payment, DR payable / CR bank."""
        logger.info("Recording bill payment bill_id=%s", bill_id)

        bill = self.get_bill(bill_id, entity_id)
        if bill.status == BillStatus.VOIDED:
            raise ValidationError("Cannot record payment for voided bill")

        amount = money.to_amount(request.amount)
        if amount <= 0:
            raise ValidationError("Payment amount must be positive")

        payment = Payment(
            entity_id=bill.entity_id,
            contact_id=bill.contact_id,
            direction=PaymentDirection.OUTGOING,
            amount=amount,
            currency_code=bill.currency_code,
            payment_date=request.payment_date,
            method=request.method,
            external_ref=request.external_ref,
        )
        self.db.add(payment)
        self.db.flush()

        self.db.add(BillPayment(
            bill_id=bill.id,
            payment_id=payment.id,
            amount_applied=amount,
        ))

        memo = f"Payment made - Bill {bill.number}"
        entry = self.ledger.post_journal_entry(
            bill.entity_id,
            PostJournalRequest(
                entry_date=request.payment_date,
                description=f"Payment for Bill {bill.number}",
                source_system=SourceSystem.MANUAL,
                source_reference=f"PAYMENT_{payment.id}",
                lines=[
                    JournalLineCreate(
                        account_id=request.payable_account_id,
                        debit=amount,
                        memo=memo,
                    ),
                    JournalLineCreate(
                        account_id=request.bank_account_id,
                        credit=amount,
                        memo=memo,
                    ),
                ],
            ),
        )
        payment.journal_entry_id = entry.id
        self.db.flush()

        self.recompute_status(bill.id)

        logger.info(
            "Bill payment recorded bill_id=%s payment_id=%s journal_entry_id=%s",
            bill.id, payment.id, entry.id,
        )
        return payment

    def recompute_status(self, bill_id: int) -> Bill:
        """PAID once the applied amounts reach the total, else PARTIAL."""
        bill = self.get_bill(bill_id)
        if bill.status == BillStatus.VOIDED:
            return bill

        total_paid = self.total_paid(bill.id)
        if total_paid >= money.to_amount(bill.total_amount):
            bill.status = BillStatus.PAID
        elif total_paid > 0:
            bill.status = BillStatus.PARTIAL
        self.db.flush()
        return bill

    def total_paid(self, bill_id: int) -> Decimal:
        applied = self.db.execute(
            select(BillPayment.amount_applied)
            .where(BillPayment.bill_id == bill_id)
        ).scalars().all()
        return money.add(money.ZERO, *applied)

    def get_bill(self, bill_id: int, entity_id: int | None = None) -> Bill:
        bill = self.db.get(Bill, bill_id)
        if not bill or (entity_id is not None and bill.entity_id != entity_id):
            raise NotFoundError("Bill")
        return bill
