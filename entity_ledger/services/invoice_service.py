"""
Invoice service: customer invoices and the payments against them.

An invoice is created as DRAFT, posted to the ledger (status SENT),
then paid in one or more payments. Its status after a payment is
recomputed from every linked payment row.
"""

import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from entity_ledger import money
from entity_ledger.errors import NotFoundError, ValidationError
from entity_ledger.models.contact import Contact
from entity_ledger.models.entity import Entity
from entity_ledger.models.enums import (
    ContactType,
    InvoiceStatus,
    PaymentDirection,
    SourceSystem,
)
from entity_ledger.models.invoice import Invoice, InvoicePayment, Payment
from entity_ledger.schemas.invoice import (
    InvoiceCreate,
    InvoicePaymentRequest,
    InvoicePostRequest,
)
from entity_ledger.schemas.ledger import JournalLineCreate, PostJournalRequest
from entity_ledger.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)


class InvoiceService:

    def __init__(self, db: Session):
        self.db = db
        self.ledger = LedgerService(db)

    def create_invoice(self, entity_id: int, request: InvoiceCreate) -> Invoice:
        """
        Create a DRAFT invoice for a customer.

        total_amount = subtotal_amount + tax_amount. Nothing is
        posted to the ledger until post_invoice().
        """
        logger.info(
            "Creating invoice entity_id=%s number=%s", entity_id, request.number
        )

        if not self.db.get(Entity, entity_id):
            raise NotFoundError("Entity")

        contact = self.db.get(Contact, request.contact_id)
        if not contact or contact.entity_id != entity_id:
            raise NotFoundError("Contact")
        if contact.contact_type != ContactType.CUSTOMER:
            raise ValidationError("Contact must be of type CUSTOMER for invoices")

        existing = self.db.execute(
            select(Invoice).where(
                Invoice.entity_id == entity_id,
                Invoice.number == request.number,
            )
        ).scalar_one_or_none()
        if existing:
            raise ValidationError(
                f"Invoice number {request.number} already exists for this entity"
            )

        subtotal = money.to_amount(request.subtotal_amount)
        tax = money.to_amount(request.tax_amount)
        if subtotal <= 0:
            raise ValidationError("Invoice subtotal must be positive")
        if tax < 0:
            raise ValidationError("Invoice tax must be non-negative")
        if request.due_date < request.issue_date:
            raise ValidationError("Due date cannot be before issue date")

        invoice = Invoice(
            entity_id=entity_id,
            contact_id=contact.id,
            number=request.number,
            issue_date=request.issue_date,
            due_date=request.due_date,
            status=InvoiceStatus.DRAFT,
            currency_code=request.currency_code.upper(),
            subtotal_amount=subtotal,
            tax_amount=tax,
            total_amount=money.add(subtotal, tax),
            external_ref=request.external_ref,
        )
        self.db.add(invoice)
        self.db.flush()

        logger.info("Invoice created invoice_id=%s", invoice.id)
        return invoice

    def post_invoice(
        self, entity_id: int, invoice_id: int, request: InvoicePostRequest
    ) -> Invoice:
        """
        Post a DRAFT invoice to the ledger.

        DR receivable (total) / CR revenue (subtotal) / CR tax
        liability (tax, when nonzero). Status becomes SENT.
        """
        logger.info("Posting invoice to ledger invoice_id=%s", invoice_id)

        invoice = self.get_invoice(invoice_id, entity_id)
        if invoice.status != InvoiceStatus.DRAFT:
            raise ValidationError("Only DRAFT invoices can be posted")

        has_tax = not money.is_zero(invoice.tax_amount)
        if has_tax and request.tax_liability_account_id is None:
            raise ValidationError(
                "A tax liability account is required for an invoice with tax"
            )

        lines = [
            JournalLineCreate(
                account_id=request.receivable_account_id,
                debit=invoice.total_amount,
                memo=f"Invoice {invoice.number}",
            ),
            JournalLineCreate(
                account_id=request.revenue_account_id,
                credit=invoice.subtotal_amount,
                memo=f"Invoice {invoice.number} - Revenue",
            ),
        ]
        if has_tax:
            lines.append(JournalLineCreate(
                account_id=request.tax_liability_account_id,
                credit=invoice.tax_amount,
                memo=f"Invoice {invoice.number} - GST",
            ))

        entry = self.ledger.post_journal_entry(
            invoice.entity_id,
            PostJournalRequest(
                entry_date=invoice.issue_date,
                description=f"Invoice {invoice.number}",
                source_system=SourceSystem.MANUAL,
                source_reference=f"INVOICE_{invoice.id}",
                lines=lines,
            ),
        )

        invoice.journal_entry_id = entry.id
        invoice.status = InvoiceStatus.SENT
        self.db.flush()

        logger.info(
            "Invoice posted invoice_id=%s journal_entry_id=%s",
            invoice.id, entry.id,
        )
        return invoice

    def record_payment(
        self, entity_id: int, invoice_id: int, request: InvoicePaymentRequest
    ) -> Payment:
        """
        Record an incoming payment against an invoice.

        Creates the payment and its link, posts DR bank / CR
        receivable, then recomputes the invoice status.
        """
        logger.info("Recording invoice payment invoice_id=%s", invoice_id)

        invoice = self.get_invoice(invoice_id, entity_id)
        if invoice.status == InvoiceStatus.VOIDED:
            raise ValidationError("Cannot record payment for voided invoice")

        amount = money.to_amount(request.amount)
        if amount <= 0:
            raise ValidationError("Payment amount must be positive")

        payment = Payment(
            entity_id=invoice.entity_id,
            contact_id=invoice.contact_id,
            direction=PaymentDirection.INCOMING,
            amount=amount,
            currency_code=invoice.currency_code,
            payment_date=request.payment_date,
            method=request.method,
            external_ref=request.external_ref,
        )
        self.db.add(payment)
        self.db.flush()

        self.db.add(InvoicePayment(
            invoice_id=invoice.id,
            payment_id=payment.id,
            amount_applied=amount,
        ))

        memo = f"Payment received - Invoice {invoice.number}"
        entry = self.ledger.post_journal_entry(
            invoice.entity_id,
            PostJournalRequest(
                entry_date=request.payment_date,
                description=f"Payment for Invoice {invoice.number}",
                source_system=SourceSystem.MANUAL,
                source_reference=f"PAYMENT_{payment.id}",
                lines=[
                    JournalLineCreate(
                        account_id=request.bank_account_id,
                        debit=amount,
                        memo=memo,
                    ),
                    JournalLineCreate(
                        account_id=request.receivable_account_id,
                        credit=amount,
                        memo=memo,
                    ),
                ],
            ),
        )
        payment.journal_entry_id = entry.id
        self.db.flush()

        self.recompute_status(invoice.id)

        logger.info(
            "Invoice payment recorded invoice_id=%s payment_id=%s "
            "journal_entry_id=%s",
            invoice.id, payment.id, entry.id,
        )
        return payment

    def recompute_status(self, invoice_id: int) -> Invoice:
        """
        Derive the invoice status from its linked payments.

        PAID once the applied amounts reach the total, PARTIAL while
        some but not all has been paid. With no payments the status
        is left as it is.
        """
        invoice = self.get_invoice(invoice_id)
        if invoice.status == InvoiceStatus.VOIDED:
            return invoice

        total_paid = self.total_paid(invoice.id)
        if total_paid >= money.to_amount(invoice.total_amount):
            invoice.status = InvoiceStatus.PAID
        elif total_paid > 0:
            invoice.status = InvoiceStatus.PARTIAL
        self.db.flush()
        return invoice

    def total_paid(self, invoice_id: int) -> Decimal:
        applied = self.db.execute(
            select(InvoicePayment.amount_applied)
            .where(InvoicePayment.invoice_id == invoice_id)
        ).scalars().all()
        return money.add(money.ZERO, *applied)

    def get_invoice(self, invoice_id: int, entity_id: int | None = None) -> Invoice:
        invoice = self.db.get(Invoice, invoice_id)
        if not invoice or (entity_id is not None and invoice.entity_id != entity_id):
            raise NotFoundError("Invoice")
        return invoice
