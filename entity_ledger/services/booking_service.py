"""
Booking service: the money side of a marketplace booking.

Each step of a booking (deposit, balance, supplier payout, margin,
cancellation, refund) posts one journal entry through the
LedgerService and records a BookingEvent pointing at it. The
booking row's amount columns are updated for the operational
reports; the ledger stays authoritative.

GST is treated as included in the gross amount:
    net = gross / (1 + rate)
    gst = gross - net
Both figures come from the money module, so net + gst == gross
exactly and the posted entry always balances.
"""

import json
import logging
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from entity_ledger import money
from entity_ledger.config import get_settings
from entity_ledger.errors import NotFoundError, ValidationError
from entity_ledger.models.booking import Booking, BookingEvent
from entity_ledger.models.contact import Contact
from entity_ledger.models.entity import Entity
from entity_ledger.models.enums import (
    BookingEventType,
    BookingStatus,
    CancellationScenario,
    ContactType,
    SourceSystem,
)
from entity_ledger.models.journal_entry import JournalEntry
from entity_ledger.schemas.booking import (
    BookingAmountRequest,
    BookingCancelRequest,
    BookingCreate,
    BookingRefundRequest,
)
from entity_ledger.schemas.ledger import JournalLineCreate, PostJournalRequest
from entity_ledger.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)


def split_gst(gross, rate) -> tuple[Decimal, Decimal]:
    """Split a GST-inclusive amount into (net, gst)."""
    gross = money.to_amount(gross)
    net = money.divide(gross, money.add(1, rate))
    return net, money.subtract(gross, net)


class BookingService:

    def __init__(self, db: Session):
        self.db = db
        self.ledger = LedgerService(db)
        self.gst_rate = get_settings().GST_RATE

    # --- Registration ---

    def create_booking(self, request: BookingCreate) -> Booking:
        """
        Register a booking in PENDING state.

        Customer and supplier contacts are matched by name within
        the entity and created when missing.
        """
        logger.info(
            "Creating booking entity_id=%s external_booking_id=%s",
            request.entity_id, request.external_booking_id,
        )

        if not self.db.get(Entity, request.entity_id):
            raise NotFoundError("Entity")

        existing = self.db.execute(
            select(Booking).where(
                Booking.entity_id == request.entity_id,
                Booking.external_booking_id == request.external_booking_id,
            )
        ).scalar_one_or_none()
        if existing:
            raise ValidationError(
                f"Booking {request.external_booking_id} already exists "
                f"for this entity"
            )

        total = money.to_amount(request.total_job_amount)
        deposit = money.to_amount(request.deposit_amount)
        margin = money.to_amount(request.margin_amount)
        if total <= 0:
            raise ValidationError("Total job amount must be positive")
        if deposit < 0 or margin < 0:
            raise ValidationError("Booking amounts must be non-negative")

        customer = self._find_or_create_contact(
            request.entity_id,
            ContactType.CUSTOMER,
            request.customer_name,
            request.customer_email,
        )
        supplier = None
        if request.supplier_name:
            supplier = self._find_or_create_contact(
                request.entity_id,
                ContactType.SUPPLIER,
                request.supplier_name,
                request.supplier_email,
            )

        booking = Booking(
            entity_id=request.entity_id,
            external_booking_id=request.external_booking_id,
            customer_id=customer.id,
            supplier_id=supplier.id if supplier else None,
            status=BookingStatus.PENDING,
            total_job_amount=total,
            deposit_amount=deposit,
            balance_amount=money.ZERO,
            margin_amount=margin,
            supplier_payout_amount=money.ZERO,
        )
        self.db.add(booking)
        self.db.flush()

        logger.info("Booking created booking_id=%s", booking.id)
        return booking

    # --- Money movements ---

    def record_deposit(
        self, booking_id: int, request: BookingAmountRequest
    ) -> Booking:
        """DR bank / CR customer deposits held / CR GST. Booking becomes CONFIRMED."""
        booking = self._get_open_booking(booking_id)
        amount = self._positive_amount(request.amount)
        accounts = request.accounts
        ref = booking.external_booking_id

        lines = self._gst_inclusive_lines(
            debit_account_id=accounts.bank_account_id,
            credit_account_id=accounts.customer_deposits_held_account_id,
            gst_account_id=accounts.gst_on_income_account_id,
            amount=amount,
            include_gst=request.include_gst,
            memos=(
                f"Deposit received - Booking {ref}",
                f"Customer deposit held - Booking {ref}",
                f"GST on deposit - Booking {ref}",
            ),
        )
        entry = self._post(
            booking, request.entry_date,
            f"Deposit received for booking {ref}", lines,
        )
        self._record_event(
            booking, BookingEventType.DEPOSIT, amount, entry,
            {"include_gst": request.include_gst, "gst_amount": self._gst_of(lines)},
        )

        booking.deposit_amount = amount
        booking.status = BookingStatus.CONFIRMED
        self.db.flush()

        logger.info(
            "Deposit recorded booking_id=%s journal_entry_id=%s",
            booking.id, entry.id,
        )
        return booking

    def record_balance(
        self, booking_id: int, request: BookingAmountRequest
    ) -> Booking:
        """DR bank / CR accounts receivable / CR GST."""
        booking = self._get_open_booking(booking_id)
        amount = self._positive_amount(request.amount)
        accounts = request.accounts
        ref = booking.external_booking_id

        lines = self._gst_inclusive_lines(
            debit_account_id=accounts.bank_account_id,
            credit_account_id=accounts.accounts_receivable_account_id,
            gst_account_id=accounts.gst_on_income_account_id,
            amount=amount,
            include_gst=request.include_gst,
            memos=(
                f"Balance payment received - Booking {ref}",
                f"Balance payment - Booking {ref}",
                f"GST on balance - Booking {ref}",
            ),
        )
        entry = self._post(
            booking, request.entry_date,
            f"Balance payment for booking {ref}", lines,
        )
        self._record_event(
            booking, BookingEventType.BALANCE, amount, entry,
            {"include_gst": request.include_gst, "gst_amount": self._gst_of(lines)},
        )

        booking.balance_amount = amount
        self.db.flush()

        logger.info(
            "Balance recorded booking_id=%s journal_entry_id=%s",
            booking.id, entry.id,
        )
        return booking

    def record_supplier_payout(
        self, booking_id: int, request: BookingAmountRequest
    ) -> Booking:
        """DR supplier payouts / CR bank. GST is not split on payouts."""
        booking = self._get_open_booking(booking_id)
        if booking.supplier_id is None:
            raise ValidationError("Booking does not have a supplier assigned")

        amount = self._positive_amount(request.amount)
        accounts = request.accounts
        ref = booking.external_booking_id

        lines = [
            JournalLineCreate(
                account_id=accounts.supplier_payouts_account_id,
                debit=amount,
                memo=f"Supplier payout - Booking {ref}",
            ),
            JournalLineCreate(
                account_id=accounts.bank_account_id,
                credit=amount,
                memo=f"Payment to supplier - Booking {ref}",
            ),
        ]
        entry = self._post(
            booking, request.entry_date,
            f"Supplier payout for booking {ref}", lines,
        )
        self._record_event(
            booking, BookingEventType.PAYOUT, amount, entry,
            {"supplier_id": booking.supplier_id},
        )

        booking.supplier_payout_amount = amount
        self.db.flush()

        logger.info(
            "Supplier payout recorded booking_id=%s journal_entry_id=%s",
            booking.id, entry.id,
        )
        return booking

    def recognize_margin(
        self, booking_id: int, request: BookingAmountRequest
    ) -> Booking:
        """DR customer deposits held / CR margin revenue / CR GST. Booking becomes COMPLETED."""
        booking = self._get_open_booking(booking_id)
        amount = self._positive_amount(request.amount)
        accounts = request.accounts
        ref = booking.external_booking_id

        lines = self._gst_inclusive_lines(
            debit_account_id=accounts.customer_deposits_held_account_id,
            credit_account_id=accounts.margin_revenue_account_id,
            gst_account_id=accounts.gst_on_income_account_id,
            amount=amount,
            include_gst=request.include_gst,
            memos=(
                f"Release deposit for margin - Booking {ref}",
                f"Margin revenue - Booking {ref}",
                f"GST on margin - Booking {ref}",
            ),
        )
        entry = self._post(
            booking, request.entry_date,
            f"Margin revenue recognized for booking {ref}", lines,
        )
        self._record_event(
            booking, BookingEventType.MARGIN, amount, entry,
            {"include_gst": request.include_gst, "gst_amount": self._gst_of(lines)},
        )

        booking.margin_amount = amount
        booking.status = BookingStatus.COMPLETED
        self.db.flush()

        logger.info(
            "Margin recognized booking_id=%s journal_entry_id=%s",
            booking.id, entry.id,
        )
        return booking

    def cancel_booking(
        self, booking_id: int, request: BookingCancelRequest
    ) -> Booking:
        """
        Cancel a booking under one of three scenarios.

        DEPOSIT_KEPT: the deposit becomes cancellation-fee revenue
        (GST-inclusive). DEPOSIT_REFUNDED: the deposit goes back to
        the customer from the bank. TRANSFER_TO_NEW_SUPPLIER: the
        deposit stays held, the supplier is swapped and the booking
        stays live.

        A booking without a deposit posts no journal entry; the
        cancel event is still recorded.
        """
        booking = self.get_booking(booking_id)
        if booking.status == BookingStatus.CANCELLED:
            raise ValidationError("Booking is already cancelled")

        scenario = request.scenario
        logger.info(
            "Cancelling booking booking_id=%s scenario=%s",
            booking.id, scenario.value,
        )

        accounts = request.accounts
        ref = booking.external_booking_id
        deposit = money.to_amount(booking.deposit_amount)

        if scenario == CancellationScenario.TRANSFER_TO_NEW_SUPPLIER:
            new_supplier = self._get_new_supplier(booking, request.new_supplier_id)
            lines = [
                JournalLineCreate(
                    account_id=accounts.customer_deposits_held_account_id,
                    debit=deposit,
                    memo=f"Transfer from old supplier - Booking {ref}",
                ),
                JournalLineCreate(
                    account_id=accounts.customer_deposits_held_account_id,
                    credit=deposit,
                    memo=f"Transfer to new supplier - Booking {ref}",
                ),
            ]
            description = (
                f"Booking supplier changed - deposit transferred {ref}"
            )
        elif scenario == CancellationScenario.DEPOSIT_KEPT:
            lines = self._gst_inclusive_lines(
                debit_account_id=accounts.customer_deposits_held_account_id,
                credit_account_id=accounts.margin_revenue_account_id,
                gst_account_id=accounts.gst_on_income_account_id,
                amount=deposit,
                include_gst=True,
                memos=(
                    f"Release deposit (kept) - Booking {ref}",
                    f"Cancellation fee revenue - Booking {ref}",
                    f"GST on cancellation fee - Booking {ref}",
                ),
            )
            description = (
                f"Booking cancelled - deposit kept as cancellation fee {ref}"
            )
        else:
            lines = [
                JournalLineCreate(
                    account_id=accounts.customer_deposits_held_account_id,
                    debit=deposit,
                    memo=f"Release deposit (refunded) - Booking {ref}",
                ),
                JournalLineCreate(
                    account_id=accounts.bank_account_id,
                    credit=deposit,
                    memo=f"Refund to customer - Booking {ref}",
                ),
            ]
            description = f"Booking cancelled - deposit refunded {ref}"

        entry = None
        if deposit > 0:
            entry = self._post(booking, request.entry_date, description, lines)

        self._record_event(
            booking, BookingEventType.CANCEL, deposit, entry,
            {
                "scenario": scenario.value,
                "new_supplier_id": request.new_supplier_id,
            },
        )

        if scenario == CancellationScenario.TRANSFER_TO_NEW_SUPPLIER:
            booking.supplier_id = new_supplier.id
        else:
            booking.status = BookingStatus.CANCELLED
        self.db.flush()

        logger.info(
            "Booking cancelled booking_id=%s scenario=%s journal_entry_id=%s",
            booking.id, scenario.value, entry.id if entry else None,
        )
        return booking

    def record_refund(
        self, booking_id: int, request: BookingRefundRequest
    ) -> Booking:
        """DR customer deposits held (or accounts receivable) / CR bank."""
        booking = self.get_booking(booking_id)
        amount = self._positive_amount(request.amount)
        accounts = request.accounts
        ref = booking.external_booking_id

        source_account_id = (
            accounts.customer_deposits_held_account_id
            if request.refund_from_deposit
            else accounts.accounts_receivable_account_id
        )
        lines = [
            JournalLineCreate(
                account_id=source_account_id,
                debit=amount,
                memo=f"Refund issued - Booking {ref}",
            ),
            JournalLineCreate(
                account_id=accounts.bank_account_id,
                credit=amount,
                memo=f"Refund to customer - Booking {ref}",
            ),
        ]
        entry = self._post(
            booking, request.entry_date,
            f"Refund issued for booking {ref}", lines,
        )
        self._record_event(
            booking, BookingEventType.REFUND, amount, entry,
            {"refund_from_deposit": request.refund_from_deposit},
        )
        self.db.flush()

        logger.info(
            "Refund recorded booking_id=%s journal_entry_id=%s",
            booking.id, entry.id,
        )
        return booking

    # --- Reads ---

    def get_booking(self, booking_id: int) -> Booking:
        booking = self.db.execute(
            select(Booking)
            .options(selectinload(Booking.events))
            .where(Booking.id == booking_id)
        ).scalar_one_or_none()
        if not booking:
            raise NotFoundError("Booking")
        return booking

    def get_booking_by_external_id(
        self, entity_id: int, external_booking_id: str
    ) -> Booking:
        booking = self.db.execute(
            select(Booking)
            .options(selectinload(Booking.events))
            .where(
                Booking.entity_id == entity_id,
                Booking.external_booking_id == external_booking_id,
            )
        ).scalar_one_or_none()
        if not booking:
            raise NotFoundError("Booking")
        return booking

    # --- Helpers ---

    def _get_open_booking(self, booking_id: int) -> Booking:
        booking = self.get_booking(booking_id)
        if booking.status == BookingStatus.CANCELLED:
            raise ValidationError("Booking is cancelled")
        return booking

    @staticmethod
    def _positive_amount(value) -> Decimal:
        amount = money.to_amount(value)
        if amount <= 0:
            raise ValidationError("Amount must be positive")
        return amount

    def _gst_inclusive_lines(
        self,
        *,
        debit_account_id: int,
        credit_account_id: int,
        gst_account_id: int,
        amount: Decimal,
        include_gst: bool,
        memos: tuple[str, str, str],
    ) -> list[JournalLineCreate]:
        """
        One gross debit against a net credit plus a GST credit.

        The GST line is left out when GST is not included or rounds
        to zero.
        """
        if include_gst:
            net, gst = split_gst(amount, self.gst_rate)
        else:
            net, gst = amount, money.ZERO

        lines = [
            JournalLineCreate(account_id=debit_account_id, debit=amount, memo=memos[0]),
            JournalLineCreate(account_id=credit_account_id, credit=net, memo=memos[1]),
        ]
        if gst > 0:
            lines.append(
                JournalLineCreate(account_id=gst_account_id, credit=gst, memo=memos[2])
            )
        return lines

    @staticmethod
    def _gst_of(lines: list[JournalLineCreate]) -> str:
        gst = lines[2].credit if len(lines) > 2 else money.ZERO
        return money.format_amount(gst)

    def _post(
        self,
        booking: Booking,
        entry_date: date,
        description: str,
        lines: list[JournalLineCreate],
    ) -> JournalEntry:
        return self.ledger.post_journal_entry(
            booking.entity_id,
            PostJournalRequest(
                entry_date=entry_date,
                description=description,
                source_system=SourceSystem.BOOKING_APP,
                source_reference=booking.external_booking_id,
                lines=lines,
            ),
        )

    def _record_event(
        self,
        booking: Booking,
        event_type: BookingEventType,
        amount: Decimal,
        entry: JournalEntry | None,
        details: dict,
    ) -> BookingEvent:
        event = BookingEvent(
            event_type=event_type,
            amount=amount,
            journal_entry_id=entry.id if entry else None,
            details=json.dumps(details),
        )
        booking.events.append(event)
        self.db.flush()
        return event

    def _find_or_create_contact(
        self,
        entity_id: int,
        contact_type: ContactType,
        name: str,
        email: str | None,
    ) -> Contact:
        contact = self.db.execute(
            select(Contact).where(
                Contact.entity_id == entity_id,
                Contact.contact_type == contact_type,
                Contact.name == name,
            )
        ).scalars().first()
        if contact:
            return contact

        contact = Contact(
            entity_id=entity_id,
            contact_type=contact_type,
            name=name,
            email=email,
            external_ref=f"BOOKING_{contact_type.value}_{'_'.join(name.split())}",
        )
        self.db.add(contact)
        self.db.flush()
        return contact

    def _get_new_supplier(
        self, booking: Booking, supplier_id: int | None
    ) -> Contact:
        if supplier_id is None:
            raise ValidationError(
                "New supplier ID required for transfer scenario"
            )
        supplier = self.db.get(Contact, supplier_id)
        if not supplier or supplier.entity_id != booking.entity_id:
            raise NotFoundError("Supplier")
        if supplier.contact_type != ContactType.SUPPLIER:
            raise ValidationError("New supplier must be a SUPPLIER contact")
        return supplier
