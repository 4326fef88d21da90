"""
Report service: financial statements derived from the ledger.

Nothing here writes. Every figure is re-derived from POSTED journal
lines each time a report is requested; no balance is cached.

Totals start at money.ZERO and are folded with money.add(). The SQL
SUM() of some backends (SQLite in particular) works in binary
floating point, so lines are summed in Python instead.
"""

import logging
from datetime import date, datetime, time, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from entity_ledger import money
from entity_ledger.errors import NotFoundError, ValidationError
from entity_ledger.models.account import Account
from entity_ledger.models.booking import Booking, BookingEvent
from entity_ledger.models.contact import Contact
from entity_ledger.models.entity import Entity
from entity_ledger.models.enums import (
    AccountType,
    BookingEventType,
    BookingStatus,
    JournalStatus,
)
from entity_ledger.models.journal_entry import JournalEntry, JournalLine
from entity_ledger.schemas.reports import (
    BalanceSheetReport,
    BalanceSheetRow,
    BookingSummary,
    MarginReport,
    OutstandingDeposit,
    ProfitAndLossReport,
    ProfitAndLossRow,
    TrialBalanceReport,
    TrialBalanceRow,
    UpcomingPayout,
)

logger = logging.getLogger(__name__)

PROFIT_AND_LOSS_TYPES = (AccountType.REVENUE, AccountType.EXPENSE)
BALANCE_SHEET_TYPES = (
    AccountType.ASSET,
    AccountType.LIABILITY,
    AccountType.EQUITY,
)


def _day_bounds(date_from: date, date_to: date) -> tuple[datetime, datetime]:
    """Timestamps covering both calendar days inclusively."""
    return (
        datetime.combine(date_from, time.min),
        datetime.combine(date_to + timedelta(days=1), time.min),
    )


class ReportService:

    def __init__(self, db: Session):
        self.db = db

    # --- Ledger aggregation ---

    def _accounts(
        self, entity_id: int, types: tuple[AccountType, ...] | None = None
    ) -> list[Account]:
        if not self.db.get(Entity, entity_id):
            raise NotFoundError("Entity")

        query = select(Account).where(Account.entity_id == entity_id)
        if types:
            query = query.where(Account.account_type.in_(types))
        return list(
            self.db.execute(query.order_by(Account.code)).scalars().all()
        )

    def _account_totals(
        self,
        entity_id: int,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> dict[int, tuple]:
        """
        Sum debits and credits per account over POSTED lines.

        Returns {account_id: (debit_total, credit_total)}.
        """
        query = (
            select(JournalLine.account_id, JournalLine.debit, JournalLine.credit)
            .join(JournalEntry, JournalLine.journal_entry_id == JournalEntry.id)
            .where(
                JournalEntry.entity_id == entity_id,
                JournalEntry.status == JournalStatus.POSTED,
            )
        )
        if date_from is not None:
            query = query.where(JournalEntry.entry_date >= date_from)
        if date_to is not None:
            query = query.where(JournalEntry.entry_date <= date_to)

        totals: dict[int, tuple] = {}
        for account_id, debit, credit in self.db.execute(query):
            acc_debit, acc_credit = totals.get(account_id, (money.ZERO, money.ZERO))
            totals[account_id] = (
                money.add(acc_debit, debit),
                money.add(acc_credit, credit),
            )
        return totals

    # --- Financial statements ---

    def trial_balance(self, entity_id: int, as_of: date) -> TrialBalanceReport:
        """
        Every account with activity up to and including as_of.

        is_balanced must always be True when every entry came
        through LedgerService. False means the ledger is corrupt.
        """
        logger.info("Generating trial balance entity_id=%s as_of=%s", entity_id, as_of)

        accounts = self._accounts(entity_id)
        totals = self._account_totals(entity_id, date_to=as_of)

        rows = []
        total_debits = money.ZERO
        total_credits = money.ZERO

        for account in accounts:
            debit, credit = totals.get(account.id, (money.ZERO, money.ZERO))
            if money.is_zero(debit) and money.is_zero(credit):
                continue

            rows.append(TrialBalanceRow(
                account_id=account.id,
                account_code=account.code,
                account_name=account.name,
                account_type=account.account_type,
                debit=debit,
                credit=credit,
                balance=money.subtract(debit, credit),
            ))
            total_debits = money.add(total_debits, debit)
            total_credits = money.add(total_credits, credit)

        is_balanced = money.is_equal(total_debits, total_credits)
        if not is_balanced:
            logger.error(
                "Trial balance does not balance entity_id=%s as_of=%s "
                "debits=%s credits=%s",
                entity_id, as_of, total_debits, total_credits,
            )

        logger.info(
            "Trial balance generated entity_id=%s accounts=%d is_balanced=%s",
            entity_id, len(rows), is_balanced,
        )
        return TrialBalanceReport(
            entity_id=entity_id,
            as_of=as_of,
            accounts=rows,
            total_debits=total_debits,
            total_credits=total_credits,
            is_balanced=is_balanced,
        )

    def profit_and_loss(
        self, entity_id: int, date_from: date, date_to: date
    ) -> ProfitAndLossReport:
        """
        Revenue and expenses for entries dated within [date_from, date_to].

        Row amounts use the revenue convention (credit - debit), so
        expense rows are normally negative; total_expenses flips them
        back to a positive figure.
        """
        logger.info(
            "Generating P&L entity_id=%s from=%s to=%s",
            entity_id, date_from, date_to,
        )
        if date_from > date_to:
            raise ValidationError("from date must not be after to date")

        accounts = self._accounts(entity_id, PROFIT_AND_LOSS_TYPES)
        totals = self._account_totals(entity_id, date_from=date_from, date_to=date_to)

        revenue_rows = []
        expense_rows = []
        total_revenue = money.ZERO
        total_expenses = money.ZERO

        for account in accounts:
            debit, credit = totals.get(account.id, (money.ZERO, money.ZERO))
            amount = money.subtract(credit, debit)
            if money.is_zero(amount):
                continue

            row = ProfitAndLossRow(
                account_id=account.id,
                account_code=account.code,
                account_name=account.name,
                account_type=account.account_type,
                amount=amount,
            )
            if account.account_type == AccountType.REVENUE:
                revenue_rows.append(row)
                total_revenue = money.add(total_revenue, amount)
            else:
                expense_rows.append(row)
                total_expenses = money.subtract(total_expenses, amount)

        net_profit = money.subtract(total_revenue, total_expenses)

        logger.info("P&L generated entity_id=%s net_profit=%s", entity_id, net_profit)
        return ProfitAndLossReport(
            entity_id=entity_id,
            date_from=date_from,
            date_to=date_to,
            revenue=revenue_rows,
            expenses=expense_rows,
            total_revenue=total_revenue,
            total_expenses=total_expenses,
            net_profit=net_profit,
        )

    def balance_sheet(self, entity_id: int, as_of: date) -> BalanceSheetReport:
        """
        Assets, liabilities and equity as of a date.

        Row balances are debit - credit. Liabilities and equity are
        totalled with the sign flipped, so is_balanced checks
        assets = liabilities + equity.
        """
        logger.info("Generating balance sheet entity_id=%s as_of=%s", entity_id, as_of)

        accounts = self._accounts(entity_id, BALANCE_SHEET_TYPES)
        totals = self._account_totals(entity_id, date_to=as_of)

        sections: dict[AccountType, list[BalanceSheetRow]] = {
            account_type: [] for account_type in BALANCE_SHEET_TYPES
        }
        section_totals = {
            account_type: money.ZERO for account_type in BALANCE_SHEET_TYPES
        }

        for account in accounts:
            debit, credit = totals.get(account.id, (money.ZERO, money.ZERO))
            balance = money.subtract(debit, credit)
            if money.is_zero(balance):
                continue

            sections[account.account_type].append(BalanceSheetRow(
                account_id=account.id,
                account_code=account.code,
                account_name=account.name,
                account_type=account.account_type,
                balance=balance,
            ))
            if account.account_type == AccountType.ASSET:
                section_totals[account.account_type] = money.add(
                    section_totals[account.account_type], balance
                )
            else:
                section_totals[account.account_type] = money.subtract(
                    section_totals[account.account_type], balance
                )

        total_assets = section_totals[AccountType.ASSET]
        total_liabilities = section_totals[AccountType.LIABILITY]
        total_equity = section_totals[AccountType.EQUITY]
        is_balanced = money.is_equal(
            total_assets, money.add(total_liabilities, total_equity)
        )
        if not is_balanced:
            logger.error(
                "Balance sheet does not balance entity_id=%s as_of=%s "
                "assets=%s liabilities=%s equity=%s",
                entity_id, as_of, total_assets, total_liabilities, total_equity,
            )

        logger.info(
            "Balance sheet generated entity_id=%s is_balanced=%s",
            entity_id, is_balanced,
        )
        return BalanceSheetReport(
            entity_id=entity_id,
            as_of=as_of,
            assets=sections[AccountType.ASSET],
            liabilities=sections[AccountType.LIABILITY],
            equity=sections[AccountType.EQUITY],
            total_assets=total_assets,
            total_liabilities=total_liabilities,
            total_equity=total_equity,
            is_balanced=is_balanced,
        )

    # --- Booking reports ---

    def _bookings(self, entity_id: int, *criteria) -> list[Booking]:
        if not self.db.get(Entity, entity_id):
            raise NotFoundError("Entity")
        return list(
            self.db.execute(
                select(Booking)
                .where(Booking.entity_id == entity_id, *criteria)
                .order_by(Booking.id)
            ).scalars().all()
        )

    def booking_summary(
        self, entity_id: int, date_from: date, date_to: date
    ) -> BookingSummary:
        """Counts and money totals for bookings created in the range."""
        logger.info(
            "Generating booking summary entity_id=%s from=%s to=%s",
            entity_id, date_from, date_to,
        )
        start, end = _day_bounds(date_from, date_to)
        bookings = self._bookings(
            entity_id, Booking.created_at >= start, Booking.created_at < end
        )

        total_revenue = money.ZERO
        total_margin = money.ZERO
        total_payouts = money.ZERO
        outstanding = money.ZERO

        for booking in bookings:
            if booking.status == BookingStatus.COMPLETED:
                total_revenue = money.add(total_revenue, booking.total_job_amount)
                total_margin = money.add(total_margin, booking.margin_amount)

            total_payouts = money.add(total_payouts, booking.supplier_payout_amount)

            # Deposits on CONFIRMED bookings are still held for the customer
            if booking.status == BookingStatus.CONFIRMED and booking.deposit_amount > 0:
                outstanding = money.add(outstanding, booking.deposit_amount)

        def count(status: BookingStatus) -> int:
            return sum(1 for b in bookings if b.status == status)

        return BookingSummary(
            total_bookings=len(bookings),
            confirmed_bookings=count(BookingStatus.CONFIRMED),
            completed_bookings=count(BookingStatus.COMPLETED),
            cancelled_bookings=count(BookingStatus.CANCELLED),
            total_revenue=total_revenue,
            total_margin=total_margin,
            total_supplier_payouts=total_payouts,
            outstanding_deposits=outstanding,
        )

    def outstanding_deposits(self, entity_id: int) -> list[OutstandingDeposit]:
        logger.info("Listing outstanding deposits entity_id=%s", entity_id)

        bookings = self._bookings(entity_id, Booking.status == BookingStatus.CONFIRMED)
        return [
            OutstandingDeposit(
                booking_id=booking.id,
                external_booking_id=booking.external_booking_id,
                customer_name=self._contact_name(booking.customer_id),
                deposit_amount=money.to_amount(booking.deposit_amount),
                status=booking.status,
                created_at=booking.created_at,
            )
            for booking in bookings
        ]

    def upcoming_payouts(self, entity_id: int) -> list[UpcomingPayout]:
        """Open bookings with a supplier and no payout recorded yet."""
        logger.info("Listing upcoming payouts entity_id=%s", entity_id)

        bookings = self._bookings(
            entity_id,
            Booking.status.in_((BookingStatus.CONFIRMED, BookingStatus.COMPLETED)),
            Booking.supplier_id.is_not(None),
        )
        paid_out = set(
            self.db.execute(
                select(BookingEvent.booking_id).where(
                    BookingEvent.event_type == BookingEventType.PAYOUT
                )
            ).scalars().all()
        )

        return [
            UpcomingPayout(
                booking_id=booking.id,
                external_booking_id=booking.external_booking_id,
                supplier_name=self._contact_name(booking.supplier_id),
                payout_amount=money.to_amount(booking.supplier_payout_amount),
                status=booking.status,
            )
            for booking in bookings
            if booking.id not in paid_out
        ]

    def margin_report(
        self, entity_id: int, date_from: date, date_to: date
    ) -> MarginReport:
        """Margin earned on bookings completed within the range."""
        logger.info(
            "Generating margin report entity_id=%s from=%s to=%s",
            entity_id, date_from, date_to,
        )
        start, end = _day_bounds(date_from, date_to)
        bookings = self._bookings(
            entity_id,
            Booking.status == BookingStatus.COMPLETED,
            Booking.updated_at >= start,
            Booking.updated_at < end,
        )

        total_margin = money.ZERO
        for booking in bookings:
            total_margin = money.add(total_margin, booking.margin_amount)

        count = len(bookings)
        average = money.divide(total_margin, count) if count else money.ZERO

        return MarginReport(
            total_margin=total_margin,
            booking_count=count,
            average_margin=average,
        )

    def _contact_name(self, contact_id: int | None) -> str:
        contact = self.db.get(Contact, contact_id) if contact_id else None
        return contact.name if contact else "Unknown"
