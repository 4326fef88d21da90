"""
Tests for the ReportService.

Reports are recomputed from posted journal lines, so every test
posts through the LedgerService first and then checks the
derived figures.
"""

import random
from datetime import date, timedelta
from decimal import Decimal

import pytest

from entity_ledger.errors import NotFoundError, ValidationError
from entity_ledger.models.base import utcnow
from entity_ledger.models.enums import AccountType, BookingStatus, SourceSystem
from entity_ledger.schemas.booking import BookingCreate
from entity_ledger.schemas.ledger import (
    JournalLineCreate,
    PostJournalRequest,
    ReverseJournalRequest,
)
from entity_ledger.services.booking_service import BookingService
from entity_ledger.services.ledger_service import LedgerService
from entity_ledger.services.report_service import ReportService


def post(db_session, entity, debit_account, credit_account, amount, on=date(2025, 1, 15)):
    entry = LedgerService(db_session).post_journal_entry(
        entity.id,
        PostJournalRequest(
            entry_date=on,
            description="Report test",
            source_system=SourceSystem.MANUAL,
            lines=[
                JournalLineCreate(account_id=debit_account.id, debit=Decimal(amount)),
                JournalLineCreate(account_id=credit_account.id, credit=Decimal(amount)),
            ],
        ),
    )
    db_session.commit()
    return entry


class TestTrialBalance:

    def test_empty_ledger_is_balanced(self, db_session, entity_with_chart):
        entity, _ = entity_with_chart

        report = ReportService(db_session).trial_balance(entity.id, date(2025, 12, 31))

        assert report.accounts == []
        assert report.total_debits == Decimal("0.0000")
        assert report.is_balanced is True

    def test_rows_per_account_with_activity(self, db_session, entity_with_chart):
        entity, accounts = entity_with_chart
        post(db_session, entity, accounts["1000"], accounts["3000"], "10000")
        post(db_session, entity, accounts["6000"], accounts["1000"], "2500.25")

        report = ReportService(db_session).trial_balance(entity.id, date(2025, 12, 31))

        rows = {row.account_code: row for row in report.accounts}
        assert set(rows) == {"1000", "3000", "6000"}
        assert rows["1000"].debit == Decimal("10000.0000")
        assert rows["1000"].credit == Decimal("2500.2500")
        assert rows["1000"].balance == Decimal("7499.7500")
        assert rows["3000"].balance == Decimal("-10000.0000")
        assert report.total_debits == report.total_credits == Decimal("12500.2500")
        assert report.is_balanced is True

    def test_entries_after_as_of_are_excluded(self, db_session, entity_with_chart):
        entity, accounts = entity_with_chart
        post(db_session, entity, accounts["1000"], accounts["4000"], "100", on=date(2025, 1, 1))
        post(db_session, entity, accounts["1000"], accounts["4000"], "900", on=date(2025, 6, 1))

        report = ReportService(db_session).trial_balance(entity.id, date(2025, 3, 31))

        assert report.total_debits == Decimal("100.0000")

    def test_reversed_entry_nets_to_zero(self, db_session, entity_with_chart):
        entity, accounts = entity_with_chart
        entry = post(db_session, entity, accounts["1000"], accounts["4000"], "1000.00")
        LedgerService(db_session).reverse_journal_entry(
            entry.id,
            ReverseJournalRequest(entry_date=date(2025, 1, 16), reason="Undo"),
        )
        db_session.commit()

        report = ReportService(db_session).trial_balance(entity.id, date(2025, 12, 31))

        assert {row.account_code: row.balance for row in report.accounts} == {
            "1000": Decimal("0.0000"),
            "4000": Decimal("0.0000"),
        }
        assert report.is_balanced is True

    def test_other_entities_are_not_included(self, db_session, make_entity):
        parent, parent_accounts = make_entity("Parent")
        sub, sub_accounts = make_entity("Subsidiary")
        post(db_session, parent, parent_accounts["1000"], parent_accounts["4000"], "10")
        post(db_session, sub, sub_accounts["1000"], sub_accounts["4000"], "99")

        report = ReportService(db_session).trial_balance(parent.id, date(2025, 12, 31))

        assert report.total_debits == Decimal("10.0000")

    def test_unknown_entity_rejected(self, db_session):
        with pytest.raises(NotFoundError):
            ReportService(db_session).trial_balance(9999, date(2025, 12, 31))

    @pytest.mark.parametrize("seed", range(5))
    def test_random_postings_always_balance(self, db_session, entity_with_chart, seed):
        rng = random.Random(seed)
        entity, accounts = entity_with_chart
        chart = list(accounts.values())

        for _ in range(rng.randint(5, 20)):
            debit_account, credit_account = rng.sample(chart, 2)
            amount = Decimal(rng.randint(1, 5_000_000)) / Decimal("10000")
            post(
                db_session, entity, debit_account, credit_account, amount,
                on=date(2025, 1, 1) + timedelta(days=rng.randint(0, 300)),
            )

        report = ReportService(db_session).trial_balance(entity.id, date(2025, 12, 31))

        assert report.is_balanced is True
        assert report.total_debits == report.total_credits


class TestProfitAndLoss:

    def test_revenue_expenses_and_net_profit(self, db_session, entity_with_chart):
        entity, accounts = entity_with_chart
        post(db_session, entity, accounts["1000"], accounts["4000"], "5000")
        post(db_session, entity, accounts["1000"], accounts["4100"], "750.50")
        post(db_session, entity, accounts["6000"], accounts["1000"], "1200")
        post(db_session, entity, accounts["1000"], accounts["3000"], "9999")

        report = ReportService(db_session).profit_and_loss(
            entity.id, date(2025, 1, 1), date(2025, 1, 31)
        )

        assert report.total_revenue == Decimal("5750.5000")
        assert report.total_expenses == Decimal("1200.0000")
        assert report.net_profit == Decimal("4550.5000")
        assert [row.account_code for row in report.revenue] == ["4000", "4100"]
        assert report.expenses[0].amount == Decimal("-1200.0000")

    def test_only_entries_in_range(self, db_session, entity_with_chart):
        entity, accounts = entity_with_chart
        post(db_session, entity, accounts["1000"], accounts["4000"], "100", on=date(2024, 12, 31))
        post(db_session, entity, accounts["1000"], accounts["4000"], "200", on=date(2025, 1, 1))
        post(db_session, entity, accounts["1000"], accounts["4000"], "300", on=date(2025, 1, 31))
        post(db_session, entity, accounts["1000"], accounts["4000"], "400", on=date(2025, 2, 1))

        report = ReportService(db_session).profit_and_loss(
            entity.id, date(2025, 1, 1), date(2025, 1, 31)
        )

        assert report.total_revenue == Decimal("500.0000")

    def test_inverted_range_rejected(self, db_session, entity_with_chart):
        entity, _ = entity_with_chart

        with pytest.raises(ValidationError):
            ReportService(db_session).profit_and_loss(
                entity.id, date(2025, 2, 1), date(2025, 1, 1)
            )


class TestBalanceSheet:

    def test_assets_equal_liabilities_plus_equity(self, db_session, entity_with_chart):
        entity, accounts = entity_with_chart
        post(db_session, entity, accounts["1000"], accounts["3000"], "20000")
        post(db_session, entity, accounts["1000"], accounts["2500"], "5000")
        post(db_session, entity, accounts["1500"], accounts["1000"], "3000")

        report = ReportService(db_session).balance_sheet(entity.id, date(2025, 12, 31))

        assert report.total_assets == Decimal("25000.0000")
        assert report.total_liabilities == Decimal("5000.0000")
        assert report.total_equity == Decimal("20000.0000")
        assert report.is_balanced is True
        assert {row.account_type for row in report.assets} == {AccountType.ASSET}

    @pytest.mark.parametrize("seed", range(5))
    def test_random_balance_sheet_postings_balance(
        self, db_session, entity_with_chart, seed
    ):
        rng = random.Random(seed)
        entity, accounts = entity_with_chart
        chart = [
            a for a in accounts.values()
            if a.account_type in (AccountType.ASSET, AccountType.LIABILITY, AccountType.EQUITY)
        ]

        for _ in range(10):
            debit_account, credit_account = rng.sample(chart, 2)
            amount = Decimal(rng.randint(1, 1_000_000)) / Decimal("100")
            post(db_session, entity, debit_account, credit_account, amount)

        report = ReportService(db_session).balance_sheet(entity.id, date(2025, 12, 31))

        assert report.total_assets == report.total_liabilities + report.total_equity
        assert report.is_balanced is True


class TestBookingReports:

    def _booking(self, db_session, entity, external_id, supplier="Big Lift Cranes"):
        booking = BookingService(db_session).create_booking(BookingCreate(
            entity_id=entity.id,
            external_booking_id=external_id,
            customer_name="Acme Builders",
            supplier_name=supplier,
            total_job_amount=Decimal("5500"),
            deposit_amount=Decimal("1100"),
            margin_amount=Decimal("550"),
        ))
        db_session.commit()
        return booking

    def test_booking_summary_counts_by_status(self, db_session, entity_with_chart):
        entity, _ = entity_with_chart
        self._booking(db_session, entity, "BK-1")
        self._booking(db_session, entity, "BK-2")
        today = utcnow().date()

        summary = ReportService(db_session).booking_summary(entity.id, today, today)

        assert summary.total_bookings == 2
        assert summary.confirmed_bookings == 0
        assert summary.total_revenue == Decimal("0.0000")

    def test_upcoming_payouts_lists_bookings_with_suppliers(
        self, db_session, entity_with_chart
    ):
        entity, _ = entity_with_chart
        booking = self._booking(db_session, entity, "BK-1")
        booking.status = BookingStatus.CONFIRMED
        self._booking(db_session, entity, "BK-2", supplier=None)
        db_session.commit()

        payouts = ReportService(db_session).upcoming_payouts(entity.id)

        assert [p.external_booking_id for p in payouts] == ["BK-1"]
        assert payouts[0].supplier_name == "Big Lift Cranes"

    def test_margin_report_without_completed_bookings(
        self, db_session, entity_with_chart
    ):
        entity, _ = entity_with_chart
        self._booking(db_session, entity, "BK-1")
        today = utcnow().date()

        report = ReportService(db_session).margin_report(entity.id, today, today)

        assert report.booking_count == 0
        assert report.average_margin == Decimal("0.0000")
