"""
Pydantic schemas for financial statements and booking reports.

All amounts are 4-place Decimals produced by entity_ledger.money.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel

from entity_ledger.models.enums import AccountType, BookingStatus


class TrialBalanceRow(BaseModel):
    account_id: int
    account_code: str
    account_name: str
    account_type: AccountType
    debit: Decimal
    credit: Decimal
    balance: Decimal


class TrialBalanceReport(BaseModel):
    entity_id: int
    as_of: date
    accounts: list[TrialBalanceRow]
    total_debits: Decimal
    total_credits: Decimal
    is_balanced: bool


class ProfitAndLossRow(BaseModel):
    account_id: int
    account_code: str
    account_name: str
    account_type: AccountType
    amount: Decimal


class ProfitAndLossReport(BaseModel):
    entity_id: int
    date_from: date
    date_to: date
    revenue: list[ProfitAndLossRow]
    expenses: list[ProfitAndLossRow]
    total_revenue: Decimal
    total_expenses: Decimal
    net_profit: Decimal


class BalanceSheetRow(BaseModel):
    account_id: int
    account_code: str
    account_name: str
    account_type: AccountType
    balance: Decimal


class BalanceSheetReport(BaseModel):
    entity_id: int
    as_of: date
    assets: list[BalanceSheetRow]
    liabilities: list[BalanceSheetRow]
    equity: list[BalanceSheetRow]
    total_assets: Decimal
    total_liabilities: Decimal
    total_equity: Decimal
    is_balanced: bool


# --- Booking Reports ---

class BookingSummary(BaseModel):
    total_bookings: int
    confirmed_bookings: int
    completed_bookings: int
    cancelled_bookings: int
    total_revenue: Decimal
    total_margin: Decimal
    total_supplier_payouts: Decimal
    outstanding_deposits: Decimal


class OutstandingDeposit(BaseModel):
    booking_id: int
    external_booking_id: str
    customer_name: str
    deposit_amount: Decimal
    status: BookingStatus
    created_at: datetime


class UpcomingPayout(BaseModel):
    booking_id: int
    external_booking_id: str
    supplier_name: str
    payout_amount: Decimal
    status: BookingStatus


class MarginReport(BaseModel):
    total_margin: Decimal
    booking_count: int
    average_margin: Decimal
