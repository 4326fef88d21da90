"""
Report endpoints.

Reports are read-only and derived from the ledger on every call.
Query parameters use the camelCase names clients already send
(asOf, from, to).
"""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from entity_ledger.api.errors import to_http_exception
from entity_ledger.errors import LedgerError
from entity_ledger.models.base import get_db
from entity_ledger.schemas.reports import (
    BalanceSheetReport,
    BookingSummary,
    MarginReport,
    OutstandingDeposit,
    ProfitAndLossReport,
    TrialBalanceReport,
    UpcomingPayout,
)
from entity_ledger.services.report_service import ReportService

router = APIRouter(prefix="/entities/{entity_id}", tags=["Reports"])


@router.get("/trial-balance", response_model=TrialBalanceReport)
def trial_balance(
    entity_id: int,
    as_of: date = Query(alias="asOf"),
    db: Session = Depends(get_db),
):
    try:
        return ReportService(db).trial_balance(entity_id, as_of)
    except LedgerError as e:
        raise to_http_exception(e)


@router.get("/pnl", response_model=ProfitAndLossReport)
def profit_and_loss(
    entity_id: int,
    date_from: date = Query(alias="from"),
    date_to: date = Query(alias="to"),
    db: Session = Depends(get_db),
):
    try:
        return ReportService(db).profit_and_loss(entity_id, date_from, date_to)
    except LedgerError as e:
        raise to_http_exception(e)


@router.get("/balance-sheet", response_model=BalanceSheetReport)
def balance_sheet(
    entity_id: int,
    as_of: date = Query(alias="asOf"),
    db: Session = Depends(get_db),
):
    try:
        return ReportService(db).balance_sheet(entity_id, as_of)
    except LedgerError as e:
        raise to_http_exception(e)


@router.get("/booking-summary", response_model=BookingSummary)
def booking_summary(
    entity_id: int,
    date_from: date = Query(alias="from"),
    date_to: date = Query(alias="to"),
    db: Session = Depends(get_db),
):
    try:
        return ReportService(db).booking_summary(entity_id, date_from, date_to)
    except LedgerError as e:
        raise to_http_exception(e)


@router.get("/outstanding-deposits", response_model=list[OutstandingDeposit])
def outstanding_deposits(entity_id: int, db: Session = Depends(get_db)):
    try:
        return ReportService(db).outstanding_deposits(entity_id)
    except LedgerError as e:
        raise to_http_exception(e)


@router.get("/upcoming-payouts", response_model=list[UpcomingPayout])
def upcoming_payouts(entity_id: int, db: Session = Depends(get_db)):
    try:
        return ReportService(db).upcoming_payouts(entity_id)
    except LedgerError as e:
        raise to_http_exception(e)


@router.get("/margin-report", response_model=MarginReport)
def margin_report(
    entity_id: int,
    date_from: date = Query(alias="from"),
    date_to: date = Query(alias="to"),
    db: Session = Depends(get_db),
):
    try:
        return ReportService(db).margin_report(entity_id, date_from, date_to)
    except LedgerError as e:
        raise to_http_exception(e)
