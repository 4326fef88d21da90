"""
Journal API endpoints.

The API layer is thin: it handles HTTP concerns (status codes,
response formatting) and delegates every rule to the
LedgerService. Service errors are surfaced with their message
unchanged.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from entity_ledger import money
from entity_ledger.api.errors import to_http_exception
from entity_ledger.errors import LedgerError
from entity_ledger.models.base import get_db
from entity_ledger.models.journal_entry import JournalEntry
from entity_ledger.schemas.ledger import (
    AccountBalanceResponse,
    JournalEntryResponse,
    JournalLineResponse,
    JournalResultResponse,
    PostJournalRequest,
    ReverseJournalRequest,
)
from entity_ledger.services.entity_service import EntityService
from entity_ledger.services.ledger_service import LedgerService

router = APIRouter(prefix="/entities/{entity_id}", tags=["Journals"])


def to_journal_result(entry: JournalEntry) -> JournalResultResponse:
    total_debits = money.ZERO
    total_credits = money.ZERO
    for line in entry.lines:
        total_debits = money.add(total_debits, line.debit)
        total_credits = money.add(total_credits, line.credit)

    return JournalResultResponse(
        entry=JournalEntryResponse.model_validate(entry),
        lines=[JournalLineResponse.model_validate(line) for line in entry.lines],
        total_debits=total_debits,
        total_credits=total_credits,
    )


@router.post("/journals", response_model=JournalResultResponse, status_code=201)
def post_journal(
    entity_id: int,
    request: PostJournalRequest,
    db: Session = Depends(get_db),
):
    """
    Post a balanced journal entry.

    The entry must have at least one line, every line must be
    strictly a debit or a credit, and total debits must equal
    total credits. Nothing is stored if any check fails.
    """
    service = LedgerService(db)
    try:
        entry = service.post_journal_entry(entity_id, request)
        db.commit()
        return to_journal_result(entry)
    except LedgerError as e:
        db.rollback()
        raise to_http_exception(e)


@router.get("/journals", response_model=list[JournalResultResponse])
def list_journals(
    entity_id: int,
    date_from: date | None = Query(default=None, alias="from"),
    date_to: date | None = Query(default=None, alias="to"),
    db: Session = Depends(get_db),
):
    service = LedgerService(db)
    try:
        entries = service.list_journal_entries(entity_id, date_from, date_to)
    except LedgerError as e:
        raise to_http_exception(e)
    return [to_journal_result(entry) for entry in entries]


@router.get("/journals/{entry_id}", response_model=JournalResultResponse)
def get_journal(
    entity_id: int,
    entry_id: int,
    db: Session = Depends(get_db),
):
    service = LedgerService(db)
    try:
        entry = service.get_journal_entry(entry_id, entity_id)
    except LedgerError as e:
        raise to_http_exception(e)
    return to_journal_result(entry)


@router.post(
    "/journals/{entry_id}/reverse",
    response_model=JournalResultResponse,
    status_code=201,
)
def reverse_journal(
    entity_id: int,
    entry_id: int,
    request: ReverseJournalRequest,
    db: Session = Depends(get_db),
):
    """
    Reverse a journal entry by posting its mirror image.

    The original entry is left untouched.
    """
    service = LedgerService(db)
    try:
        # Scope the lookup to the entity in the path
        service.get_journal_entry(entry_id, entity_id)
        reversal = service.reverse_journal_entry(entry_id, request)
        db.commit()
        return to_journal_result(reversal)
    except LedgerError as e:
        db.rollback()
        raise to_http_exception(e)


@router.get(
    "/accounts/{account_id}/balance",
    response_model=AccountBalanceResponse,
)
def get_account_balance(
    entity_id: int,
    account_id: int,
    as_of: date | None = Query(default=None, alias="asOf"),
    db: Session = Depends(get_db),
):
    """
    Balance of one account, derived from its posted lines.

    Balance is calculated, never stored.
    """
    try:
        account = EntityService(db).get_account(account_id, entity_id)
        balance = LedgerService(db).get_account_balance(account_id, as_of)
    except LedgerError as e:
        raise to_http_exception(e)

    return AccountBalanceResponse(
        account_id=account.id,
        account_code=account.code,
        account_type=account.account_type.value,
        as_of=as_of,
        balance=balance,
    )
