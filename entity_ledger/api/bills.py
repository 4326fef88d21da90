"""
Bill endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from entity_ledger.api.errors import to_http_exception
from entity_ledger.errors import LedgerError
from entity_ledger.models.base import get_db
from entity_ledger.schemas.bill import (
    BillCreate,
    BillPaymentRequest,
    BillPostRequest,
    BillResponse,
)
from entity_ledger.schemas.invoice import PaymentResponse
from entity_ledger.services.bill_service import BillService

router = APIRouter(prefix="/entities/{entity_id}/bills", tags=["Bills"])


@router.post("", response_model=BillResponse, status_code=201)
def create_bill(
    entity_id: int,
    request: BillCreate,
    db: Session = Depends(get_db),
):
    service = BillService(db)
    try:
        bill = service.create_bill(entity_id, request)
        db.commit()
        return bill
    except LedgerError as e:
        db.rollback()
        raise to_http_exception(e)


@router.get("/{bill_id}", response_model=BillResponse)
def get_bill(entity_id: int, bill_id: int, db: Session = Depends(get_db)):
    try:
        return BillService(db).get_bill(bill_id, entity_id)
    except LedgerError as e:
        raise to_http_exception(e)


@router.post("/{bill_id}/post", response_model=BillResponse)
def post_bill(
    entity_id: int,
    bill_id: int,
    request: BillPostRequest,
    db: Session = Depends(get_db),
):
    """Post a DRAFT bill to the ledger. The bill becomes SENT."""
    service = BillService(db)
    try:
        bill = service.post_bill(entity_id, bill_id, request)
        db.commit()
        return bill
    except LedgerError as e:
        db.rollback()
        raise to_http_exception(e)


@router.post(
    "/{bill_id}/payments", response_model=PaymentResponse, status_code=201
)
def record_payment(
    entity_id: int,
    bill_id: int,
    request: BillPaymentRequest,
    db: Session = Depends(get_db),
):
    """Pay a supplier and recompute the bill status."""
    service = BillService(db)
    try:
        payment = service.record_payment(entity_id, bill_id, request)
        db.commit()
        return payment
    except LedgerError as e:
        db.rollback()
        raise to_http_exception(e)
