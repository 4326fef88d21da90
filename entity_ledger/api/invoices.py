"""
Invoice endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from entity_ledger.api.errors import to_http_exception
from entity_ledger.errors import LedgerError
from entity_ledger.models.base import get_db
from entity_ledger.schemas.invoice import (
    InvoiceCreate,
    InvoicePaymentRequest,
    InvoicePostRequest,
    InvoiceResponse,
    PaymentResponse,
)
from entity_ledger.services.invoice_service import InvoiceService

router = APIRouter(prefix="/entities/{entity_id}/invoices", tags=["Invoices"])


@router.post("", response_model=InvoiceResponse, status_code=201)
def create_invoice(
    entity_id: int,
    request: InvoiceCreate,
    db: Session = Depends(get_db),
):
    service = InvoiceService(db)
    try:
        invoice = service.create_invoice(entity_id, request)
        db.commit()
        return invoice
    except LedgerError as e:
        db.rollback()
        raise to_http_exception(e)


@router.get("/{invoice_id}", response_model=InvoiceResponse)
def get_invoice(entity_id: int, invoice_id: int, db: Session = Depends(get_db)):
    try:
        return InvoiceService(db).get_invoice(invoice_id, entity_id)
    except LedgerError as e:
        raise to_http_exception(e)


@router.post("/{invoice_id}/post", response_model=InvoiceResponse)
def post_invoice(
    entity_id: int,
    invoice_id: int,
    request: InvoicePostRequest,
    db: Session = Depends(get_db),
):
    """Post a DRAFT invoice to the ledger. The invoice becomes SENT."""
    service = InvoiceService(db)
    try:
        invoice = service.post_invoice(entity_id, invoice_id, request)
        db.commit()
        return invoice
    except LedgerError as e:
        db.rollback()
        raise to_http_exception(e)


@router.post(
    "/{invoice_id}/payments", response_model=PaymentResponse, status_code=201
)
def record_payment(
    entity_id: int,
    invoice_id: int,
    request: InvoicePaymentRequest,
    db: Session = Depends(get_db),
):
    """Record a customer payment and recompute the invoice status."""
    service = InvoiceService(db)
    try:
        payment = service.record_payment(entity_id, invoice_id, request)
        db.commit()
        return payment
    except LedgerError as e:
        db.rollback()
        raise to_http_exception(e)
