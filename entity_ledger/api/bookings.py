"""
Booking endpoints.

Each money movement on a booking posts one journal entry and
returns the booking with its event history.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from entity_ledger.api.errors import to_http_exception
from entity_ledger.errors import LedgerError
from entity_ledger.models.base import get_db
from entity_ledger.schemas.booking import (
    BookingAmountRequest,
    BookingCancelRequest,
    BookingCreate,
    BookingRefundRequest,
    BookingResponse,
)
from entity_ledger.services.booking_service import BookingService

router = APIRouter(prefix="/bookings", tags=["Bookings"])


def _run(db: Session, booking_id: int, action) -> BookingResponse:
    """Run a booking step, commit, and return the refreshed booking."""
    service = BookingService(db)
    try:
        action(service)
        db.commit()
        return service.get_booking(booking_id)
    except LedgerError as e:
        db.rollback()
        raise to_http_exception(e)


@router.post("", response_model=BookingResponse, status_code=201)
def create_booking(request: BookingCreate, db: Session = Depends(get_db)):
    service = BookingService(db)
    try:
        booking = service.create_booking(request)
        db.commit()
        return service.get_booking(booking.id)
    except LedgerError as e:
        db.rollback()
        raise to_http_exception(e)


@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(booking_id: int, db: Session = Depends(get_db)):
    try:
        return BookingService(db).get_booking(booking_id)
    except LedgerError as e:
        raise to_http_exception(e)


@router.post("/{booking_id}/deposit", response_model=BookingResponse)
def record_deposit(
    booking_id: int,
    request: BookingAmountRequest,
    db: Session = Depends(get_db),
):
    """DR bank / CR customer deposits held / CR GST on income."""
    return _run(db, booking_id, lambda s: s.record_deposit(booking_id, request))


@router.post("/{booking_id}/balance", response_model=BookingResponse)
def record_balance(
    booking_id: int,
    request: BookingAmountRequest,
    db: Session = Depends(get_db),
):
    """DR bank / CR accounts receivable / CR GST on income."""
    return _run(db, booking_id, lambda s: s.record_balance(booking_id, request))


@router.post("/{booking_id}/payout", response_model=BookingResponse)
def record_supplier_payout(
    booking_id: int,
    request: BookingAmountRequest,
    db: Session = Depends(get_db),
):
    """DR supplier payouts / CR bank."""
    return _run(
        db, booking_id, lambda s: s.record_supplier_payout(booking_id, request)
    )


@router.post("/{booking_id}/margin", response_model=BookingResponse)
def recognize_margin(
    booking_id: int,
    request: BookingAmountRequest,
    db: Session = Depends(get_db),
):
    """DR customer deposits held / CR margin revenue / CR GST on income."""
    return _run(db, booking_id, lambda s: s.recognize_margin(booking_id, request))


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(
    booking_id: int,
    request: BookingCancelRequest,
    db: Session = Depends(get_db),
):
    return _run(db, booking_id, lambda s: s.cancel_booking(booking_id, request))


@router.post("/{booking_id}/refund", response_model=BookingResponse)
def record_refund(
    booking_id: int,
    request: BookingRefundRequest,
    db: Session = Depends(get_db),
):
    """DR customer deposits held (or receivable) / CR bank."""
    return _run(db, booking_id, lambda s: s.record_refund(booking_id, request))
