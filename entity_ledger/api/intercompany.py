"""
Intercompany endpoints.

A loan transfer writes to two entities' ledgers. If only the
first entry could be posted the response is 409 and names the
entry that was kept.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from entity_ledger.api.errors import to_http_exception
from entity_ledger.errors import LedgerError
from entity_ledger.models.base import get_db
from entity_ledger.schemas.intercompany import (
    LoanTransferRequest,
    LoanTransferResponse,
)
from entity_ledger.services.intercompany_service import IntercompanyService

router = APIRouter(prefix="/intercompany", tags=["Intercompany"])


@router.post("/loans", response_model=LoanTransferResponse, status_code=201)
def create_loan_transfer(
    request: LoanTransferRequest,
    db: Session = Depends(get_db),
):
    service = IntercompanyService(db)
    try:
        return service.create_loan_transfer(request)
    except LedgerError as e:
        db.rollback()
        raise to_http_exception(e)
