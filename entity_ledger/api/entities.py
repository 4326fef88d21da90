"""
Entity and chart-of-accounts endpoints.

Entities, their accounts, tax codes and contacts must exist before
journals can be posted against them.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from entity_ledger.api.errors import to_http_exception
from entity_ledger.errors import LedgerError
from entity_ledger.models.base import get_db
from entity_ledger.schemas.chart import (
    AccountCreate,
    AccountResponse,
    AccountUpdate,
    ContactCreate,
    ContactResponse,
    EntityCreate,
    EntityResponse,
    TaxCodeCreate,
    TaxCodeResponse,
)
from entity_ledger.services.entity_service import EntityService

router = APIRouter(prefix="/entities", tags=["Entities"])


@router.post("", response_model=EntityResponse, status_code=201)
def create_entity(request: EntityCreate, db: Session = Depends(get_db)):
    service = EntityService(db)
    try:
        entity = service.create_entity(request)
        db.commit()
        return entity
    except LedgerError as e:
        db.rollback()
        raise to_http_exception(e)


@router.get("", response_model=list[EntityResponse])
def list_entities(db: Session = Depends(get_db)):
    return EntityService(db).list_entities()


@router.get("/{entity_id}", response_model=EntityResponse)
def get_entity(entity_id: int, db: Session = Depends(get_db)):
    try:
        return EntityService(db).get_entity(entity_id)
    except LedgerError as e:
        raise to_http_exception(e)


# --- Accounts ---

@router.post(
    "/{entity_id}/accounts", response_model=AccountResponse, status_code=201
)
def create_account(
    entity_id: int,
    request: AccountCreate,
    db: Session = Depends(get_db),
):
    """
    Add an account to the entity's chart of accounts.

    Account codes are unique within an entity.
    """
    service = EntityService(db)
    try:
        account = service.create_account(entity_id, request)
        db.commit()
        return account
    except LedgerError as e:
        db.rollback()
        raise to_http_exception(e)


@router.get("/{entity_id}/accounts", response_model=list[AccountResponse])
def list_accounts(entity_id: int, db: Session = Depends(get_db)):
    try:
        return EntityService(db).list_accounts(entity_id)
    except LedgerError as e:
        raise to_http_exception(e)


@router.patch(
    "/{entity_id}/accounts/{account_id}", response_model=AccountResponse
)
def update_account(
    entity_id: int,
    account_id: int,
    request: AccountUpdate,
    db: Session = Depends(get_db),
):
    """Activate or deactivate an account. Inactive accounts reject new postings."""
    service = EntityService(db)
    try:
        account = service.set_account_active(
            entity_id, account_id, request.is_active
        )
        db.commit()
        return account
    except LedgerError as e:
        db.rollback()
        raise to_http_exception(e)


# --- Tax codes ---

@router.post(
    "/{entity_id}/tax-codes", response_model=TaxCodeResponse, status_code=201
)
def create_tax_code(
    entity_id: int,
    request: TaxCodeCreate,
    db: Session = Depends(get_db),
):
    service = EntityService(db)
    try:
        tax_code = service.create_tax_code(entity_id, request)
        db.commit()
        return tax_code
    except LedgerError as e:
        db.rollback()
        raise to_http_exception(e)


@router.get("/{entity_id}/tax-codes", response_model=list[TaxCodeResponse])
def list_tax_codes(entity_id: int, db: Session = Depends(get_db)):
    try:
        return EntityService(db).list_tax_codes(entity_id)
    except LedgerError as e:
        raise to_http_exception(e)


# --- Contacts ---

@router.post(
    "/{entity_id}/contacts", response_model=ContactResponse, status_code=201
)
def create_contact(
    entity_id: int,
    request: ContactCreate,
    db: Session = Depends(get_db),
):
    service = EntityService(db)
    try:
        contact = service.create_contact(entity_id, request)
        db.commit()
        return contact
    except LedgerError as e:
        db.rollback()
        raise to_http_exception(e)
