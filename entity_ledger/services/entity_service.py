"""
Entity service: entities and their chart of accounts.

Entities, accounts, tax codes and contacts are created here before
any journal entry can reference them.
"""

import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from entity_ledger import money
from entity_ledger.config import get_settings
from entity_ledger.errors import NotFoundError, ValidationError
from entity_ledger.models.account import Account
from entity_ledger.models.contact import Contact
from entity_ledger.models.entity import Entity
from entity_ledger.models.tax_code import TaxCode
from entity_ledger.schemas.chart import (
    AccountCreate,
    ContactCreate,
    EntityCreate,
    TaxCodeCreate,
)

logger = logging.getLogger(__name__)


class EntityService:

    def __init__(self, db: Session):
        self.db = db

    # --- Entities ---

    def create_entity(self, request: EntityCreate) -> Entity:
        logger.info("Creating entity name=%s", request.name)

        entity = Entity(
            name=request.name,
            legal_identifier=request.legal_identifier,
            currency_code=(
                request.currency_code or get_settings().DEFAULT_CURRENCY
            ).upper(),
        )
        self.db.add(entity)
        self.db.flush()

        logger.info("Entity created entity_id=%s", entity.id)
        return entity

    def get_entity(self, entity_id: int) -> Entity:
        entity = self.db.get(Entity, entity_id)
        if not entity:
            raise NotFoundError("Entity")
        return entity

    def list_entities(self) -> list[Entity]:
        return list(
            self.db.execute(select(Entity).order_by(Entity.id)).scalars().all()
        )

    # --- Accounts ---

    def create_account(self, entity_id: int, request: AccountCreate) -> Account:
        """
        Add an account to an entity's chart of accounts.

        Raises ValidationError if the code is already used within
        the entity.
        """
        self.get_entity(entity_id)

        existing = self.db.execute(
            select(Account).where(
                Account.entity_id == entity_id,
                Account.code == request.code,
            )
        ).scalar_one_or_none()

        if existing:
            raise ValidationError(
                f"Account code {request.code} already exists for this entity"
            )

        account = Account(
            entity_id=entity_id,
            code=request.code,
            name=request.name,
            account_type=request.account_type,
            is_bank_account=request.is_bank_account,
            is_active=request.is_active,
        )
        self.db.add(account)
        self.db.flush()

        logger.info(
            "Account created account_id=%s entity_id=%s code=%s",
            account.id, entity_id, account.code,
        )
        return account

    def get_account(self, account_id: int, entity_id: int | None = None) -> Account:
        account = self.db.get(Account, account_id)
        if not account or (entity_id is not None and account.entity_id != entity_id):
            raise NotFoundError("Account")
        return account

    def get_account_by_code(self, entity_id: int, code: str) -> Account:
        account = self.db.execute(
            select(Account).where(
                Account.entity_id == entity_id,
                Account.code == code,
            )
        ).scalar_one_or_none()
        if not account:
            raise NotFoundError(f"Account with code {code}")
        return account

    def list_accounts(self, entity_id: int) -> list[Account]:
        self.get_entity(entity_id)
        accounts = self.db.execute(
            select(Account)
            .where(Account.entity_id == entity_id)
            .order_by(Account.code)
        ).scalars().all()
        return list(accounts)

    def set_account_active(
        self, entity_id: int, account_id: int, is_active: bool
    ) -> Account:
        """Activate or deactivate an account. Accounts are never deleted."""
        account = self.get_account(account_id, entity_id)
        account.is_active = is_active
        self.db.flush()

        logger.info(
            "Account activation changed account_id=%s is_active=%s",
            account_id, is_active,
        )
        return account

    # --- Tax codes ---

    def create_tax_code(self, entity_id: int, request: TaxCodeCreate) -> TaxCode:
        self.get_entity(entity_id)

        rate = Decimal(request.rate)
        if rate < 0 or rate > 1:
            raise ValidationError("Tax rate must be between 0 and 1")

        tax_code = TaxCode(
            entity_id=entity_id,
            name=request.name,
            rate=money.to_amount(rate),
        )
        self.db.add(tax_code)
        self.db.flush()
        return tax_code

    def list_tax_codes(self, entity_id: int) -> list[TaxCode]:
        self.get_entity(entity_id)
        return list(
            self.db.execute(
                select(TaxCode)
                .where(TaxCode.entity_id == entity_id)
                .order_by(TaxCode.id)
            ).scalars().all()
        )

    # --- Contacts ---

    def create_contact(self, entity_id: int, request: ContactCreate) -> Contact:
        self.get_entity(entity_id)

        contact = Contact(
            entity_id=entity_id,
            contact_type=request.contact_type,
            name=request.name,
            email=request.email,
            external_ref=request.external_ref,
        )
        self.db.add(contact)
        self.db.flush()
        return contact

    def get_contact(self, contact_id: int) -> Contact:
        contact = self.db.get(Contact, contact_id)
        if not contact:
            raise NotFoundError("Contact")
        return contact
