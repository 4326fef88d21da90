"""
Pydantic schemas for entities, accounts, tax codes and contacts.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from entity_ledger.models.enums import AccountType, ContactType


# --- Entity Schemas ---

class EntityCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    legal_identifier: str | None = Field(default=None, max_length=100)
    currency_code: str | None = Field(default=None, min_length=3, max_length=3)


class EntityResponse(BaseModel):
    id: int
    name: str
    legal_identifier: str | None
    currency_code: str
    created_at: datetime

    model_config = {"from_attributes": True}


# --- Account Schemas ---

class AccountCreate(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=255)
    account_type: AccountType
    is_bank_account: bool = False
    is_active: bool = True


class AccountUpdate(BaseModel):
    is_active: bool


class AccountResponse(BaseModel):
    id: int
    entity_id: int
    code: str
    name: str
    account_type: AccountType
    is_active: bool
    is_bank_account: bool
    created_at: datetime

    model_config = {"from_attributes": True}


# --- Tax Code Schemas ---

class TaxCodeCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    rate: Decimal


class TaxCodeResponse(BaseModel):
    id: int
    entity_id: int
    name: str
    rate: Decimal

    model_config = {"from_attributes": True}


# --- Contact Schemas ---

class ContactCreate(BaseModel):
    contact_type: ContactType
    name: str = Field(min_length=1, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    external_ref: str | None = Field(default=None, max_length=255)


class ContactResponse(BaseModel):
    id: int
    entity_id: int
    contact_type: ContactType
    name: str
    email: str | None
    external_ref: str | None

    model_config = {"from_attributes": True}
