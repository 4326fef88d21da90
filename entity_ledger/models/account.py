"""
Account model (chart of accounts).

Every account belongs to one entity and its code is unique within
that entity. Accounts referenced by journal lines are never
deleted, only deactivated via is_active=False.
"""

from datetime import datetime

from sqlalchemy import (
    String, Boolean, DateTime, ForeignKey, UniqueConstraint,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from entity_ledger.models.base import Base, utcnow
from entity_ledger.models.enums import AccountType


class Account(Base):

    __tablename__ = "accounts"
    __table_args__ = (
        UniqueConstraint("entity_id", "code", name="uq_accounts_entity_code"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    entity_id: Mapped[int] = mapped_column(
        ForeignKey("entities.id"), nullable=False, index=True
    )
    code: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    account_type: Mapped[AccountType] = mapped_column(
        SAEnum(AccountType, name="account_type_enum"),
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    is_bank_account: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    entity: Mapped["Entity"] = relationship(back_populates="accounts")

    def __repr__(self) -> str:
        return f"<Account {self.code} ({self.account_type.value})>"
