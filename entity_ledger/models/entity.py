"""
Entity model.

An entity is one legal/accounting unit. Every account, tax code
and journal entry belongs to exactly one entity, and postings
never cross entities implicitly.
"""

from datetime import datetime

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from entity_ledger.models.base import Base, utcnow


class Entity(Base):
    __tablename__ = "entities"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    legal_identifier: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )
    currency_code: Mapped[str] = mapped_column(
        String(3), nullable=False, default="AUD"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    accounts: Mapped[list["Account"]] = relationship(
        back_populates="entity"
    )

    def __repr__(self) -> str:
        return f"<Entity {self.id} {self.name} ({self.currency_code})>"
