"""
Contact model.

Customers, suppliers and intercompany counterparties of an entity.
"""

from datetime import datetime

from sqlalchemy import String, DateTime, ForeignKey, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from entity_ledger.models.base import Base, utcnow
from entity_ledger.models.enums import ContactType


class Contact(Base):
    __tablename__ = "contacts"

    id: Mapped[int] = mapped_column(primary_key=True)
    entity_id: Mapped[int] = mapped_column(
        ForeignKey("entities.id"), nullable=False, index=True
    )
    contact_type: Mapped[ContactType] = mapped_column(
        SAEnum(ContactType, name="contact_type_enum"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    external_ref: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    def __repr__(self) -> str:
        return f"<Contact {self.name} ({self.contact_type.value})>"
