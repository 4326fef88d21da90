"""
Supplier bill and bill-payment link models.

Bills are the payable side of invoices. Payments against them are
OUTGOING rows in the shared payments table.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    String, Date, DateTime, Numeric, ForeignKey, UniqueConstraint,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from entity_ledger.models.base import Base, utcnow
from entity_ledger.models.enums import BillStatus


class Bill(Base):
    __tablename__ = "bills"
    __table_args__ = (
        UniqueConstraint("entity_id", "number", name="uq_bills_entity_number"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    entity_id: Mapped[int] = mapped_column(
        ForeignKey("entities.id"), nullable=False, index=True
    )
    contact_id: Mapped[int] = mapped_column(
        ForeignKey("contacts.id"), nullable=False, index=True
    )
    number: Mapped[str] = mapped_column(String(100), nullable=False)
    issue_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[BillStatus] = mapped_column(
        SAEnum(BillStatus, name="bill_status_enum"),
        nullable=False,
        default=BillStatus.DRAFT,
    )
    currency_code: Mapped[str] = mapped_column(
        String(3), nullable=False, default="AUD"
    )
    subtotal_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False
    )
    tax_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False
    )
    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False
    )
    external_ref: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    journal_entry_id: Mapped[int | None] = mapped_column(
        ForeignKey("journal_entries.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    payment_links: Mapped[list["BillPayment"]] = relationship(
        back_populates="bill",
        order_by="BillPayment.id",
    )

    def __repr__(self) -> str:
        return f"<Bill {self.number} ({self.status.value})>"


class BillPayment(Base):
    __tablename__ = "bill_payments"

    id: Mapped[int] = mapped_column(primary_key=True)
    bill_id: Mapped[int] = mapped_column(
        ForeignKey("bills.id"), nullable=False, index=True
    )
    payment_id: Mapped[int] = mapped_column(
        ForeignKey("payments.id"), nullable=False, index=True
    )
    amount_applied: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    bill: Mapped["Bill"] = relationship(back_populates="payment_links")
    payment: Mapped["Payment"] = relationship()
