"""
Booking and booking event models.

A booking is a job sold on behalf of a supplier. Its money
movements (deposit, balance, payout, margin, cancellation,
refund) each post a journal entry and leave a BookingEvent that
points at it. The amount columns are convenience copies used by
the operational reports; the ledger remains the source of truth.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String, Text, DateTime, Numeric, ForeignKey, UniqueConstraint,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from entity_ledger.models.base import Base, utcnow
from entity_ledger.models.enums import BookingStatus, BookingEventType


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        UniqueConstraint(
            "entity_id", "external_booking_id",
            name="uq_bookings_entity_external_id",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    entity_id: Mapped[int] = mapped_column(
        ForeignKey("entities.id"), nullable=False, index=True
    )
    external_booking_id: Mapped[str] = mapped_column(
        String(255), nullable=False, index=True
    )
    customer_id: Mapped[int] = mapped_column(
        ForeignKey("contacts.id"), nullable=False, index=True
    )
    supplier_id: Mapped[int | None] = mapped_column(
        ForeignKey("contacts.id"), nullable=True, index=True
    )
    status: Mapped[BookingStatus] = mapped_column(
        SAEnum(BookingStatus, name="booking_status_enum"),
        nullable=False,
        default=BookingStatus.PENDING,
    )
    total_job_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False
    )
    deposit_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    balance_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    margin_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    supplier_payout_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    customer: Mapped["Contact"] = relationship(foreign_keys=[customer_id])
    supplier: Mapped["Contact | None"] = relationship(
        foreign_keys=[supplier_id]
    )
    events: Mapped[list["BookingEvent"]] = relationship(
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="BookingEvent.id",
    )

    def __repr__(self) -> str:
        return (
            f"<Booking {self.external_booking_id} ({self.status.value})>"
        )


class BookingEvent(Base):
    __tablename__ = "booking_events"

    id: Mapped[int] = mapped_column(primary_key=True)
    booking_id: Mapped[int] = mapped_column(
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    event_type: Mapped[BookingEventType] = mapped_column(
        SAEnum(BookingEventType, name="booking_event_type_enum"),
        nullable=False,
        index=True,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(19, 4), nullable=False)
    journal_entry_id: Mapped[int | None] = mapped_column(
        ForeignKey("journal_entries.id"), nullable=True, index=True
    )
    # JSON-encoded context (GST split, scenario, ...)
    details: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    booking: Mapped["Booking"] = relationship(back_populates="events")
