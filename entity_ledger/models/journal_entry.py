"""
Journal entry and journal line models.

A journal entry is the atomic unit of record. Its lines are
written together with it and never change afterwards. Within an
entry the sum of line debits equals the sum of line credits; the
LedgerService enforces this before anything is written.

Corrections are new entries (reversals), never updates.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    String, Date, DateTime, Numeric, ForeignKey,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from entity_ledger.models.base import Base, utcnow
from entity_ledger.models.enums import SourceSystem, JournalStatus


class JournalEntry(Base):
    __tablename__ = "journal_entries"

    id: Mapped[int] = mapped_column(primary_key=True)
    entity_id: Mapped[int] = mapped_column(
        ForeignKey("entities.id"), nullable=False, index=True
    )
    entry_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    source_system: Mapped[SourceSystem] = mapped_column(
        SAEnum(SourceSystem, name="source_system_enum"),
        nullable=False,
    )
    # Stored as given. Duplicates are not rejected here.
    source_reference: Mapped[str | None] = mapped_column(
        String(255), nullable=True, index=True
    )
    status: Mapped[JournalStatus] = mapped_column(
        SAEnum(JournalStatus, name="journal_status_enum"),
        nullable=False,
        default=JournalStatus.POSTED,
    )
    created_by: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    reverses_entry_id: Mapped[int | None] = mapped_column(
        ForeignKey("journal_entries.id"), nullable=True, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    lines: Mapped[list["JournalLine"]] = relationship(
        back_populates="journal_entry",
        cascade="all, delete-orphan",
        order_by="JournalLine.id",
    )
    reverses: Mapped["JournalEntry | None"] = relationship(
        remote_side=[id]
    )

    def __repr__(self) -> str:
        return (
            f"<JournalEntry {self.id} {self.entry_date} "
            f"({self.status.value})>"
        )


class JournalLine(Base):
    """
    One debit or one credit against an account.

    Exactly one of debit/credit is strictly positive; the other is
    zero.
    """

    __tablename__ = "journal_lines"

    id: Mapped[int] = mapped_column(primary_key=True)
    journal_entry_id: Mapped[int] = mapped_column(
        ForeignKey("journal_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id"), nullable=False, index=True
    )
    debit: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    credit: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    tax_code_id: Mapped[int | None] = mapped_column(
        ForeignKey("tax_codes.id"), nullable=True
    )
    tax_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    memo: Mapped[str | None] = mapped_column(String(500), nullable=True)

    journal_entry: Mapped["JournalEntry"] = relationship(
        back_populates="lines"
    )
    account: Mapped["Account"] = relationship()

    def __repr__(self) -> str:
        return (
            f"<JournalLine account={self.account_id} "
            f"dr={self.debit} cr={self.credit}>"
        )
