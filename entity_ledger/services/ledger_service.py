"""
Ledger service: the core of the bookkeeping system.

This service enforces the fundamental rules:
1. Every journal line is either a debit or a credit, never both
   and never neither
2. Every journal entry balances (debits = credits at 4 places)
3. An entry and its lines are written as one unit
4. Entries are immutable; corrections are reversal entries

No other service writes journal entries directly. Invoices,
bookings and intercompany transfers all go through
post_journal_entry().
"""

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from entity_ledger import money
from entity_ledger.errors import (
    NotFoundError,
    UnbalancedJournalError,
    ValidationError,
)
from entity_ledger.models.account import Account
from entity_ledger.models.entity import Entity
from entity_ledger.models.enums import AccountType, JournalStatus
from entity_ledger.models.journal_entry import JournalEntry, JournalLine
from entity_ledger.models.tax_code import TaxCode
from entity_ledger.schemas.ledger import (
    JournalLineCreate,
    PostJournalRequest,
    ReverseJournalRequest,
)

logger = logging.getLogger(__name__)

REVERSAL_REFERENCE_PREFIX = "REVERSAL_OF_"

DEBIT_NORMAL_TYPES = (AccountType.ASSET, AccountType.EXPENSE)


def reversal_reference(entry_id: int) -> str:
    return f"{REVERSAL_REFERENCE_PREFIX}{entry_id}"


class LedgerService:
    """
    All journal operations pass through this service.

    The service takes a database session as a constructor argument,
    so the caller controls the transaction boundary and decides
    when to commit.
    """

    def __init__(self, db: Session):
        self.db = db

    # --- Posting ---

    def post_journal_entry(
        self,
        entity_id: int,
        request: PostJournalRequest,
        *,
        reverses_entry_id: int | None = None,
    ) -> JournalEntry:
        """
        Validate, balance, tax and persist a journal entry.

        Checks run in a fixed order and fail fast, before anything
        is added to the session:
        - at least one line
        - per line: non-negative, not both sides, not neither side
        - total debits equal total credits
        - entity, accounts and tax codes exist and belong together

        The header and all lines are flushed together. If the flush
        fails the session is rolled back, so no partial entry is
        ever left behind. The caller commits.
        """
        logger.info(
            "Posting journal entry entity_id=%s source_system=%s "
            "source_reference=%s lines=%d",
            entity_id,
            request.source_system.value,
            request.source_reference,
            len(request.lines),
        )

        lines = [self._normalize_line(line) for line in request.lines]
        self._validate_lines(lines)

        total_debits = money.ZERO
        total_credits = money.ZERO
        for line in lines:
            total_debits = money.add(total_debits, line.debit)
            total_credits = money.add(total_credits, line.credit)

        if not money.is_equal(total_debits, total_credits):
            raise UnbalancedJournalError(total_debits, total_credits)

        self._get_entity(entity_id)
        self._validate_accounts(entity_id, lines)
        tax_codes = self._load_tax_codes(entity_id, lines)

        entry = JournalEntry(
            entity_id=entity_id,
            entry_date=request.entry_date,
            description=request.description,
            source_system=request.source_system,
            source_reference=request.source_reference,
            status=JournalStatus.POSTED,
            created_by=request.created_by,
            reverses_entry_id=reverses_entry_id,
        )
        for line in lines:
            tax_amount = money.ZERO
            if line.tax_code_id is not None:
                rate = tax_codes[line.tax_code_id].rate
                tax_amount = money.multiply(
                    money.subtract(line.debit, line.credit), rate
                )
            entry.lines.append(JournalLine(
                account_id=line.account_id,
                debit=line.debit,
                credit=line.credit,
                tax_code_id=line.tax_code_id,
                tax_amount=tax_amount,
                memo=line.memo,
            ))

        try:
            self.db.add(entry)
            self.db.flush()
        except Exception:
            self.db.rollback()
            logger.exception(
                "Failed to persist journal entry entity_id=%s", entity_id
            )
            raise

        logger.info(
            "Journal entry posted entry_id=%s entity_id=%s lines=%d "
            "total=%s",
            entry.id,
            entity_id,
            len(entry.lines),
            total_debits,
        )
        return entry

    def reverse_journal_entry(
        self, entry_id: int, request: ReverseJournalRequest
    ) -> JournalEntry:
        """
        Post a new entry that cancels an existing one.

        Each original line is copied with debit and credit swapped.
        The reversal goes through post_journal_entry(), so it is
        balance-checked like any other entry. The original is not
        modified.
        """
        logger.info("Reversing journal entry entry_id=%s", entry_id)

        original = self.get_journal_entry(entry_id)
        if original.status == JournalStatus.VOIDED:
            raise ValidationError("Cannot reverse a voided journal entry")

        reversal_lines = [
            JournalLineCreate(
                account_id=line.account_id,
                debit=line.credit,
                credit=line.debit,
                tax_code_id=line.tax_code_id,
                memo=line.memo,
            )
            for line in original.lines
        ]

        reversal = self.post_journal_entry(
            original.entity_id,
            PostJournalRequest(
                entry_date=request.entry_date,
                description=(
                    f"REVERSAL: {request.reason} "
                    f"(Original: {original.description})"
                )[:500],
                source_system=original.source_system,
                source_reference=reversal_reference(original.id),
                lines=reversal_lines,
                created_by=request.created_by,
            ),
            reverses_entry_id=original.id,
        )

        logger.info(
            "Journal entry reversed original_id=%s reversal_id=%s",
            original.id,
            reversal.id,
        )
        return reversal

    # --- Reads ---

    def get_journal_entry(
        self, entry_id: int, entity_id: int | None = None
    ) -> JournalEntry:
        """
        Load an entry with its lines.

        When entity_id is given, an entry owned by another entity is
        reported as not found.
        """
        entry = self.db.execute(
            select(JournalEntry)
            .options(selectinload(JournalEntry.lines))
            .where(JournalEntry.id == entry_id)
        ).scalar_one_or_none()

        if not entry or (entity_id is not None and entry.entity_id != entity_id):
            raise NotFoundError("Journal entry")
        return entry

    def list_journal_entries(
        self,
        entity_id: int,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[JournalEntry]:
        """Entries of an entity, oldest first, optionally by date range."""
        self._get_entity(entity_id)

        query = (
            select(JournalEntry)
            .options(selectinload(JournalEntry.lines))
            .where(JournalEntry.entity_id == entity_id)
        )
        if date_from:
            query = query.where(JournalEntry.entry_date >= date_from)
        if date_to:
            query = query.where(JournalEntry.entry_date <= date_to)

        entries = self.db.execute(
            query.order_by(JournalEntry.entry_date, JournalEntry.id)
        ).scalars().all()
        return list(entries)

    def find_reversals(self, entry_id: int) -> list[JournalEntry]:
        """Entries that reverse the given entry."""
        entries = self.db.execute(
            select(JournalEntry)
            .where(JournalEntry.reverses_entry_id == entry_id)
            .order_by(JournalEntry.id)
        ).scalars().all()
        return list(entries)

    def get_account_balance(self, account_id: int, as_of: date | None = None):
        """
        Derive an account's balance from its posted lines.

        Balance is never stored. For ASSET and EXPENSE accounts
        balance = debits - credits; for LIABILITY, EQUITY and
        REVENUE balance = credits - debits.
        """
        account = self.db.get(Account, account_id)
        if not account:
            raise NotFoundError("Account")

        query = (
            select(JournalLine.debit, JournalLine.credit)
            .join(JournalEntry, JournalLine.journal_entry_id == JournalEntry.id)
            .where(
                JournalLine.account_id == account_id,
                JournalEntry.status == JournalStatus.POSTED,
            )
        )
        if as_of:
            query = query.where(JournalEntry.entry_date <= as_of)

        total_debits = money.ZERO
        total_credits = money.ZERO
        for debit, credit in self.db.execute(query):
            total_debits = money.add(total_debits, debit)
            total_credits = money.add(total_credits, credit)

        if account.account_type in DEBIT_NORMAL_TYPES:
            return money.subtract(total_debits, total_credits)
        return money.subtract(total_credits, total_debits)

    # --- Validation helpers ---

    @staticmethod
    def _normalize_line(line: JournalLineCreate) -> JournalLineCreate:
        """Round amounts to the stored scale so what is checked is what is written."""
        return line.model_copy(update={
            "debit": money.to_amount(line.debit),
            "credit": money.to_amount(line.credit),
        })

    @staticmethod
    def _validate_lines(lines: list[JournalLineCreate]) -> None:
        if not lines:
            raise ValidationError("Journal entry must have at least one line")

        for line in lines:
            if line.debit < 0 or line.credit < 0:
                raise ValidationError(
                    "Debit and credit amounts must be non-negative"
                )
            if line.debit > 0 and line.credit > 0:
                raise ValidationError(
                    "A line cannot have both debit and credit amounts"
                )
            if money.is_zero(line.debit) and money.is_zero(line.credit):
                raise ValidationError(
                    "A line must have either a debit or credit amount"
                )

    def _get_entity(self, entity_id: int) -> Entity:
        entity = self.db.get(Entity, entity_id)
        if not entity:
            raise NotFoundError("Entity")
        return entity

    def _validate_accounts(
        self, entity_id: int, lines: list[JournalLineCreate]
    ) -> None:
        account_ids = {line.account_id for line in lines}
        accounts = self.db.execute(
            select(Account).where(Account.id.in_(account_ids))
        ).scalars().all()
        accounts_by_id = {a.id: a for a in accounts}

        missing = account_ids - set(accounts_by_id)
        if missing:
            raise NotFoundError(f"Account {sorted(missing)[0]}")

        for account in accounts_by_id.values():
            if account.entity_id != entity_id:
                raise ValidationError(
                    f"Account {account.code} belongs to another entity"
                )
            if not account.is_active:
                raise ValidationError(f"Account {account.code} is not active")

    def _load_tax_codes(
        self, entity_id: int, lines: list[JournalLineCreate]
    ) -> dict[int, TaxCode]:
        tax_code_ids = {
            line.tax_code_id for line in lines if line.tax_code_id is not None
        }
        if not tax_code_ids:
            return {}

        tax_codes = self.db.execute(
            select(TaxCode).where(TaxCode.id.in_(tax_code_ids))
        ).scalars().all()
        by_id = {t.id: t for t in tax_codes}

        missing = tax_code_ids - set(by_id)
        if missing:
            raise NotFoundError(f"Tax code {sorted(missing)[0]}")
        for tax_code in by_id.values():
            if tax_code.entity_id != entity_id:
                raise ValidationError(
                    f"Tax code {tax_code.name} belongs to another entity"
                )
        return by_id
