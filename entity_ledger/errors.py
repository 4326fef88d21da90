"""
Typed errors raised by the ledger services.

Every error is synchronous and non-retryable. The HTTP layer maps
``status_code`` straight onto the response and surfaces the message
verbatim.
"""


class LedgerError(Exception):
    """Base class for all ledger failures."""

    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError, ValueError):
    """Malformed input or a business-rule violation."""

    status_code = 400


class UnbalancedJournalError(ValidationError):
    """Total debits of a proposed entry differ from total credits."""

    def __init__(self, total_debits, total_credits):
        self.total_debits = total_debits
        self.total_credits = total_credits
        super().__init__(
            f"Journal entry is unbalanced: debits ({total_debits}) "
            f"!= credits ({total_credits})"
        )


class NotFoundError(LedgerError, LookupError):
    """A referenced entity, account or journal entry does not exist."""

    status_code = 404

    def __init__(self, resource: str):
        self.resource = resource
        super().__init__(f"{resource} not found")


class PartialCompletionError(LedgerError):
    """
    A multi-entry workflow stopped halfway.

    The entries in ``completed_entry_ids`` were posted and stay on the
    books; the rest were not. Reconciliation is required.
    """

    status_code = 409

    def __init__(self, message: str, completed_entry_ids: list[int]):
        self.completed_entry_ids = completed_entry_ids
        super().__init__(
            f"{message} Completed journal entries: {completed_entry_ids}. "
            f"Manual reconciliation required."
        )
