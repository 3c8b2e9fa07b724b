from typing import Optional


class LedgerError(Exception):
    pass


class ValidationError(LedgerError):
    """Bad or incomplete user input. The caller shows the message and the user retries."""

    def __init__(self, message: str, missing: Optional[list[str]] = None):
        super().__init__(message)
        self.message = message
        self.missing = list(missing or [])


class SplitExceedsAmountError(ValidationError):
    pass


class SplitMismatchError(ValidationError):
    pass


class DataError(LedgerError):
    """Malformed snapshot or expense data handed in from a store."""


class TrackerNotFoundError(LedgerError):
    pass


class StorageError(LedgerError):
    pass


class PartialPersistenceError(LedgerError):
    """The expense row was written but its splits were not."""

    def __init__(self, expense_id: str, reason: str):
        super().__init__(f"Expense {expense_id} was saved but its splits failed: {reason}")
        self.expense_id = expense_id
        self.reason = reason
