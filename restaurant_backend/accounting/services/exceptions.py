# accounting/services/exceptions.py

"""
ACCOUNTING SERVICE ERRORS

Domain errors raised by accounting services. API views translate every
subclass of AccountingServiceError into a 400 response.
"""

from decimal import Decimal


class AccountingServiceError(Exception):
    """Base exception for all accounting service failures."""


class AccountResolutionError(AccountingServiceError):
    """Raised when an expected account cannot be resolved."""


class JournalEntryCreationError(AccountingServiceError):
    """Raised when a journal entry cannot be created."""


class UnbalancedEntryError(JournalEntryCreationError):
    """Raised when debits and credits of an entry do not match."""

    def __init__(self, debits: Decimal, credits: Decimal):
        self.debits = debits
        self.credits = credits
        super().__init__(f"Journal entry not balanced: debits={debits} credits={credits}")


class IdempotencyError(AccountingServiceError):
    """Raised on duplicate or retried accounting events."""


class ReversalError(AccountingServiceError):
    """Raised when a journal entry cannot be reversed."""


class PeriodCloseError(AccountingServiceError):
    """Raised when a period cannot be closed."""


class ExpenseWorkflowError(AccountingServiceError):
    """Raised on invalid expense claim transitions."""
