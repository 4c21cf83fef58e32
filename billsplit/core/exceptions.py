"""
Ledger exceptions.

Pure calculators and the settlement state machine report business failures
as typed results. Services turn those results into the exceptions below,
and the API layer renders them with the class's status code.
"""


class LedgerError(Exception):
    """Base exception for ledger errors."""
    status_code = 400
    default_detail = "Ledger operation failed."

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(LedgerError):
    """Split amounts, percentages, participants or total are invalid."""
    status_code = 400
    default_detail = "Invalid bill data."


class NotFoundError(LedgerError):
    """Bill, share or payment edge does not exist."""
    status_code = 404
    default_detail = "Not found."


class AuthorizationError(LedgerError):
    """Actor is not allowed to perform this operation."""
    status_code = 403
    default_detail = "You do not have permission to perform this action."


class ConflictError(LedgerError):
    """Transition not supported from the current state, or a concurrent write won."""
    status_code = 409
    default_detail = "The payment is not in a state that allows this action."
