"""
Domain errors raised by the balance engine and trip services.

Each error carries the HTTP status the API layer should answer with, so
services stay free of FastAPI imports.
"""
from typing import Any, Optional


class TripLedgerError(Exception):
    """Base class for trip ledger errors."""
    status_code = 500

    def __init__(self, message: str, errors: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors


class LedgerValidationError(TripLedgerError):
    """Input rejected before any write (e.g. splits do not add up)."""
    status_code = 422


class LedgerNotFoundError(TripLedgerError):
    """Referenced trip, member, transaction or user does not exist."""
    status_code = 404


class LedgerAccessError(TripLedgerError):
    """Caller is not allowed to perform the operation on this trip."""
    status_code = 403


class LedgerConsistencyError(TripLedgerError):
    """The atomic unit failed mid-way and was rolled back."""
    status_code = 500
