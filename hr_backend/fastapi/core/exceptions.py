"""
Payroll error taxonomy.

Every error carries the HTTP status the transport layer answers with, so
endpoints can map ledger failures without knowing each subclass.
"""

from typing import Iterable, Optional

from fastapi import status
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

# SQLSTATE codes reported by PostgreSQL for transaction conflicts
SERIALIZATION_FAILURE = "40001"
DEADLOCK_DETECTED = "40P01"
LOCK_NOT_AVAILABLE = "55P03"
CONFLICT_SQLSTATES = frozenset({SERIALIZATION_FAILURE, DEADLOCK_DETECTED, LOCK_NOT_AVAILABLE})


class PayrollError(Exception):
    """Base class for payroll ledger errors."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PayrollError):
    """Malformed or out-of-range input. Raised before any write."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, fields: Optional[Iterable[str]] = None):
        super().__init__(message)
        self.fields = list(fields or [])


class NotFoundError(PayrollError):
    """A referenced payroll record, adjustment or employee does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class ConcurrencyError(PayrollError):
    """Transaction conflict. The caller may retry the whole operation."""

    status_code = status.HTTP_409_CONFLICT


class InfrastructureError(PayrollError):
    """Storage unavailable or in an unexpected state."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


def _sqlstate(exc: DBAPIError) -> Optional[str]:
    orig = exc.orig
    # psycopg 3 exposes ``sqlstate``, psycopg2 ``pgcode``
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def translate_db_error(exc: SQLAlchemyError) -> PayrollError:
    """
    Map a SQLAlchemy error to the payroll taxonomy.

    Args:
        exc: Error raised by the session or engine

    Returns:
        ConcurrencyError for serialization failures, deadlocks and lock
        timeouts; InfrastructureError for everything else
    """
    if isinstance(exc, DBAPIError) and _sqlstate(exc) in CONFLICT_SQLSTATES:
        return ConcurrencyError("Concurrent update conflict, retry the operation")
    return InfrastructureError(f"Database error: {exc.__class__.__name__}")
