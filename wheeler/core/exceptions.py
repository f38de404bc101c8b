"""Error taxonomy surfaced by every public operation.

Each failure is exactly one of:
- ValidationError: rejected input (bad option type, non-positive amount, malformed date)
- NotFoundError: the addressed row does not exist
- ConflictError: unique-key or foreign-key violation
- BackendError: storage I/O or schema failure
- OperationCancelled: ambient cancellation observed
"""

from typing import Optional


class WheelerError(Exception):
    """Base exception for all categorised Wheeler errors."""

    kind = "error"

    def __init__(self, message: str, entity: Optional[str] = None, field: Optional[str] = None):
        super().__init__(message)
        self.entity = entity
        self.field = field


class ValidationError(WheelerError):
    """Raised when input is rejected before it reaches storage."""

    kind = "validation"


class NotFoundError(WheelerError):
    """Raised when the addressed row does not exist."""

    kind = "not-found"


class ConflictError(WheelerError):
    """Raised on unique-key or foreign-key violations."""

    kind = "conflict"


class BackendError(WheelerError):
    """Raised when the storage backend fails."""

    kind = "backend"


class OperationCancelled(WheelerError):
    """Raised when a cancellation signal is observed between storage calls."""

    kind = "cancelled"
