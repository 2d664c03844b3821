"""Domain layer errors.

Every error carries a machine-readable ``kind`` that the interface layer
forwards to clients next to the human message.
"""

from datetime import datetime
from typing import ClassVar


class DomainError(Exception):
    """Base domain error."""

    kind: ClassVar[str] = "domain_error"


class ValidationError(DomainError):
    """Malformed product id, voter id or vote type."""

    kind = "validation_error"


class QuotaExceededError(DomainError):
    """Anonymous voter has no new votes left in the current window."""

    kind = "quota_exceeded"

    def __init__(self, voter_id: str, window_reset_at: datetime | None = None):
        self.voter_id = voter_id
        self.window_reset_at = window_reset_at
        super().__init__(
            f"Voter {voter_id} has no votes remaining in the current window"
        )


class NotFoundError(DomainError):
    """Raised when a requested resource is not found."""

    kind = "not_found"

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class StorageError(DomainError):
    """Ledger, aggregate or quota storage could not be read or written."""

    kind = "storage_error"


class ConcurrencyConflict(StorageError):
    """Lost a race for a vote key, product or voter (lock timeout, duplicate key)."""

    kind = "concurrency_conflict"


class BroadcastError(DomainError):
    """Real-time update could not be published."""

    kind = "broadcast_error"
