from __future__ import annotations

from typing import Sequence


class DomainError(Exception):
    """Base exception for business rule violations.

    ``kind`` is the stable error name callers switch on.
    """

    kind = "DomainError"


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    kind = "ValidationFailed"


class NotFoundError(DomainError):
    kind = "NotFound"

    def __init__(self, entity: str, entity_id: object = None):
        self.entity = entity
        self.entity_id = entity_id
        if entity_id is None:
            super().__init__(f"{entity} not found")
        else:
            super().__init__(f"{entity} {entity_id} not found")


class InvalidRoleError(DomainError):
    """Referenced user exists but does not hold the required role."""

    kind = "InvalidRole"


class ConflictDetectedError(DomainError):
    kind = "ConflictDetected"

    def __init__(self, conflicts: Sequence):
        self.conflicts = list(conflicts)
        super().__init__(f"{len(self.conflicts)} booking conflict(s) detected")


class RecurrenceWindowInvalidError(DomainError):
    kind = "RecurrenceWindowInvalid"


class ChildEditForbiddenError(DomainError):
    """Occurrences of a series can only change through their parent."""

    kind = "ChildEditForbidden"


class AlreadyScannedError(DomainError):
    kind = "AlreadyScanned"


class WindowClosedError(DomainError):
    kind = "WindowClosed"


class TokenInvalidError(DomainError):
    kind = "TokenInvalid"


class LockTimeoutError(Exception):
    """A room lock could not be acquired in time.

    Not a DomainError: it is a storage failure and propagates to the caller.
    """
