"""Error taxonomy raised by services.

Routes translate these into HTTP responses; services never catch them.
"""

from __future__ import annotations

from typing import Any


class HRMSError(Exception):
    """Base class for all domain errors."""

    code = "HRMS_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(HRMSError):
    """Raised when a referenced entity ID does not resolve."""

    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: Any = None, message: str | None = None):
        self.entity = entity
        self.entity_id = entity_id
        if message is None:
            if entity_id is None:
                message = f"{entity} not found"
            else:
                message = f"{entity} not found with id: {entity_id}"
        super().__init__(message)


class ValidationError(HRMSError):
    """Raised for missing fields, bad date ordering and similar input errors."""

    code = "VALIDATION_ERROR"


class ConflictError(HRMSError):
    """Raised when a code or name is already taken within its scope."""

    code = "CONFLICT"


class StateConflictError(HRMSError):
    """Raised when mutating or deleting a protected or referenced entity."""

    code = "STATE_CONFLICT"


class InvalidTransitionError(StateConflictError):
    """Raised when an invalid status transition is attempted."""

    code = "INVALID_TRANSITION"

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        msg = f"Invalid transition from '{from_status}' to '{to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)
