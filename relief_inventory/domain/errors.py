"""
Typed errors raised by the coordination core.

Every error leaves persisted state untouched; the API layer maps each
ErrorKind onto an HTTP status in relief_inventory.api.errors.
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorKind(str, Enum):
    VALIDATION = "validation_error"
    INVALID_QUANTITY = "invalid_quantity"
    NOT_FOUND = "not_found"
    INVALID_STATE_TRANSITION = "invalid_state_transition"
    CONFLICT = "conflict"
    FORBIDDEN = "forbidden"


class CoordinationError(Exception):
    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.kind.value, "detail": self.detail}


class ValidationError(CoordinationError):
    """Malformed payload; carries field-level messages."""

    kind = ErrorKind.VALIDATION

    def __init__(self, detail: str, errors: Optional[List[Dict[str, str]]] = None):
        super().__init__(detail)
        self.errors = errors or []

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, [{"field": field, "message": message}])

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body["errors"] = self.errors
        return body


class InvalidQuantityError(ValidationError):
    """Quantities or availability-mode fields break the entry invariants."""

    kind = ErrorKind.INVALID_QUANTITY


class NotFoundError(CoordinationError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, resource: str, identifier: Any):
        super().__init__(f"{resource} {identifier} not found")
        self.resource = resource
        self.identifier = identifier


class InvalidStateTransitionError(CoordinationError):
    kind = ErrorKind.INVALID_STATE_TRANSITION

    def __init__(self, resource: str, current: str, action: str):
        super().__init__(f"Cannot {action.lower()} a {resource} in state {current}")
        self.current = current
        self.action = action


class ConflictError(CoordinationError):
    """The entry changed underneath the operation; refetch and retry."""

    kind = ErrorKind.CONFLICT


class ForbiddenError(CoordinationError):
    kind = ErrorKind.FORBIDDEN
