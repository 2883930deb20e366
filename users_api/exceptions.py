"""
Users API: Custom Exception Hierarchy
======================================

What:  Application-specific exceptions that carry their own HTTP status code
       and a structured response payload.
How:   Each exception exposes `status_code`, a human-readable `message`, a
       `payload` dict (what the FaultClassifier reads) and an optional
       `context` dict that is logged but never sent to the client.
Who:   Raised by services; rendered by the global exception handlers in
       main.py through the OutcomeNormalizer.

Exception Hierarchy:
    UsersApiError (base)               → 500
    ├── BadRequestError                → 400
    │   └── ValidationFailedError      → 400 (payload message is a violation list)
    ├── NotFoundError                  → 404
    ├── ConflictError                  → 409
    ├── RateLimitExceededError         → 429
    └── DatabaseError                  → 500

Payload shape:
    {"message": <str or [{"property": ..., "constraints": {...}}, ...]>,
     "error": <HTTP reason phrase>,
     "statusCode": <int>}
"""

from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Dict, List, Optional, Sequence


@dataclass(frozen=True)
class FieldViolation:
    """
    One field that failed validation and the constraints it broke.

    `constraints` maps a constraint name (e.g. "isEmail") to its message.
    Insertion order is the order messages are reported in.
    """

    property: str
    constraints: Dict[str, str] = field(default_factory=dict)

    def as_record(self) -> Dict[str, Any]:
        return {"property": self.property, "constraints": dict(self.constraints)}


class UsersApiError(Exception):
    """
    Base exception for all Users API errors.

    Attributes:
        status_code: HTTP status the fault maps to
        message:     User-facing description (safe to return in the response)
        context:     Debug info for logs (NOT returned to the client)
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    def _payload_message(self) -> Any:
        return self.message

    @property
    def payload(self) -> Dict[str, Any]:
        """Structured response payload, the same shape for every subclass."""
        return {
            "message": self._payload_message(),
            "error": HTTPStatus(self.status_code).phrase,
            "statusCode": self.status_code,
        }


class BadRequestError(UsersApiError):
    """Client sent input that cannot be processed as-is. HTTP 400."""

    status_code = 400

    def __init__(
        self,
        message: str = "Bad request",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ValidationFailedError(BadRequestError):
    """
    Raised when one or more fields fail validation.

    What:    Carries an ordered list of FieldViolation records.
    When:    Business-rule validation in services (e.g. duplicate email).
             Schema validation is raised by FastAPI as RequestValidationError
             and converted to the same record list by the FaultClassifier.
    HTTP:    400 Bad Request

    Example payload:
        {
            "message": [
                {"property": "email", "constraints": {"unique": "email already exists"}}
            ],
            "error": "Bad Request",
            "statusCode": 400
        }
    """

    def __init__(
        self,
        violations: Sequence[FieldViolation],
        context: Optional[Dict[str, Any]] = None,
    ):
        self.violations: List[FieldViolation] = list(violations)
        fields = ", ".join(v.property for v in self.violations)
        super().__init__(message=f"Validation failed for: {fields}", context=context)

    def _payload_message(self) -> Any:
        return [v.as_record() for v in self.violations]


class NotFoundError(UsersApiError):
    """
    Raised when a requested resource does not exist.

    When:    GET/PATCH/DELETE /users/{id} with an unknown id.
    HTTP:    404 Not Found

    The message follows the "<Resource> with ID <id> not found" form used by
    every variant, so clients see the same text for a raised fault and for a
    soft failure returned by value.
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource} not found"
        if resource_id is not None:
            message = f"{resource} with ID {resource_id} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = str(resource_id)
        super().__init__(message=message, context=ctx)


class ConflictError(UsersApiError):
    """Request conflicts with the current state of a resource. HTTP 409."""

    status_code = 409

    def __init__(
        self,
        message: str = "Resource conflict",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(UsersApiError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    Security Note:
        The message is always generic. Driver errors, SQL text and constraint
        names go into `context`, which is logged server-side only.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(UsersApiError):
    """
    Raised by RateLimitMiddleware when a client exceeds the request budget.

    HTTP:    429 Too Many Requests
    Headers: Retry-After (seconds until the oldest request leaves the window)
    """

    status_code = 429

    def __init__(self, retry_after: int, context: Optional[Dict[str, Any]] = None):
        self.retry_after = retry_after
        super().__init__(
            message=f"Too many requests. Please wait {retry_after} seconds before retrying.",
            context=context,
        )
