"""
Users API: Fault Classifier
============================

What:  Turns an arbitrary caught exception into a `Fault(status_code, message)`.
How:   1. Status code: the error's own for recognized HTTP errors, else 500.
       2. Payload: the error's structured payload, else a generic one.
       3. A payload message that is a list of {property, constraints}
          records is folded into {property: [messages...]}.
       4. Any other message is used verbatim.
       5. The disclosure policy decides how much of that reaches the client.
Who:   Called by OutcomeNormalizer.from_error().

Recognized errors:
    UsersApiError           → its own status_code and payload
    RequestValidationError  → 400, one violation record per pydantic error
    HTTPException           → its status_code; `detail` becomes the payload
    anything else           → 500, "An unexpected error occurred"

The classifier is pure: no logging, no shared state, and it never raises.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Dict, List, Optional, Sequence, Tuple

from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from users_api.config import DisclosurePolicy
from users_api.exceptions import FieldViolation, UsersApiError

GENERIC_FAULT_MESSAGE = "An unexpected error occurred"
MASKED_FAULT_MESSAGE = "Internal server error"

# Request locations FastAPI prefixes to every validation error `loc`
_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


@dataclass(frozen=True)
class Fault:
    """Status code and client-facing message derived from an error."""

    status_code: int
    message: Any


# ══════════════════════════════════════════════════════════════════════════
# Validation Error Set helpers
# ══════════════════════════════════════════════════════════════════════════

def _record_parts(record: Any) -> Tuple[Optional[str], Optional[Mapping]]:
    if isinstance(record, FieldViolation):
        return record.property, record.constraints
    if isinstance(record, Mapping):
        constraints = record.get("constraints")
        if not isinstance(constraints, Mapping):
            constraints = None
        return record.get("property"), constraints
    return None, None


def is_violation_list(value: Any) -> bool:
    """True when `value` is a non-empty sequence of {property, constraints} records."""
    if not isinstance(value, (list, tuple)) or not value:
        return False
    return all(
        isinstance(item, FieldViolation)
        or (isinstance(item, Mapping) and "property" in item)
        for item in value
    )


def fold_violations(records: Sequence[Any]) -> Dict[str, List[str]]:
    """
    Fold violation records into {property: [constraint messages...]}.

    Records for the same property accumulate in order. Records without a
    property or without any constraint messages contribute nothing, so a
    field never maps to an empty list.
    """
    folded: Dict[str, List[str]] = {}
    for record in records:
        prop, constraints = _record_parts(record)
        if not prop or not constraints:
            continue
        folded.setdefault(str(prop), []).extend(str(m) for m in constraints.values())
    return folded


def violations_from_request_errors(errors: Sequence[Mapping]) -> List[FieldViolation]:
    """
    Convert FastAPI/pydantic validation errors into FieldViolation records.

    `loc` ("body", "email") becomes property "email"; nested locations are
    joined with dots. The pydantic error type is the constraint name.
    A body that is not valid JSON is reported against "body" (its `loc`
    carries the byte offset of the decode error, not a field).
    """
    violations = []
    for error in errors:
        raw_loc = list(error.get("loc", ()))
        if error.get("type") == "json_invalid":
            raw_loc = ["body"]
        loc = [str(part) for part in raw_loc]
        if len(loc) > 1 and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]
        prop = ".".join(loc) or "body"
        violations.append(
            FieldViolation(
                property=prop,
                constraints={str(error.get("type", "invalid")): str(error.get("msg", "is invalid"))},
            )
        )
    return violations


# ══════════════════════════════════════════════════════════════════════════
# Classifier
# ══════════════════════════════════════════════════════════════════════════

class FaultClassifier:
    """
    Derives (status code, message) for a caught error under a disclosure policy.

    The policy is injected at construction:
        verbose: real status code and message
        generic: real status code, message reduced to the HTTP reason phrase
        masked:  status 200, "Internal server error"
    """

    def __init__(self, policy: DisclosurePolicy = DisclosurePolicy.VERBOSE):
        self.policy = DisclosurePolicy(policy)

    def classify(self, error: BaseException) -> Fault:
        try:
            fault = Fault(
                status_code=self._status_of(error),
                message=self._message_of(self._payload_of(error)),
            )
        except Exception:
            # Introspection failed: unclassified fault
            fault = Fault(status_code=500, message=GENERIC_FAULT_MESSAGE)
        return self._disclose(fault)

    @staticmethod
    def _status_of(error: BaseException) -> int:
        if isinstance(error, UsersApiError):
            return int(error.status_code)
        if isinstance(error, RequestValidationError):
            return 400
        if isinstance(error, StarletteHTTPException):
            return int(error.status_code)
        return 500

    @staticmethod
    def _payload_of(error: BaseException) -> Mapping:
        if isinstance(error, UsersApiError):
            return error.payload
        if isinstance(error, RequestValidationError):
            violations = violations_from_request_errors(error.errors())
            return {
                "message": [v.as_record() for v in violations],
                "error": HTTPStatus.BAD_REQUEST.phrase,
                "statusCode": 400,
            }
        if isinstance(error, StarletteHTTPException):
            if isinstance(error.detail, Mapping):
                return error.detail
            return {"message": error.detail, "statusCode": error.status_code}
        return {"message": GENERIC_FAULT_MESSAGE}

    @staticmethod
    def _message_of(payload: Mapping) -> Any:
        message = payload.get("message")
        if is_violation_list(message):
            return fold_violations(message)
        if message is None or message == "":
            return dict(payload)
        return message

    def _disclose(self, fault: Fault) -> Fault:
        if self.policy == DisclosurePolicy.MASKED:
            return Fault(status_code=200, message=MASKED_FAULT_MESSAGE)
        if self.policy == DisclosurePolicy.GENERIC:
            try:
                phrase = HTTPStatus(fault.status_code).phrase
            except ValueError:
                phrase = MASKED_FAULT_MESSAGE
            return Fault(status_code=fault.status_code, message=phrase)
        return fault
