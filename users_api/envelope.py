"""
Users API: Outcome Normalizer
==============================

What:  Renders every handler outcome into the canonical response envelope.
How:   from_result() shapes a returned value; from_error() asks the
       FaultClassifier about a raised error. Both return a RenderedEnvelope
       whose status code is used for the HTTP response AND the body.
Who:   EnvelopeRoute (success path) and the global exception handlers in
       main.py (failure path). Each request is rendered exactly once.

Envelope:
    {
        "status": true,
        "statusCode": 200,
        "path": "/users/1",
        "method": "GET",
        "timestamp": "2024-01-15T12:00:00.000Z",
        "message": "Operation successful",
        "data": {...}            ← success only, and only when there is a payload
    }

Reading a handler result:
    SoftFailure               → failure envelope, its own status code and message
    Success                   → success envelope; `data` only if it carries one
    mapping with any of the keys status/statusCode/message/data
                              → read field by field; status False is a soft failure
                                (statusCode defaults to 400); `data` only if the
                                mapping has a "data" key
    None                      → success envelope without `data`
    anything else             → success envelope, the value itself is `data`

A payload mapping that happens to carry one of those keys (a user record with
a "status" column, say) is read as a result, not as data. Return such payloads
wrapped: `Success(data=record)`.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from fastapi.encoders import jsonable_encoder
from starlette.responses import JSONResponse

from users_api.faults import FaultClassifier
from users_api.results import NO_DATA, SoftFailure, Success

DEFAULT_SUCCESS_MESSAGE = "Operation successful"
DEFAULT_FAILURE_MESSAGE = "Operation failed"

_RESULT_KEYS = frozenset({"status", "statusCode", "message", "data"})


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _is_result_shaped(value: Any) -> bool:
    # Key overlap alone decides; payloads with these keys must come wrapped in Success
    return isinstance(value, Mapping) and not _RESULT_KEYS.isdisjoint(value.keys())


@dataclass(frozen=True)
class RenderedEnvelope:
    """A JSON-ready envelope body and the HTTP status it must be sent with."""

    status_code: int
    body: Dict[str, Any]

    def to_response(self, headers: Optional[Mapping] = None) -> JSONResponse:
        return JSONResponse(status_code=self.status_code, content=self.body, headers=headers)


class OutcomeNormalizer:
    """
    Builds envelopes for one request at a time.

    Holds no per-request state; the same instance serves concurrent requests.
    `clock` returns the timestamp string and exists so tests can fix it.
    """

    def __init__(
        self,
        classifier: FaultClassifier,
        clock: Callable[[], str] = utc_timestamp,
    ):
        self.classifier = classifier
        self.clock = clock

    # ── Success path ──────────────────────────────────────────────────────

    def from_result(
        self,
        result: Any,
        *,
        method: str,
        path: str,
        default_status: int = 200,
    ) -> RenderedEnvelope:
        """
        Render a handler's return value.

        Args:
            result:         Whatever the handler returned
            method, path:   From the in-flight request
            default_status: Status already chosen for the route (200 unless declared)
        """
        if isinstance(result, SoftFailure):
            return self._failure(result.status_code, result.message, method, path)

        if isinstance(result, Success):
            return self._success(
                status_code=result.status_code or default_status,
                status=True,
                message=result.message,
                data=result.data,
                method=method,
                path=path,
            )

        if _is_result_shaped(result):
            if result.get("status") is False:
                return self._failure(
                    result.get("statusCode") or 400,
                    result.get("message"),
                    method,
                    path,
                )
            status = result.get("status")
            status_code = result.get("statusCode")
            return self._success(
                status_code=default_status if status_code is None else status_code,
                status=True if status is None else bool(status),
                message=result.get("message"),
                data=result["data"] if "data" in result else NO_DATA,
                method=method,
                path=path,
            )

        return self._success(
            status_code=default_status,
            status=True,
            message=None,
            data=NO_DATA if result is None else result,
            method=method,
            path=path,
        )

    # ── Failure path ──────────────────────────────────────────────────────

    def from_error(self, error: BaseException, *, method: str, path: str) -> RenderedEnvelope:
        """Render a raised error through the FaultClassifier. Never includes `data`."""
        fault = self.classifier.classify(error)
        return self._failure(fault.status_code, fault.message, method, path)

    # ── Builders ──────────────────────────────────────────────────────────

    def _success(
        self,
        *,
        status_code: int,
        status: bool,
        message: Optional[str],
        data: Any,
        method: str,
        path: str,
    ) -> RenderedEnvelope:
        if not message:
            message = DEFAULT_SUCCESS_MESSAGE if status else DEFAULT_FAILURE_MESSAGE
        body = self._base(status, status_code, method, path, message)
        if data is not NO_DATA:
            body["data"] = data
        return RenderedEnvelope(status_code=int(status_code), body=jsonable_encoder(body))

    def _failure(self, status_code: int, message: Any, method: str, path: str) -> RenderedEnvelope:
        if message is None or message == "":
            message = DEFAULT_FAILURE_MESSAGE
        body = self._base(False, status_code, method, path, message)
        return RenderedEnvelope(status_code=int(status_code), body=jsonable_encoder(body))

    def _base(self, status: bool, status_code: int, method: str, path: str, message: Any) -> Dict[str, Any]:
        return {
            "status": status,
            "statusCode": int(status_code),
            "path": path,
            "method": method,
            "timestamp": self.clock(),
            "message": message,
        }
