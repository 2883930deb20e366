"""
Users API: Handler Result Types
================================

What:  The tagged union that route handlers and services return.
How:   `Success` carries a payload; `SoftFailure` signals failure by value
       (e.g. "not found") without raising. `Result` is either of them.
Who:   Returned by services, rendered by the OutcomeNormalizer.

Handlers are not forced to use these types. A plain value (a dict, a list,
a Pydantic model) is treated as the payload, and a mapping with
`status`/`statusCode`/`message`/`data` keys is read field by field. See
envelope.py for the exact rules.
"""

from dataclasses import dataclass
from typing import Any, Optional, Union


class _NoData:
    """Sentinel type for "this result carries no payload"."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_DATA"

    def __bool__(self) -> bool:
        return False


# Distinguishes "no payload" from a payload that is None, empty or falsy
NO_DATA = _NoData()


@dataclass(frozen=True)
class Success:
    """
    A completed operation.

    Attributes:
        data:        Payload for the envelope's `data` key; NO_DATA omits the key
        message:     Overrides the default "Operation successful"
        status_code: Overrides the route's declared status code
    """

    data: Any = NO_DATA
    message: Optional[str] = None
    status_code: Optional[int] = None

    @property
    def has_data(self) -> bool:
        return self.data is not NO_DATA


@dataclass(frozen=True)
class SoftFailure:
    """
    A failure reported by value instead of by raising.

    Rendered exactly like a raised fault, with this status code and message.
    """

    message: Any = "Operation failed"
    status_code: int = 400


Result = Union[Success, SoftFailure]
