"""
Users API: Envelope Schemas (OpenAPI)
======================================

What:  Pydantic descriptions of the response envelope and the health payload.
Why:   The envelope body is built by OutcomeNormalizer as a plain dict; these
       models exist so Swagger/OpenAPI documents what clients receive.
Who:   Referenced from the `responses=` argument of route decorators.
"""

from typing import Any, Dict, List, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from users_api.schemas.user import CamelModel


class _EnvelopeBase(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status: bool = Field(description="true for success, false for failure")
    status_code: int = Field(description="Same value as the HTTP status of the response")
    path: str = Field(description="Request URL")
    method: str = Field(description="HTTP method")
    timestamp: str = Field(description="ISO-8601 time the envelope was formatted")


class SuccessEnvelope(_EnvelopeBase):
    """
    Example:
        {"status": true, "statusCode": 200, "path": "/users/1", "method": "GET",
         "timestamp": "2024-01-15T12:00:00.000Z", "message": "Operation successful",
         "data": {...}}

    `data` is absent (not null) when the handler produced no payload.
    """

    message: str
    data: Any = Field(default=None, description="Omitted when there is no payload")


class FailureEnvelope(_EnvelopeBase):
    """
    Example:
        {"status": false, "statusCode": 404, "path": "/users/1", "method": "GET",
         "timestamp": "2024-01-15T12:00:00.000Z", "message": "User with ID 1 not found"}

    Validation failures carry a mapping:
        "message": {"email": ["value is not a valid email address: ..."]}
    """

    message: Union[str, Dict[str, List[str]]]


class HealthResponse(CamelModel):
    """Health check payload (the `data` of GET /health), camelCase on the wire."""

    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    disclosure_policy: str = Field(description="Active error disclosure policy")
    uptime_seconds: float = Field(description="Seconds since service started")
