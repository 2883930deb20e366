"""
Users API: Outcome Normalizer Unit Tests
=========================================

What:  Tests for OutcomeNormalizer.from_result() and from_error().
How:   The normalizer is built with a frozen clock (see conftest.py), so
       whole envelopes can be compared with ==.
"""

from datetime import datetime, timezone
from uuid import UUID

import pytest
from pydantic import BaseModel

from users_api.config import DisclosurePolicy
from users_api.envelope import OutcomeNormalizer, utc_timestamp
from users_api.exceptions import FieldViolation, NotFoundError, ValidationFailedError
from users_api.faults import FaultClassifier
from users_api.results import NO_DATA, SoftFailure, Success

FIXED_TIMESTAMP = "2024-01-15T12:00:00.000Z"

REQUEST = {"method": "GET", "path": "/users/1"}


class TestSuccessEnvelopes:

    def test_plain_value_becomes_data(self, normalizer):
        rendered = normalizer.from_result({"id": 1, "firstName": "John"}, **REQUEST)
        assert rendered.status_code == 200
        assert rendered.body == {
            "status": True,
            "statusCode": 200,
            "path": "/users/1",
            "method": "GET",
            "timestamp": FIXED_TIMESTAMP,
            "message": "Operation successful",
            "data": {"id": 1, "firstName": "John"},
        }

    def test_success_without_data_omits_key(self, normalizer):
        rendered = normalizer.from_result(Success(message="Done"), **REQUEST)
        assert "data" not in rendered.body
        assert rendered.body["message"] == "Done"

    def test_none_omits_data(self, normalizer):
        rendered = normalizer.from_result(None, **REQUEST)
        assert "data" not in rendered.body
        assert rendered.body["status"] is True

    def test_result_shaped_mapping_without_data_key(self, normalizer):
        rendered = normalizer.from_result({"status": True, "message": "Nothing to return"}, **REQUEST)
        assert "data" not in rendered.body
        assert rendered.body["message"] == "Nothing to return"
        assert rendered.body["statusCode"] == 200

    def test_payload_with_result_keys_needs_success_wrapper(self, normalizer):
        record = {"id": 1, "status": "active"}

        wrapped = normalizer.from_result(Success(data=record), **REQUEST)
        assert wrapped.body["status"] is True
        assert wrapped.body["data"] == {"id": 1, "status": "active"}

        bare = normalizer.from_result(record, **REQUEST)
        assert bare.body["status"] is True
        assert "data" not in bare.body

    def test_explicit_null_data_is_kept(self, normalizer):
        rendered = normalizer.from_result({"message": "ok", "data": None}, **REQUEST)
        assert rendered.body["data"] is None

    def test_empty_list_is_data(self, normalizer):
        rendered = normalizer.from_result(Success(data=[], message="No users found"), **REQUEST)
        assert rendered.body["data"] == []

    def test_route_default_status_applies(self, normalizer):
        rendered = normalizer.from_result(Success(data={"id": 1}), default_status=201, **REQUEST)
        assert rendered.status_code == 201
        assert rendered.body["statusCode"] == 201

    def test_result_status_code_overrides_default(self, normalizer):
        rendered = normalizer.from_result(Success(data={"id": 1}, status_code=202), **REQUEST)
        assert rendered.status_code == 202
        assert rendered.body["statusCode"] == 202

    def test_pydantic_models_serialized_by_alias(self, normalizer):
        class Payload(BaseModel):
            id: UUID
            created_at: datetime

            model_config = {"alias_generator": lambda name: "createdAt" if name == "created_at" else name}

        payload = Payload(
            id=UUID("12345678-1234-5678-1234-567812345678"),
            created_at=datetime(2024, 1, 15, tzinfo=timezone.utc),
        )
        rendered = normalizer.from_result(Success(data=payload), **REQUEST)
        assert rendered.body["data"] == {
            "id": "12345678-1234-5678-1234-567812345678",
            "createdAt": "2024-01-15T00:00:00Z",
        }

    def test_formatting_twice_is_identical(self, normalizer):
        result = Success(data={"id": 1}, message="User retrieved successfully")
        assert normalizer.from_result(result, **REQUEST) == normalizer.from_result(result, **REQUEST)

    def test_only_timestamp_differs_with_real_clock(self):
        normalizer = OutcomeNormalizer(FaultClassifier())
        first = normalizer.from_result({"id": 1}, **REQUEST).body
        second = normalizer.from_result({"id": 1}, **REQUEST).body
        first.pop("timestamp")
        second.pop("timestamp")
        assert first == second


class TestSoftFailures:

    def test_soft_failure_value(self, normalizer):
        rendered = normalizer.from_result(
            SoftFailure(status_code=404, message="User with ID 1 not found"), **REQUEST
        )
        assert rendered.status_code == 404
        assert rendered.body == {
            "status": False,
            "statusCode": 404,
            "path": "/users/1",
            "method": "GET",
            "timestamp": FIXED_TIMESTAMP,
            "message": "User with ID 1 not found",
        }

    def test_status_false_mapping_uses_its_own_fields(self, normalizer):
        rendered = normalizer.from_result(
            {"status": False, "statusCode": 404, "message": "User with ID 1 not found", "data": {"x": 1}},
            **REQUEST,
        )
        assert rendered.status_code == 404
        assert rendered.body["status"] is False
        assert rendered.body["message"] == "User with ID 1 not found"
        assert "data" not in rendered.body

    def test_status_false_defaults_to_400(self, normalizer):
        rendered = normalizer.from_result({"status": False}, **REQUEST)
        assert rendered.status_code == 400
        assert rendered.body["message"] == "Operation failed"

    def test_soft_failure_ignores_masked_policy(self, fixed_clock):
        masked = OutcomeNormalizer(FaultClassifier(DisclosurePolicy.MASKED), clock=fixed_clock)
        rendered = masked.from_result(SoftFailure(status_code=404, message="User with ID 1 not found"), **REQUEST)
        assert rendered.status_code == 404
        assert rendered.body["message"] == "User with ID 1 not found"


class TestErrorEnvelopes:

    def test_not_found_fault(self, normalizer):
        rendered = normalizer.from_error(NotFoundError("User", 5), method="GET", path="/users/5")
        assert rendered.status_code == 404
        assert rendered.body == {
            "status": False,
            "statusCode": 404,
            "path": "/users/5",
            "method": "GET",
            "timestamp": FIXED_TIMESTAMP,
            "message": "User with ID 5 not found",
        }

    def test_validation_fault_message_mapping(self, normalizer):
        error = ValidationFailedError([
            FieldViolation("email", {"isEmail": "email must be an email"}),
            FieldViolation("password", {"minLength": "password too short"}),
        ])
        rendered = normalizer.from_error(error, method="POST", path="/users/create-user")
        assert rendered.status_code == 400
        assert rendered.body["message"] == {
            "email": ["email must be an email"],
            "password": ["password too short"],
        }
        assert "data" not in rendered.body

    def test_unclassified_fault(self, normalizer):
        rendered = normalizer.from_error(ZeroDivisionError("division by zero"), **REQUEST)
        assert rendered.status_code == 500
        assert rendered.body["message"] == "An unexpected error occurred"

    @pytest.mark.parametrize("error", [NotFoundError("User", 1), RuntimeError("boom")])
    def test_masked_policy(self, fixed_clock, error):
        masked = OutcomeNormalizer(FaultClassifier(DisclosurePolicy.MASKED), clock=fixed_clock)
        rendered = masked.from_error(error, **REQUEST)
        assert rendered.status_code == 200
        assert rendered.body["statusCode"] == 200
        assert rendered.body["status"] is False
        assert rendered.body["message"] == "Internal server error"


class TestTimestamp:

    def test_utc_millisecond_iso_format(self):
        stamp = utc_timestamp()
        assert stamp.endswith("Z")
        parsed = datetime.strptime(stamp, "%Y-%m-%dT%H:%M:%S.%fZ")
        assert len(stamp.split(".")[1]) == 4  # three digits plus Z
        assert parsed.year >= 2024

    def test_no_data_sentinel_is_falsy_singleton(self):
        assert not NO_DATA
        assert Success().has_data is False
        assert Success(data=0).has_data is True
