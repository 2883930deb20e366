"""
Users API: Settings Tests
==========================

What:  Tests for Settings validation and the production safety check.
"""

import pytest
from pydantic import ValidationError

from users_api.config import DisclosurePolicy, Settings


class TestSettings:

    def test_disclosure_policy_from_environment(self, monkeypatch):
        monkeypatch.setenv("DISCLOSURE_POLICY", "masked")
        assert Settings().disclosure_policy is DisclosurePolicy.MASKED

    def test_unknown_disclosure_policy_rejected(self):
        with pytest.raises(ValidationError):
            Settings(disclosure_policy="loud")

    def test_environment_and_log_level_normalized(self):
        settings = Settings(environment="Production", log_level="debug")
        assert settings.is_production
        assert settings.log_level == "DEBUG"

    def test_cors_origins_list(self):
        settings = Settings(cors_origins="http://a.test, http://b.test")
        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]

    def test_production_rejects_verbose_policy(self):
        settings = Settings(
            environment="production",
            disclosure_policy="verbose",
            database_url="postgresql+asyncpg://u:p@db:5432/users",
        )
        with pytest.raises(ValueError, match="DISCLOSURE_POLICY"):
            settings.validate_required_for_production()

    def test_production_with_masked_policy_passes(self):
        settings = Settings(
            environment="production",
            disclosure_policy="masked",
            database_url="postgresql+asyncpg://u:p@db:5432/users",
        )
        settings.validate_required_for_production()
