"""
Tests for configuration, logging setup and the error envelope.
"""

from __future__ import annotations

import pytest
import structlog
from pydantic import ValidationError

from clinical_portal.core.config import Settings, get_settings
from clinical_portal.core.errors import DataSourceError, PortalError, downstream, failure
from clinical_portal.core.logging import configure_logging


class TestSettings:
    def test_test_environment_uses_mock_backend(self):
        settings = get_settings()
        assert settings.data_source == "mock"
        assert settings.seed_demo_data is False
        assert settings.jwt_expire_minutes == 24 * 60

    def test_defaults(self):
        settings = Settings(data_source="live", _env_file=None)
        assert settings.environment == "development"
        assert settings.port == 3001
        assert settings.is_production is False

    def test_mock_refused_in_production(self):
        with pytest.raises(ValidationError):
            Settings(environment="production", data_source="mock", secret_key="s" * 32, _env_file=None)

    def test_default_secret_refused_in_production(self):
        with pytest.raises(ValidationError):
            Settings(environment="production", data_source="live", secret_key="CHANGE_ME_IN_PRODUCTION", _env_file=None)

    def test_production(self):
        settings = Settings(environment="production", data_source="live", secret_key="s" * 32, _env_file=None)
        assert settings.is_production


class TestLogging:
    @pytest.mark.parametrize("fmt", ["json", "console"])
    def test_configure(self, fmt):
        configure_logging("debug", fmt)
        structlog.get_logger().info("test.event", answer=42)

    def test_unknown_level_falls_back(self):
        configure_logging("chatty", "console")


class TestErrors:
    def test_failure_envelope(self):
        response = failure(409, "Already there", error="dup")
        assert response.status_code == 409
        assert response.body == b'{"success":false,"message":"Already there","error":"dup"}'

    def test_failure_without_error(self):
        assert failure(404, "Gone").body == b'{"success":false,"message":"Gone"}'

    def test_downstream_converts(self):
        with pytest.raises(PortalError) as exc:
            with downstream("Failed to fetch things"):
                raise DataSourceError("relation does not exist")
        assert exc.value.status_code == 400
        assert exc.value.message == "Failed to fetch things"
        assert exc.value.error == "relation does not exist"

    def test_downstream_status(self):
        with pytest.raises(PortalError) as exc:
            with downstream("Failed", status_code=500):
                raise DataSourceError("boom")
        assert exc.value.status_code == 500

    def test_downstream_passes_other_errors(self):
        with pytest.raises(KeyError):
            with downstream("Failed"):
                raise KeyError("x")
