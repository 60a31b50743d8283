"""
Wanderlust Backend - Configuration Tests

What we test:
    ✅ Missing DATABASE_URL / JWT_SECRET stop the app from being built
    ✅ Defaults (port, token lifetime, body limit, CORS origins)
    ✅ Invalid log level rejected; lowercase accepted
"""

import re

import pytest
from pydantic import ValidationError

from wanderlust.config import Settings
from wanderlust.exceptions import ConfigurationError
from wanderlust.main import create_app


class TestRequiredSettings:
    def test_missing_secret_and_url_listed(self):
        settings = Settings(_env_file=None, database_url="", jwt_secret="")
        assert settings.missing_required() == ["DATABASE_URL", "JWT_SECRET"]

    def test_create_app_refuses_missing_secret(self, settings_factory):
        with pytest.raises(ConfigurationError, match="JWT_SECRET"):
            create_app(settings_factory(jwt_secret=""))

    def test_complete_settings_pass(self, settings_factory):
        settings_factory().validate_required()


class TestDefaults:
    def test_defaults(self, test_settings):
        settings = test_settings
        assert settings.backend_port == 5000
        assert settings.jwt_expires_days == 7
        assert settings.max_body_bytes == 5 * 1024 * 1024
        assert settings.is_sqlite is True

    @pytest.mark.parametrize(
        "origin",
        ["http://localhost:8081", "http://127.0.0.1", "http://192.168.1.20:19006"],
    )
    def test_local_origins_allowed(self, origin, test_settings):
        assert re.match(test_settings.cors_origin_regex, origin)

    @pytest.mark.parametrize(
        "origin",
        ["https://localhost:8081", "http://evil.example.com", "http://10.0.0.5:3000"],
    )
    def test_other_origins_rejected(self, origin, test_settings):
        assert re.match(test_settings.cors_origin_regex, origin) is None

    def test_log_level_normalized(self, settings_factory):
        assert settings_factory(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self, settings_factory):
        with pytest.raises(ValidationError):
            settings_factory(log_level="LOUD")
