"""
Unit Tests for Configuration Module

These tests verify that the configuration system works correctly:
- Settings are loaded with sensible defaults
- Validation catches invalid configurations
- Property methods work as expected

Run with:
    pytest tests/unit/test_config.py -v
"""

import pytest
from core.config import Settings, settings, validate_configuration


class TestConfigurationLoading:
    """Test that configuration loads correctly"""

    def test_provider_urls_loaded(self):
        """Verify both provider URLs are http(s) URLs"""
        assert settings.hs_base_url.startswith("http")
        assert settings.hs_old_base_url.startswith("http")
        assert settings.coingecko_base_url.startswith("http")

    def test_app_port_is_valid_integer(self):
        """Verify app port is a valid integer"""
        assert isinstance(settings.app_port, int)
        assert 1 <= settings.app_port <= 65535

    def test_debug_mode_is_boolean(self):
        assert isinstance(settings.debug, bool)

    def test_debug_mode_off_by_default(self, monkeypatch):
        monkeypatch.delenv("DEBUG", raising=False)
        assert Settings(_env_file=None).debug is False

    def test_default_currency_is_set(self):
        assert settings.default_currency
        assert settings.default_language

    def test_env_overrides_defaults(self, monkeypatch):
        """Verify environment variables take precedence over defaults"""
        monkeypatch.setenv("DEFAULT_CURRENCY", "eur")
        monkeypatch.setenv("MAX_RETRIES", "5")

        overridden = Settings()

        assert overridden.default_currency == "eur"
        assert overridden.max_retries == 5


class TestConfigurationProperties:
    """Test property methods and computed values"""

    def test_cors_origins_list_strips_whitespace(self):
        custom = Settings(cors_origins=" http://a.test , ,http://b.test ")
        assert custom.cors_origins_list == ["http://a.test", "http://b.test"]


class TestConfigurationValidation:
    """Test configuration validation function"""

    def test_validate_configuration_succeeds(self):
        """Verify validation passes with default configuration"""
        try:
            validate_configuration()
        except ValueError as e:
            pytest.fail(f"Configuration validation failed: {e}")

    @pytest.mark.parametrize("field,value", [
        ("hs_base_url", "ftp://example.test"),
        ("hs_old_base_url", "markets.example.test"),
        ("request_timeout", 0),
        ("max_retries", 0),
        ("sync_interval_seconds", -1),
        ("app_port", 70000),
        ("log_level", "LOUD"),
    ])
    def test_validation_rejects_invalid_values(self, monkeypatch, field, value):
        monkeypatch.setattr(settings, field, value)

        with pytest.raises(ValueError):
            validate_configuration()


class TestEnvironmentVariables:
    """Test environment-specific settings"""

    def test_environment_setting_exists(self):
        assert settings.environment in ["development", "production", "staging"]

    def test_request_timeout_is_positive(self):
        assert settings.request_timeout > 0
        assert isinstance(settings.request_timeout, int)

    def test_sync_interval_is_positive(self):
        assert settings.sync_interval_seconds > 0
