"""
Tests for backend/config.py — Settings construction from the environment.
"""

import pytest
from pydantic import ValidationError

from config import Settings, load_settings


class TestLoadSettings:
    def test_defaults(self):
        s = load_settings({})
        assert s.port == 4000
        assert s.frontend_url == "*"
        assert s.fetch_timeout_seconds == 30.0
        assert s.fallback_timeout_seconds == 15.0
        assert s.max_redirects == 10
        assert s.max_body_bytes == 2 * 1024 * 1024

    def test_env_overrides(self):
        s = load_settings({"PORT": "8080", "FRONTEND_URL": "https://app.example.com", "FETCH_TIMEOUT_SECONDS": "12.5"})
        assert s.port == 8080
        assert s.frontend_url == "https://app.example.com"
        assert s.fetch_timeout_seconds == 12.5

    def test_blank_values_fall_back(self):
        assert load_settings({"PORT": "  "}).port == 4000

    def test_malformed_value_fails(self):
        with pytest.raises(ValidationError):
            load_settings({"PORT": "abc"})

    def test_frozen(self):
        s = Settings()
        with pytest.raises(ValidationError):
            s.port = 1


class TestCorsOrigins:
    def test_wildcard(self):
        assert Settings().cors_origins == ["*"]

    def test_comma_separated(self):
        s = Settings(frontend_url="https://a.example.com, https://b.example.com")
        assert s.cors_origins == ["https://a.example.com", "https://b.example.com"]

    def test_empty_falls_back_to_wildcard(self):
        assert Settings(frontend_url=" , ").cors_origins == ["*"]
