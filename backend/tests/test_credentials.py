"""
AI Gateway — Credential Pool & Configuration Unit Tests
========================================================

What:  Key loading from settings, the fatal no-key condition, and pool access.
How:   Environment mappings are passed explicitly; the real environment and
       any developer .env file are never read.
"""

import pytest

from ai_gateway.config import Settings
from ai_gateway.exceptions import ConfigurationError
from ai_gateway.services.credentials import Credential, CredentialPool


def make_settings(**overrides):
    values = {"gemini_api_key": "", "_env_file": None}
    values.update(overrides)
    return Settings(**values)


class TestApiKeyCollection:

    def test_primary_key_only(self):
        assert make_settings(gemini_api_key="primary").api_keys({}) == ["primary"]

    def test_indexed_keys_follow_primary(self):
        env = {"GEMINI_API_KEY_1": "one", "GEMINI_API_KEY_2": "two"}
        assert make_settings(gemini_api_key="primary").api_keys(env) == ["primary", "one", "two"]

    def test_indexed_keys_stop_at_first_gap(self):
        env = {"GEMINI_API_KEY_1": "one", "GEMINI_API_KEY_3": "three"}
        assert make_settings(gemini_api_key="primary").api_keys(env) == ["primary", "one"]

    def test_indexed_keys_without_primary(self):
        env = {"GEMINI_API_KEY_1": "one"}
        assert make_settings().api_keys(env) == ["one"]

    def test_placeholder_and_blank_values_skipped(self):
        env = {"GEMINI_API_KEY_1": "  ", "GEMINI_API_KEY_2": "two"}
        settings = make_settings(gemini_api_key="your_gemini_api_key_here")
        assert settings.api_keys(env) == ["two"]


class TestSettingsValidation:

    def test_invalid_log_level_rejected(self):
        with pytest.raises(ValueError):
            make_settings(log_level="LOUD")

    def test_log_level_normalized(self):
        assert make_settings(log_level="debug").log_level == "DEBUG"

    def test_missing_key_is_configuration_error(self):
        with pytest.raises(ConfigurationError) as exc_info:
            make_settings().validate_required_for_production({})
        assert "GEMINI_API_KEY" in exc_info.value.message

    def test_defaults(self):
        settings = make_settings(gemini_api_key="k")
        assert settings.failover_reset_window == 300.0
        assert settings.failover_cooldown == 3.0


class TestCredentialPool:

    def test_from_settings(self):
        env = {"GEMINI_API_KEY_1": "second"}
        pool = CredentialPool.from_settings(make_settings(gemini_api_key="first"), env)
        assert pool.size == 2
        assert pool.credential_at(0) == Credential(0, "first")
        assert pool.credential_at(1).api_key == "second"

    def test_empty_pool_is_fatal(self):
        with pytest.raises(ConfigurationError):
            CredentialPool.from_settings(make_settings(), {})

    def test_direct_construction_requires_keys(self):
        with pytest.raises(ConfigurationError):
            CredentialPool([])

    def test_repr_never_shows_key(self):
        credential = Credential(0, "super-secret-key-value")
        assert "super-secret" not in repr(credential)
        assert "super-secret" not in credential.masked
        assert credential.label == "key #1"

    def test_iteration_order_matches_indices(self, make_pool):
        pool = make_pool(3)
        assert [c.index for c in pool] == [0, 1, 2]
        assert len(pool) == 3
