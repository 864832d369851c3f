"""
Tests for startup validation of the security settings.
"""

import dataclasses

import pytest

from auth.errors import ConfigurationError
from config.settings import Settings


def _settings(**overrides) -> Settings:
    values = {"jwt_secret": "s" * 32, "bcrypt_rounds": 4, "_env_file": None}
    values.update(overrides)
    return Settings(**values)


class TestAuthConfig:
    def test_valid(self):
        cfg = _settings(jwt_expiry_seconds=60).auth_config()
        assert cfg.signing_secret == b"s" * 32
        assert cfg.bcrypt_rounds == 4
        assert cfg.token_ttl_seconds == 60

    def test_is_immutable(self):
        cfg = _settings().auth_config()
        with pytest.raises(dataclasses.FrozenInstanceError):
            cfg.bcrypt_rounds = 31

    def test_missing_secret(self):
        with pytest.raises(ConfigurationError, match="not set"):
            _settings(jwt_secret="").auth_config()

    def test_short_secret(self):
        with pytest.raises(ConfigurationError, match="at least 32 bytes"):
            _settings(jwt_secret="s" * 31).auth_config()

    def test_secret_length_counts_bytes(self):
        # 16 two-byte characters
        assert _settings(jwt_secret="é" * 16).auth_config()

    @pytest.mark.parametrize("rounds", [3, 32, 0, -1])
    def test_cost_factor_out_of_range(self, rounds):
        with pytest.raises(ConfigurationError, match="BCRYPT_ROUNDS"):
            _settings(bcrypt_rounds=rounds).auth_config()

    @pytest.mark.parametrize("ttl", [0, -1])
    def test_non_positive_ttl(self, ttl):
        with pytest.raises(ConfigurationError):
            _settings(jwt_expiry_seconds=ttl).auth_config()

    def test_create_app_refuses_weak_secret(self):
        from main import create_app

        with pytest.raises(ConfigurationError):
            create_app(_settings(jwt_secret="short"), init_db=False)
