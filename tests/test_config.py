"""Tests for environment-driven settings."""

import pytest

from payroll_recon.config import DEFAULT_DATABASE_URL, Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("DATABASE_URL", "MIN_PASSWORD_LENGTH", "CREATE_SCHEMA", "DEBUG"):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setenv("BCRYPT_ROUNDS", "10")

        settings = Settings.from_env()

        assert settings.database_url == DEFAULT_DATABASE_URL
        assert settings.min_password_length == 6
        assert settings.bcrypt_rounds == 10
        assert settings.create_schema is False
        assert settings.is_sqlite is False

    def test_flags_and_sqlite(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
        monkeypatch.setenv("CREATE_SCHEMA", "yes")

        settings = Settings.from_env()

        assert settings.create_schema is True
        assert settings.is_sqlite is True

    @pytest.mark.parametrize("rounds", ["3", "32"])
    def test_bcrypt_rounds_out_of_range(self, monkeypatch, rounds):
        monkeypatch.setenv("BCRYPT_ROUNDS", rounds)
        with pytest.raises(ValueError):
            Settings.from_env()

    def test_min_password_length_must_be_positive(self, monkeypatch):
        monkeypatch.setenv("MIN_PASSWORD_LENGTH", "0")
        with pytest.raises(ValueError):
            Settings.from_env()
