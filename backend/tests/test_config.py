# tests/test_config.py
"""
Tests for Settings defaults and environment handling.
"""

import pytest

from portfolio_tracker.config import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("ENVIRONMENT", "DATABASE_URL", "SYNTHETIC_QUOTES_ENABLED"):
        monkeypatch.delenv(name, raising=False)


class TestSyntheticQuotes:
    """Placeholder quotes are opt-in in every environment."""

    def test_off_by_default_in_test(self):
        settings = Settings(_env_file=None, environment="test")

        assert settings.synthetic_quotes_allowed is False

    def test_off_by_default_in_development(self):
        settings = Settings(
            _env_file=None,
            environment="development",
            database_url="postgresql://user:pw@localhost:5432/portfolio",
        )

        assert settings.synthetic_quotes_allowed is False

    def test_explicit_opt_in(self):
        settings = Settings(_env_file=None, environment="test", synthetic_quotes_enabled=True)

        assert settings.synthetic_quotes_allowed is True

    def test_opt_in_from_environment(self, monkeypatch):
        monkeypatch.setenv("SYNTHETIC_QUOTES_ENABLED", "true")

        settings = Settings(_env_file=None, environment="test")

        assert settings.synthetic_quotes_allowed is True


class TestDatabaseConfig:

    def test_test_environment_defaults_to_in_memory_sqlite(self):
        settings = Settings(_env_file=None, environment="test")

        assert settings.database_url == "sqlite:///:memory:"
        assert settings.is_sqlite is True

    def test_development_requires_database_url(self):
        with pytest.raises(ValueError, match="DATABASE_URL is required"):
            Settings(_env_file=None, environment="development")

    def test_production_rejects_sqlite(self):
        with pytest.raises(ValueError, match="requires PostgreSQL"):
            Settings(_env_file=None, environment="production", database_url="sqlite:///prod.db")
