"""Tests for environment configuration."""

import pytest

from gameshop_tables.settings import DEFAULT_TIMEOUT, DEFAULT_URL, Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("GAMESHOP_URL", "GAMESHOP_TIMEOUT", "GAMESHOP_STRICT_SCHEMA"):
        monkeypatch.delenv(name, raising=False)


class TestSettings:
    """Tests for Settings.from_env."""

    def test_defaults(self):
        """Test defaults when nothing is set."""
        settings = Settings.from_env()
        assert settings.url == DEFAULT_URL
        assert settings.timeout == DEFAULT_TIMEOUT
        assert settings.strict_schema is False

    def test_from_env(self, monkeypatch):
        """Test values are read from the environment."""
        monkeypatch.setenv("GAMESHOP_URL", "http://shop.example:8080/")
        monkeypatch.setenv("GAMESHOP_TIMEOUT", "2.5")
        monkeypatch.setenv("GAMESHOP_STRICT_SCHEMA", "yes")

        settings = Settings.from_env()

        assert settings.url == "http://shop.example:8080"
        assert settings.timeout == 2.5
        assert settings.strict_schema is True

    def test_invalid_timeout(self, monkeypatch):
        """Test a non-numeric timeout names the variable."""
        monkeypatch.setenv("GAMESHOP_TIMEOUT", "soon")
        with pytest.raises(ValueError, match="GAMESHOP_TIMEOUT"):
            Settings.from_env()

    def test_non_positive_timeout(self, monkeypatch):
        """Test the timeout must be positive."""
        monkeypatch.setenv("GAMESHOP_TIMEOUT", "0")
        with pytest.raises(ValueError, match="positive"):
            Settings.from_env()

    def test_non_finite_timeout(self, monkeypatch):
        """Test infinite and NaN timeouts are rejected."""
        for raw in ("nan", "inf", "-inf", "Infinity"):
            monkeypatch.setenv("GAMESHOP_TIMEOUT", raw)
            with pytest.raises(ValueError, match="finite"):
                Settings.from_env()

    def test_invalid_bool(self, monkeypatch):
        """Test unrecognised booleans are rejected."""
        monkeypatch.setenv("GAMESHOP_STRICT_SCHEMA", "maybe")
        with pytest.raises(ValueError, match="GAMESHOP_STRICT_SCHEMA"):
            Settings.from_env()
