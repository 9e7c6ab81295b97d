"""Tests for configuration validation."""

import pytest

from src.core.config import Settings, constants


def test_require_credential_with_valid_value() -> None:
    """Test require_credential returns value when credential is set."""
    settings = Settings(secret_key="s3cret")

    result = settings.require_credential("secret_key", "Secret key")

    assert result == "s3cret"


def test_require_credential_with_none_raises_error() -> None:
    """Test require_credential raises ValueError when credential is None."""
    settings = Settings(secret_key=None)

    with pytest.raises(ValueError, match="Secret key credential not configured"):
        settings.require_credential("secret_key", "Secret key")


def test_require_credential_with_empty_string_raises_error() -> None:
    """Test require_credential raises ValueError when credential is empty."""
    settings = Settings(secret_key="")

    with pytest.raises(ValueError, match="Secret key credential not configured"):
        settings.require_credential("secret_key", "Secret key")


def test_require_credential_error_message_includes_field_name() -> None:
    """Test error message includes the environment variable name."""
    settings = Settings(secret_key=None)

    with pytest.raises(ValueError, match="SECRET_KEY"):
        settings.require_credential("secret_key", "Secret key")


def test_settings_read_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("TOKEN_TTL_SECONDS", "60")
    monkeypatch.setenv("SQLITE_DB_PATH", "/tmp/elsewhere.db")

    settings = Settings()

    assert settings.token_ttl_seconds == 60
    assert settings.sqlite_db_path == "/tmp/elsewhere.db"


def test_default_ttl_is_thirty_days(monkeypatch) -> None:
    monkeypatch.delenv("TOKEN_TTL_SECONDS", raising=False)

    assert Settings().token_ttl_seconds == 30 * 24 * 60 * 60


def test_priority_rank_orders_high_above_low() -> None:
    rank = constants.PRIORITY_RANK

    assert rank["high"] > rank["medium"] > rank["low"]


@pytest.mark.parametrize(("environment", "expected"), [("production", True), ("Production", True), ("dev", False)])
def test_is_production(environment, expected) -> None:
    assert Settings(environment=environment).is_production is expected
