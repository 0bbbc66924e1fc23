"""
Tests for configuration validation
"""
import pytest
from pydantic import ValidationError
from ems.core.config import Settings


def test_prod_settings_rejects_wildcard_origins():
    settings = Settings(
        DATABASE_URL="postgresql://test",
        JWT_SECRET_KEY="a" * 32,
        APP_ENV="prod",
        ALLOWED_ORIGINS="*"
    )

    with pytest.raises(ValueError, match="ALLOWED_ORIGINS"):
        settings.validate_production()


def test_prod_settings_rejects_short_jwt_secret():
    settings = Settings(
        DATABASE_URL="postgresql://test",
        JWT_SECRET_KEY="short",
        APP_ENV="prod",
        ALLOWED_ORIGINS="https://example.com"
    )

    with pytest.raises(ValueError, match="JWT_SECRET_KEY"):
        settings.validate_production()


def test_local_settings_allows_wildcard_origins():
    settings = Settings(
        DATABASE_URL="postgresql://test",
        JWT_SECRET_KEY="test-key",
        APP_ENV="local",
        ALLOWED_ORIGINS="*"
    )

    settings.validate_production()
    assert settings.get_allowed_origins_list() == ["*"]


def test_allowed_origins_list_is_split_and_trimmed():
    settings = Settings(
        DATABASE_URL="postgresql://test",
        JWT_SECRET_KEY="test-key",
        ALLOWED_ORIGINS="https://a.example.com, https://b.example.com,",
    )

    assert settings.get_allowed_origins_list() == ["https://a.example.com", "https://b.example.com"]


def test_invalid_app_env_rejected():
    with pytest.raises(ValidationError):
        Settings(DATABASE_URL="sqlite://", JWT_SECRET_KEY="k", APP_ENV="qa")


@pytest.mark.parametrize("ttl", [0, -3])
def test_qr_token_ttl_must_be_positive(ttl):
    with pytest.raises(ValidationError):
        Settings(DATABASE_URL="sqlite://", JWT_SECRET_KEY="k", QR_TOKEN_TTL_DAYS=ttl)


def test_qr_defaults():
    settings = Settings(DATABASE_URL="sqlite://", JWT_SECRET_KEY="k")

    assert settings.QR_TOKEN_TTL_DAYS is None
    assert settings.PUBLIC_PROFILE_BASE_URL.startswith("http")
