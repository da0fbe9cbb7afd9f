import pytest

from coffee_menu.core import config, startup_checks


def test_sqlite_forbidden_in_production(monkeypatch):
    monkeypatch.setattr(startup_checks, "IS_PROD", True)
    monkeypatch.setattr(startup_checks, "DATABASE_URL", "sqlite:///./coffee_menu.db")

    with pytest.raises(RuntimeError):
        startup_checks.validate_database_environment()


def test_postgres_allowed_in_production(monkeypatch):
    monkeypatch.setattr(startup_checks, "IS_PROD", True)
    monkeypatch.setattr(startup_checks, "DATABASE_URL", "postgresql://db/coffee")

    startup_checks.validate_database_environment()


def test_missing_jwt_secret_fails_startup(monkeypatch):
    monkeypatch.setattr(config, "JWT_SECRET", "")

    with pytest.raises(RuntimeError):
        startup_checks.validate_token_settings()


def test_token_settings_loaded_from_environment(monkeypatch):
    monkeypatch.setattr(config, "JWT_SECRET", "a-long-enough-secret-for-tests-0001")
    monkeypatch.setattr(config, "JWT_EXPIRE_HOURS", 2)

    settings = config.load_token_settings()

    assert settings.secret == "a-long-enough-secret-for-tests-0001"
    assert settings.expire_hours == 2
    assert settings.algorithm == "HS256"
    startup_checks.validate_token_settings()


def test_non_positive_expiry_is_rejected(monkeypatch):
    monkeypatch.setattr(config, "JWT_SECRET", "secret")
    monkeypatch.setattr(config, "JWT_EXPIRE_HOURS", 0)

    with pytest.raises(RuntimeError):
        config.load_token_settings()
