import pytest

from ehr_api.application import create_app
from ehr_api.config import ConfigError, Settings

ENV_VARS = (
    "DATABASE_URL",
    "DB_USER",
    "DB_PASS",
    "DB_HOST",
    "DB_NAME",
    "JWT_SECRET",
    "JWT_PREVIOUS_SECRETS",
    "JWT_EXPIRE_HOURS",
    "CORS_ORIGINS",
    "COOKIE_SECURE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    # keep a developer's .env out of the picture
    monkeypatch.chdir(tmp_path)
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_missing_signing_secret_fails_startup():
    with pytest.raises(ConfigError):
        Settings.from_env()
    with pytest.raises(ConfigError):
        create_app()


def test_database_url_is_built_from_parts(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", "s3cret")
    monkeypatch.setenv("DB_USER", "ehr")
    monkeypatch.setenv("DB_PASS", "pw")
    monkeypatch.setenv("DB_HOST", "db.internal")
    monkeypatch.setenv("DB_NAME", "records")

    settings = Settings.from_env()
    assert settings.database_url == "mysql+mysqlconnector://ehr:pw@db.internal/records"
    assert settings.jwt_expire_hours == 24
    assert settings.db_pool_size == 5


def test_lists_and_flags_are_parsed(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", "new")
    monkeypatch.setenv("JWT_PREVIOUS_SECRETS", "old1, old2,")
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example,https://b.example")
    monkeypatch.setenv("COOKIE_SECURE", "true")
    monkeypatch.setenv("DATABASE_URL", "sqlite:///x.db")

    settings = Settings.from_env()
    assert settings.jwt_previous_secrets == ("old1", "old2")
    assert settings.cors_origins == ("https://a.example", "https://b.example")
    assert settings.cookie_secure is True
    assert settings.database_url == "sqlite:///x.db"


def test_non_integer_setting_is_a_config_error(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", "s")
    monkeypatch.setenv("JWT_EXPIRE_HOURS", "a day")
    with pytest.raises(ConfigError):
        Settings.from_env()
