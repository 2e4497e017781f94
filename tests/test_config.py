import pytest

from shikshan.core.config import Settings
from shikshan.core.logging import configure_logging

CREDENTIAL_VARS = ("DATABASE_URL", "DB_PASSWORD", "SUPER_ADMIN_EMAIL", "SUPER_ADMIN_PASSWORD", "DEMO_USER_PASSWORD")


@pytest.fixture()
def clean_env(monkeypatch):
    for name in CREDENTIAL_VARS + ("DB_HOST", "DB_PORT", "DB_NAME", "DB_USER", "DB_SSL"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_credentials_have_no_defaults(clean_env) -> None:
    settings = Settings(_env_file=None)

    assert settings.db_password is None
    assert settings.super_admin_email is None
    assert settings.super_admin_password is None
    assert settings.demo_user_password is None
    assert settings.test_user_password is None


def test_database_url_built_from_parts(clean_env) -> None:
    clean_env.setenv("DB_HOST", "db.internal")
    clean_env.setenv("DB_PORT", "6543")
    clean_env.setenv("DB_USER", "app")
    clean_env.setenv("DB_PASSWORD", "from-secret-store")

    url = Settings(_env_file=None).database_url

    assert url.drivername == "postgresql+asyncpg"
    assert (url.host, url.port, url.username, url.database) == ("db.internal", 6543, "app", "shikshan")
    assert url.password == "from-secret-store"
    assert "from-secret-store" not in str(url)


def test_database_url_override_wins(clean_env) -> None:
    clean_env.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    clean_env.setenv("DB_HOST", "ignored")

    url = Settings(_env_file=None).database_url

    assert url.get_backend_name() == "sqlite"
    assert url.host is None


def test_configure_logging_accepts_explicit_level() -> None:
    configure_logging("debug")
