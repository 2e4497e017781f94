from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings
from sqlalchemy.engine import URL, make_url


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    # Full URL wins over the discrete DB_* parameters when set.
    database_url_override: Optional[str] = Field(None, alias="DATABASE_URL")

    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_name: str = Field("shikshan", alias="DB_NAME")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: Optional[str] = Field(None, alias="DB_PASSWORD")
    db_ssl: bool = Field(False, alias="DB_SSL")
    db_echo: bool = Field(False, alias="DB_ECHO")

    log_level: str = Field("INFO", alias="LOG_LEVEL")

    # No defaults: credentials come from the environment / secret store only.
    super_admin_email: Optional[str] = Field(None, alias="SUPER_ADMIN_EMAIL")
    super_admin_password: Optional[str] = Field(None, alias="SUPER_ADMIN_PASSWORD")
    demo_user_password: Optional[str] = Field(None, alias="DEMO_USER_PASSWORD")
    test_user_password: Optional[str] = Field(None, alias="TEST_USER_PASSWORD")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"
        populate_by_name = True

    @property
    def database_url(self) -> URL:
        if self.database_url_override:
            return make_url(self.database_url_override)
        return URL.create(
            "postgresql+asyncpg",
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
