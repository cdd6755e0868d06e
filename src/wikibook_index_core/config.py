from __future__ import annotations

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from wikibook_index_core.db import PostgresConfig
from wikibook_index_core.hierarchy import DEFAULT_BASE_URL


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    source_sqlite_path: str = Field(alias="SOURCE_SQLITE_PATH")
    source_table: str = Field(default="en", alias="SOURCE_TABLE")
    source_limit: int | None = Field(default=None, alias="SOURCE_LIMIT")
    base_url: str = Field(default=DEFAULT_BASE_URL, alias="BASE_URL")

    dictionary_path: str = Field(alias="DICTIONARY_PATH")
    stopwords_path: str = Field(alias="STOPWORDS_PATH")

    pg_dsn: str | None = Field(default=None, alias="PG_DSN")
    pg_schema: str = Field(default="public", alias="PG_SCHEMA")
    postgres_host: str | None = Field(default=None, alias="POSTGRES_HOST")
    postgres_port: int = Field(default=5432, alias="POSTGRES_PORT")
    postgres_db: str | None = Field(default=None, alias="POSTGRES_DB")
    postgres_user: str | None = Field(default=None, alias="POSTGRES_USER")
    postgres_password: SecretStr | None = Field(default=None, alias="POSTGRES_PASSWORD")

    max_workers: int = Field(default=8, ge=1, alias="MAX_WORKERS")
    fail_fast: bool = Field(default=False, alias="FAIL_FAST")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=False, alias="LOG_JSON")

    def postgres_dsn(self) -> str | None:
        """
        DSN for the document store, or None when persistence is not configured.

        PG_DSN wins; otherwise the POSTGRES_* parts are used once POSTGRES_HOST is set.
        """
        config = PostgresConfig.from_settings(self)
        return config.build_dsn() if config.enabled else None


def load_settings() -> Settings:
    return Settings()
