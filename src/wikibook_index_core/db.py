from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

import psycopg
from pydantic import SecretStr

if TYPE_CHECKING:
    from wikibook_index_core.config import Settings


@dataclass(frozen=True)
class PostgresConfig:
    """Document-store connection parameters: a full DSN, or host/db/user/password parts."""

    dsn: str | None = None
    host: str | None = None
    port: int = 5432
    db: str | None = None
    user: str | None = None
    password: SecretStr | str | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> PostgresConfig:
        return cls(
            dsn=settings.pg_dsn,
            host=settings.postgres_host,
            port=settings.postgres_port,
            db=settings.postgres_db,
            user=settings.postgres_user,
            password=settings.postgres_password,
        )

    @property
    def enabled(self) -> bool:
        return bool(self.dsn or self.host)

    def build_dsn(self) -> str:
        if self.dsn:
            return self.dsn
        missing = [
            name
            for name, value in (
                ("POSTGRES_HOST", self.host),
                ("POSTGRES_DB", self.db),
                ("POSTGRES_USER", self.user),
                ("POSTGRES_PASSWORD", self.password),
            )
            if not value
        ]
        if missing:
            raise ValueError(f"Incomplete Postgres settings, missing {', '.join(missing)} (or set PG_DSN)")
        password = (
            self.password.get_secret_value()
            if isinstance(self.password, SecretStr)
            else self.password
        )
        return f"postgresql://{self.user}:{password}@{self.host}:{self.port}/{self.db}"


@contextmanager
def connect(dsn: str, *, schema: str = "public") -> Iterator[psycopg.Connection]:
    options = f"-c search_path={schema} -c timezone=UTC"
    with psycopg.connect(dsn, options=options) as conn:
        yield conn
