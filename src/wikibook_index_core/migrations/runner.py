from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

import psycopg

from wikibook_index_core.log import get_logger

logger = get_logger(__name__)

SQL_DIR = Path(__file__).resolve().parent / "sql"


@dataclass(frozen=True)
class Migration:
    version: str
    path: Path

    def read(self) -> str:
        return self.path.read_text(encoding="utf-8")


def discover_migrations(directory: Path = SQL_DIR) -> list[Migration]:
    return [Migration(version=p.stem, path=p) for p in sorted(directory.glob("*.sql"))]


def _prepare(conn: psycopg.Connection, schema: str) -> set[str]:
    conn.execute("set timezone to 'UTC'")
    conn.execute(f'create schema if not exists "{schema}"')
    conn.execute(f'set search_path to "{schema}"')
    conn.execute(
        """
        create table if not exists schema_migrations (
          version text primary key,
          applied_at timestamptz not null default now()
        )
        """
    )
    return {r[0] for r in conn.execute("select version from schema_migrations").fetchall()}


def pending_migrations(applied: Iterable[str], migrations: Sequence[Migration]) -> list[Migration]:
    done = set(applied)
    return [m for m in migrations if m.version not in done]


def apply_migrations(
    dsn: str,
    *,
    schema: str = "public",
    migrations: Sequence[Migration] | None = None,
) -> list[str]:
    """
    Create the index tables in `schema`. Safe to call on every run: recorded
    versions are skipped and each migration commits together with its record.
    """
    if migrations is None:
        migrations = discover_migrations()

    applied: list[str] = []
    with psycopg.connect(dsn) as conn:
        done = _prepare(conn, schema)
        for mig in pending_migrations(done, migrations):
            conn.execute(mig.read())
            conn.execute("insert into schema_migrations(version) values (%s)", (mig.version,))
            conn.commit()
            logger.info("Applied migration %s to schema %s", mig.version, schema)
            applied.append(mig.version)
    return applied
