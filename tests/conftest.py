from __future__ import annotations

import os
import uuid
from collections.abc import Generator

import psycopg
import pytest

from wikibook_index_core.db import connect
from wikibook_index_core.migrations.runner import apply_migrations
from wikibook_index_core.models import SourceRow
from wikibook_index_core.tokenizer import Lexicon

BASE = "https://en.wikibooks.org/wiki/"


@pytest.fixture()
def lexicon() -> Lexicon:
    return Lexicon.from_words(
        dictionary=["cat", "sat", "dog", "the", "and", "mat", "bird"],
        stop_words=["the", "and"],
    )


@pytest.fixture()
def scenario_rows() -> list[SourceRow]:
    # Sorted by URL, as the source store delivers them.
    return [
        SourceRow(title="A", url=BASE + "A", body_text="cat and dog"),
        SourceRow(title="B", url=BASE + "A/B", body_text="the cat sat"),
    ]


@pytest.fixture(scope="session")
def pg_dsn() -> str:
    dsn = os.environ.get("PG_DSN")
    if not dsn:
        pytest.skip("PG_DSN not set; skipping DB integration tests")
    return dsn


@pytest.fixture(scope="session")
def pg_schema(pg_dsn: str) -> Generator[str, None, None]:
    schema = f"test_{uuid.uuid4().hex[:10]}"
    apply_migrations(pg_dsn, schema=schema)
    yield schema
    with psycopg.connect(pg_dsn) as conn:
        conn.execute(f'drop schema if exists "{schema}" cascade')
        conn.commit()


@pytest.fixture()
def conn(pg_dsn: str, pg_schema: str) -> Generator[psycopg.Connection, None, None]:
    with connect(pg_dsn, schema=pg_schema) as c:
        yield c
