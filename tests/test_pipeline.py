from __future__ import annotations

import sqlite3

import pytest

from wikibook_index_core.config import Settings
from wikibook_index_core.pipeline import run_pipeline

BASE = "https://en.wikibooks.org/wiki/"


def test_run_pipeline_without_postgres(tmp_path) -> None:
    db_path = tmp_path / "en.sqlite"
    with sqlite3.connect(db_path) as conn:
        conn.execute("create table en (title text, url text, abstract text, body_text text, body_html text)")
        conn.executemany(
            "insert into en values (?, ?, '', ?, '')",
            [("B", BASE + "A/B", "the cat sat"), ("A", BASE + "A", "cat and dog")],
        )
        conn.commit()
    words = tmp_path / "words.txt"
    words.write_text("cat\nsat\ndog\n", encoding="utf-8")
    stop = tmp_path / "stop.txt"
    stop.write_text("the\nand\n", encoding="utf-8")

    settings = Settings.model_validate(
        {
            "SOURCE_SQLITE_PATH": str(db_path),
            "DICTIONARY_PATH": str(words),
            "STOPWORDS_PATH": str(stop),
            "MAX_WORKERS": 2,
        }
    )
    outcome = run_pipeline(settings)

    assert outcome.persistence is None
    assert outcome.result.token_table.tokens == ("cat", "dog", "sat")
    a, ab = outcome.result.documents
    assert a.path == "A"
    assert ab.parent_id == a.document_id


def test_run_pipeline_rejects_incomplete_store_settings_before_indexing(tmp_path) -> None:
    settings = Settings.model_validate(
        {
            "SOURCE_SQLITE_PATH": str(tmp_path / "missing.sqlite"),
            "DICTIONARY_PATH": str(tmp_path / "missing.txt"),
            "STOPWORDS_PATH": str(tmp_path / "missing.txt"),
            "POSTGRES_HOST": "localhost",
        }
    )
    # Fails on the store settings, not on the missing word lists or source.
    with pytest.raises(ValueError, match="POSTGRES_DB"):
        run_pipeline(settings)
