from __future__ import annotations

import re
import sqlite3
from collections.abc import Iterator
from pathlib import Path

from wikibook_index_core.errors import SourceError
from wikibook_index_core.log import get_logger
from wikibook_index_core.models import SourceRow

logger = get_logger(__name__)

_COLUMNS = ("title", "url", "abstract", "body_text", "body_html")
_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _decode_text(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")


def _table_columns(conn: sqlite3.Connection, table: str) -> list[str]:
    rows = conn.execute(f"pragma table_info({table})").fetchall()
    return [r[1] for r in rows]


def iter_source_rows(
    sqlite_path: str | Path,
    *,
    table: str = "en",
    limit: int | None = None,
) -> Iterator[SourceRow]:
    """
    Stream Wikibooks rows ordered by URL ascending.

    URL order puts every page after its ancestors, which the hierarchy linking
    relies on. Missing text columns are read as empty strings; rows without a
    URL are skipped.
    """
    path = Path(sqlite_path)
    if not path.is_file():
        raise SourceError(f"sqlite source not found: {path}")
    if not _IDENT_RE.match(table):
        raise SourceError(f"invalid source table name: {table!r}")

    effective_limit = None if limit is None or int(limit) <= 0 else int(limit)

    try:
        conn = sqlite3.connect(f"file:{path}?mode=ro", uri=True)
    except sqlite3.Error as exc:
        raise SourceError(f"cannot open {path}: {exc}") from exc
    # Invalid UTF-8 in one row must not abort the batch; clean() drops the replacement chars.
    conn.text_factory = _decode_text
    try:
        cols = _table_columns(conn, table)
        if "url" not in cols:
            raise SourceError(f"table {table!r} in {path} has no url column")
        select_cols = [c if c in cols else f"'' as {c}" for c in _COLUMNS]
        sql = f"select {', '.join(select_cols)} from {table} where url is not null order by url"
        if effective_limit is not None:
            sql += f" limit {effective_limit}"
        count = 0
        try:
            for title, url, abstract, body_text, body_html in conn.execute(sql):
                if not url:
                    continue
                count += 1
                yield SourceRow(
                    title=title or "",
                    url=str(url),
                    abstract=abstract or "",
                    body_text=body_text or "",
                    body_html=body_html or "",
                )
        except sqlite3.Error as exc:
            raise SourceError(f"reading {table!r} from {path}: {exc}") from exc
        logger.info("Read %d rows from %s:%s", count, path, table)
    finally:
        conn.close()
