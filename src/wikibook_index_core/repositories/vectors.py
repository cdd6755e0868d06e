from __future__ import annotations

import json
from collections.abc import Iterable

import psycopg

from wikibook_index_core.models import DocumentVector


class VectorRepository:
    def __init__(self, conn: psycopg.Connection):
        self._conn = conn

    def replace_all(self, vectors: Iterable[DocumentVector]) -> None:
        rows = []
        for v in vectors:
            payload = v.to_payload()
            rows.append((v.document_id, json.dumps(payload["vector"]), payload["norm"]))
        with self._conn.transaction():
            self._conn.execute("delete from document_vectors")
            with self._conn.cursor() as cur:
                cur.executemany(
                    """
                    insert into document_vectors (document_id, vector, norm)
                    values (%s, %s::jsonb, %s)
                    """,
                    rows,
                )
        self._conn.commit()

    def get_vector(self, document_id: int) -> DocumentVector | None:
        row = self._conn.execute(
            "select document_id, vector, norm from document_vectors where document_id=%s",
            (document_id,),
        ).fetchone()
        if not row:
            return None
        return DocumentVector(
            document_id=row[0],
            entries={int(k): int(v) for k, v in (row[1] or {}).items()},
            norm=row[2],
        )
