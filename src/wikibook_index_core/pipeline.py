from __future__ import annotations

from dataclasses import dataclass

from wikibook_index_core.config import Settings
from wikibook_index_core.db import connect
from wikibook_index_core.engine import IndexingEngine, IndexResult, PersistenceReport
from wikibook_index_core.log import get_logger
from wikibook_index_core.migrations.runner import apply_migrations
from wikibook_index_core.sink import PostgresIndexSink
from wikibook_index_core.sources import iter_source_rows
from wikibook_index_core.wordlists import load_lexicon

logger = get_logger(__name__)


@dataclass(frozen=True)
class PipelineOutcome:
    result: IndexResult
    persistence: PersistenceReport | None


def run_pipeline(settings: Settings) -> PipelineOutcome:
    """Load word lists, index the source corpus and, when a document store is configured, persist it."""
    # Incomplete POSTGRES_* settings fail here, before any indexing work.
    dsn = settings.postgres_dsn()
    lexicon = load_lexicon(settings.dictionary_path, settings.stopwords_path)
    rows = iter_source_rows(
        settings.source_sqlite_path,
        table=settings.source_table,
        limit=settings.source_limit,
    )

    with IndexingEngine(
        lexicon,
        base_url=settings.base_url,
        max_workers=settings.max_workers,
        fail_fast=settings.fail_fast,
    ) as engine:
        result = engine.run(rows)
        logger.info(
            "Indexed %d documents, %d tokens (%d documents failed)",
            len(result.vectors),
            len(result.token_table),
            sum(1 for d in result.documents if d.is_failed),
        )

        if dsn is None:
            logger.info("No document store configured; skipping persistence")
            return PipelineOutcome(result=result, persistence=None)

        apply_migrations(dsn, schema=settings.pg_schema)
        with connect(dsn, schema=settings.pg_schema) as conn:
            report = engine.persist(PostgresIndexSink(conn))
        if not report.ok:
            logger.error("Persistence incomplete: %s", "; ".join(str(e) for e in report.errors))
        return PipelineOutcome(result=result, persistence=report)
