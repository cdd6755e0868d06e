from __future__ import annotations

import sys

from wikibook_index_core.config import load_settings
from wikibook_index_core.errors import IndexingError
from wikibook_index_core.log import configure_logging, get_logger
from wikibook_index_core.pipeline import run_pipeline


def main() -> int:
    settings = load_settings()
    configure_logging(settings.log_level, use_json=settings.log_json)
    logger = get_logger("wikibook_index_core")
    logger.info("Starting indexing run (source=%s)", settings.source_sqlite_path)
    try:
        outcome = run_pipeline(settings)
    except (IndexingError, ValueError):
        logger.exception("Indexing run failed")
        return 1
    if outcome.persistence is not None and not outcome.persistence.ok:
        return 2
    logger.info("Indexing run finished")
    return 0


if __name__ == "__main__":
    sys.exit(main())
