from wikibook_index_core.sources.wikibooks_sqlite import iter_source_rows

__all__ = ["iter_source_rows"]
