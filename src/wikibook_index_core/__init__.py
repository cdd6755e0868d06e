from wikibook_index_core.concurrent import ConcurrentSet, ReferenceMap
from wikibook_index_core.config import Settings, load_settings
from wikibook_index_core.engine import IndexingEngine, IndexResult, PersistenceReport
from wikibook_index_core.hierarchy import HierarchyBuilder, canonical_path, parent_path
from wikibook_index_core.models import Document, DocumentVector, InvertedIndexEntry, SourceRow
from wikibook_index_core.tokenizer import Lexicon, clean, tokenize
from wikibook_index_core.vocabulary import GlobalTokenTable, finalize_vocabulary

__all__ = [
    "__version__",
    "ConcurrentSet",
    "Document",
    "DocumentVector",
    "GlobalTokenTable",
    "HierarchyBuilder",
    "IndexResult",
    "IndexingEngine",
    "InvertedIndexEntry",
    "Lexicon",
    "PersistenceReport",
    "ReferenceMap",
    "Settings",
    "SourceRow",
    "canonical_path",
    "clean",
    "finalize_vocabulary",
    "load_settings",
    "parent_path",
    "tokenize",
]

__version__ = "0.1.0"
