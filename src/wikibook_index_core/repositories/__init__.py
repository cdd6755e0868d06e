from wikibook_index_core.repositories.documents import DocumentRepository
from wikibook_index_core.repositories.tokens import TokenRepository
from wikibook_index_core.repositories.vectors import VectorRepository

__all__ = [
    "DocumentRepository",
    "TokenRepository",
    "VectorRepository",
]
