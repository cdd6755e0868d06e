from __future__ import annotations


class IndexingError(Exception):
    """Base class for every error raised by the indexing core."""


class MalformedUrlError(IndexingError):
    def __init__(self, url: str, base_url: str):
        super().__init__(f"URL {url!r} is not under base URL {base_url!r}")
        self.url = url
        self.base_url = base_url


class LookupTableError(IndexingError):
    """Dictionary or stop-word table is missing or empty."""


class SourceError(IndexingError):
    """The source row store could not be read."""


class EmptyVocabularyError(IndexingError):
    """No valid token was found in the whole corpus."""


class PhaseError(IndexingError):
    """An engine phase was requested before the phases it depends on finished."""


class IndexConsistencyError(IndexingError):
    """The reference map and a document's working counts disagree."""


class PersistenceError(IndexingError):
    def __init__(self, step: str, message: str):
        super().__init__(f"{step}: {message}")
        self.step = step
        self.message = message


class ConcurrentStructureClosed(IndexingError):
    """A request was sent to a shared structure whose owner thread has stopped."""
