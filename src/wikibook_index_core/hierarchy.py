from __future__ import annotations

from wikibook_index_core.errors import MalformedUrlError
from wikibook_index_core.log import get_logger
from wikibook_index_core.models import Document

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://en.wikibooks.org/wiki/"


def canonical_path(url: str, base_url: str = DEFAULT_BASE_URL) -> str:
    if not base_url or not url.startswith(base_url):
        raise MalformedUrlError(url, base_url)
    path = url[len(base_url) :]
    if not path:
        raise MalformedUrlError(url, base_url)
    return path


def parent_path(path: str) -> str:
    head, sep, _ = path.rpartition("/")
    return head if sep else ""


class HierarchyBuilder:
    """
    Links documents into a forest by path prefix.

    Documents must be added in ascending URL order so that an ancestor is
    registered before any of its descendants. A document whose parent path was
    never registered is a root.
    """

    def __init__(self, documents: list[Document], *, base_url: str = DEFAULT_BASE_URL):
        self._documents = documents
        self._base_url = base_url
        self._by_path: dict[str, int] = {}

    def add(self, document: Document) -> None:
        try:
            path = canonical_path(document.url, self._base_url)
        except MalformedUrlError as exc:
            logger.warning(
                "Skipping document %d: %s",
                document.document_id,
                exc,
                extra={"ctx_document_id": document.document_id},
            )
            document.mark_failed(str(exc))
            return

        document.path = path
        parent_id = self._by_path.get(parent_path(path))
        if parent_id is not None:
            parent = self._documents[parent_id]
            document.parent_id = parent_id
            parent.child_ids.append(document.document_id)
            parent.child_count += 1
        if path in self._by_path:
            logger.warning(
                "Duplicate path %r: document %d replaces %d for later lookups",
                path,
                document.document_id,
                self._by_path[path],
            )
        self._by_path[path] = document.document_id

    def roots(self) -> list[int]:
        return [d.document_id for d in self._documents if d.path is not None and d.parent_id is None]
