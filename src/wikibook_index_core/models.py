from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field


@dataclass(frozen=True)
class SourceRow:
    title: str
    url: str
    abstract: str = ""
    body_text: str = ""
    body_html: str = ""


@dataclass
class Document:
    """
    One corpus page.

    Hierarchy links are stored as document IDs into the engine's flat document
    table, never as object references. `token_counts` is the working map filled
    by the single task that tokenizes this document.
    """

    document_id: int
    title: str
    url: str
    abstract: str = ""
    body_text: str = ""
    body_html: str = ""
    path: str | None = None
    parent_id: int | None = None
    child_ids: list[int] = field(default_factory=list)
    child_count: int = 0
    token_counts: dict[str, int] = field(default_factory=dict)
    tokens: list[tuple[str, int]] = field(default_factory=list)
    unique_tokens: int = 0
    norm: float = 0.0
    status: str = "ingested"
    error: str | None = None

    @classmethod
    def from_row(cls, document_id: int, row: SourceRow) -> Document:
        return cls(
            document_id=document_id,
            title=row.title,
            url=row.url,
            abstract=row.abstract,
            body_text=row.body_text,
            body_html=row.body_html,
        )

    @property
    def is_failed(self) -> bool:
        return self.status == "failed"

    def mark_failed(self, message: str) -> None:
        self.status = "failed"
        self.error = message

    def set_token_counts(self, counts: dict[str, int]) -> None:
        self.token_counts = dict(counts)
        self.tokens = sorted(self.token_counts.items())
        self.unique_tokens = len(self.token_counts)
        self.norm = euclidean_norm(self.token_counts.values())


def euclidean_norm(counts: Iterable[int]) -> float:
    return math.sqrt(sum(c * c for c in counts))


@dataclass(frozen=True)
class InvertedIndexEntry:
    token_id: int
    token: str
    postings: tuple[tuple[int, int], ...]

    @property
    def document_frequency(self) -> int:
        return len(self.postings)

    @property
    def document_ids(self) -> frozenset[int]:
        return frozenset(doc_id for doc_id, _ in self.postings)


@dataclass(frozen=True)
class DocumentVector:
    document_id: int
    entries: dict[int, int]
    norm: float

    def to_payload(self) -> dict[str, object]:
        """Serialized form handed to the sink: only non-zero `{tokenID: count}` pairs plus the norm."""
        return {
            "document_id": self.document_id,
            "vector": {str(token_id): count for token_id, count in sorted(self.entries.items()) if count},
            "norm": self.norm,
        }
