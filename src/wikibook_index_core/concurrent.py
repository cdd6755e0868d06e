from __future__ import annotations

import queue
import threading
from collections.abc import Iterable
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Any

from wikibook_index_core.errors import ConcurrentStructureClosed


@dataclass(frozen=True)
class _AddRequest:
    items: tuple[str, ...]
    reply: Future = field(default_factory=Future)


@dataclass(frozen=True)
class _SnapshotRequest:
    reply: Future = field(default_factory=Future)


@dataclass(frozen=True)
class _AddReferencesRequest:
    document_id: int
    tokens: tuple[str, ...]
    reply: Future = field(default_factory=Future)


@dataclass(frozen=True)
class _LookupRequest:
    token: str
    reply: Future = field(default_factory=Future)


@dataclass(frozen=True)
class _StopRequest:
    reply: Future = field(default_factory=Future)


class _SingleOwner:
    """
    Runs one thread that owns a table exclusively.

    Callers never touch the table: they enqueue a typed request and block on
    its reply future. Requests are applied strictly in queue order, so a
    request that has returned is visible to every request enqueued after it.
    """

    def __init__(self, *, name: str):
        self._requests: queue.SimpleQueue[Any] = queue.SimpleQueue()
        # Guards the closed flag so nothing can be enqueued behind the stop request.
        self._lock = threading.Lock()
        self._closed = False
        self._thread = threading.Thread(target=self._serve, name=name, daemon=True)
        self._thread.start()

    def _call(self, request: Any) -> Any:
        with self._lock:
            if self._closed:
                raise ConcurrentStructureClosed(f"{self._thread.name} is closed")
            self._requests.put(request)
        return request.reply.result()

    def _serve(self) -> None:
        while True:
            request = self._requests.get()
            if isinstance(request, _StopRequest):
                request.reply.set_result(None)
                return
            try:
                request.reply.set_result(self._handle(request))
            except Exception as exc:  # noqa: BLE001
                request.reply.set_exception(exc)

    def _handle(self, request: Any) -> Any:
        raise NotImplementedError

    def close(self) -> None:
        stop = _StopRequest()
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._requests.put(stop)
        stop.reply.result()
        self._thread.join()

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self):  # noqa: ANN204
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class ConcurrentSet(_SingleOwner):
    """Thread-safe string set; `snapshot()` is meaningful once every writer has returned."""

    def __init__(self, *, name: str = "concurrent-set"):
        self._members: set[str] = set()
        super().__init__(name=name)

    def add(self, item: str) -> None:
        self._call(_AddRequest(items=(item,)))

    def add_all(self, items: Iterable[str]) -> None:
        self._call(_AddRequest(items=tuple(items)))

    def snapshot(self) -> frozenset[str]:
        return self._call(_SnapshotRequest())

    def _handle(self, request: Any) -> Any:
        if isinstance(request, _AddRequest):
            self._members.update(request.items)
            return None
        if isinstance(request, _SnapshotRequest):
            return frozenset(self._members)
        raise TypeError(f"Unsupported request for ConcurrentSet: {type(request).__name__}")


class ReferenceMap(_SingleOwner):
    """
    Token -> set of document IDs containing it.

    Only membership is recorded here; per-document counts stay in each
    document's own working map.
    """

    def __init__(self, *, name: str = "reference-map"):
        self._refs: dict[str, set[int]] = {}
        super().__init__(name=name)

    def add_references(self, document_id: int, tokens: Iterable[str]) -> None:
        self._call(_AddReferencesRequest(document_id=document_id, tokens=tuple(tokens)))

    def documents_for(self, token: str) -> frozenset[int]:
        return self._call(_LookupRequest(token=token))

    def snapshot(self) -> dict[str, frozenset[int]]:
        return self._call(_SnapshotRequest())

    def _handle(self, request: Any) -> Any:
        if isinstance(request, _AddReferencesRequest):
            for token in request.tokens:
                self._refs.setdefault(token, set()).add(request.document_id)
            return None
        if isinstance(request, _LookupRequest):
            return frozenset(self._refs.get(request.token, ()))
        if isinstance(request, _SnapshotRequest):
            return {token: frozenset(ids) for token, ids in self._refs.items()}
        raise TypeError(f"Unsupported request for ReferenceMap: {type(request).__name__}")
