from __future__ import annotations
from dataclasses import replace
from typing import Dict, List, Optional
import threading

from ..engine.tree import deep_clone
from ..engine.types import Delta
from ..errors import ForkConflictError, ForkError
from .models import Document


def _bump_version_etag(current: Optional[str]) -> str:
    """Monotonic numeric etag; a non-numeric prior value restarts at "1"."""
    if current is None:
        return "1"
    try:
        return str(int(current) + 1)
    except ValueError:
        return "1"


def _copy(doc: Document) -> Document:
    # Callers never share mutable state with the store.
    return replace(
        doc,
        segments=deep_clone(doc.segments),
        deltas=list(doc.deltas),
        meta=dict(doc.meta),
    )


class InMemoryDocumentStore:
    """Thread-safe in-memory DocumentStore; one lock serializes all writes."""

    def __init__(self) -> None:
        self._docs: Dict[str, Document] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._docs)

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self._docs

    def get(self, doc_id: str) -> Optional[Document]:
        with self._lock:
            doc = self._docs.get(doc_id)
            return _copy(doc) if doc is not None else None

    def insert(self, doc: Document) -> Document:
        with self._lock:
            if doc.id in self._docs:
                raise ForkError(f"document {doc.id!r} already exists")
            stored = _copy(doc)
            if stored.version_etag is None:
                stored.version_etag = "1"
            self._docs[doc.id] = stored
            return _copy(stored)

    def update_deltas(
        self,
        doc_id: str,
        owner_id: str,
        deltas: List[Delta],
        *,
        expected_etag: Optional[str] = None,
    ) -> str:
        with self._lock:
            doc = self._docs.get(doc_id)
            # Owner mismatch looks the same as a missing row to the caller.
            if doc is None or doc.owner_id != owner_id:
                raise ForkError(f"document {doc_id!r} not found for owner {owner_id!r}")
            if expected_etag is not None and expected_etag != doc.version_etag:
                raise ForkConflictError(
                    f"document {doc_id!r} changed concurrently "
                    f"(expected etag {expected_etag}, found {doc.version_etag})"
                )
            doc.deltas = list(deltas)
            doc.version_etag = _bump_version_etag(doc.version_etag)
            return doc.version_etag

    def increment_fork_count(self, doc_id: str) -> int:
        with self._lock:
            doc = self._docs.get(doc_id)
            if doc is None:
                raise ForkError(f"document {doc_id!r} not found")
            doc.fork_count = max(0, doc.fork_count + 1)
            return doc.fork_count
