from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

from ..engine.types import Delta, Segment


@dataclass
class Document:
    id: str
    owner_id: str
    title: str
    segments: List[Segment] = field(default_factory=list)
    deltas: List[Delta] = field(default_factory=list)
    original_id: Optional[str] = None  # set on forks only
    sync_original_updates: bool = True
    fork_count: int = 0
    version_etag: Optional[str] = None
    meta: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_fork(self) -> bool:
        return self.original_id is not None


class DocumentStore(Protocol):
    """What the fork lifecycle needs from persistence.

    Delta writes are scoped to the owning user. Implementations serialize
    writes per document; `expected_etag` lets callers detect a lost update.
    """

    def get(self, doc_id: str) -> Optional[Document]: ...

    def insert(self, doc: Document) -> Document: ...

    def update_deltas(
        self,
        doc_id: str,
        owner_id: str,
        deltas: List[Delta],
        *,
        expected_etag: Optional[str] = None,
    ) -> str: ...

    def increment_fork_count(self, doc_id: str) -> int: ...
