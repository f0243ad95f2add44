from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence
import logging
import time
import uuid

from ..errors import ForkError
from ..io.config import validate_config
from ..io.log import append_jsonl
from ..store.models import Document, DocumentStore
from .apply import apply_deltas_report
from .diff import compute_deltas
from .prune import partition_stale_deltas
from .tree import deep_clone
from .types import Delta, Segment

__all__ = ["RemixService", "SyncResult", "REMIX_TITLE_SUFFIX"]

_logger = logging.getLogger(__name__)

REMIX_TITLE_SUFFIX = " (Remixed)"
_LOG_STREAM = "remix.jsonl"


@dataclass
class SyncResult:
    effective_segments: List[Segment]
    kept: List[Delta]
    dropped: List[Delta] = field(default_factory=list)
    version_etag: Optional[str] = None


def _now_ms() -> int:
    return int(time.time() * 1000)


class RemixService:
    """
    Fork lifecycle over a DocumentStore.

    A fork never copies the original's content: its own `segments` stay empty
    and its effective view is always apply(original.segments, fork.deltas).
    Writes are scoped to the fork owner; authentication is the caller's job.
    """

    def __init__(self, store: DocumentStore, config: Optional[Dict[str, Any]] = None):
        self.store = store
        self.config = validate_config(config)

    # ---- helpers ----

    def _log(self, event: str, started: int, **fields: Any) -> None:
        logs = self.config["logs"]
        record = {"event": event, "ms": _now_ms() - started, **fields}
        append_jsonl(_LOG_STREAM, record, log_dir=logs["dir"], feature_guard=logs["enabled"])

    def _require(self, doc_id: str, what: str = "document") -> Document:
        doc = self.store.get(doc_id)
        if doc is None:
            raise ForkError(f"{what} {doc_id!r} not found")
        return doc

    def _owned_fork(self, fork_id: str, owner_id: str) -> Document:
        fork = self.store.get(fork_id)
        if fork is None or fork.owner_id != owner_id or not fork.is_fork:
            raise ForkError("Fork not found or not a forked material")
        return fork

    def _merge(self, base: Sequence[Segment], deltas: Sequence[Delta], doc_id: str) -> List[Segment]:
        report = apply_deltas_report(base, deltas)
        if report.skipped and self.config["apply"]["report_skipped"]:
            _logger.warning(
                "document %s: %d stale delta(s) skipped during merge", doc_id, len(report.skipped)
            )
        return report.segments

    # ---- lifecycle ----

    def import_material(self, original_id: str, owner_id: str, *, new_id: Optional[str] = None) -> Document:
        """Create a fork of `original_id` for `owner_id` holding no content, only an empty delta list."""
        started = _now_ms()
        original = self._require(original_id, "original material")
        fork = Document(
            id=new_id or uuid.uuid4().hex,
            owner_id=owner_id,
            title=f"{original.title}{REMIX_TITLE_SUFFIX}",
            segments=[],
            deltas=[],
            original_id=original.id,
            sync_original_updates=True,
            meta=dict(original.meta),
        )
        created = self.store.insert(fork)
        self.store.increment_fork_count(original.id)
        self._log("import", started, fork_id=created.id, original_id=original.id)
        return created

    def effective_segments(self, doc_id: str) -> List[Segment]:
        """What a viewer renders for `doc_id`."""
        doc = self._require(doc_id)
        if not doc.is_fork or doc.segments:
            return deep_clone(doc.segments)
        original = self.store.get(doc.original_id)
        if original is None:
            # Upstream vanished: nothing to merge onto.
            return []
        return self._merge(original.segments, doc.deltas, doc.id)

    def save_fork_deltas(
        self,
        fork_id: str,
        owner_id: str,
        deltas: Sequence[Delta],
        *,
        expected_etag: Optional[str] = None,
    ) -> str:
        """Persist `deltas` as the fork's delta list; returns the new version etag."""
        started = _now_ms()
        etag = self.store.update_deltas(fork_id, owner_id, list(deltas), expected_etag=expected_etag)
        self._log("save_deltas", started, fork_id=fork_id, deltas=len(deltas), version_etag=etag)
        return etag

    def save_edits(
        self,
        fork_id: str,
        owner_id: str,
        edited_segments: Sequence[Segment],
        *,
        expected_etag: Optional[str] = None,
        now: Optional[str] = None,
    ) -> List[Delta]:
        """Diff an edited effective tree against the original and persist the result."""
        fork = self._owned_fork(fork_id, owner_id)
        original = self._require(fork.original_id, "original material")
        deltas = compute_deltas(
            original.segments,
            edited_segments,
            now=now,
            modify_fields=self.config["diff"]["modify_fields"],
        )
        self.save_fork_deltas(fork_id, owner_id, deltas, expected_etag=expected_etag)
        return deltas

    def sync_with_original(self, fork_id: str, owner_id: str) -> SyncResult:
        """
        Re-base the fork on the latest upstream: prune deltas whose target is
        gone, persist the pruned list, and return the refreshed effective view.
        """
        started = _now_ms()
        fork = self._owned_fork(fork_id, owner_id)
        if not fork.sync_original_updates:
            raise ForkError(f"fork {fork_id!r} has upstream sync disabled")
        original = self._require(fork.original_id, "original material")

        kept, dropped = partition_stale_deltas(fork.deltas, original.segments)
        etag = self.store.update_deltas(fork_id, owner_id, kept, expected_etag=fork.version_etag)
        effective = self._merge(original.segments, kept, fork_id)

        if dropped:
            _logger.info("fork %s: pruned %d stale delta(s) on sync", fork_id, len(dropped))
        self._log(
            "sync",
            started,
            fork_id=fork_id,
            original_id=original.id,
            kept=len(kept),
            dropped=len(dropped),
            version_etag=etag,
        )
        return SyncResult(effective_segments=effective, kept=kept, dropped=dropped, version_etag=etag)
