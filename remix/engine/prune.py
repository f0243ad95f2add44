from __future__ import annotations
from typing import Iterable, List, Sequence, Tuple

from .tree import collect_ids
from .types import Delta, Segment

__all__ = ["prune_stale_deltas", "partition_stale_deltas"]


def partition_stale_deltas(
    deltas: Iterable[Delta], original_segments: Sequence[Segment]
) -> Tuple[List[Delta], List[Delta]]:
    """
    Split `deltas` into (kept, dropped) against the latest upstream tree.

    Adds are always kept: user-authored segments must survive any upstream
    change, and their anchors are not re-validated here (Apply drops an Add
    whose anchor is gone). Modify/Delete survive only while their target id
    still exists upstream. Storage order is preserved in both lists.
    """
    valid_ids = collect_ids(original_segments or [])
    kept: List[Delta] = []
    dropped: List[Delta] = []
    for d in deltas or []:
        if d.op == "add" or d.segment_id in valid_ids:
            kept.append(d)
        else:
            dropped.append(d)
    return kept, dropped


def prune_stale_deltas(deltas: Iterable[Delta], original_segments: Sequence[Segment]) -> List[Delta]:
    """Return only the deltas that still make sense against `original_segments`."""
    kept, _ = partition_stale_deltas(deltas, original_segments)
    return kept
