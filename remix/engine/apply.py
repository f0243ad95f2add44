from __future__ import annotations
from itertools import groupby
from typing import Iterable, List, Sequence
import logging

from .tree import SegmentIndex, clone_segment, deep_clone
from .types import AddDelta, ApplyReport, DeleteDelta, Delta, ModifyDelta, Segment, parse_timestamp

__all__ = ["apply_deltas", "apply_deltas_report", "sort_deltas"]

_logger = logging.getLogger(__name__)


# -------- helpers --------

def sort_deltas(deltas: Iterable[Delta]) -> List[Delta]:
    """Ascending by timestamp; ties keep storage order (sorted() is stable)."""
    return sorted(deltas, key=lambda d: parse_timestamp(d.timestamp))


def _apply_modify(index: SegmentIndex, d: ModifyDelta) -> bool:
    seg = index.find(d.segment_id)
    if seg is None:
        return False
    if d.new_text is not None:
        seg.text = d.new_text
    if d.new_title is not None:
        seg.title = d.new_title
    return True


def _apply_delete(index: SegmentIndex, d: DeleteDelta) -> bool:
    # Already gone with an ancestor deleted earlier in the batch.
    if d.segment_id in index.swept:
        return True
    return index.remove(d.segment_id) is not None


def _apply_add(index: SegmentIndex, d: AddDelta) -> bool:
    # The delta owns its segment; the working copy gets a private clone.
    seg = clone_segment(d.segment)
    if d.after_id is None:
        return index.prepend(d.parent_id, seg)
    return index.insert_after(d.after_id, seg)


_DISPATCH = {
    "modify": _apply_modify,
    "delete": _apply_delete,
    "add": _apply_add,
}


# -------- main API --------

def apply_deltas_report(segments: Sequence[Segment], deltas: Iterable[Delta]) -> ApplyReport:
    """
    Replay `deltas` onto a private clone of `segments` in timestamp order.
    Deltas whose target (or anchor) is missing are skipped and listed in the
    report; they never abort the rest of the batch. Within one timestamp, an
    Add whose anchor is missing is retried once the other deltas of that
    timestamp have run, so equal-timestamp Add chains do not depend on storage
    order. A Delete whose target already went with a deleted ancestor counts
    as applied. Inputs are not mutated.
    """
    ordered = sort_deltas(deltas or [])
    working = deep_clone(segments or [])
    if not ordered:
        return ApplyReport(segments=working, applied=0)

    index = SegmentIndex(working)
    applied = 0
    skipped: List[Delta] = []
    for _, group in groupby(ordered, key=lambda d: parse_timestamp(d.timestamp)):
        parked: List[AddDelta] = []
        for d in group:
            if _DISPATCH[d.op](index, d):
                applied += 1
            elif d.op == "add":
                parked.append(d)
            else:
                skipped.append(d)

        # Anchors stored after their dependants; unresolved ones drop before the next instant.
        while parked:
            retry = [d for d in parked if not _apply_add(index, d)]
            applied += len(parked) - len(retry)
            if len(retry) == len(parked):
                break
            parked = retry
        skipped.extend(parked)

    if skipped:
        _logger.debug(
            "apply: %d of %d deltas skipped (missing target)", len(skipped), len(ordered)
        )
    return ApplyReport(segments=working, applied=applied, skipped=skipped)


def apply_deltas(segments: Sequence[Segment], deltas: Iterable[Delta]) -> List[Segment]:
    """Return the effective tree: base `segments` with every delta replayed."""
    return apply_deltas_report(segments, deltas).segments
