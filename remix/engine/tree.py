"""
Traversal primitives over a segment forest.

A forest is a root-level ordered list of `Segment`; wrappers own their
children lists. Ids are unique across the whole forest. None of the helpers
here validate that: on duplicate ids the later occurrence wins.

`SegmentIndex` backs Apply's private working copy with an
id -> (container, parent) table built once per call, so each delta resolves
its target without re-walking the tree.
"""
from __future__ import annotations
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from .types import Segment

__all__ = [
    "walk",
    "flatten_to_map",
    "flatten_to_list",
    "deep_clone",
    "clone_segment",
    "collect_ids",
    "SegmentIndex",
]


def walk(segments: Iterable[Segment]) -> Iterator[Segment]:
    """Depth-first pre-order iterator over every segment (wrappers included)."""
    for s in segments:
        yield s
        if s.children:
            yield from walk(s.children)


def flatten_to_map(segments: Iterable[Segment]) -> Dict[str, Segment]:
    out: Dict[str, Segment] = {}
    for s in walk(segments):
        out[s.id] = s
    return out


def flatten_to_list(segments: Iterable[Segment]) -> List[Segment]:
    return list(walk(segments))


def collect_ids(segments: Iterable[Segment]) -> Set[str]:
    return {s.id for s in walk(segments)}


def clone_segment(seg: Segment) -> Segment:
    return Segment(
        id=seg.id,
        type=seg.type,
        title=seg.title,
        text=seg.text,
        children=deep_clone(seg.children),
    )


def deep_clone(segments: Iterable[Segment]) -> List[Segment]:
    """Full structural copy; the result shares no mutable state with the input."""
    return [clone_segment(s) for s in segments]


class SegmentIndex:
    """Mutable id index over a forest that it edits in place.

    Each entry maps an id to the list that holds the segment and the wrapper
    owning that list (None for the root list). Lookups for unknown ids
    return None; structural edits keep the index current. Ids that left the
    tree inside a removed subtree are remembered in `swept` until re-added.
    """

    def __init__(self, roots: List[Segment]):
        self.roots = roots
        self._where: Dict[str, Tuple[List[Segment], Optional[Segment]]] = {}
        self.swept: Set[str] = set()
        for s in roots:
            self._register(s, roots, None)

    # ---- bookkeeping ----

    def _register(self, seg: Segment, container: List[Segment], parent: Optional[Segment]) -> None:
        self._where[seg.id] = (container, parent)
        self.swept.discard(seg.id)
        for c in seg.children:
            self._register(c, seg.children, seg)

    def _unregister(self, seg: Segment) -> None:
        # seg must still sit in its container here
        for s in walk([seg]):
            entry = self._where.get(s.id)
            # A later duplicate may own the entry; only drop our own.
            if entry is not None and any(x is s for x in entry[0]):
                del self._where[s.id]
                if s is not seg:
                    self.swept.add(s.id)

    @staticmethod
    def _position(container: List[Segment], seg_id: str) -> int:
        for i, s in enumerate(container):
            if s.id == seg_id:
                return i
        return -1

    # ---- queries ----

    def __contains__(self, seg_id: object) -> bool:
        return seg_id in self._where

    def __len__(self) -> int:
        return len(self._where)

    def find(self, seg_id: str) -> Optional[Segment]:
        entry = self._where.get(seg_id)
        if entry is None:
            return None
        container, _ = entry
        i = self._position(container, seg_id)
        return container[i] if i >= 0 else None

    def parent_of(self, seg_id: str) -> Optional[Segment]:
        entry = self._where.get(seg_id)
        return entry[1] if entry is not None else None

    # ---- edits ----

    def insert_after(self, anchor_id: str, seg: Segment) -> bool:
        """Insert `seg` right after `anchor_id` in the anchor's own list."""
        entry = self._where.get(anchor_id)
        if entry is None:
            return False
        container, parent = entry
        i = self._position(container, anchor_id)
        if i < 0:
            return False
        container.insert(i + 1, seg)
        self._register(seg, container, parent)
        return True

    def prepend(self, parent_id: Optional[str], seg: Segment) -> bool:
        """Insert `seg` first in the root list, or first among `parent_id`'s children."""
        if parent_id is None:
            self.roots.insert(0, seg)
            self._register(seg, self.roots, None)
            return True
        parent = self.find(parent_id)
        if parent is None:
            return False
        parent.children.insert(0, seg)
        self._register(seg, parent.children, parent)
        return True

    def remove(self, seg_id: str) -> Optional[Segment]:
        """Detach the segment (with its subtree) and return it, or None on a miss."""
        entry = self._where.get(seg_id)
        if entry is None:
            return None
        container, _ = entry
        i = self._position(container, seg_id)
        if i < 0:
            del self._where[seg_id]
            return None
        seg = container[i]
        self._unregister(seg)
        container.pop(i)
        return seg
