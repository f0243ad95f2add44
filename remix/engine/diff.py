"""
Deterministic diff between two segment forests.

compute_deltas(original, modified) emits, in order:
  1) Delete for every original id that no longer appears anywhere in `modified`
  2) a pre-order walk of `modified`, container by container:
     - segments that stay in their original container, in their original
       relative order, are kept in place; a text/title change becomes a Modify
     - every other segment (new, moved, reordered, retyped, or with a field
       cleared) is re-placed: Delete (if it existed) + Add carrying its whole
       modified subtree, anchored on its previous sibling

Round-trip guarantee (ids stable between the two trees):
    apply_deltas(original, compute_deltas(original, modified)) == modified

All deltas share one timestamp; Apply's stable sort keeps emission order.
"""
from __future__ import annotations
from bisect import bisect_left
from typing import Dict, List, Literal, Optional, Sequence, Set

from .tree import clone_segment, flatten_to_map, walk
from .types import AddDelta, DeleteDelta, Delta, ModifyDelta, Segment, utc_now_iso

__all__ = ["compute_deltas", "MODIFY_FIELDS"]

ModifyFields = Literal["both", "changed"]
MODIFY_FIELDS = ("both", "changed")

_MISSING = object()


def _parent_table(segments: Sequence[Segment]) -> tuple[Dict[str, Optional[str]], Dict[str, int]]:
    """id -> parent id (None at root) and id -> index within its container."""
    parents: Dict[str, Optional[str]] = {}
    positions: Dict[str, int] = {}

    def visit(container: Sequence[Segment], parent: Optional[str]) -> None:
        for i, s in enumerate(container):
            parents[s.id] = parent
            positions[s.id] = i
            if s.children:
                visit(s.children, s.id)

    visit(segments, None)
    return parents, positions


def _longest_run(positions: List[int]) -> Set[int]:
    """Indices of a longest strictly increasing subsequence of `positions`."""
    tails: List[int] = []
    tail_vals: List[int] = []
    prev = [-1] * len(positions)
    for i, p in enumerate(positions):
        j = bisect_left(tail_vals, p)
        if j > 0:
            prev[i] = tails[j - 1]
        if j == len(tails):
            tails.append(i)
            tail_vals.append(p)
        else:
            tails[j] = i
            tail_vals[j] = p
    out: Set[int] = set()
    k = tails[-1] if tails else -1
    while k >= 0:
        out.add(k)
        k = prev[k]
    return out


def _reproducible(orig: Segment, mod: Segment) -> bool:
    """Can a Modify turn `orig` into `mod`? (None in a Modify means keep.)"""
    if orig.type != mod.type:
        return False
    if orig.text is not None and mod.text is None:
        return False
    if orig.title is not None and mod.title is None:
        return False
    return True


class _Differ:
    def __init__(self, original: Sequence[Segment], modified: Sequence[Segment], ts: str,
                 modify_fields: ModifyFields):
        self.ts = ts
        self.modify_fields = modify_fields
        self.orig_map = flatten_to_map(original)
        self.mod_map = flatten_to_map(modified)
        self.orig_parent, self.orig_pos = _parent_table(original)
        self.out: List[Delta] = []

    def _within(self, seg_id: str, ancestor_id: str) -> bool:
        cur = self.orig_parent.get(seg_id)
        while cur is not None:
            if cur == ancestor_id:
                return True
            cur = self.orig_parent.get(cur)
        return False

    def deletions(self) -> None:
        for seg_id in self.orig_map:
            if seg_id not in self.mod_map:
                self.out.append(DeleteDelta(segment_id=seg_id, timestamp=self.ts))

    def _modify(self, orig: Segment, mod: Segment) -> None:
        text_changed = orig.text != mod.text
        title_changed = orig.title != mod.title
        if not (text_changed or title_changed):
            return
        if self.modify_fields == "changed":
            new_text = mod.text if text_changed else None
            new_title = mod.title if title_changed else None
        else:
            new_text, new_title = mod.text, mod.title
        self.out.append(
            ModifyDelta(segment_id=mod.id, new_text=new_text, new_title=new_title, timestamp=self.ts)
        )

    def _place(self, seg: Segment, after_id: Optional[str], parent_id: Optional[str]) -> None:
        if seg.id in self.orig_map:
            self.out.append(DeleteDelta(segment_id=seg.id, timestamp=self.ts))
        # Descendants pulled in from elsewhere must leave their old spot first.
        for d in walk(seg.children):
            if d.id in self.orig_map and not self._within(d.id, seg.id):
                self.out.append(DeleteDelta(segment_id=d.id, timestamp=self.ts))
        self.out.append(
            AddDelta(
                after_id=after_id,
                segment=clone_segment(seg),
                timestamp=self.ts,
                parent_id=parent_id if after_id is None else None,
            )
        )

    def container(self, children: Sequence[Segment], parent_id: Optional[str]) -> None:
        candidates = [
            s for s in children
            if self.orig_parent.get(s.id, _MISSING) == parent_id
            and s.id in self.orig_map
            and _reproducible(self.orig_map[s.id], s)
        ]
        run = _longest_run([self.orig_pos[s.id] for s in candidates])
        keep = {candidates[i].id for i in run}

        prev_id: Optional[str] = None
        for s in children:
            if s.id in keep:
                self._modify(self.orig_map[s.id], s)
                self.container(s.children, s.id)
            else:
                self._place(s, prev_id, parent_id)
            prev_id = s.id


def compute_deltas(
    original: Sequence[Segment],
    modified: Sequence[Segment],
    *,
    now: Optional[str] = None,
    modify_fields: ModifyFields = "both",
) -> List[Delta]:
    """Compute the delta list turning `original` into `modified`.

    `modify_fields="both"` re-asserts text and title on every Modify;
    "changed" carries only the fields that differ.
    """
    if modify_fields not in MODIFY_FIELDS:
        raise ValueError(f"modify_fields must be one of {MODIFY_FIELDS}, got {modify_fields!r}")
    differ = _Differ(original or [], modified or [], now or utc_now_iso(), modify_fields)
    differ.deletions()
    differ.container(modified or [], None)
    return differ.out
