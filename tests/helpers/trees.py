"""Small builders shared by the engine tests (no deps)."""
from __future__ import annotations

from remix.engine.types import AddDelta, DeleteDelta, ModifyDelta, Segment

T0 = "2024-01-01T00:00:00.000Z"
T1 = "2024-01-01T00:00:01.000Z"
T2 = "2024-01-01T00:00:02.000Z"
T3 = "2024-01-01T00:00:03.000Z"


def leaf(seg_id: str, text: str = "") -> Segment:
    return Segment(id=seg_id, type="content", text=text)


def heading(seg_id: str, title: str, *children: Segment) -> Segment:
    return Segment(id=seg_id, type="heading", title=title, children=list(children))


def mk_modify(seg_id, text=None, title=None, ts=T1) -> ModifyDelta:
    return ModifyDelta(segment_id=seg_id, new_text=text, new_title=title, timestamp=ts)


def mk_add(after_id, segment, ts=T1, parent_id=None) -> AddDelta:
    return AddDelta(after_id=after_id, segment=segment, timestamp=ts, parent_id=parent_id)


def mk_delete(seg_id, ts=T1) -> DeleteDelta:
    return DeleteDelta(segment_id=seg_id, timestamp=ts)


def ids(segments) -> list:
    """Nested id outline, e.g. ["a", ["b", "c"], "d"]."""
    out = []
    for s in segments:
        out.append(s.id)
        if s.children:
            out.append(ids(s.children))
    return out


def sample_tree():
    return [
        heading("a", "Intro", leaf("b", "Hello"), leaf("c", "World")),
        heading("d", "Body", heading("e", "Sub", leaf("f", "deep"))),
        leaf("g", "tail"),
    ]
