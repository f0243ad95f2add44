"""
Wire codec for segments and deltas.

Wire shapes (JSON-compatible dicts, camelCase keys):
  { "op": "modify", "segmentId", "newText"?, "newTitle"?, "timestamp" }
  { "op": "add",    "afterId": str|null, "segment": {...}, "timestamp", "parentId"? }
  { "op": "delete", "segmentId", "timestamp" }
  Segment: { "id", "type", "title"?, "text"?, "children"? }

Decoding validates shape and raises DeltaFormatError naming the offending
path (e.g. "deltas[3].segmentId"). With strict=False, malformed deltas are
skipped with a warning instead. Encoding omits absent optional fields and
empty children.
"""
from __future__ import annotations
from typing import Any, Dict, List, Mapping, Optional
import json
import logging

from ..errors import DeltaFormatError
from .types import AddDelta, DeleteDelta, Delta, ModifyDelta, Segment, parse_timestamp

__all__ = [
    "coerce_json_list",
    "segment_from_dict",
    "segment_to_dict",
    "load_segments",
    "dump_segments",
    "delta_from_dict",
    "delta_to_dict",
    "load_deltas",
    "dump_deltas",
]

_logger = logging.getLogger(__name__)

KNOWN_OPS = ("modify", "add", "delete")


# ---- small helpers --------------------------------------------------------

def _require_str(obj: Mapping[str, Any], key: str, path: str) -> str:
    if key not in obj:
        raise DeltaFormatError(f"missing required field '{key}'", f"{path}.{key}")
    v = obj[key]
    if not isinstance(v, str):
        raise DeltaFormatError(f"expected string, got {type(v).__name__}", f"{path}.{key}")
    return v


def _optional_str(obj: Mapping[str, Any], key: str, path: str) -> Optional[str]:
    v = obj.get(key)
    if v is None:
        return None
    if not isinstance(v, str):
        raise DeltaFormatError(f"expected string or null, got {type(v).__name__}", f"{path}.{key}")
    return v


def _require_mapping(obj: Any, path: str) -> Mapping[str, Any]:
    if not isinstance(obj, Mapping):
        raise DeltaFormatError(f"expected object, got {type(obj).__name__}", path)
    return obj


def coerce_json_list(value: Any, path: str = "$") -> List[Any]:
    """Accept a list, None, or a JSON-encoded list (as some stores hand back)."""
    if value is None:
        return []
    if isinstance(value, (str, bytes, bytearray)):
        if not value.strip():
            return []
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise DeltaFormatError(f"invalid JSON: {e.msg}", path) from e
        if value is None:
            return []
    if not isinstance(value, list):
        raise DeltaFormatError(f"expected array, got {type(value).__name__}", path)
    return value


# ---- segments -------------------------------------------------------------

def segment_from_dict(obj: Any, path: str = "segment") -> Segment:
    m = _require_mapping(obj, path)
    children_raw = m.get("children")
    if children_raw is None:
        children_raw = []
    if not isinstance(children_raw, list):
        raise DeltaFormatError(
            f"expected array, got {type(children_raw).__name__}", f"{path}.children"
        )
    seg_type = _optional_str(m, "type", path)
    return Segment(
        id=_require_str(m, "id", path),
        type="content" if seg_type is None else seg_type,
        title=_optional_str(m, "title", path),
        text=_optional_str(m, "text", path),
        children=[
            segment_from_dict(c, f"{path}.children[{i}]") for i, c in enumerate(children_raw)
        ],
    )


def segment_to_dict(seg: Segment) -> Dict[str, Any]:
    out: Dict[str, Any] = {"id": seg.id, "type": seg.type}
    if seg.title is not None:
        out["title"] = seg.title
    if seg.text is not None:
        out["text"] = seg.text
    if seg.children:
        out["children"] = [segment_to_dict(c) for c in seg.children]
    return out


def load_segments(value: Any, path: str = "segments") -> List[Segment]:
    return [segment_from_dict(s, f"{path}[{i}]") for i, s in enumerate(coerce_json_list(value, path))]


def dump_segments(segments: List[Segment]) -> List[Dict[str, Any]]:
    return [segment_to_dict(s) for s in segments]


# ---- deltas ---------------------------------------------------------------

def delta_from_dict(obj: Any, path: str = "delta") -> Delta:
    m = _require_mapping(obj, path)
    op = m.get("op")
    if op not in KNOWN_OPS:
        raise DeltaFormatError(f"unknown op {op!r}; expected one of {', '.join(KNOWN_OPS)}", f"{path}.op")
    ts = _require_str(m, "timestamp", path)
    try:
        parse_timestamp(ts)
    except DeltaFormatError as e:
        raise DeltaFormatError(str(e), f"{path}.timestamp") from e

    if op == "modify":
        return ModifyDelta(
            segment_id=_require_str(m, "segmentId", path),
            new_text=_optional_str(m, "newText", path),
            new_title=_optional_str(m, "newTitle", path),
            timestamp=ts,
        )
    if op == "delete":
        return DeleteDelta(segment_id=_require_str(m, "segmentId", path), timestamp=ts)

    if "afterId" not in m:
        raise DeltaFormatError("missing required field 'afterId'", f"{path}.afterId")
    if "segment" not in m:
        raise DeltaFormatError("missing required field 'segment'", f"{path}.segment")
    return AddDelta(
        after_id=_optional_str(m, "afterId", path),
        segment=segment_from_dict(m["segment"], f"{path}.segment"),
        timestamp=ts,
        parent_id=_optional_str(m, "parentId", path),
    )


def delta_to_dict(d: Delta) -> Dict[str, Any]:
    if d.op == "modify":
        out: Dict[str, Any] = {"op": "modify", "segmentId": d.segment_id}
        if d.new_text is not None:
            out["newText"] = d.new_text
        if d.new_title is not None:
            out["newTitle"] = d.new_title
        out["timestamp"] = d.timestamp
        return out
    if d.op == "delete":
        return {"op": "delete", "segmentId": d.segment_id, "timestamp": d.timestamp}
    out = {"op": "add", "afterId": d.after_id, "segment": segment_to_dict(d.segment)}
    if d.after_id is None and d.parent_id is not None:
        out["parentId"] = d.parent_id
    out["timestamp"] = d.timestamp
    return out


def load_deltas(value: Any, *, strict: bool = True, path: str = "deltas") -> List[Delta]:
    out: List[Delta] = []
    for i, raw in enumerate(coerce_json_list(value, path)):
        try:
            out.append(delta_from_dict(raw, f"{path}[{i}]"))
        except DeltaFormatError as e:
            if strict:
                raise
            _logger.warning("skipping malformed delta: %s", e)
    return out


def dump_deltas(deltas: List[Delta]) -> List[Dict[str, Any]]:
    return [delta_to_dict(d) for d in deltas]
