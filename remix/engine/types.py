from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Literal, Optional, Union

from ..errors import DeltaFormatError


# ---- Segment tree ----


@dataclass
class Segment:
    """One node of a content tree.

    Leaves ("content") carry `text`; wrappers ("heading" and other structural
    tags) carry an optional `title` and ordered `children`. Only `text` and
    `title` are ever mutated after creation.
    """

    id: str
    type: str = "content"
    title: Optional[str] = None
    text: Optional[str] = None
    children: List["Segment"] = field(default_factory=list)

    @property
    def is_leaf(self) -> bool:
        return not self.children


# ---- Deltas ----


@dataclass(frozen=True)
class ModifyDelta:
    segment_id: str
    timestamp: str
    new_text: Optional[str] = None  # None keeps the existing value
    new_title: Optional[str] = None
    op: Literal["modify"] = field(default="modify", init=False)


@dataclass(frozen=True)
class AddDelta:
    after_id: Optional[str]  # None prepends (at root, or into parent_id)
    segment: Segment
    timestamp: str
    parent_id: Optional[str] = None  # only read when after_id is None
    op: Literal["add"] = field(default="add", init=False)


@dataclass(frozen=True)
class DeleteDelta:
    segment_id: str
    timestamp: str
    op: Literal["delete"] = field(default="delete", init=False)


Delta = Union[ModifyDelta, AddDelta, DeleteDelta]


@dataclass
class ApplyReport:
    segments: List[Segment]
    applied: int
    skipped: List[Delta] = field(default_factory=list)

    @property
    def fully_applied(self) -> bool:
        return not self.skipped


# ---- timestamps ----


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into an aware datetime (naive => UTC)."""
    if not isinstance(value, str) or not value.strip():
        raise DeltaFormatError(f"timestamp must be a non-empty ISO-8601 string, got {value!r}")
    s = value.strip()
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"
    try:
        ts = datetime.fromisoformat(s)
    except ValueError as e:
        raise DeltaFormatError(f"unparsable timestamp {value!r}") from e
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def utc_now_iso() -> str:
    """Current UTC time as `YYYY-MM-DDTHH:MM:SS.mmmZ`."""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


__all__ = [
    "AddDelta",
    "ApplyReport",
    "DeleteDelta",
    "Delta",
    "ModifyDelta",
    "Segment",
    "parse_timestamp",
    "utc_now_iso",
]
