import json
import os
from pathlib import Path
from typing import Any, Dict

from . import paths

# Streams whose records must be byte-stable on CI
_IDENTITY_LOGS = {"remix.jsonl"}


def normalize_for_identity(name: str, rec: Dict[str, Any]) -> Dict[str, Any]:
    """
    For CI identity checks, strip runtime noise from known identity logs:
    zero `ms`. No-op when CI is not set.
    """
    if os.environ.get("CI", "").lower() != "true":
        return rec
    if os.path.basename(name) not in _IDENTITY_LOGS:
        return rec
    out = dict(rec)
    if "ms" in out:
        out["ms"] = 0
    return out


def append_jsonl(filename: str, record: dict, *, log_dir: str | Path | None = None,
                 feature_guard: bool | None = None) -> None:
    """Append one JSON record to `filename` under the logs directory.

    `feature_guard=False` suppresses the write so callers can pass their
    enabled flag straight through.
    """
    if feature_guard is False:
        return
    base = Path(log_dir) if log_dir else paths.logs_dir()
    base.mkdir(parents=True, exist_ok=True)
    path = base / filename

    record = normalize_for_identity(filename, record)

    # Binary append avoids platform newline translation; records end with one LF.
    line = (json.dumps(record, ensure_ascii=False, sort_keys=True) + "\n").encode("utf-8")
    with open(path, "ab") as f:
        f.write(line)
