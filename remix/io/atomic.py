"""Atomic file output: write a sibling temp file, fsync it, then swap it in."""
from __future__ import annotations

import contextlib
import errno
import json
import os
import random
import tempfile
import time
from pathlib import Path
from typing import Any, BinaryIO, Iterator

__all__ = [
    "atomic_write_text",
    "atomic_write_bytes",
    "atomic_write_json",
    "atomic_replace",
]

_NEW_FILE_MODE = 0o644
# Sharing/permission errors raised while a reader holds the target open
_CONTENTION = {errno.EACCES, errno.EPERM, errno.EBUSY}


def _pauses(attempts: int, first_ms: int) -> Iterator[float]:
    delay = first_ms / 1000.0
    for _ in range(attempts):
        yield delay + random.uniform(0, delay * 0.25)
        delay = min(delay * 1.5, 0.25)


def atomic_replace(tmp_path: Path, final_path: Path, *, retries: int = 40, backoff_ms: int = 10) -> None:
    """Move `tmp_path` over `final_path`, retrying with jittered backoff on contention.

    When every attempt fails the temp file is removed and the last error re-raised.
    """
    final_path.parent.mkdir(parents=True, exist_ok=True)
    err: OSError | None = None
    for pause in _pauses(retries, backoff_ms):
        try:
            os.replace(tmp_path, final_path)
            return
        except OSError as e:
            err = e
            if not isinstance(e, PermissionError) and e.errno not in _CONTENTION:
                break
        time.sleep(pause)
    tmp_path.unlink(missing_ok=True)
    if err is not None:
        raise err


@contextlib.contextmanager
def _staged(final: Path) -> Iterator[BinaryIO]:
    final.parent.mkdir(parents=True, exist_ok=True)
    fd, name = tempfile.mkstemp(prefix=final.name + ".", dir=final.parent)
    tmp = Path(name)
    try:
        with os.fdopen(fd, "wb") as f:
            yield f
            f.flush()
            os.fsync(f.fileno())
        # keep the mode of a file being overwritten
        os.chmod(tmp, final.stat().st_mode if final.exists() else _NEW_FILE_MODE)
        atomic_replace(tmp, final)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def atomic_write_bytes(final_path: Path | str, data: bytes) -> None:
    with _staged(Path(final_path)) as f:
        f.write(data)


def atomic_write_text(final_path: Path | str, text: str, *, encoding: str = "utf-8") -> None:
    """CRLF is normalized to LF so output bytes match across platforms."""
    atomic_write_bytes(final_path, text.replace("\r\n", "\n").encode(encoding))


def atomic_write_json(final_path: Path | str, obj: Any, *, indent: int | None = None) -> None:
    """Sorted keys, compact unless `indent` is given, one trailing newline."""
    separators = (",", ":") if indent is None else None
    payload = json.dumps(obj, sort_keys=True, indent=indent, separators=separators, ensure_ascii=False)
    atomic_write_text(final_path, payload + "\n")
