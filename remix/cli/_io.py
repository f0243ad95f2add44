from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

from ..io.atomic import atomic_write_bytes
from ..optional.zstd_support import compress_bytes, decompress_bytes, is_zstd_path

# Verbosity gates
VERBOSE = False
QUIET = False


def set_verbosity(verbose: bool = False, quiet: bool = False) -> None:
    global VERBOSE, QUIET
    VERBOSE, QUIET = bool(verbose), bool(quiet)


def eprint(msg: str) -> None:
    if not QUIET:
        print(msg, file=sys.stderr)


def vprint(msg: str) -> None:
    if VERBOSE and not QUIET:
        print(msg, file=sys.stderr)


def read_json(path: str) -> Any:
    """Load JSON from a file ('-' = stdin); `*.zst` files are decompressed first."""
    if path == "-":
        return json.loads(sys.stdin.read() or "null")
    raw = Path(path).read_bytes()
    if is_zstd_path(path):
        raw = decompress_bytes(raw)
    return json.loads(raw.decode("utf-8"))


def dumps(obj: Any, *, pretty: bool = False) -> str:
    if pretty:
        return json.dumps(obj, indent=2, ensure_ascii=False)
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False)


def emit_json(obj: Any, out: str | None = None, *, pretty: bool = False) -> None:
    """Write JSON to stdout, or atomically to `out` (compressed when it ends in .zst)."""
    text = dumps(obj, pretty=pretty) + "\n"
    if not out or out == "-":
        sys.stdout.write(text)
        return
    data = text.encode("utf-8")
    if is_zstd_path(out):
        data = compress_bytes(data)
    atomic_write_bytes(out, data)
    vprint(f"wrote {out}")
