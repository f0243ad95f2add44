"""Filesystem locations used by the JSONL event writer."""
import os
import tempfile
from pathlib import Path


def temp_root() -> Path:
    """Platform temp dir; $REMIX_TMP overrides it for tests and CI."""
    return Path(os.environ.get("REMIX_TMP") or tempfile.gettempdir())


def _ensure(p: Path) -> Path:
    p.mkdir(parents=True, exist_ok=True)
    return p.resolve()


def logs_dir() -> Path:
    """
    Directory that receives remix.jsonl, created on demand:
    $REMIX_LOG_DIR, else ./.logs, else {tempdir}/remix/logs when the working
    directory is not writable.
    """
    override = os.environ.get("REMIX_LOG_DIR")
    if override:
        return _ensure(Path(override))
    try:
        return _ensure(Path.cwd() / ".logs")
    except OSError:
        return _ensure(temp_root() / "remix" / "logs")
