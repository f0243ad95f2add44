"""remix: public API surface.

Public names are re-exported here lazily; `remix.errors` holds the typed
error taxonomy. Everything under `remix.engine`, `remix.io`, `remix.store`
and `remix.cli` is internal.
"""
from __future__ import annotations

from typing import Any as _Any
from . import errors as errors  # noqa: F401

from importlib.metadata import version as _pkg_version, PackageNotFoundError


def _version_from_metadata() -> str | None:
    try:
        return _pkg_version("remix")
    except PackageNotFoundError:
        return None


__version__ = _version_from_metadata() or "0+unknown"

# name -> (module, attribute)
_LAZY = {
    "AddDelta": ("remix.engine.types", "AddDelta"),
    "ApplyReport": ("remix.engine.types", "ApplyReport"),
    "DeleteDelta": ("remix.engine.types", "DeleteDelta"),
    "Document": ("remix.store.models", "Document"),
    "InMemoryDocumentStore": ("remix.store.inmemory", "InMemoryDocumentStore"),
    "ModifyDelta": ("remix.engine.types", "ModifyDelta"),
    "RemixService": ("remix.engine.fork", "RemixService"),
    "Segment": ("remix.engine.types", "Segment"),
    "apply_deltas": ("remix.engine.apply", "apply_deltas"),
    "apply_deltas_report": ("remix.engine.apply", "apply_deltas_report"),
    "compute_deltas": ("remix.engine.diff", "compute_deltas"),
    "dump_deltas": ("remix.engine.codec", "dump_deltas"),
    "dump_segments": ("remix.engine.codec", "dump_segments"),
    "load_config": ("remix.io.config", "load_config"),
    "load_deltas": ("remix.engine.codec", "load_deltas"),
    "load_segments": ("remix.engine.codec", "load_segments"),
    "prune_stale_deltas": ("remix.engine.prune", "prune_stale_deltas"),
}


def __getattr__(name: str) -> _Any:  # PEP 562 lazy exports to avoid import-time cycles
    target = _LAZY.get(name)
    if target is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    import importlib

    value = getattr(importlib.import_module(target[0]), target[1])
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return list(__all__)


# Star-export surface (deterministic ordering).
__all__ = sorted(["__version__", "errors", *_LAZY])
