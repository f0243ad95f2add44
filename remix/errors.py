from __future__ import annotations

"""Typed error taxonomy (public).

Only `remix` and `remix.errors` are public import roots. Everything else is internal.
This module exposes the caller-facing error classes and a small helper `format_error`.

Stale references inside a delta list are not errors: Apply and Prune degrade
gracefully. These classes cover malformed input, configuration and the fork
lifecycle around the pure engine.
"""

__all__ = [
    "RemixError",
    "ConfigError",
    "DeltaFormatError",
    "ForkError",
    "ForkConflictError",
    "CLIError",
    "format_error",
]


class RemixError(Exception):
    """Base class for all typed, caller-facing errors in remix."""
    pass


class ConfigError(RemixError):
    """Configuration invalid, unknown keys, wrong version, etc."""
    pass


class DeltaFormatError(RemixError):
    """Malformed wire payload: unknown op tag, missing field, bad timestamp."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


class ForkError(RemixError):
    """Fork not found, not a fork, owner mismatch, or sync disabled."""
    pass


class ForkConflictError(ForkError):
    """Concurrent delta write detected via a stale version etag."""
    pass


class CLIError(RemixError):
    """Generic CLI failure wrapper for unexpected errors in CLI code paths."""
    pass


def format_error(e: BaseException) -> str:
    """Return a short, uniform message like 'ConfigError: detail'."""
    name = e.__class__.__name__
    msg = str(e).strip()
    return f"{name}: {msg}" if msg else name


# Keep star-export order deterministic for tests and tooling
__all__ = sorted(__all__)
