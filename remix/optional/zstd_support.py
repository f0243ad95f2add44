from __future__ import annotations

import importlib.util

from remix.optional._require import require

ZSTD_SUFFIX = ".zst"


def has_zstd() -> bool:
    """Return True if the 'zstandard' module is importable."""
    return importlib.util.find_spec("zstandard") is not None


def is_zstd_path(path: str) -> bool:
    return str(path).endswith(ZSTD_SUFFIX)


def compress_bytes(data: bytes, level: int = 3) -> bytes:
    zstd = require("zstandard", "zstd")
    return zstd.ZstdCompressor(level=level).compress(data)


def decompress_bytes(data: bytes) -> bytes:
    zstd = require("zstandard", "zstd")
    return zstd.ZstdDecompressor().decompress(data)


__all__ = [
    "ZSTD_SUFFIX",
    "has_zstd",
    "is_zstd_path",
    "compress_bytes",
    "decompress_bytes",
]
