from __future__ import annotations

import importlib
from types import ModuleType


def require(module_name: str, extra_hint: str) -> ModuleType:
    """Import an optional dependency or raise ImportError naming the extra to install.

    >>> require("zstandard", "zstd")  # doctest: +SKIP
    """
    try:
        return importlib.import_module(module_name)
    except ImportError as e:
        raise ImportError(
            "Optional dependency '{mod}' is not installed. "
            "Install with: pip install 'remix[{extra}]'".format(mod=module_name, extra=extra_hint)
        ) from e
