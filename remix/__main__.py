# remix/__main__.py
from __future__ import annotations

import os

# Deterministic env defaults (no-ops if already set).
os.environ.setdefault("TZ", "UTC")
os.environ.setdefault("PYTHONUTF8", "1")

from remix.cli.main import main as _cli_main  # noqa: E402

if __name__ == "__main__":
    raise SystemExit(_cli_main())
