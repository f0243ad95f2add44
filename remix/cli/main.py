# remix/cli/main.py
from __future__ import annotations

import argparse
import logging
import sys
from typing import List

from . import apply, diff, prune, validate
from ..io.config import discover_config_path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="remix",
        description="Delta-based fork/merge engine for segment trees",
        allow_abbrev=False,
    )
    try:
        from remix import __version__ as _VER
    except ImportError:
        _VER = "unknown"
    parser.add_argument("--version", action="version", version=f"remix {_VER}")
    parser.add_argument("--debug", action="store_true", help=argparse.SUPPRESS)
    parser.add_argument("-c", "--config", dest="config", help="config file (default: discovered)")
    subparsers = parser.add_subparsers(dest="command")

    apply.register(subparsers)
    diff.register(subparsers)
    prune.register(subparsers)
    validate.register(subparsers)

    return parser


def main(argv: List[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    parser = build_parser()
    ns = parser.parse_args(argv)
    if not hasattr(ns, "func"):
        parser.print_help(sys.stderr)
        return 2

    logging.basicConfig(
        level=logging.DEBUG if ns.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if ns.command != "validate":
        selected, source = discover_config_path(ns.config)
        ns.config = str(selected) if selected is not None else None
        ns.config_source = source
    return ns.func(ns)


if __name__ == "__main__":
    raise SystemExit(main())
