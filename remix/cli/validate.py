"""CLI subcommand `validate`: check a config file and print the normalized result."""

from __future__ import annotations

import argparse
import json
import sys

from ..errors import ConfigError, format_error
from ..io.config import discover_config_path, load_config
from ._exit import OK, USER_ERR, VALIDATION_ERR
from ._io import eprint, set_verbosity, vprint


def register(subparsers: argparse._SubParsersAction) -> None:
    sp = subparsers.add_parser(
        "validate",
        help="validate a config file",
        description="Validate a remix config file (defaults to the discovered config).",
    )
    sp.add_argument("path", nargs="?", help="config.yaml to validate")
    sp.add_argument("--json", action="store_true", help="print the normalized config as JSON")
    sp.add_argument("--quiet", action="store_true", help="suppress non-essential stderr")
    sp.add_argument("--verbose", action="store_true", help="increase stderr verbosity")
    sp.set_defaults(command="validate", func=_run)


def _run(ns: argparse.Namespace) -> int:
    set_verbosity(ns.verbose, ns.quiet)
    selected, source = discover_config_path(ns.path or getattr(ns, "config", None))
    if source == "explicit-missing":
        eprint(f"error: config file not found: {selected}")
        return USER_ERR
    vprint(f"config: {selected if selected else '<defaults>'} ({source})")
    try:
        cfg = load_config(selected)
    except ConfigError as e:
        eprint(format_error(e))
        return VALIDATION_ERR
    if ns.json:
        sys.stdout.write(json.dumps(cfg, sort_keys=True, separators=(",", ":")) + "\n")
    else:
        print("OK")
    return OK
