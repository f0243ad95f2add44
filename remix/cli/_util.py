from __future__ import annotations

import argparse
import json
from typing import Any, Callable, Dict

from ..errors import CLIError, ConfigError, DeltaFormatError, format_error
from ..io.config import load_config
from ._exit import USER_ERR, VALIDATION_ERR
from ._io import eprint, set_verbosity, vprint

__all__ = ["add_engine_subparser", "run_command"]


def add_engine_subparser(
    subparsers: argparse._SubParsersAction,
    name: str,
    help_text: str,
    description: str,
) -> argparse.ArgumentParser:
    """
    Create a subparser with the flags every engine command shares:
    - --out PATH: write JSON there (atomically; .zst compresses) instead of stdout
    - --pretty: indented JSON
    - --quiet / --verbose: stderr verbosity; stdout stays reserved for output
    """
    sp = subparsers.add_parser(name, help=help_text, description=description)
    sp.add_argument("--out", metavar="PATH", help="write result to PATH instead of stdout")
    sp.add_argument("--pretty", action="store_true", help="indent JSON output")
    sp.add_argument("--quiet", action="store_true", help="suppress non-essential stderr")
    sp.add_argument("--verbose", action="store_true", help="increase stderr verbosity")
    return sp


def run_command(ns: argparse.Namespace, body: Callable[[argparse.Namespace, Dict[str, Any]], int]) -> int:
    """Load config, then run `body`, mapping typed failures onto exit codes."""
    set_verbosity(getattr(ns, "verbose", False), getattr(ns, "quiet", False))
    vprint(f"config: {getattr(ns, 'config', None) or '<defaults>'} ({getattr(ns, 'config_source', 'none')})")
    try:
        cfg = load_config(getattr(ns, "config", None))
    except ConfigError as e:
        eprint(format_error(e))
        return VALIDATION_ERR
    try:
        return body(ns, cfg)
    except DeltaFormatError as e:
        eprint(format_error(e))
        return VALIDATION_ERR
    except (OSError, json.JSONDecodeError, ImportError) as e:
        eprint(format_error(CLIError(f"{ns.command}: {e}")))
        return USER_ERR
