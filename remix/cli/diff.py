"""CLI subcommand `diff`: derive the delta list between two trees."""

from __future__ import annotations

import argparse
from typing import Any, Dict

from ..engine.codec import dump_deltas, load_segments
from ..engine.diff import MODIFY_FIELDS, compute_deltas
from ._exit import OK
from ._io import emit_json, read_json, vprint
from ._util import add_engine_subparser, run_command


def register(subparsers: argparse._SubParsersAction) -> None:
    sp = add_engine_subparser(
        subparsers,
        name="diff",
        help_text="compute deltas between two trees",
        description="Compute the delta list that turns ORIGINAL into MODIFIED.",
    )
    sp.add_argument("original", help="original segments JSON file")
    sp.add_argument("modified", help="modified segments JSON file")
    sp.add_argument("--now", metavar="ISO8601", help="timestamp stamped on every delta (default: current UTC)")
    sp.add_argument(
        "--modify-fields",
        choices=MODIFY_FIELDS,
        default=None,
        help="fields carried by Modify deltas (default from config: diff.modify_fields)",
    )
    sp.set_defaults(command="diff", func=_run)


def _body(ns: argparse.Namespace, cfg: Dict[str, Any]) -> int:
    original = load_segments(read_json(ns.original), path="original")
    modified = load_segments(read_json(ns.modified), path="modified")
    fields = ns.modify_fields or cfg["diff"]["modify_fields"]
    deltas = compute_deltas(original, modified, now=ns.now, modify_fields=fields)
    vprint(f"diff: {len(deltas)} delta(s)")
    emit_json(dump_deltas(deltas), ns.out, pretty=ns.pretty)
    return OK


def _run(ns: argparse.Namespace) -> int:
    return run_command(ns, _body)
