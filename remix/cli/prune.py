"""CLI subcommand `prune`: drop deltas that no longer target the upstream tree."""

from __future__ import annotations

import argparse
from typing import Any, Dict

from ..engine.codec import dump_deltas, load_deltas, load_segments
from ..engine.prune import partition_stale_deltas
from ._exit import OK
from ._io import emit_json, read_json, vprint
from ._util import add_engine_subparser, run_command


def register(subparsers: argparse._SubParsersAction) -> None:
    sp = add_engine_subparser(
        subparsers,
        name="prune",
        help_text="drop stale deltas against an upstream tree",
        description="Keep only the deltas that still make sense against the latest UPSTREAM tree.",
    )
    sp.add_argument("deltas", help="deltas JSON file")
    sp.add_argument("upstream", help="latest upstream segments JSON file")
    sp.set_defaults(command="prune", func=_run)


def _body(ns: argparse.Namespace, cfg: Dict[str, Any]) -> int:
    deltas = load_deltas(read_json(ns.deltas), strict=cfg["codec"]["strict"])
    upstream = load_segments(read_json(ns.upstream), path="upstream")
    kept, dropped = partition_stale_deltas(deltas, upstream)
    vprint(f"prune: kept {len(kept)}, dropped {len(dropped)}")
    emit_json(dump_deltas(kept), ns.out, pretty=ns.pretty)
    return OK


def _run(ns: argparse.Namespace) -> int:
    return run_command(ns, _body)
