"""CLI subcommand `apply`: materialize the effective tree of a fork."""

from __future__ import annotations

import argparse
from typing import Any, Dict

from ..engine.apply import apply_deltas_report
from ..engine.codec import dump_segments, load_deltas, load_segments
from ._exit import OK
from ._io import emit_json, eprint, read_json
from ._util import add_engine_subparser, run_command


def register(subparsers: argparse._SubParsersAction) -> None:
    sp = add_engine_subparser(
        subparsers,
        name="apply",
        help_text="replay deltas onto a base tree",
        description="Replay a delta list onto a base segment tree and print the effective tree.",
    )
    sp.add_argument("base", help="base segments JSON file ('-' for stdin)")
    sp.add_argument("deltas", help="deltas JSON file")
    sp.add_argument(
        "--report", action="store_true", help="print {segments, applied, skipped} instead of the tree"
    )
    sp.set_defaults(command="apply", func=_run)


def _body(ns: argparse.Namespace, cfg: Dict[str, Any]) -> int:
    base = load_segments(read_json(ns.base), path="base")
    deltas = load_deltas(read_json(ns.deltas), strict=cfg["codec"]["strict"])
    report = apply_deltas_report(base, deltas)
    if report.skipped and cfg["apply"]["report_skipped"]:
        eprint(f"warning: {len(report.skipped)} delta(s) skipped (missing target)")
    if ns.report:
        emit_json(
            {
                "segments": dump_segments(report.segments),
                "applied": report.applied,
                "skipped": len(report.skipped),
            },
            ns.out,
            pretty=ns.pretty,
        )
    else:
        emit_json(dump_segments(report.segments), ns.out, pretty=ns.pretty)
    return OK


def _run(ns: argparse.Namespace) -> int:
    return run_command(ns, _body)
