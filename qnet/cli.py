# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# cli.py
# -----------------------------------------------------------------------------
# Purpose:
#   Process entry point: qnet END_TIME NETWORK OUTPUT [options]
#
# Design notes:
#   - Command-line values override the YAML run configuration.
#   - Exit codes: 0 success, 1 configuration error, 2 usage error (argparse),
#     3 resource exhaustion, 4 internal invariant violation. No report is
#     written on failure.
#
# Usage:
#   python -m qnet 1000 config/networks/tandem.txt report.txt --seed 1
# -----------------------------------------------------------------------------

from __future__ import annotations
import argparse, json, logging, sys
from typing import List, Optional

from .config import apply_overrides, load_cfg, validate
from .errors import QnetError, ResourceExhaustion
from .report import render_report, write_report
from .simulation import simulate

log = logging.getLogger("qnet")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qnet",
        description="Simulate an open network of single-server FIFO queues.",
    )
    parser.add_argument("end_time", type=float, help="end-of-simulation time (horizon)")
    parser.add_argument("network", help="path to the network description")
    parser.add_argument("output", help="path of the report to write")
    parser.add_argument("--config", "-c", help="YAML run configuration")
    parser.add_argument("--seed", type=int, help="random seed (default: config, else OS entropy)")
    parser.add_argument("--drain", action="store_true",
                        help="deliver events already scheduled past the horizon")
    parser.add_argument("--route-layout", choices=["grouped", "interleaved"],
                        help="order of probabilities and destinations in Q records")
    parser.add_argument("--summary-json", help="also write the summary as JSON to this path")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", "-v", action="store_true", help="trace every event")
    verbosity.add_argument("--quiet", "-q", action="store_true", help="only warnings and errors")
    return parser


def _overrides(args: argparse.Namespace) -> dict:
    sim = {"end_time": args.end_time}
    if args.seed is not None:
        sim["seed"] = args.seed
    if args.drain:
        sim["drain"] = True
    net = {"path": args.network}
    if args.route_layout:
        net["route_layout"] = args.route_layout
    return {"sim": sim, "network": net, "report": {"path": args.output}}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    level = logging.DEBUG if args.verbose else logging.WARNING if args.quiet else logging.INFO
    logging.basicConfig(level=level, stream=sys.stderr,
                        format="%(levelname)s %(name)s: %(message)s")
    try:
        cfg = validate(apply_overrides(load_cfg(args.config), _overrides(args)))
        run = simulate(cfg)
        summary = run.summary()
        text = render_report(summary)
    except MemoryError:
        err = ResourceExhaustion("out of memory while simulating")
        print(f"error: {err}", file=sys.stderr)
        return err.exit_code
    except QnetError as err:
        print(f"error: {err}", file=sys.stderr)
        return err.exit_code

    try:
        write_report(cfg["report"]["path"], text)
        if args.summary_json:
            with open(args.summary_json, "w") as f:
                json.dump(summary, f, indent=2)
    except OSError as exc:
        print(f"error: cannot write output: {exc}", file=sys.stderr)
        return 1
    log.info("report written to %s", cfg["report"]["path"])
    return 0


if __name__ == "__main__":
    sys.exit(main())
