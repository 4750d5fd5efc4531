#!/usr/bin/env python3
"""
Compare the fast estimator against the exact search over a case corpus.

Usage:
  python check_cases.py --cases cases.txt
  python check_cases.py --cases cases.txt --estimator code_total --no-sentinels
  python check_cases.py --cases cases.txt --cross-check --report out/report.txt
"""

import argparse
import sys
from pathlib import Path

from cases import load_cases
from config import CFG
from io_files import write_report, write_summary_json
from models import Capacities, InvalidItem
from render import format_outcome, format_summary
from solver.orchestrator import ESTIMATORS, run_comparison


def _resolve(p: str) -> Path:
    pp = Path(p)
    if pp.is_absolute():
        return pp
    return Path.cwd() / pp


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    ap.add_argument("--cases", default=CFG.CASES_PATH, help="corpus file (lenient JSON)")
    ap.add_argument("--estimator", choices=ESTIMATORS, default=CFG.ESTIMATOR)
    ap.add_argument("--no-sentinels", action="store_true",
                    help="do not append the {AC},{AD},{BC},{BD} items to each case")
    ap.add_argument("--cross-check", action="store_true", help="also solve every case with CP-SAT")
    ap.add_argument("--capacities", nargs=4, type=int, metavar=("ROW_A", "ROW_B", "COL_C", "COL_D"))
    ap.add_argument("--node-limit", type=int, default=None, help="0 disables the limit")
    ap.add_argument("--report", default=None, help="write a text + JSON report to this path")
    ap.add_argument("--quiet", action="store_true", help="only print the summary line")
    return ap


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        cases = load_cases(_resolve(args.cases))
        caps = Capacities(*args.capacities) if args.capacities else Capacities.from_cfg()
    except FileNotFoundError as e:
        print(f"Cases file not found: {e.filename}", file=sys.stderr)
        return 2
    except (InvalidItem, ValueError) as e:
        print(str(e), file=sys.stderr)
        return 2

    def _print_outcome(outcome):
        if not args.quiet and outcome.agrees is not True:
            print(format_outcome(outcome))

    summary = run_comparison(
        cases,
        caps,
        append_sentinels=not args.no_sentinels,
        estimator=args.estimator,
        cross_check=args.cross_check or None,
        node_limit=args.node_limit,
        on_outcome=_print_outcome,
    )
    print(format_summary(summary))
    if summary.oracle_conflicts:
        print(f"CP-SAT disagreed with the exact search on {len(summary.oracle_conflicts)} case(s)")

    if args.report:
        CFG.REPORT_OUT = str(_resolve(args.report))
        base = str(Path.cwd())
        print(f"Report: {write_report(summary, base)}")
        print(f"Summary: {write_summary_json(summary, base)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
