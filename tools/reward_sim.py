#!/usr/bin/env python3
"""
Run a reward scenario (YAML) against an in-memory vault + staker and print a
JSON report.

Exit codes: 0 ok, 1 scenario failed or invariants violated, 2 bad input.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from staker.config import ConfigError
from staker.integration.scenario import ScenarioError, run_scenario_file


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Deterministic reward accrual scenario runner")
    ap.add_argument("scenario", type=Path, help="path to a staker/scenario/v1 YAML file")
    ap.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    ap.add_argument("--out", type=str, default="", help="write the report here instead of stdout")
    args = ap.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    if not args.scenario.exists():
        print(f"missing scenario file: {args.scenario}", file=sys.stderr)
        return 2
    try:
        report = run_scenario_file(args.scenario)
    except (ScenarioError, ConfigError) as exc:
        print(f"scenario failed: {exc}", file=sys.stderr)
        return 1

    text = json.dumps(report, indent=2, sort_keys=True)
    if args.out:
        Path(args.out).write_text(text + "\n", encoding="utf-8")
    else:
        print(text)
    return 1 if report["invariant_violations"] else 0


if __name__ == "__main__":
    raise SystemExit(main())
