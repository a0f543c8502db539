#!/usr/bin/env python3
"""Build planner - pick one item per slot that best meets buff targets."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from buildplanner.config import PlannerConfig, load_config
from buildplanner.data import CatalogCsvLoader, Item, PlannerStore, parse_targets
from buildplanner.engine.report import optimization_report
from buildplanner.engine.search import BeamSearchOptimizer


def _load_catalog(path: Path) -> tuple[list[Item], dict[str, float]]:
    if path.suffix.lower() == ".csv":
        return CatalogCsvLoader().load_items(path), {}
    store = PlannerStore.open(path)
    return store.items, store.targets


def _resolve_config(args: argparse.Namespace) -> PlannerConfig:
    config = load_config(args.config) if args.config else PlannerConfig()
    overrides = {
        "top_k_per_slot": args.top_k,
        "beam_width": args.beam_width,
        "jobs": args.jobs,
    }
    # Re-validate so CLI overrides obey the same bounds as config files.
    return PlannerConfig.model_validate(
        {**config.model_dump(), **{key: value for key, value in overrides.items() if value is not None}}
    )


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Gear build optimizer")
    parser.add_argument("--catalog", type=Path, required=True, help="JSON planner state or CSV catalog")
    parser.add_argument("--targets", type=Path, help="text file with one 'Name: value' target per line")
    parser.add_argument(
        "--target",
        action="append",
        default=[],
        help="single target such as 'Momentum: 100' (repeatable)",
    )
    parser.add_argument("--top-k", type=int, help="candidates kept per slot")
    parser.add_argument("--beam-width", type=int, help="partial builds kept between slots")
    parser.add_argument("--jobs", type=int, help="scoring threads")
    parser.add_argument("--config", type=Path, help="YAML/JSON config file")
    parser.add_argument("--json", action="store_true", help="print the JSON report")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    config = _resolve_config(args)
    logging.basicConfig(level=config.log_level, format="%(levelname)s %(name)s: %(message)s")

    items, targets = _load_catalog(args.catalog)
    if args.targets:
        targets = parse_targets(args.targets.read_text(encoding="utf-8"))
    if args.target:
        targets = {**targets, **parse_targets("\n".join(args.target))}

    if not targets:
        print("[WARN] No necessary buffs set; ranking by recommended lines and raw value only.")

    optimizer = BeamSearchOptimizer(
        top_k_per_slot=config.top_k_per_slot,
        beam_width=config.beam_width,
        jobs=config.jobs,
    )
    result = optimizer.optimize(items, targets)
    report = optimization_report(result, targets)

    if args.json:
        print(json.dumps(report.json_report, ensure_ascii=False, indent=2))
    else:
        print(report.markdown_report)
    return 0


if __name__ == "__main__":
    sys.exit(main())
