#!/usr/bin/env python3

"""
Trend Scoring Pass
Runs one pass of the trend prediction engine against a JSON state file:
1. (optional) import collector posts from a CSV export
2. rescore every emerging / rising trend and append its prediction
3. print the pass report (or a structured error) as JSON

Usage
-----
python scripts/run_scoring_pass.py --state data/trend_state.json
python scripts/run_scoring_pass.py --state data/trend_state.json --posts-csv exports/posts.csv --seed 7

Engine settings come from ``TREND_ENGINE_*`` environment variables (``.env``
is honoured); command-line flags override them.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from trend_engine.config import EngineConfig  # noqa: E402
from trend_engine.engine import TrendPredictionEngine, run_pass_payload  # noqa: E402
from trend_engine.errors import ConfigError, TrendEngineError  # noqa: E402
from trend_engine.stores import open_state_repository  # noqa: E402

# Configure logging early so downstream modules inherit the level
logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(name)s | %(message)s")
LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run one trend scoring pass")
    parser.add_argument("--state", required=True, help="JSON state file holding posts, trends and predictions")
    parser.add_argument("--posts-csv", dest="posts_csv", help="CSV export of collector posts to import first")
    parser.add_argument("--seed", type=int, help="Seed for timeline projection (reproducible dates)")
    parser.add_argument("--max-workers", dest="max_workers", type=int, help="Concurrent candidate computations")
    parser.add_argument("--deadline", dest="deadline_seconds", type=float, help="Stop launching candidates after N seconds")
    parser.add_argument("--output", help="Also write the JSON payload to this path")
    return parser


def write_payload(payload: Dict[str, Any], output: Optional[str]) -> None:
    text = json.dumps(payload, indent=2)
    print(text)
    if output:
        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(text + "\n", encoding="utf-8")
        LOGGER.info("Report written to %s", output_path)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry-point for a single scoring pass."""
    args = build_parser().parse_args(argv)

    try:
        config = EngineConfig.from_env(
            seed=args.seed,
            max_workers=args.max_workers,
            deadline_seconds=args.deadline_seconds,
        )
    except ConfigError as e:
        LOGGER.error("Invalid engine configuration: %s", e)
        return 2

    LOGGER.info("🚀 Running scoring pass on %s", args.state)
    try:
        repository = open_state_repository(args.state, args.posts_csv)
    except TrendEngineError as e:
        LOGGER.error("Could not open state: %s", e)
        payload = {"success": False, "error": str(e)}
    else:
        engine = TrendPredictionEngine(repository, repository, repository, config=config)
        payload = run_pass_payload(engine)
    write_payload(payload, args.output)

    if not payload.get("success"):
        return 1
    LOGGER.info("🎉 Scoring pass finished: %s predictions", payload["predictions_generated"])
    return 0


if __name__ == "__main__":
    sys.exit(main())
