#!/usr/bin/env python3

"""
Collection Summary - Describe collected posts and refresh trend signals.
"""

import argparse
import json
import logging
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from trend_engine.collection import refresh_trend_signals
from trend_engine.config import EngineConfig
from trend_engine.errors import TrendEngineError
from trend_engine.metrics import summarize_collection
from trend_engine.stores import open_state_repository

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    """CLI interface for collection summaries."""
    parser = argparse.ArgumentParser(description="Summarize collected social posts")
    parser.add_argument("--state", required=True, help="JSON state file")
    parser.add_argument("--posts-csv", dest="posts_csv", help="CSV export of collector posts to import first")
    parser.add_argument("--days", type=int, help="Only summarize posts from the last N days (default: engine window)")
    parser.add_argument("--refresh-signals", action="store_true", help="Update trend scores and mention counts from the posts")

    args = parser.parse_args(argv)

    config = EngineConfig.from_env()
    try:
        repository = open_state_repository(args.state, args.posts_csv)
    except TrendEngineError as e:
        logger.error(f"Could not open state: {e}")
        print(json.dumps({"success": False, "error": str(e)}, indent=2))
        return 1

    now = datetime.now(timezone.utc)
    since = now - timedelta(days=args.days or config.window_days)
    posts = repository.fetch_posts(since)

    summary = summarize_collection(posts)
    print(json.dumps(summary.model_dump(mode="json"), indent=2))

    if args.refresh_signals:
        updated = refresh_trend_signals(posts, repository, config=config, now=now)
        print(f"✅ Refreshed signals for {updated} trends")

    return 0


if __name__ == "__main__":
    sys.exit(main())
