#!/usr/bin/env python3

"""
Refresh Scheduler - Trigger a trend scoring pass on a fixed interval.
The engine itself never schedules; this loop is the external trigger.
"""

import logging
import signal
import sys
import time
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from trend_engine.config import EngineConfig
from trend_engine.engine import TrendPredictionEngine, run_pass_payload
from trend_engine.errors import TrendEngineError
from trend_engine.stores import open_state_repository

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class RefreshScheduler:
    """Runs scoring passes every ``interval_minutes`` until stopped."""

    def __init__(self, state_file: str, interval_minutes: int = 30, config: Optional[EngineConfig] = None):
        """Initialize the refresh scheduler."""
        self.state_file = state_file
        self.interval_minutes = interval_minutes
        self.interval_seconds = interval_minutes * 60
        self.config = config or EngineConfig.from_env()
        self.running = False
        self.cycle_count = 0
        self.engine: Optional[TrendPredictionEngine] = None

    def install_signal_handlers(self):
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

    def _signal_handler(self, signum, frame):
        """Handle shutdown signals gracefully."""
        logger.info(f"Received signal {signum}, shutting down gracefully...")
        self.running = False
        if self.engine is not None:
            self.engine.cancel()

    def run_cycle(self) -> Dict[str, Any]:
        """Run one scoring pass against a freshly loaded state file."""
        try:
            repository = open_state_repository(self.state_file)
        except TrendEngineError as e:
            logger.error(f"Could not open state: {e}")
            return {"success": False, "error": str(e)}
        self.engine = TrendPredictionEngine(repository, repository, repository, config=self.config)
        logger.info("🚀 Starting scoring pass...")
        return run_pass_payload(self.engine)

    def display_cycle_summary(self, cycle_num: int, payload: Dict[str, Any]):
        """Display summary of the current cycle."""
        insights = payload.get("market_insights", {})
        print(f"\n📊 CYCLE {cycle_num} SUMMARY")
        print("=" * 50)
        print(f"⏰ Time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        print(f"📈 Predictions: {payload.get('predictions_generated', 0):,}")
        print(f"⚠️ Failed candidates: {payload.get('failed_candidates', 0):,}")
        print(f"⭐ Emerging categories: {', '.join(insights.get('emerging_categories', [])) or '-'}")
        print(f"🌍 Top markets: {', '.join(insights.get('top_markets', [])) or '-'}")
        print("=" * 50)

    def run_continuous_monitoring(self):
        """Run scoring passes until interrupted."""
        self.running = True
        self.cycle_count = 0

        print(f"🚀 STARTING {self.interval_minutes}-MINUTE SCORING LOOP")
        print("🛑 Press Ctrl+C to stop gracefully")

        try:
            while self.running:
                self.cycle_count += 1
                cycle_start = time.time()

                logger.info(f"🔄 Starting cycle {self.cycle_count}")
                try:
                    payload = self.run_cycle()
                except Exception as e:
                    logger.error(f"Error in cycle {self.cycle_count}: {e}")
                    payload = {"success": False, "error": str(e)}

                if payload.get("success"):
                    self.display_cycle_summary(self.cycle_count, payload)
                else:
                    logger.error(f"❌ Cycle {self.cycle_count} failed: {payload.get('error')}")

                cycle_duration = time.time() - cycle_start
                sleep_time = max(0, self.interval_seconds - cycle_duration)

                if self.running and sleep_time > 0:
                    next_run = datetime.now() + timedelta(seconds=sleep_time)
                    logger.info(f"😴 Cycle {self.cycle_count} completed in {cycle_duration:.1f}s. Next run at {next_run.strftime('%H:%M:%S')}")

                    # Sleep in chunks to allow for graceful shutdown
                    sleep_chunks = int(sleep_time / 10) + 1
                    chunk_size = sleep_time / sleep_chunks

                    for _ in range(sleep_chunks):
                        if not self.running:
                            break
                        time.sleep(chunk_size)

        except KeyboardInterrupt:
            logger.info("🛑 Received keyboard interrupt")

        finally:
            self.running = False
            print(f"\n🏁 SCORING LOOP STOPPED after {self.cycle_count} cycles")


def main(argv=None) -> int:
    """Main function with CLI interface."""
    import argparse

    parser = argparse.ArgumentParser(description="Run trend scoring passes on an interval")
    parser.add_argument("--state", required=True, help="JSON state file")
    parser.add_argument("--interval", "-i", type=int, default=30, help="Interval in minutes (default: 30)")
    parser.add_argument("--once", action="store_true", help="Run a single pass instead of looping")

    args = parser.parse_args(argv)

    scheduler = RefreshScheduler(args.state, interval_minutes=args.interval)
    scheduler.install_signal_handlers()

    if args.once:
        payload = scheduler.run_cycle()
        if not payload.get("success"):
            print(f"❌ Pass failed: {payload.get('error')}")
            return 1
        scheduler.display_cycle_summary(1, payload)
        return 0

    scheduler.run_continuous_monitoring()
    return 0


if __name__ == "__main__":
    sys.exit(main())
