"""
AMHUB Headless Fleet Watcher
============================
Author: AMHUB Member
Date: 2026-10-18

Poll the project topology from a terminal and print the link state and
device table whenever a new snapshot lands.

Usage:
    python scripts/watch_fleet.py                      # Poll until Ctrl+C
    python scripts/watch_fleet.py --duration 30        # Stop after 30 s
    python scripts/watch_fleet.py --interval 2000      # Poll every 2 s
    python scripts/watch_fleet.py --once               # Single poll, exit code = link state
"""

import sys
import asyncio
import argparse
from pathlib import Path
from typing import Optional

# Setup paths
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from amhub.console import snapshot_to_frame
from amhub.core import ConfigError, get_config, get_logger, setup_logging
from amhub.fleet import FleetClient, LinkStatus, Poller
from amhub.fleet.models import DeviceSnapshot, LinkHealth

logger = get_logger("AMHUB.Watch")

EXIT_CODES = {
    LinkStatus.HEALTHY: 0,
    LinkStatus.UNHEALTHY: 1,
    LinkStatus.UNAUTHORIZED: 2,
}


def print_snapshot(snapshot: DeviceSnapshot) -> None:
    frame = snapshot_to_frame(snapshot)
    print(f"\n{snapshot.message}: {len(snapshot)} drone(s), {snapshot.online_count} online")
    if not frame.empty:
        print(frame.to_string(index=False))


async def watch(poller: Poller, interval_ms: int, duration: Optional[float]) -> LinkHealth:
    """Run the poller until `duration` elapses (or forever)."""
    state = {"status": None}

    def on_health(health: LinkHealth) -> None:
        if health.status is not state["status"]:
            state["status"] = health.status
            print(f"[LINK] {health.status.value.upper()}" + (f": {health.reason}" if hasattr(health, "reason") else ""))

    poller.start(interval_ms, on_snapshot=print_snapshot, on_health=on_health)
    try:
        if duration is None:
            await asyncio.Event().wait()
        else:
            await asyncio.sleep(duration)
    finally:
        poller.stop()
    return poller.health


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="AMHUB Headless Fleet Watcher")
    parser.add_argument("--interval", type=int, default=None, help="Poll interval in ms (default from config)")
    parser.add_argument("--duration", type=float, default=None, help="Stop after this many seconds")
    parser.add_argument("--once", action="store_true", help="Poll once and exit")
    parser.add_argument("--log-level", default=None, help="Console log level")

    args = parser.parse_args()

    try:
        config = get_config()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 3
    setup_logging(args.log_level or config.log_level)

    client = FleetClient(config)
    poller = Poller(client.fetch_topology, interval_ms=args.interval or config.poll_interval_ms)

    if args.once:
        health = asyncio.run(poller.poll_once())
        if health.status is LinkStatus.HEALTHY:
            print_snapshot(health.snapshot)
        else:
            print(f"[LINK] {health.status.value.upper()}: {health.reason}")
        return EXIT_CODES[health.status]

    try:
        health = asyncio.run(watch(poller, poller.interval_ms, args.duration))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0
    return EXIT_CODES[health.status]


if __name__ == "__main__":
    exit(main())
