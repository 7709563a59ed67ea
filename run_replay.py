#!/usr/bin/env python3
"""
Replay recorded auction events through the analytics adapter.

Usage:
    python run_replay.py events.yaml
    python run_replay.py events.json --config config/analytics.yaml
    python run_replay.py events.yaml --sink-late
"""

import argparse
import json
import sys
from pathlib import Path

import yaml


def load_events(path: Path) -> list[dict]:
    """Read a list of {"event": <type>, "args": <payload>} entries."""
    with open(path) as f:
        if path.suffix == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f)
    if isinstance(data, dict):
        data = data.get("events", [])
    return data or []


def main():
    parser = argparse.ArgumentParser(description="Replay auction events through the WDC analytics adapter")
    parser.add_argument("events", help="YAML or JSON file of recorded events")
    parser.add_argument("--config", default=None, help="Analytics config YAML")
    parser.add_argument(
        "--sink-late",
        action="store_true",
        help="Install the sink only after all events were replayed",
    )
    args = parser.parse_args()

    from src.wdc.analytics import GoogleAnalyticsAdapter, LoggingSink, SinkRegistry
    from src.wdc.config import AnalyticsConfigManager, ConfigLoadError
    from src.wdc.events import InMemoryEventBus
    from src.wdc.logging import AuctionLogContext

    try:
        manager = AnalyticsConfigManager(args.config)
        options = manager.load()
    except ConfigLoadError as e:
        print(f"Error: {e}")
        sys.exit(1)

    bus = InMemoryEventBus()
    sinks = SinkRegistry()
    sink = LoggingSink()
    config = manager.to_config()
    if not args.sink_late:
        sinks.register(config.sink_name, sink)

    adapter = GoogleAnalyticsAdapter(bus, sinks)
    adapter.enable_analytics(manager.provider, options)

    with AuctionLogContext(source=args.events):
        for entry in load_events(Path(args.events)):
            bus.emit(entry["event"], entry.get("args"))

    if not adapter.is_sampled:
        print("Analytics disabled by sampling, nothing reported")
        return

    queue = adapter.session.queue
    if args.sink_late:
        sinks.register(config.sink_name, sink)
        queue.drain_if_ready()

    stats = queue.get_stats()
    print(f"enqueued={stats.commands_enqueued} dispatched={stats.commands_dispatched} "
          f"failed={stats.commands_failed} pending={stats.queue_depth} mode={stats.mode.value}")


if __name__ == "__main__":
    main()
