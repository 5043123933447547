#!/usr/bin/env python3
"""
block_latency.py - Cross-node block import latency

Fetches every block of the range from every configured node and compares
the local import timestamps. For each height the latency of a node is its
import time minus the earliest import time of that block; the per-block
figure averages the nodes behind the first importer. The network latency
is the running mean of the per-block figures.

Usage:
  python3 block_latency.py [startBlock] [endBlock]
"""

import argparse

from kpi.constants import SENTINEL
from kpi.reductions import import_latency_report

# Handle imports for both direct execution and module import
try:
    from error_handling import log_warning
    from kpi_common import announce_range, build_collector, build_range_parser, run_metric
    from network_config import NetworkConfig
except ImportError:
    from scripts.error_handling import log_warning
    from scripts.kpi_common import announce_range, build_collector, build_range_parser, run_metric
    from scripts.network_config import NetworkConfig

# Component name for logging
COMPONENT = "BLOCK_LATENCY"


def format_latency(latency: float) -> str:
    return f"{latency:.0f} ms" if latency != SENTINEL else "n/a"


def report_block_latency(args: argparse.Namespace, config: NetworkConfig) -> None:
    if len(config.endpoints) < 2:
        log_warning(COMPONENT, "Import latency needs at least two nodes; every block will report n/a")

    collector = build_collector(config)
    block_range = collector.resolve_range(args.start, args.end)
    announce_range(COMPONENT, block_range)

    heights = collector.run(collector.fetch_observations(block_range))
    report = import_latency_report(heights)

    for number, latency in report.per_block:
        print(f"block {number} average import latency: {format_latency(latency)}")
    print(f"network average import latency over {report.block_count} blocks: "
          f"{format_latency(report.network_latency)}")


def main():
    """Main entry point."""
    parser = build_range_parser("Block import latency across the configured nodes")
    run_metric(COMPONENT, report_block_latency, parser.parse_args())


if __name__ == "__main__":
    main()
