#!/usr/bin/env python3
"""
orphaned_rate.py - Orphaned block rate from a patched count RPC

Only works against nodes whose eth_getBlockTransactionCount has been
patched to answer with the number of blocks seen at a height, orphans
included. Summing it over the canonical range and subtracting the range
length gives the orphan count. orphaned_rate_hashes.py measures the same
thing without the patched method.

Usage:
  python3 orphaned_rate.py [startBlock] [endBlock]
"""

import argparse

from kpi.constants import ORPHAN_RANGE_FLOOR
from kpi.reductions import orphan_stats

# Handle imports for both direct execution and module import
try:
    from kpi_common import announce_range, build_collector, build_range_parser, run_metric
    from network_config import NetworkConfig
except ImportError:
    from scripts.kpi_common import announce_range, build_collector, build_range_parser, run_metric
    from scripts.network_config import NetworkConfig

# Component name for logging
COMPONENT = "ORPHAN_RATE"


def report_orphan_rate(args: argparse.Namespace, config: NetworkConfig) -> None:
    collector = build_collector(config, endpoints=config.endpoints[:1], floor=ORPHAN_RANGE_FLOOR)
    block_range = collector.resolve_range(args.start, args.end)
    announce_range(COMPONENT, block_range)

    stats = orphan_stats(collector.run(collector.fetch_seen_counts(block_range)))

    print(f"block height: {block_range.latest}")
    print(f"{stats.orphan_count} orphaned blocks found in {stats.canonical_count} canonical blocks "
          f"({stats.total_seen} blocks seen)")
    print(f"orphaned block rate: {stats.rate}")


def main():
    """Main entry point."""
    parser = build_range_parser("Orphaned block rate using the patched block count RPC")
    run_metric(COMPONENT, report_orphan_rate, parser.parse_args())


if __name__ == "__main__":
    main()
