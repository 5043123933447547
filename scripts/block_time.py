#!/usr/bin/env python3
"""
block_time.py - Block time statistics

Fetches a block range from the first configured node and prints the mean
and population standard deviation of the block interval, overall and per
seal type.

Usage:
  python3 block_time.py [startBlock] [endBlock]
"""

import argparse

from kpi.blocks import SealType
from kpi.reductions import block_time_stats

# Handle imports for both direct execution and module import
try:
    from kpi_common import announce_range, build_collector, build_range_parser, run_metric
    from network_config import NetworkConfig
except ImportError:
    from scripts.kpi_common import announce_range, build_collector, build_range_parser, run_metric
    from scripts.network_config import NetworkConfig

# Component name for logging
COMPONENT = "BLOCK_TIME"


def report_block_time(args: argparse.Namespace, config: NetworkConfig) -> None:
    collector = build_collector(config, endpoints=config.endpoints[:1])
    block_range = collector.resolve_range(args.start, args.end)
    announce_range(COMPONENT, block_range)

    blocks = collector.run(collector.fetch_blocks(collector.urls[0], block_range))

    for label, seal_type in (("", None), ("Pow ", SealType.POW), ("Pos ", SealType.POS)):
        stats = block_time_stats(blocks, seal_type)
        print(f"{label}Block time statistics -> (Mean: {stats.mean}, Std: {stats.std})")


def main():
    """Main entry point."""
    parser = build_range_parser("Block time mean and standard deviation over a block range")
    run_metric(COMPONENT, report_block_time, parser.parse_args())


if __name__ == "__main__":
    main()
