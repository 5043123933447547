#!/usr/bin/env python3
"""
total_difficulty.py - Total difficulty over a block range

Prints number,timestamp,totalDifficulty as reported by the first configured
node, followed by the total difficulty recomputed from the block
difficulties (cumulative PoW sum times cumulative PoS sum, both seeded
at 1 at the start of the range).

Usage:
  python3 total_difficulty.py [startBlock] [endBlock]
"""

import argparse

from kpi.reductions import accumulate_total_difficulty, total_difficulty_series

# Handle imports for both direct execution and module import
try:
    from kpi_common import announce_range, build_collector, build_range_parser, run_metric
    from network_config import NetworkConfig
except ImportError:
    from scripts.kpi_common import announce_range, build_collector, build_range_parser, run_metric
    from scripts.network_config import NetworkConfig

# Component name for logging
COMPONENT = "TOTAL_DIFFICULTY"


def report_total_difficulty(args: argparse.Namespace, config: NetworkConfig) -> None:
    collector = build_collector(config, endpoints=config.endpoints[:1])
    block_range = collector.resolve_range(args.start, args.end)
    announce_range(COMPONENT, block_range)

    blocks = collector.run(collector.fetch_blocks(collector.urls[0], block_range))

    print("Total difficulty (node reported):")
    for number, timestamp, total in total_difficulty_series(blocks):
        print(f"{number},{timestamp},{total}")

    print("Total difficulty (accumulated over range):")
    for point in accumulate_total_difficulty(blocks):
        print(f"{point.number},{point.timestamp},{point.total_difficulty}")


def main():
    """Main entry point."""
    parser = build_range_parser("Total difficulty over a block range")
    run_metric(COMPONENT, report_total_difficulty, parser.parse_args())


if __name__ == "__main__":
    main()
