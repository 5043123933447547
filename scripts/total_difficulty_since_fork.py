#!/usr/bin/env python3
"""
total_difficulty_since_fork.py - Total difficulty accumulated after a fork block

Accumulates total difficulty on the first configured node from the block
after the given fork block up to the latest block.

Usage:
  python3 total_difficulty_since_fork.py <forkBlock>
"""

import argparse

from kpi.reductions import accumulate_total_difficulty

# Handle imports for both direct execution and module import
try:
    from kpi_common import announce_range, build_collector, run_metric
    from network_config import NetworkConfig
except ImportError:
    from scripts.kpi_common import announce_range, build_collector, run_metric
    from scripts.network_config import NetworkConfig

# Component name for logging
COMPONENT = "TOTAL_DIFFICULTY_SINCE_FORK"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Total difficulty accumulated from the block after a fork block"
    )
    parser.add_argument("fork_block", type=int, help="Fork block (exclusive)")
    parser.add_argument("--config", default=None,
                        help="YAML configuration file (default: $KPI_CONFIG or ./kpi.yaml)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Show per-request debug logging")
    return parser


def report_since_fork(args: argparse.Namespace, config: NetworkConfig) -> None:
    collector = build_collector(config, endpoints=config.endpoints[:1])
    block_range = collector.resolve_range(args.fork_block + 1, None)
    announce_range(COMPONENT, block_range)

    blocks = collector.run(collector.fetch_blocks(collector.urls[0], block_range))

    print("Total difficulty:")
    for point in accumulate_total_difficulty(blocks):
        print(point.timestamp, point.total_difficulty)


def main():
    """Main entry point."""
    run_metric(COMPONENT, report_since_fork, build_parser().parse_args())


if __name__ == "__main__":
    main()
