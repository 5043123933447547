#!/usr/bin/env python3
"""
total_difficulty_fork.py - Compare total difficulty of two forked chains

Fetches the same height range from two nodes, finds the last block both
chains share and re-accumulates total difficulty on each branch from the
block after it. The range ends at the lower of the two heads.

Uses the first two configured endpoints; defaults to the "fork" preset.
A ``cluster`` or ``endpoints`` key in kpi.yaml (or KPI_CLUSTER /
KPI_ENDPOINTS) replaces that preset, and a warning names the endpoints
actually compared.

Usage:
  python3 total_difficulty_fork.py [startBlock] [endBlock]
"""

import argparse
from typing import List

from kpi.reductions import DifficultyPoint, compare_forks

# Handle imports for both direct execution and module import
try:
    from kpi_common import announce_range, build_collector, build_range_parser, run_metric
    from network_config import ConfigError, NetworkConfig
except ImportError:
    from scripts.kpi_common import announce_range, build_collector, build_range_parser, run_metric
    from scripts.network_config import ConfigError, NetworkConfig

# Component name for logging
COMPONENT = "TOTAL_DIFFICULTY_FORK"
DEFAULT_CLUSTER = "fork"


def print_branch(title: str, points: List[DifficultyPoint]) -> None:
    print(f"Total difficulty ({title}):")
    for point in points:
        seal = point.seal_type.value if point.seal_type else "?"
        print(point.timestamp, point.total_difficulty, seal)


def report_fork(args: argparse.Namespace, config: NetworkConfig) -> None:
    if len(config.endpoints) < 2:
        raise ConfigError("Fork comparison needs two endpoints")

    collector = build_collector(config, endpoints=config.endpoints[:2])
    block_range = collector.resolve_range(args.start, args.end)
    announce_range(COMPONENT, block_range)

    chain1, chain2 = collector.run(collector.fetch_all(block_range))
    comparison = compare_forks(chain1, chain2)

    if comparison.diverged:
        common = comparison.fork_index
        number = block_range.start + common
        print(f"Last common block: {common} (#{number})")
    else:
        print("Last common block: none, chains agree over the whole range")

    print_branch(f"chain 1, {collector.urls[0]}", comparison.chain_a)
    print_branch(f"chain 2, {collector.urls[1]}", comparison.chain_b)


def main():
    """Main entry point."""
    parser = build_range_parser("Compare total difficulty of two nodes after their fork point")
    run_metric(COMPONENT, report_fork, parser.parse_args(), cluster=DEFAULT_CLUSTER)


if __name__ == "__main__":
    main()
