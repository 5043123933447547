#!/usr/bin/env python3
"""
difficulty.py - Raw block difficulty per seal type

Lists number,difficulty for the PoW and the PoS blocks among the latest
blocks of the first configured node, as CSV-like lines.

Usage:
  python3 difficulty.py [startBlock] [endBlock]
"""

import argparse

from kpi.blocks import SealType
from kpi.constants import DIFFICULTY_WINDOW
from kpi.reductions import difficulty_by_seal

# Handle imports for both direct execution and module import
try:
    from kpi_common import announce_range, build_collector, build_range_parser, run_metric
    from network_config import NetworkConfig
except ImportError:
    from scripts.kpi_common import announce_range, build_collector, build_range_parser, run_metric
    from scripts.network_config import NetworkConfig

# Component name for logging
COMPONENT = "DIFFICULTY"


def report_difficulty(args: argparse.Namespace, config: NetworkConfig) -> None:
    collector = build_collector(config, endpoints=config.endpoints[:1], window=DIFFICULTY_WINDOW)
    block_range = collector.resolve_range(args.start, args.end)
    announce_range(COMPONENT, block_range)

    grouped = difficulty_by_seal(collector.run(collector.fetch_blocks(collector.urls[0], block_range)))

    for title, seal_type in (("Proof-of-work", SealType.POW), ("Proof-of-stake", SealType.POS)):
        print(f"{title} difficulty")
        for number, difficulty in grouped[seal_type]:
            print(f"{number},{difficulty}")


def main():
    """Main entry point."""
    parser = build_range_parser("List block difficulty per seal type")
    run_metric(COMPONENT, report_difficulty, parser.parse_args())


if __name__ == "__main__":
    main()
