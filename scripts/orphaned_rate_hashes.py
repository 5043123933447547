#!/usr/bin/env python3
"""
orphaned_rate_hashes.py - Orphaned block rate by hash comparison

Compares every PoW and PoS block hash the first configured node has seen
against the canonical hashes of the range. Hashes that fall inside the
range but are not canonical are orphans.

The node must expose its seen-hash lists through eth_accounts (PoW) and
personal_listAccounts (PoS).

Usage:
  python3 orphaned_rate_hashes.py [startBlock] [endBlock]
"""

import argparse
import asyncio
from typing import Dict, List, Tuple

from kpi.blocks import BlockRecord
from kpi.collector import BlockRange, RangedMetricCollector
from kpi.reductions import orphan_stats_from_hashes

# Handle imports for both direct execution and module import
try:
    from kpi_common import announce_range, build_collector, build_range_parser, run_metric
    from network_config import NetworkConfig
except ImportError:
    from scripts.kpi_common import announce_range, build_collector, build_range_parser, run_metric
    from scripts.network_config import NetworkConfig

# Component name for logging
COMPONENT = "ORPHAN_HASHES"


async def fetch_range_and_hashes(collector: RangedMetricCollector,
                                 block_range: BlockRange) -> Tuple[List[BlockRecord], Dict[str, List[str]]]:
    """Canonical blocks of the range and the node's seen-hash lists, fetched together."""
    blocks, seen = await asyncio.gather(
        collector.fetch_blocks(collector.urls[0], block_range),
        collector.fetch_seen_hashes(),
    )
    return blocks, seen


def report_orphan_hashes(args: argparse.Namespace, config: NetworkConfig) -> None:
    collector = build_collector(config, endpoints=config.endpoints[:1])
    block_range = collector.resolve_range(args.start, args.end)
    announce_range(COMPONENT, block_range)

    blocks, seen = collector.run(fetch_range_and_hashes(collector, block_range))
    stats = orphan_stats_from_hashes([b.hash for b in blocks], seen["pow"], seen["pos"])

    print(f"Main chain blocks count: {stats.main_count}")
    print(f"Orphaned blocks count: {stats.orphan_count} "
          f"POW: {len(stats.pow_orphans)} POS: {len(stats.pos_orphans)}")
    print(f"Orphaned blocks rate: {stats.rate} POW: {stats.pow_share} POS: {stats.pos_share}")


def main():
    """Main entry point."""
    parser = build_range_parser("Orphaned block rate from the node's seen block hashes")
    run_metric(COMPONENT, report_orphan_hashes, parser.parse_args())


if __name__ == "__main__":
    main()
