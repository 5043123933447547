#!/usr/bin/env python3
"""
reward.py - Block reward distribution

Counts, for every configured node, how many blocks of the range each miner
sealed and how the range splits between proof-of-work and proof-of-stake.

Usage:
  python3 reward.py [startBlock] [endBlock]
"""

import argparse

from kpi.reductions import RewardTally, tally_rewards

# Handle imports for both direct execution and module import
try:
    from kpi_common import announce_range, build_collector, build_range_parser, run_metric
    from network_config import NetworkConfig
except ImportError:
    from scripts.kpi_common import announce_range, build_collector, build_range_parser, run_metric
    from scripts.network_config import NetworkConfig

# Component name for logging
COMPONENT = "REWARD"


def print_tally(url: str, tally: RewardTally) -> None:
    prefix = f"[{url}]"
    print(f"{prefix} total pos: {tally.total_pos} --- {tally.pos_share:.2f}%")
    print(f"{prefix} total pow: {tally.total_pow} --- {tally.pow_share:.2f}%")
    print(f"{prefix} {'Miner':<66}\t Type \t Total Block \t %overall")
    for miner, miner_tally in tally.miners.items():
        seal = miner_tally.seal_type.value if miner_tally.seal_type else "?"
        print(f"{prefix} {miner:<66}\t {seal} \t {miner_tally.blocks} \t {tally.share(miner_tally.blocks):.2f}%")


def report_rewards(args: argparse.Namespace, config: NetworkConfig) -> None:
    collector = build_collector(config)
    block_range = collector.resolve_range(args.start, args.end)
    announce_range(COMPONENT, block_range)

    per_endpoint = collector.run(collector.fetch_all(block_range))
    for url, blocks in zip(collector.urls, per_endpoint):
        print_tally(url, tally_rewards(blocks))


def main():
    """Main entry point."""
    parser = build_range_parser("Per-miner PoW/PoS block reward distribution")
    run_metric(COMPONENT, report_rewards, parser.parse_args())


if __name__ == "__main__":
    main()
