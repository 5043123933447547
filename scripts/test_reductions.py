#!/usr/bin/env python3
"""
Unit tests for the block range reductions in kpi.reductions.
"""

import math
import unittest

from kpi.blocks import BlockRecord, SealType
from kpi.constants import SENTINEL
from kpi.reductions import (
    DifficultyAccumulator,
    LatencyAccumulator,
    RewardTally,
    accumulate_total_difficulty,
    block_import_latency,
    block_intervals,
    block_time_stats,
    compare_forks,
    difficulty_by_seal,
    find_fork_index,
    import_latency_report,
    orphan_stats,
    orphan_stats_from_hashes,
    tally_rewards,
    total_difficulty_series,
)

POW = SealType.POW
POS = SealType.POS


def make_block(number, timestamp=0, seal_type=POW, miner="0xa", difficulty=0,
               block_hash=None, import_timestamp=None, total_difficulty=0):
    return BlockRecord(
        number=number,
        timestamp=timestamp,
        hash=block_hash or f"0x{number:04x}",
        miner=miner,
        seal_type=seal_type,
        difficulty=difficulty,
        total_difficulty=total_difficulty,
        import_timestamp=import_timestamp,
    )


class TestBlockTime(unittest.TestCase):
    """Block interval mean and standard deviation."""

    def test_mean_and_population_std(self):
        blocks = [make_block(i + 1, ts) for i, ts in enumerate([100, 105, 111, 120])]
        stats = block_time_stats(blocks)
        self.assertEqual(stats.mean, 6.67)
        self.assertEqual(stats.std, 1.70)
        self.assertEqual(stats.samples, 3)

    def test_blocks_are_ordered_by_number(self):
        blocks = [make_block(3, 111), make_block(1, 100), make_block(4, 120), make_block(2, 105)]
        self.assertEqual(block_intervals(blocks), [5, 6, 9])

    def test_seal_filter_measures_against_previous_matching_block(self):
        blocks = [
            make_block(1, 100, POW),
            make_block(2, 104, POS),
            make_block(3, 110, POW),
            make_block(4, 113, POS),
            make_block(5, 130, POW),
        ]
        self.assertEqual(block_intervals(blocks, POW), [10, 20])
        self.assertEqual(block_intervals(blocks, POS), [9])
        pos = block_time_stats(blocks, POS)
        self.assertEqual((pos.mean, pos.std), (9, 0))

    def test_insufficient_blocks_give_sentinel(self):
        for blocks in ([], [make_block(1, 100)]):
            stats = block_time_stats(blocks)
            self.assertEqual((stats.mean, stats.std), (SENTINEL, SENTINEL))

    def test_filter_without_matches_gives_sentinel(self):
        blocks = [make_block(1, 100, POW), make_block(2, 110, POW)]
        self.assertEqual(block_time_stats(blocks, POS).mean, SENTINEL)

    def test_repeated_runs_are_identical(self):
        blocks = [make_block(i + 1, 10 * i + i % 3) for i in range(20)]
        self.assertEqual(block_time_stats(blocks), block_time_stats(list(blocks)))


class TestImportLatency(unittest.TestCase):
    """Cross-node import latency."""

    def test_latency_excludes_first_importer_from_divisor(self):
        observations = [make_block(7, import_timestamp=t) for t in (1000, 1030, 1060)]
        self.assertEqual(block_import_latency(observations), 45)

    def test_single_observer_gives_sentinel(self):
        self.assertEqual(block_import_latency([make_block(7, import_timestamp=1000)]), SENTINEL)

    def test_missing_import_timestamps_are_ignored(self):
        observations = [make_block(7, import_timestamp=1000), make_block(7), make_block(7, import_timestamp=1010)]
        self.assertEqual(block_import_latency(observations), 10)

    def test_network_latency_is_running_mean(self):
        heights = [
            [make_block(1, import_timestamp=0), make_block(1, import_timestamp=20)],
            [make_block(2, import_timestamp=5), make_block(2, import_timestamp=45)],
            [make_block(3, import_timestamp=9)],
        ]
        report = import_latency_report(heights)
        self.assertEqual(report.per_block, [(1, 20), (2, 40), (3, SENTINEL)])
        self.assertEqual(report.network_latency, 30)
        self.assertEqual(report.block_count, 2)

    def test_accumulator_is_not_shared_between_reports(self):
        heights = [[make_block(1, import_timestamp=0), make_block(1, import_timestamp=10)]]
        first = import_latency_report(heights)
        second = import_latency_report(heights)
        self.assertEqual(first.network_latency, second.network_latency)
        self.assertEqual(second.block_count, 1)

    def test_accumulator_starts_from_sentinel(self):
        acc = LatencyAccumulator()
        self.assertEqual(acc.network_latency, SENTINEL)
        acc = acc.add(12).add(SENTINEL).add(4)
        self.assertEqual((acc.network_latency, acc.block_count), (8, 2))

    def test_empty_range(self):
        report = import_latency_report([])
        self.assertEqual(report.per_block, [])
        self.assertEqual(report.network_latency, SENTINEL)


class TestRewards(unittest.TestCase):
    """Per-miner block reward distribution."""

    def test_shares(self):
        blocks = [make_block(i, miner="0xa", seal_type=POW) for i in range(6)]
        blocks += [make_block(6 + i, miner="0xb", seal_type=POS) for i in range(4)]
        tally = tally_rewards(blocks)
        self.assertEqual((tally.total_pow, tally.total_pos), (6, 4))
        self.assertAlmostEqual(tally.miner_share("0xa"), 60)
        self.assertAlmostEqual(tally.miner_share("0xb"), 40)
        self.assertEqual(tally.miners["0xb"].seal_type, POS)
        self.assertAlmostEqual(tally.pow_share, 60)

    def test_miner_keeps_first_seal_type(self):
        tally = tally_rewards([make_block(1, miner="0xa", seal_type=POS),
                               make_block(2, miner="0xa", seal_type=POW)])
        self.assertEqual(tally.miners["0xa"].seal_type, POS)
        self.assertEqual(tally.miners["0xa"].blocks, 2)

    def test_unsealed_block_counts_for_miner_only(self):
        tally = tally_rewards([make_block(1, miner="0xa", seal_type=None),
                               make_block(2, miner="0xa", seal_type=POW)])
        self.assertEqual(tally.total, 1)
        self.assertEqual(tally.miners["0xa"].blocks, 2)

    def test_tally_is_returned_not_mutated(self):
        base = tally_rewards([make_block(1, miner="0xa")])
        extended = tally_rewards([make_block(2, miner="0xb", seal_type=POS)], base)
        self.assertEqual(base.total, 1)
        self.assertNotIn("0xb", base.miners)
        self.assertEqual(extended.total, 2)

    def test_empty_tally_has_nan_shares(self):
        tally = RewardTally()
        self.assertTrue(math.isnan(tally.pow_share))
        self.assertTrue(math.isnan(tally.miner_share("0xa")))


class TestOrphanRate(unittest.TestCase):
    """Orphan counting from seen-block counts and seen hashes."""

    def test_counts(self):
        counts = [1] * 47 + [2] * 3
        stats = orphan_stats(counts)
        self.assertEqual(stats.canonical_count, 50)
        self.assertEqual(stats.total_seen, 53)
        self.assertEqual(stats.orphan_count, 3)
        self.assertAlmostEqual(stats.rate, 0.06)

    def test_empty_range_gives_nan(self):
        stats = orphan_stats([])
        self.assertEqual(stats.orphan_count, 0)
        self.assertTrue(math.isnan(stats.rate))

    def test_hash_comparison(self):
        canonical = ["0xA1", "0xa2", "0xa3", "0xa4"]
        pow_seen = ["0x00", "0xa1", "0xo1", "0xa3", "0xo2", "0xlate"]
        pos_seen = ["0xa2", "0xp1", "0xa4", "0xafter"]
        stats = orphan_stats_from_hashes(canonical, pow_seen, pos_seen)
        self.assertEqual(stats.main_count, 4)
        # hashes outside the first..last canonical span are not attributed to the range
        self.assertEqual(stats.pow_orphans, ["0xo1"])
        self.assertEqual(stats.pos_orphans, ["0xp1"])
        self.assertEqual(stats.orphan_count, 2)
        self.assertEqual(stats.rate, 0.5)
        self.assertEqual((stats.pow_share, stats.pos_share), (0.5, 0.5))

    def test_hash_lists_are_case_insensitive(self):
        stats = orphan_stats_from_hashes(["0xAB", "0xCD"], ["0xab", "0xEE", "0xcd"], [])
        self.assertEqual(stats.pow_orphans, ["0xee"])

    def test_no_orphans(self):
        stats = orphan_stats_from_hashes(["0x1", "0x2"], ["0x1"], ["0x2"])
        self.assertEqual(stats.rate, 0)
        self.assertTrue(math.isnan(stats.pow_share))


class TestDifficulty(unittest.TestCase):
    """Cumulative total difficulty and fork comparison."""

    def test_total_is_product_of_seeded_sums(self):
        blocks = [
            make_block(1, 10, POW, difficulty=4),
            make_block(2, 20, POS, difficulty=2),
            make_block(3, 30, POW, difficulty=5),
        ]
        totals = [p.total_difficulty for p in accumulate_total_difficulty(blocks)]
        self.assertEqual(totals, [5 * 1, 5 * 3, 10 * 3])

    def test_accumulator_seed(self):
        acc = DifficultyAccumulator()
        self.assertEqual(acc.total, 1)
        self.assertEqual(acc.add(make_block(1, seal_type=POS, difficulty=9)).total, 10)

    def test_fork_point(self):
        shared = [make_block(i, 10 * i, POW, difficulty=1) for i in range(10)]
        chain_a = shared + [make_block(i, 10 * i, POW, difficulty=3, block_hash=f"0xa{i}") for i in range(10, 13)]
        chain_b = shared + [make_block(i, 10 * i, POS, difficulty=2, block_hash=f"0xb{i}") for i in range(10, 13)]

        self.assertEqual(find_fork_index(chain_a, chain_b), 9)

        comparison = compare_forks(chain_a, chain_b)
        self.assertTrue(comparison.diverged)
        self.assertEqual(comparison.fork_index, 9)
        self.assertEqual([p.number for p in comparison.chain_a], [10, 11, 12])
        self.assertEqual([p.total_difficulty for p in comparison.chain_a], [4, 7, 10])
        self.assertEqual([p.total_difficulty for p in comparison.chain_b], [3, 5, 7])

    def test_divergence_at_first_block(self):
        chain_a = [make_block(1, block_hash="0xa")]
        chain_b = [make_block(1, block_hash="0xb")]
        comparison = compare_forks(chain_a, chain_b)
        self.assertEqual(comparison.fork_index, -1)
        self.assertEqual(len(comparison.chain_a), 1)

    def test_identical_chains_accumulate_whole_range(self):
        chain = [make_block(i, difficulty=1) for i in range(5)]
        comparison = compare_forks(chain, list(chain))
        self.assertIsNone(comparison.fork_index)
        self.assertFalse(comparison.diverged)
        self.assertEqual(len(comparison.chain_a), 5)
        self.assertEqual(comparison.chain_a, comparison.chain_b)

    def test_difficulty_by_seal(self):
        blocks = [make_block(3, seal_type=POS, difficulty=30), make_block(1, difficulty=10),
                  make_block(2, difficulty=20), make_block(4, seal_type=None, difficulty=40)]
        grouped = difficulty_by_seal(blocks)
        self.assertEqual(grouped[POW], [(1, 10), (2, 20)])
        self.assertEqual(grouped[POS], [(3, 30)])

    def test_total_difficulty_series(self):
        blocks = [make_block(1, 100, total_difficulty=7), make_block(2, 110, total_difficulty=9)]
        self.assertEqual(total_difficulty_series(blocks), [(1, 100, 7), (2, 110, 9)])


if __name__ == "__main__":
    unittest.main()
