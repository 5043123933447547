"""
Pure reductions over fetched block records.

Every function here works on data already in memory. Accumulators are
explicit dataclasses that are passed in and returned, so two invocations
never share a tally.
"""

import math
import statistics
from collections import OrderedDict
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence, Tuple

from .blocks import BlockRecord, SealType
from .constants import DIFFICULTY_SEED, ORPHAN_RATE_DECIMALS, SENTINEL, STAT_DECIMALS


# ---------------------------------------------------------------------------
# Block time
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BlockTimeStats:
    mean: float = SENTINEL
    std: float = SENTINEL
    samples: int = 0


def block_intervals(blocks: Sequence[BlockRecord],
                    seal_type: Optional[SealType] = None) -> List[int]:
    """Timestamp deltas between consecutive blocks.

    With ``seal_type`` set, non-matching blocks are skipped and each delta
    is measured against the previous matching block.
    """
    intervals = []
    previous = None
    for block in sorted(blocks, key=lambda b: b.number):
        if not block.is_sealed_by(seal_type):
            continue
        if previous is not None:
            intervals.append(block.timestamp - previous)
        previous = block.timestamp
    return intervals


def block_time_stats(blocks: Sequence[BlockRecord],
                     seal_type: Optional[SealType] = None) -> BlockTimeStats:
    """Mean and population standard deviation of block intervals.

    Fewer than two matching blocks yields the sentinel for both values.
    """
    intervals = block_intervals(blocks, seal_type)
    if not intervals:
        return BlockTimeStats()
    return BlockTimeStats(
        mean=round(statistics.mean(intervals), STAT_DECIMALS),
        std=round(statistics.pstdev(intervals), STAT_DECIMALS),
        samples=len(intervals),
    )


# ---------------------------------------------------------------------------
# Import latency
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LatencyAccumulator:
    """Running unweighted mean of per-block import latencies."""
    network_latency: float = SENTINEL
    block_count: int = 0

    def add(self, block_latency: float) -> "LatencyAccumulator":
        if block_latency == SENTINEL:
            return self
        count = self.block_count + 1
        # sentinel * 0 contributes nothing on the first sample
        total = self.network_latency * self.block_count + block_latency
        return LatencyAccumulator(network_latency=total / count, block_count=count)


@dataclass(frozen=True)
class ImportLatencyReport:
    per_block: List[Tuple[int, float]] = field(default_factory=list)
    network_latency: float = SENTINEL
    block_count: int = 0


def block_import_latency(observations: Sequence[BlockRecord]) -> float:
    """Average delay of the other observers behind the first importer.

    The first importer's own zero latency is excluded from the divisor.
    Returns the sentinel when fewer than two observers report an import
    timestamp.
    """
    stamps = [b.import_timestamp for b in observations if b.import_timestamp is not None]
    if len(stamps) < 2:
        return SENTINEL
    earliest = min(stamps)
    return sum(stamp - earliest for stamp in stamps) / (len(stamps) - 1)


def import_latency_report(heights: Sequence[Sequence[BlockRecord]],
                          accumulator: Optional[LatencyAccumulator] = None) -> ImportLatencyReport:
    """Per-height latencies plus the network-wide running average.

    ``heights`` holds, for each block number, every endpoint's copy of
    that block.
    """
    acc = accumulator or LatencyAccumulator()
    per_block = []
    for observations in heights:
        if not observations:
            continue
        latency = block_import_latency(observations)
        per_block.append((observations[0].number, latency))
        acc = acc.add(latency)
    return ImportLatencyReport(per_block=per_block,
                               network_latency=acc.network_latency,
                               block_count=acc.block_count)


# ---------------------------------------------------------------------------
# Reward distribution
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MinerTally:
    blocks: int
    seal_type: Optional[SealType]


@dataclass(frozen=True)
class RewardTally:
    """Blocks per miner and per seal type over one range."""
    miners: Dict[str, MinerTally] = field(default_factory=OrderedDict)
    total_pow: int = 0
    total_pos: int = 0

    @property
    def total(self) -> int:
        return self.total_pow + self.total_pos

    def share(self, blocks: int) -> float:
        """Percentage of all PoW and PoS blocks; nan on an empty tally."""
        if self.total == 0:
            return math.nan
        return blocks / self.total * 100

    def miner_share(self, miner: str) -> float:
        tally = self.miners.get(miner)
        return self.share(tally.blocks if tally else 0)

    @property
    def pow_share(self) -> float:
        return self.share(self.total_pow)

    @property
    def pos_share(self) -> float:
        return self.share(self.total_pos)


def tally_rewards(blocks: Sequence[BlockRecord],
                  tally: Optional[RewardTally] = None) -> RewardTally:
    """Fold ``blocks`` into ``tally`` and return the new tally.

    A miner keeps the seal type of the first block it was seen with.
    Blocks without a seal type count for their miner only.
    """
    tally = tally or RewardTally()
    miners = OrderedDict(tally.miners)
    total_pow, total_pos = tally.total_pow, tally.total_pos

    for block in blocks:
        current = miners.get(block.miner)
        if current is None:
            miners[block.miner] = MinerTally(1, block.seal_type)
        else:
            miners[block.miner] = replace(current, blocks=current.blocks + 1)

        if block.seal_type == SealType.POS:
            total_pos += 1
        elif block.seal_type == SealType.POW:
            total_pow += 1

    return RewardTally(miners=miners, total_pow=total_pow, total_pos=total_pos)


# ---------------------------------------------------------------------------
# Orphan rate
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OrphanStats:
    canonical_count: int
    total_seen: int
    orphan_count: int
    rate: float


def orphan_stats(seen_counts: Sequence[int], canonical_count: Optional[int] = None) -> OrphanStats:
    """Orphan rate from per-height counts of every block a node has seen.

    ``canonical_count`` defaults to the number of heights counted.
    """
    canonical = len(seen_counts) if canonical_count is None else canonical_count
    total_seen = sum(seen_counts)
    orphans = total_seen - canonical
    rate = orphans / canonical if canonical > 0 else math.nan
    return OrphanStats(canonical_count=canonical, total_seen=total_seen,
                       orphan_count=orphans, rate=rate)


@dataclass(frozen=True)
class HashOrphanStats:
    main_count: int
    pow_orphans: List[str]
    pos_orphans: List[str]

    @property
    def orphan_count(self) -> int:
        return len(self.pow_orphans) + len(self.pos_orphans)

    @property
    def rate(self) -> float:
        if self.main_count == 0:
            return math.nan
        return round(self.orphan_count / self.main_count, ORPHAN_RATE_DECIMALS)

    @property
    def pow_share(self) -> float:
        if self.orphan_count == 0:
            return math.nan
        return round(len(self.pow_orphans) / self.orphan_count, STAT_DECIMALS)

    @property
    def pos_share(self) -> float:
        if self.orphan_count == 0:
            return math.nan
        return round(len(self.pos_orphans) / self.orphan_count, STAT_DECIMALS)


def _orphans_within(seen: Sequence[str], canonical: Sequence[str]) -> List[str]:
    """Hashes of ``seen`` between the first and last canonical hash, minus canonical ones."""
    seen = [h.lower() for h in seen]
    main = set(canonical)
    positions = [i for i, h in enumerate(seen) if h in main]
    if not positions:
        return []
    window = seen[positions[0]:positions[-1] + 1]
    return [h for h in window if h not in main]


def orphan_stats_from_hashes(canonical_hashes: Sequence[str],
                             pow_seen: Sequence[str],
                             pos_seen: Sequence[str]) -> HashOrphanStats:
    """Compare every hash a node has seen against the canonical range.

    The seen lists are in import order, so only the stretch bounded by
    canonical blocks of the range is attributed to it.
    """
    canonical = [h.lower() for h in canonical_hashes]
    return HashOrphanStats(
        main_count=len(canonical),
        pow_orphans=_orphans_within(pow_seen, canonical),
        pos_orphans=_orphans_within(pos_seen, canonical),
    )


# ---------------------------------------------------------------------------
# Difficulty
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DifficultyAccumulator:
    """Cumulative PoW and PoS difficulty; the chain total is their product."""
    pow_difficulty: int = DIFFICULTY_SEED
    pos_difficulty: int = DIFFICULTY_SEED

    @property
    def total(self) -> int:
        return self.pow_difficulty * self.pos_difficulty

    def add(self, block: BlockRecord) -> "DifficultyAccumulator":
        if block.seal_type == SealType.POW:
            return replace(self, pow_difficulty=self.pow_difficulty + block.difficulty)
        return replace(self, pos_difficulty=self.pos_difficulty + block.difficulty)


@dataclass(frozen=True)
class DifficultyPoint:
    number: int
    timestamp: int
    total_difficulty: int
    seal_type: Optional[SealType]


def accumulate_total_difficulty(blocks: Sequence[BlockRecord],
                                accumulator: Optional[DifficultyAccumulator] = None
                                ) -> List[DifficultyPoint]:
    """Chain total difficulty after each block, starting from ``accumulator``."""
    acc = accumulator or DifficultyAccumulator()
    points = []
    for block in blocks:
        acc = acc.add(block)
        points.append(DifficultyPoint(block.number, block.timestamp, acc.total, block.seal_type))
    return points


@dataclass(frozen=True)
class ForkComparison:
    # index of the last common block; -1 when the chains differ at index 0
    # and None when they never differ
    fork_index: Optional[int]
    chain_a: List[DifficultyPoint]
    chain_b: List[DifficultyPoint]

    @property
    def diverged(self) -> bool:
        return self.fork_index is not None


def find_fork_index(chain_a: Sequence[BlockRecord], chain_b: Sequence[BlockRecord]) -> Optional[int]:
    """Index of the last block both chains share, or None if they never diverge."""
    for i, (a, b) in enumerate(zip(chain_a, chain_b)):
        if a.hash != b.hash:
            return i - 1
    return None


def compare_forks(chain_a: Sequence[BlockRecord], chain_b: Sequence[BlockRecord]) -> ForkComparison:
    """Re-accumulate total difficulty on both branches after their fork point."""
    fork = find_fork_index(chain_a, chain_b)
    first = 0 if fork is None else fork + 1
    return ForkComparison(
        fork_index=fork,
        chain_a=accumulate_total_difficulty(chain_a[first:]),
        chain_b=accumulate_total_difficulty(chain_b[first:]),
    )


def difficulty_by_seal(blocks: Sequence[BlockRecord]) -> Dict[SealType, List[Tuple[int, int]]]:
    """(number, difficulty) pairs per seal type, ascending by number."""
    grouped: Dict[SealType, List[Tuple[int, int]]] = {SealType.POW: [], SealType.POS: []}
    for block in sorted(blocks, key=lambda b: b.number):
        if block.seal_type in grouped:
            grouped[block.seal_type].append((block.number, block.difficulty))
    return grouped


def total_difficulty_series(blocks: Sequence[BlockRecord]) -> List[Tuple[int, int, int]]:
    """(number, timestamp, node-reported total difficulty) per block."""
    return [(b.number, b.timestamp, b.total_difficulty) for b in blocks]
