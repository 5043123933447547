"""
Ranged metric collection: resolve a block range against the nodes, fetch
every block of it from every endpoint concurrently, then hand the joined
records to a pure reduction.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Iterator, List, Optional, Sequence, TypeVar

from .blocks import BlockRecord
from .constants import DEFAULT_RANGE_FLOOR, DEFAULT_TIMEOUT_SECS, DEFAULT_WINDOW
from .node_rpc import AsyncNodeRPC, NodeRPC, RPCError
from .shared_utils import clamp_block_range

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BlockRange:
    """Closed range of block numbers; empty when start > end."""
    start: int
    end: int
    latest: int

    def __iter__(self) -> Iterator[int]:
        return iter(range(self.start, self.end + 1))

    def __len__(self) -> int:
        return max(0, self.end - self.start + 1)

    @property
    def is_empty(self) -> bool:
        return self.start > self.end


async def gather_range(block_range: BlockRange,
                       fetch: Callable[[int], Awaitable[T]]) -> List[T]:
    """Run ``fetch`` for every block number in the range and join in index order."""
    return list(await asyncio.gather(*(fetch(number) for number in block_range)))


class RangedMetricCollector:
    """Fetches block ranges from one or more endpoints.

    The collector keeps no state between calls besides its endpoint list;
    reductions receive the fetched records and own their accumulators.
    """

    def __init__(self, urls: Sequence[str],
                 window: int = DEFAULT_WINDOW,
                 floor: int = DEFAULT_RANGE_FLOOR,
                 timeout: float = DEFAULT_TIMEOUT_SECS,
                 client_factory: Callable[..., NodeRPC] = NodeRPC,
                 async_client_factory: Callable[..., AsyncNodeRPC] = AsyncNodeRPC):
        if not urls:
            raise ValueError("At least one RPC endpoint is required")
        self.urls = list(urls)
        self.window = window
        self.floor = floor
        self.timeout = timeout
        self._client_factory = client_factory
        self._async_client_factory = async_client_factory

    def latest_block_number(self) -> int:
        """Lowest head among the endpoints, so every endpoint can serve the range."""
        heads = []
        for url in self.urls:
            with self._client_factory(url, timeout=self.timeout) as client:
                head = client.get_block_number()
            logger.debug(f"{url} head: #{head}")
            heads.append(head)
        return min(heads)

    def resolve_range(self, start: Optional[int] = None, end: Optional[int] = None) -> BlockRange:
        latest = self.latest_block_number()
        first, last = clamp_block_range(latest, start, end, window=self.window, floor=self.floor)
        logger.info(f"Latest block #{latest}, range #{first} to #{last}")
        return BlockRange(first, last, latest)

    async def fetch_blocks(self, url: str, block_range: BlockRange) -> List[BlockRecord]:
        """All blocks of the range as seen by one endpoint, ascending by number."""
        async with self._async_client_factory(url, timeout=self.timeout) as client:
            return await gather_range(block_range, client.get_block)

    async def fetch_all(self, block_range: BlockRange) -> List[List[BlockRecord]]:
        """The range from every endpoint, in endpoint order.

        A single failed fetch fails the whole batch.
        """
        return list(await asyncio.gather(
            *(self.fetch_blocks(url, block_range) for url in self.urls)
        ))

    async def fetch_observations(self, block_range: BlockRange) -> List[List[BlockRecord]]:
        """Per-height lists of every endpoint's copy of the block."""
        per_endpoint = await self.fetch_all(block_range)
        return [list(copies) for copies in zip(*per_endpoint)]

    async def fetch_seen_counts(self, block_range: BlockRange) -> List[int]:
        """Blocks seen per height on the first endpoint (patched count RPC)."""
        async with self._async_client_factory(self.urls[0], timeout=self.timeout) as client:
            return await gather_range(block_range, client.get_block_transaction_count)

    async def fetch_seen_hashes(self) -> Dict[str, List[str]]:
        """PoW and PoS hashes the first endpoint has ever sealed or imported."""
        async with self._async_client_factory(self.urls[0], timeout=self.timeout) as client:
            pow_hashes, pos_hashes = await asyncio.gather(
                client.get_pow_block_hashes(), client.get_pos_block_hashes()
            )
        return {"pow": pow_hashes, "pos": pos_hashes}

    def run(self, coro: Awaitable[T]) -> T:
        """Drive one fetch coroutine to completion from synchronous code."""
        return asyncio.run(coro)


__all__ = ["BlockRange", "RangedMetricCollector", "RPCError", "gather_range"]
