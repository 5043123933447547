"""
Block records as returned by ``eth_getBlockByNumber`` on a hybrid
proof-of-work / proof-of-stake chain.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .shared_utils import hex_to_int


class SealType(Enum):
    """Consensus mechanism that sealed a block."""
    POW = "Pow"
    POS = "Pos"

    @classmethod
    def parse(cls, value: Any) -> Optional["SealType"]:
        """Parse a seal type from its name or its header encoding (0 = Pow, 1 = Pos)."""
        if value is None:
            return None
        if isinstance(value, SealType):
            return value
        if isinstance(value, str):
            for member in cls:
                if value.strip().lower() == member.value.lower():
                    return member
        code = hex_to_int(value)
        if code == 0:
            return cls.POW
        if code == 1:
            return cls.POS
        return None


@dataclass(frozen=True)
class BlockRecord:
    """One block as observed by one node."""
    number: int
    timestamp: int
    hash: str
    miner: str = ""
    seal_type: Optional[SealType] = None
    difficulty: int = 0
    total_difficulty: int = 0
    import_timestamp: Optional[int] = None
    transaction_count: Optional[int] = None

    @classmethod
    def from_rpc(cls, data: Dict[str, Any]) -> "BlockRecord":
        """Build a record from the JSON object a node returns for a block.

        Raises:
            ValueError: if the block number or timestamp cannot be decoded
        """
        number = hex_to_int(data.get("number"))
        timestamp = hex_to_int(data.get("timestamp"))
        if number is None or timestamp is None:
            raise ValueError(f"Malformed block object: {data!r}")

        transactions = data.get("transactions")
        transaction_count = len(transactions) if isinstance(transactions, list) else None

        return cls(
            number=number,
            timestamp=timestamp,
            hash=(data.get("hash") or "").lower(),
            miner=(data.get("miner") or "").lower(),
            seal_type=SealType.parse(data.get("sealType")),
            difficulty=hex_to_int(data.get("difficulty")) or 0,
            total_difficulty=hex_to_int(data.get("totalDifficulty")) or 0,
            import_timestamp=hex_to_int(data.get("importTimestamp")),
            transaction_count=transaction_count,
        )

    def is_sealed_by(self, seal_type: Optional[SealType]) -> bool:
        """True when no filter is given or the block carries ``seal_type``."""
        return seal_type is None or self.seal_type == seal_type
