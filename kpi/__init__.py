"""
Block KPI toolkit

This package polls chain nodes over JSON-RPC and reduces block ranges to
simple statistics: block time, import latency, reward distribution,
orphan rate and cumulative difficulty.
"""

from .blocks import BlockRecord, SealType
from .collector import BlockRange, RangedMetricCollector
from .node_rpc import AsyncNodeRPC, NodeRPC, RPCError

__all__ = ['BlockRecord', 'SealType', 'BlockRange', 'RangedMetricCollector',
           'AsyncNodeRPC', 'NodeRPC', 'RPCError']
