"""
JSON-RPC client wrappers for the chain node.
Provides a blocking client for one-off queries and an asyncio client for
fanning out many block fetches at once.
"""

import asyncio
import itertools
import logging
from typing import Any, Dict, List, Optional

import aiohttp
import requests
from requests.adapters import HTTPAdapter

from .blocks import BlockRecord
from .constants import DEFAULT_RPC_URL, DEFAULT_TIMEOUT_SECS, JSONRPC_VERSION
from .shared_utils import hex_to_int, to_quantity


class RPCError(Exception):
    """Custom exception for RPC-related errors"""
    pass


_request_ids = itertools.count(1)


def build_payload(method: str, params: Optional[List[Any]] = None) -> Dict[str, Any]:
    """Build a JSON-RPC 2.0 request object."""
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": next(_request_ids),
        "method": method,
        "params": params if params is not None else [],
    }


def unwrap_response(method: str, body: Any) -> Any:
    """Return the ``result`` member of a JSON-RPC response or raise RPCError."""
    if not isinstance(body, dict):
        raise RPCError(f"RPC {method}: unexpected response {body!r}")
    if body.get("error") is not None:
        raise RPCError(f"RPC {method} error: {body['error']}")
    return body.get("result")


def parse_block(number: int, result: Any) -> BlockRecord:
    """Turn an ``eth_getBlockByNumber`` result into a BlockRecord."""
    if not result:
        raise RPCError(f"Block #{number} not found")
    try:
        return BlockRecord.from_rpc(result)
    except ValueError as e:
        raise RPCError(str(e)) from e


def parse_quantity(method: str, result: Any) -> int:
    value = hex_to_int(result)
    if value is None:
        raise RPCError(f"RPC {method}: expected a quantity, got {result!r}")
    return value


def parse_hash_list(method: str, result: Any) -> List[str]:
    if not isinstance(result, list):
        raise RPCError(f"RPC {method}: expected a list, got {result!r}")
    return [str(h).lower() for h in result]


class BaseRPC:
    """Base class for blocking RPC communication"""

    def __init__(self, url: str = DEFAULT_RPC_URL, timeout: float = DEFAULT_TIMEOUT_SECS):
        self.url = url
        self.timeout = timeout
        self.session = self._create_session()
        self.logger = logging.getLogger(self.__class__.__name__)

    def _create_session(self) -> requests.Session:
        """Create a requests session; failed calls are not retried"""
        session = requests.Session()
        adapter = HTTPAdapter(max_retries=0)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    def _make_request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """Make an RPC request"""
        payload = build_payload(method, params)
        self.logger.debug(f"{self.url} -> {method} {payload['params']}")

        try:
            response = self.session.post(
                self.url,
                json=payload,
                timeout=self.timeout,
                headers={"Content-Type": "application/json"}
            )
            response.raise_for_status()
            body = response.json()
        except requests.exceptions.RequestException as e:
            raise RPCError(f"Request to {self.url} failed: {str(e)}") from e
        except ValueError as e:
            raise RPCError(f"Invalid JSON from {self.url}: {str(e)}") from e

        return unwrap_response(method, body)

    def close(self) -> None:
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class NodeRPC(BaseRPC):
    """Blocking chain node RPC client"""

    def get_block_number(self) -> int:
        """Get the latest block number"""
        return parse_quantity("eth_blockNumber", self._make_request("eth_blockNumber"))


class AsyncNodeRPC:
    """Asyncio chain node RPC client for concurrent block fetches"""

    def __init__(self, url: str = DEFAULT_RPC_URL, timeout: float = DEFAULT_TIMEOUT_SECS):
        self.url = url
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        # aiohttp session will be created in async context
        self._session: Optional[aiohttp.ClientSession] = None
        self.logger = logging.getLogger(self.__class__.__name__)

    async def __aenter__(self):
        # limit=0: every request of a batch is in flight at once
        connector = aiohttp.TCPConnector(limit=0)
        self._session = aiohttp.ClientSession(timeout=self._timeout, connector=connector)
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if self._session:
            await self._session.close()
            self._session = None

    async def _make_request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        if not self._session:
            raise RuntimeError("Session not created; use 'async with AsyncNodeRPC(...) as client'")
        payload = build_payload(method, params)
        self.logger.debug(f"{self.url} -> {method} {payload['params']}")

        try:
            async with self._session.post(self.url, json=payload,
                                          headers={"Content-Type": "application/json"}) as resp:
                resp.raise_for_status()
                body = await resp.json(content_type=None)
        except aiohttp.ClientError as e:
            raise RPCError(f"Request to {self.url} failed: {str(e)}") from e
        except asyncio.TimeoutError as e:
            raise RPCError(f"Request to {self.url} timed out") from e
        except ValueError as e:
            raise RPCError(f"Invalid JSON from {self.url}: {str(e)}") from e

        return unwrap_response(method, body)

    async def get_block(self, number: int) -> BlockRecord:
        result = await self._make_request("eth_getBlockByNumber", [to_quantity(number), False])
        return parse_block(number, result)

    async def get_block_transaction_count(self, number: int) -> int:
        """
        Get the transaction count of a block.
        Patched nodes answer with the number of blocks seen at that height,
        canonical and orphaned alike.
        """
        method = "eth_getBlockTransactionCountByNumber"
        return parse_quantity(method, await self._make_request(method, [to_quantity(number)]))

    async def get_pow_block_hashes(self) -> List[str]:
        """Every PoW-sealed block hash the node has seen, in import order.

        Patched nodes serve this list through ``eth_accounts``.
        """
        return parse_hash_list("eth_accounts", await self._make_request("eth_accounts"))

    async def get_pos_block_hashes(self) -> List[str]:
        """Every PoS-sealed block hash, served through ``personal_listAccounts``."""
        method = "personal_listAccounts"
        return parse_hash_list(method, await self._make_request(method))
