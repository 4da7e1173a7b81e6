"""EVM JSON-RPC client: eth_getLogs, eth_getTransactionByHash, eth_blockNumber."""

import logging
from typing import Any

from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential

from treasuryscan.domain.models.transfer import RawLogEntry, TransactionContext
from treasuryscan.exceptions import ExternalServiceError, ResultLimitError
from treasuryscan.infra.blockchain.base import LogProvider
from treasuryscan.infra.http.rate_limited_client import RateLimitedClient

logger = logging.getLogger(__name__)

# Messages providers use when an eth_getLogs window matches too many logs.
# -32005 alone is ambiguous: Infura also uses it for rate limiting.
_RESULT_LIMIT_MARKERS = (
    "query returned more than",
    "more than 10000 results",
    "response size exceeded",
    "too many results",
)
_RATE_LIMIT_MARKERS = ("rate limit", "request count", "too many requests", "exceeded its throughput")


def _is_result_limit(msg: str) -> bool:
    lowered = msg.lower()
    if any(m in lowered for m in _RATE_LIMIT_MARKERS):
        return False
    return any(m in lowered for m in _RESULT_LIMIT_MARKERS)


def _is_retriable(exc: BaseException) -> bool:
    return isinstance(exc, ExternalServiceError) and not isinstance(exc, ResultLimitError)


class EVMRPCClient(LogProvider):
    """Minimal EVM JSON-RPC client for log scanning."""

    def __init__(
        self,
        rpc_url: str,
        http_client: RateLimitedClient,
        max_attempts: int = 3,
        backoff: float = 1.0,
    ) -> None:
        self._rpc_url = rpc_url
        self._http = http_client
        self._max_attempts = max_attempts
        self._backoff = backoff
        self._request_id = 0

    async def _call(self, method: str, params: list) -> Any:
        """Execute a JSON-RPC call and return the result field, retrying provider errors."""
        async for attempt in AsyncRetrying(
            retry=retry_if_exception(_is_retriable),
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_exponential(multiplier=self._backoff, max=10),
            reraise=True,
        ):
            with attempt:
                return await self._request(method, params)

    async def _request(self, method: str, params: list) -> Any:
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params,
        }
        resp = await self._http.post(self._rpc_url, json=payload)
        try:
            data = resp.json()
        except ValueError as e:
            raise ExternalServiceError(f"RPC {method}: response is not JSON") from e

        if not isinstance(data, dict):
            raise ExternalServiceError(f"RPC {method}: unexpected response {data!r:.200}")

        if "error" in data:
            error = data["error"]
            if isinstance(error, dict):
                msg = str(error.get("message", error))
            else:
                msg = str(error)
            if _is_result_limit(msg):
                raise ResultLimitError(f"RPC {method}: {msg}")
            raise ExternalServiceError(f"RPC error ({method}): {msg}")

        return data.get("result")

    async def get_logs(
        self,
        addresses: list[str],
        from_block: int,
        to_block: int,
        topics: list[str | list[str] | None],
    ) -> list[RawLogEntry]:
        params = {
            "address": addresses,
            "fromBlock": hex(from_block),
            "toBlock": hex(to_block),
            "topics": topics,
        }
        result = await self._call("eth_getLogs", [params])
        if result is None:
            return []
        if not isinstance(result, list):
            raise ExternalServiceError(f"eth_getLogs returned {type(result).__name__}, expected list")
        try:
            return [RawLogEntry.from_rpc(item) for item in result if not item.get("removed")]
        except (KeyError, ValueError) as e:
            raise ExternalServiceError(f"eth_getLogs returned a malformed log: {e}") from e

    async def get_transaction(self, tx_hash: str) -> TransactionContext | None:
        result = await self._call("eth_getTransactionByHash", [tx_hash])
        if not result:
            return None
        sender = result.get("from")
        if not sender:
            return None
        return TransactionContext(tx_hash=result.get("hash", tx_hash), sender=sender)

    async def get_block_number(self) -> int:
        result = await self._call("eth_blockNumber", [])
        return int(result, 16)
