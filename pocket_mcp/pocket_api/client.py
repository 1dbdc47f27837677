"""
Thin JSON-RPC client for Pocket Network gateway services.

Calls are POSTed as JSON-RPC 2.0 envelopes to each service's gateway URL. Transport
and protocol failures are mapped onto internal exceptions that the tool layer turns
into safe, user-facing messages.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from pocket_mcp.config import PocketConfig, default_config
from pocket_mcp.pocket_api.services import BlockchainService

logger = logging.getLogger(__name__)


class PocketApiError(Exception):
    """Base exception for gateway errors."""

    def __init__(
        self,
        message: str,
        *,
        code: Optional[int] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code


class NodeUnreachableError(PocketApiError):
    """Raised when the gateway cannot be reached."""


class UnauthorizedError(PocketApiError):
    """Raised when the gateway rejects the request due to missing or bad auth."""


class RateLimitedError(PocketApiError):
    """Raised when the gateway throttles the request."""


class RpcError(PocketApiError):
    """Raised when the node answers with a JSON-RPC error object."""


class PocketApiClient:
    """Async client for JSON-RPC calls through the Pocket gateway."""

    def __init__(
        self,
        config: PocketConfig | None = None,
        *,
        async_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.config = config or default_config
        self._client: Optional[httpx.AsyncClient] = async_client
        self._owns_client = async_client is None
        self._ids = itertools.count(1)

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.config.timeout)
            self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _build_headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = self.config.api_key
        return headers

    def _map_http_error(self, status_code: int, message: Optional[str] = None) -> PocketApiError:
        if status_code in {401, 403}:
            return UnauthorizedError("Unauthorized or API key required.", status_code=status_code)
        if status_code == 429:
            return RateLimitedError("Gateway rate limit exceeded.", status_code=status_code)
        if status_code == 404:
            return PocketApiError("Service not found on gateway.", status_code=status_code)
        return PocketApiError(message or "Pocket API error.", status_code=status_code)

    def _process_response(self, response: httpx.Response) -> Any:
        if response.status_code >= 400:
            raise self._map_http_error(response.status_code)

        try:
            data = response.json()
        except ValueError:
            raise PocketApiError("Unexpected response from gateway.", status_code=response.status_code)

        if not isinstance(data, dict):
            raise PocketApiError("Unexpected response from gateway.", status_code=response.status_code)

        error = data.get("error")
        if error is not None:
            code: Optional[int] = None
            message = "RPC error"
            if isinstance(error, dict):
                raw_code = error.get("code")
                code = raw_code if isinstance(raw_code, int) else None
                raw_message = error.get("message")
                if isinstance(raw_message, str) and raw_message:
                    message = raw_message
            elif isinstance(error, str) and error:
                message = error
            raise RpcError(message, code=code, status_code=response.status_code)

        if "result" not in data:
            raise PocketApiError("Unexpected response from gateway.", status_code=response.status_code)
        return data["result"]

    async def call_rpc(
        self,
        service: BlockchainService,
        method: str,
        params: Optional[Sequence[Any]] = None,
    ) -> Any:
        """Send one JSON-RPC request and return its ``result`` member."""
        client = await self._get_client()
        url = service.rpc_url(self.config)
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": list(params) if params is not None else [],
        }
        try:
            response = await client.post(url, json=payload, headers=self._build_headers())
        except httpx.RequestError as exc:
            logger.warning("Pocket gateway unreachable for service %s method %s", service.id, method)
            raise NodeUnreachableError("Node unreachable") from exc
        return self._process_response(response)

    async def fetch_transaction(self, service: BlockchainService, tx_hash: str) -> Any:
        return await self.call_rpc(service, "eth_getTransactionByHash", [tx_hash])

    async def fetch_transaction_receipt(self, service: BlockchainService, tx_hash: str) -> Any:
        return await self.call_rpc(service, "eth_getTransactionReceipt", [tx_hash])

    async def estimate_gas(self, service: BlockchainService, transaction: Dict[str, Any]) -> Any:
        return await self.call_rpc(service, "eth_estimateGas", [transaction])

    async def fetch_block(
        self, service: BlockchainService, block: str, *, include_transactions: bool = False
    ) -> Any:
        method = "eth_getBlockByHash" if len(block) == 66 else "eth_getBlockByNumber"
        return await self.call_rpc(service, method, [block, include_transactions])

    async def fetch_logs(self, service: BlockchainService, log_filter: Dict[str, Any]) -> List[Any]:
        result = await self.call_rpc(service, "eth_getLogs", [log_filter])
        if not isinstance(result, list):
            raise PocketApiError("Unexpected response from gateway.")
        return result


default_client = PocketApiClient()
