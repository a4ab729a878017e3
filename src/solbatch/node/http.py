"""
HTTP JSON-RPC transport.

Provides node access via a Solana JSON-RPC endpoint over HTTP.
"""

import itertools
from typing import Any, Dict, List, Optional

import httpx
import structlog

from solbatch.config import SolbatchConfig, get_config
from solbatch.core.types import Commitment
from solbatch.node.interface import RpcTransport, TransportError

logger = structlog.get_logger(__name__)


class HttpRpcTransport(RpcTransport):
    """
    httpx-based JSON-RPC transport.

    Implements the RpcTransport using a shared ``httpx.AsyncClient``.
    """

    def __init__(
        self,
        config: Optional[SolbatchConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the transport.

        Args:
            config: Solbatch configuration. Uses global config if not provided.
            client: Pre-built HTTP client (tests inject one with a mock transport)
        """
        self.config = config or get_config()
        self.rpc_url = self.config.rpc_url
        self._client: Optional[httpx.AsyncClient] = client
        self._ids = itertools.count(1)

    @property
    def commitment(self) -> Optional[Commitment]:
        return self.config.commitment

    async def connect(self) -> None:
        """Create the HTTP client."""
        if self._client is not None:
            return

        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.request_timeout_seconds),
            limits=httpx.Limits(
                max_connections=self.config.max_connections,
                max_keepalive_connections=max(1, self.config.max_connections // 2),
            ),
            headers={"Content-Type": "application/json"},
        )
        logger.info("rpc_connected", url=self.rpc_url)

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("rpc_disconnected", url=self.rpc_url)

    async def raw_call(self, method: str, params: List[Any]) -> Dict[str, Any]:
        """POST a JSON-RPC request and return the response envelope."""
        if not self._client:
            await self.connect()

        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }

        try:
            response = await self._client.post(self.rpc_url, json=payload)
        except httpx.RequestError as e:
            logger.error("rpc_request_error", method=method, error=str(e))
            raise TransportError(f"RPC request {method} failed: {e}") from e

        if response.status_code != 200:
            logger.error(
                "rpc_request_failed",
                method=method,
                status=response.status_code,
                error=response.text,
            )
            raise TransportError(
                f"RPC request {method} failed with HTTP {response.status_code}: {response.text}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(f"RPC request {method} returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise TransportError(f"RPC request {method} returned a non-object envelope")

        return data
