"""
Abstract interface for Solana RPC transports.

Defines the contract for node access that all transports must implement.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from solbatch.core.types import Commitment


class RpcTransport(ABC):
    """
    Abstract JSON-RPC transport to a Solana node.

    A transport only moves envelopes: it raises TransportError when the call
    itself fails and hands back ``{"error": ...}`` envelopes untouched so the
    caller can attach its own context.
    """

    @property
    @abstractmethod
    def commitment(self) -> Optional[Commitment]:
        """Default commitment for reads, or None if not configured."""
        pass

    @abstractmethod
    async def connect(self) -> None:
        """
        Establish connection to the node.

        Raises:
            TransportError: If connection cannot be established
        """
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Close connection to the node."""
        pass

    @abstractmethod
    async def raw_call(self, method: str, params: List[Any]) -> Dict[str, Any]:
        """
        Issue a single JSON-RPC call.

        Args:
            method: RPC method name
            params: Positional parameters

        Returns:
            The decoded JSON-RPC envelope, containing either ``result`` or ``error``

        Raises:
            TransportError: If the request could not be completed
        """
        pass

    async def __aenter__(self) -> "RpcTransport":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.disconnect()


class TransportError(Exception):
    """Raised when an RPC call fails at the network or protocol level."""
    pass


class TransactionSubmitError(Exception):
    """Raised when transaction submission fails."""

    def __init__(self, message: str, error_code: Optional[int] = None):
        super().__init__(message)
        self.error_code = error_code
