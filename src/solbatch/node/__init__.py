"""
Node Integration Layer.

Provides abstracted JSON-RPC access to a Solana node.
"""

from solbatch.node.interface import RpcTransport, TransportError, TransactionSubmitError
from solbatch.node.http import HttpRpcTransport

__all__ = [
    "RpcTransport",
    "TransportError",
    "TransactionSubmitError",
    "HttpRpcTransport",
]
