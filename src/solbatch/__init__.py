"""
solbatch

Batched account lookups and single program invocations against a Solana
JSON-RPC node. Large key lists are split into node-sized requests, fetched
concurrently and returned in request order.
"""

__version__ = "0.1.0"

from solbatch.core.fetcher import (
    AccountFetcher,
    AccountFetchError,
    ConsistencyError,
    get_multiple_accounts,
)
from solbatch.core.decoder import DecodeError
from solbatch.core.types import AccountInfo, Commitment, KeyedAccount
from solbatch.node.interface import TransportError
from solbatch.tx.invoke import invoke

__all__ = [
    "AccountFetcher",
    "AccountFetchError",
    "AccountInfo",
    "Commitment",
    "ConsistencyError",
    "DecodeError",
    "KeyedAccount",
    "TransportError",
    "get_multiple_accounts",
    "invoke",
]
