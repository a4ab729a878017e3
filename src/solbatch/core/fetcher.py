"""
Batched account fetcher.

Splits large key lists into node-sized getMultipleAccounts requests, issues
them concurrently and reassembles decoded results in request order.
"""

import asyncio
from itertools import chain
from typing import Any, Dict, List, Optional, Sequence

import structlog
from solders.pubkey import Pubkey

from solbatch.core.chunking import chunks
from solbatch.core.decoder import ACCOUNT_DATA_ENCODING, decode_response
from solbatch.core.types import AccountInfo, Commitment, KeyedAccount, ResultSlot
from solbatch.node.interface import RpcTransport

logger = structlog.get_logger(__name__)

# Maximum keys per getMultipleAccounts request accepted by the node
GET_MULTIPLE_ACCOUNTS_LIMIT = 99


class AccountFetchError(Exception):
    """Raised when the node rejects a getMultipleAccounts request."""

    def __init__(
        self,
        public_keys: Sequence[Pubkey],
        message: str,
        code: Optional[int] = None,
    ):
        joined = ", ".join(str(k) for k in public_keys)
        super().__init__(f"failed to get info about accounts {joined}: {message}")
        self.public_keys = list(public_keys)
        self.message = message
        self.code = code


class ConsistencyError(Exception):
    """Raised when decoded results cannot be matched to the requested keys."""
    pass


def resolve_commitment(
    transport: RpcTransport,
    commitment: Optional[Commitment] = None,
) -> Optional[Commitment]:
    """Explicit commitment wins, then the transport default, else None."""
    return commitment if commitment is not None else transport.commitment


def build_params(
    public_keys: Sequence[Pubkey],
    commitment: Optional[Commitment] = None,
) -> List[Any]:
    """
    Build positional params for a getMultipleAccounts request.

    The commitment key is left out entirely when no level is given.
    """
    config: Dict[str, Any] = {"encoding": ACCOUNT_DATA_ENCODING}
    if commitment is not None:
        config["commitment"] = Commitment(commitment).value
    return [[str(k) for k in public_keys], config]


def assemble(
    public_keys: Sequence[Pubkey],
    decoded_per_chunk: Sequence[Sequence[Optional[AccountInfo]]],
) -> List[ResultSlot]:
    """
    Flatten per-chunk results and pair them with their keys by position.

    Raises:
        ConsistencyError: If the flattened length differs from the key count
    """
    flat = list(chain.from_iterable(decoded_per_chunk))
    if len(flat) != len(public_keys):
        raise ConsistencyError(
            f"Decoded {len(flat)} accounts for {len(public_keys)} requested keys"
        )
    return [
        None if account is None else KeyedAccount(public_key=key, account=account)
        for key, account in zip(public_keys, flat)
    ]


async def _fetch_chunk(
    transport: RpcTransport,
    public_keys: Sequence[Pubkey],
    commitment: Optional[Commitment],
) -> List[Optional[AccountInfo]]:
    """Issue one getMultipleAccounts call and decode its entries."""
    response = await transport.raw_call(
        "getMultipleAccounts", build_params(public_keys, commitment)
    )

    error = response.get("error")
    if error is not None:
        if isinstance(error, dict):
            message = str(error.get("message", "Unknown error"))
            code = error.get("code")
        else:
            message, code = str(error), None
        logger.error(
            "accounts_chunk_failed",
            keys=len(public_keys),
            code=code,
            error=message,
        )
        raise AccountFetchError(public_keys, message, code)

    return decode_response(response)


async def get_multiple_accounts_core(
    transport: RpcTransport,
    public_keys: Sequence[Pubkey],
    commitment: Optional[Commitment] = None,
) -> List[ResultSlot]:
    """
    Fetch up to one request's worth of accounts.

    Args:
        transport: RPC transport to use
        public_keys: Keys to fetch; must fit in a single request
        commitment: Optional commitment override

    Returns:
        One slot per key, None where the account does not exist

    Raises:
        AccountFetchError: If the node returns an error
        DecodeError: If the response is malformed
        TransportError: If the call itself fails
    """
    effective = resolve_commitment(transport, commitment)
    decoded = await _fetch_chunk(transport, public_keys, effective)
    return assemble(public_keys, [decoded])


async def get_multiple_accounts(
    transport: RpcTransport,
    public_keys: Sequence[Pubkey],
    commitment: Optional[Commitment] = None,
) -> List[ResultSlot]:
    """
    Fetch any number of accounts, batching requests as needed.

    Chunks are requested concurrently. The first failing chunk fails the
    whole call; no partial results are returned and nothing is retried.

    Args:
        transport: RPC transport to use
        public_keys: Keys to fetch, in the order results should be returned
        commitment: Optional commitment override; defaults to the transport's

    Returns:
        One slot per key, in input order, None where the account does not exist
    """
    keys = list(public_keys)
    if not keys:
        return []

    effective = resolve_commitment(transport, commitment)
    batches = chunks(keys, GET_MULTIPLE_ACCOUNTS_LIMIT)

    logger.debug(
        "accounts_fetch_started",
        keys=len(keys),
        chunks=len(batches),
        commitment=effective.value if effective else None,
    )

    decoded_per_chunk = await asyncio.gather(
        *(_fetch_chunk(transport, batch, effective) for batch in batches)
    )

    results = assemble(keys, decoded_per_chunk)

    logger.debug(
        "accounts_fetched",
        keys=len(keys),
        found=sum(1 for r in results if r is not None),
    )
    return results


class AccountFetcher:
    """
    Convenience wrapper binding a transport and a default commitment.

    Per-call commitment overrides the fetcher default, which in turn
    overrides the transport default.
    """

    def __init__(
        self,
        transport: RpcTransport,
        commitment: Optional[Commitment] = None,
    ):
        self.transport = transport
        self.commitment = commitment

    async def fetch(
        self,
        public_keys: Sequence[Pubkey],
        commitment: Optional[Commitment] = None,
    ) -> List[ResultSlot]:
        """Fetch accounts for the given keys, preserving order."""
        return await get_multiple_accounts(
            self.transport,
            public_keys,
            commitment if commitment is not None else self.commitment,
        )

    async def fetch_one(
        self,
        public_key: Pubkey,
        commitment: Optional[Commitment] = None,
    ) -> Optional[AccountInfo]:
        """Fetch a single account, or None if it does not exist."""
        [slot] = await self.fetch([public_key], commitment)
        return slot.account if slot is not None else None
