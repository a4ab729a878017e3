"""
Response Decoder - validates and decodes getMultipleAccounts responses.

Raw JSON-RPC payloads are validated against pydantic schemas before any
field is read, so a malformed node response surfaces as a DecodeError
instead of a KeyError or TypeError deep inside the fetch path.
"""

import base64
import binascii
from typing import Any, Dict, List, Optional, Tuple

import structlog
from pydantic import BaseModel, ConfigDict, Field, StrictBool, ValidationError, field_validator
from solders.pubkey import Pubkey

from solbatch.core.types import AccountInfo

logger = structlog.get_logger(__name__)

U64_MAX = 2**64 - 1
ACCOUNT_DATA_ENCODING = "base64"


class DecodeError(Exception):
    """Raised when a node response does not match the expected shape."""

    def __init__(self, message: str, raw: Any = None):
        super().__init__(message)
        self.raw = raw


class RawAccount(BaseModel):
    """Wire shape of a single non-null account entry."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    data: Tuple[str, str]
    owner: str
    executable: StrictBool
    lamports: int = Field(ge=0, le=U64_MAX, strict=True)
    rent_epoch: Optional[int] = Field(default=None, alias="rentEpoch", strict=True)

    @field_validator("data")
    @classmethod
    def _check_encoding(cls, value: Tuple[str, str]) -> Tuple[str, str]:
        encoding = value[1]
        if encoding != ACCOUNT_DATA_ENCODING:
            raise ValueError(
                f"unsupported account data encoding {encoding!r}, "
                f"expected {ACCOUNT_DATA_ENCODING!r}"
            )
        return value


class RpcContext(BaseModel):
    """Response context attached by the node."""

    model_config = ConfigDict(extra="ignore")

    slot: int


class MultipleAccountsResult(BaseModel):
    """The ``result`` member of a getMultipleAccounts response."""

    model_config = ConfigDict(extra="ignore")

    context: Optional[RpcContext] = None
    value: List[Optional[Dict[str, Any]]]


def decode_account(entry: Optional[Dict[str, Any]]) -> Optional[AccountInfo]:
    """
    Decode one raw account entry.

    Args:
        entry: Raw entry from ``result.value``; None for a missing account

    Returns:
        Decoded account, or None if the entry is null

    Raises:
        DecodeError: If the entry is malformed or not base64-encoded
    """
    if entry is None:
        return None

    try:
        raw = RawAccount.model_validate(entry)
    except ValidationError as e:
        raise DecodeError(f"Invalid account entry: {e}", raw=entry) from e

    try:
        data = base64.b64decode(raw.data[0], validate=True)
    except binascii.Error as e:
        raise DecodeError(f"Invalid base64 account data: {e}", raw=entry) from e

    try:
        owner = Pubkey.from_string(raw.owner)
    except ValueError as e:
        raise DecodeError(f"Invalid account owner {raw.owner!r}: {e}", raw=entry) from e

    return AccountInfo(
        owner=owner,
        lamports=raw.lamports,
        executable=raw.executable,
        data=data,
        rent_epoch=raw.rent_epoch,
    )


def decode_response(envelope: Any) -> List[Optional[AccountInfo]]:
    """
    Decode a full getMultipleAccounts response envelope.

    The envelope must already be known not to carry an ``error`` member.

    Raises:
        DecodeError: If the result payload is missing or any entry is malformed
    """
    if not isinstance(envelope, dict) or envelope.get("result") is None:
        raise DecodeError("Invalid response: missing result", raw=envelope)

    try:
        result = MultipleAccountsResult.model_validate(envelope["result"])
    except ValidationError as e:
        raise DecodeError(f"Invalid response result: {e}", raw=envelope) from e

    accounts = [decode_account(entry) for entry in result.value]

    logger.debug(
        "accounts_decoded",
        slot=result.context.slot if result.context else None,
        count=len(accounts),
        missing=sum(1 for a in accounts if a is None),
    )
    return accounts
