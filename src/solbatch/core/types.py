"""
Account data model.

Typed representations of decoded on-chain accounts and fetch results.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from solders.pubkey import Pubkey


class Commitment(str, Enum):
    """Solana commitment levels for reads."""
    PROCESSED = "processed"
    CONFIRMED = "confirmed"
    FINALIZED = "finalized"


@dataclass(frozen=True)
class AccountInfo:
    """A decoded account as returned by the node."""
    owner: Pubkey                      # Program that owns the account
    lamports: int                      # Balance (u64)
    executable: bool                   # Whether the account holds a program
    data: bytes                        # Raw account data
    rent_epoch: Optional[int] = None   # Next rent epoch, when reported


@dataclass(frozen=True)
class KeyedAccount:
    """An account paired with the public key it was fetched for."""
    public_key: Pubkey
    account: AccountInfo


# One slot per requested key; None marks a key with no account
ResultSlot = Optional[KeyedAccount]
