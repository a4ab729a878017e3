"""Address helpers."""

from typing import Union

from solders.pubkey import Pubkey

Address = Union[Pubkey, str]


def translate_address(address: Address) -> Pubkey:
    """
    Normalize a base-58 string or Pubkey into a Pubkey.

    Raises:
        ValueError: If the string is not a valid base-58 public key
    """
    if isinstance(address, Pubkey):
        return address
    return Pubkey.from_string(address)
