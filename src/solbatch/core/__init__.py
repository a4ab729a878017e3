"""
Core account-fetch components.

Data model, chunk planning and response decoding. The batched fetcher
itself lives in ``solbatch.core.fetcher``.
"""

from solbatch.core.types import AccountInfo, Commitment, KeyedAccount, ResultSlot
from solbatch.core.chunking import chunks
from solbatch.core.decoder import DecodeError, decode_account, decode_response

__all__ = [
    "AccountInfo",
    "Commitment",
    "KeyedAccount",
    "ResultSlot",
    "chunks",
    "DecodeError",
    "decode_account",
    "decode_response",
]
