"""
Transaction module.

Handles instruction construction, signing, and submission.
"""

from solbatch.tx.address import translate_address
from solbatch.tx.invoke import invoke
from solbatch.tx.provider import Provider, get_provider, set_provider
from solbatch.tx.signer import TransactionSigner

__all__ = [
    "translate_address",
    "invoke",
    "Provider",
    "get_provider",
    "set_provider",
    "TransactionSigner",
]
