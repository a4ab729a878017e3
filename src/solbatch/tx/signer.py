"""
Transaction Signer - holds the fee payer keypair.

Loads Solana keypairs and signs transaction messages.
"""

import json
from pathlib import Path
from typing import List, Optional

import structlog
from solders.hash import Hash
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from solbatch.config import SolbatchConfig, get_config

logger = structlog.get_logger(__name__)


class TransactionSigner:
    """
    Handles transaction signing with a local keypair.

    Supports loading keys from:
    - Solana CLI keypair file (JSON array of 64 bytes)
    - Configuration (``keypair_path``)
    """

    def __init__(self, config: Optional[SolbatchConfig] = None):
        """
        Initialize the transaction signer.

        Args:
            config: Solbatch configuration
        """
        self.config = config or get_config()
        self._keypair: Optional[Keypair] = None

    def load_key_from_file(self, key_path: str) -> None:
        """
        Load a keypair from a Solana CLI keypair file.

        Args:
            key_path: Path to the keypair JSON file
        """
        path = Path(key_path)
        if not path.exists():
            raise FileNotFoundError(f"Keypair file not found: {key_path}")

        secret: List[int] = json.loads(path.read_text())
        self._keypair = Keypair.from_bytes(bytes(secret))

        logger.info("keypair_loaded", path=key_path, pubkey=str(self._keypair.pubkey()))

    def load_from_config(self) -> None:
        """Load keypair from configuration."""
        if not self.config.keypair_path:
            raise ValueError("No keypair configured")
        self.load_key_from_file(self.config.keypair_path)

    @property
    def pubkey(self) -> Optional[Pubkey]:
        """Get the signer's public key."""
        return self._keypair.pubkey() if self._keypair else None

    @property
    def is_loaded(self) -> bool:
        """Check if a keypair is loaded."""
        return self._keypair is not None

    def sign_message(
        self,
        message: Message,
        recent_blockhash: Hash,
        extra_signers: Optional[List[Keypair]] = None,
    ) -> Transaction:
        """
        Sign a message as fee payer.

        Args:
            message: Message whose first signer is this keypair
            recent_blockhash: Blockhash the transaction is valid for
            extra_signers: Additional keypairs required by the message

        Returns:
            Signed transaction
        """
        if not self._keypair:
            raise RuntimeError("No signing key loaded")

        signers = [self._keypair, *(extra_signers or [])]
        tx = Transaction(signers, message, recent_blockhash)

        logger.debug("transaction_signed", signature=str(tx.signatures[0])[:16] + "...")
        return tx


def generate_test_key() -> TransactionSigner:
    """
    Generate a new random keypair for testing.

    WARNING: Do not use in production. The key is not persisted.
    """
    signer = TransactionSigner()
    signer._keypair = Keypair()

    logger.warning("test_key_generated", pubkey=str(signer.pubkey))

    return signer
