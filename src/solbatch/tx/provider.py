"""
Provider - signs and submits transactions through an RPC transport.
"""

import base64
from typing import Any, Dict, List, Optional, Sequence

import structlog
from solders.hash import Hash
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message

from solbatch.core.types import Commitment
from solbatch.node.interface import RpcTransport, TransactionSubmitError
from solbatch.tx.signer import TransactionSigner

logger = structlog.get_logger(__name__)


class Provider:
    """
    Pairs a transport with the wallet paying for and signing transactions.
    """

    def __init__(
        self,
        transport: RpcTransport,
        signer: TransactionSigner,
        commitment: Optional[Commitment] = None,
        skip_preflight: bool = False,
    ):
        self.transport = transport
        self.signer = signer
        self.commitment = commitment if commitment is not None else transport.commitment
        self.skip_preflight = skip_preflight

    async def _call(self, method: str, params: List[Any]) -> Any:
        response = await self.transport.raw_call(method, params)
        error = response.get("error")
        if error is not None:
            message = error.get("message", "Unknown error") if isinstance(error, dict) else str(error)
            code = error.get("code") if isinstance(error, dict) else None
            logger.error("rpc_call_failed", method=method, code=code, error=message)
            raise TransactionSubmitError(f"{method} failed: {message}", error_code=code)
        if "result" not in response:
            raise TransactionSubmitError(f"{method} returned no result")
        return response["result"]

    async def get_latest_blockhash(self) -> Hash:
        """Fetch a recent blockhash to anchor a transaction."""
        params: List[Any] = []
        if self.commitment is not None:
            params.append({"commitment": Commitment(self.commitment).value})

        result = await self._call("getLatestBlockhash", params)
        try:
            return Hash.from_string(result["value"]["blockhash"])
        except (KeyError, TypeError, ValueError) as e:
            raise TransactionSubmitError(f"Invalid getLatestBlockhash result: {e}")

    async def send(
        self,
        instructions: Sequence[Instruction],
        extra_signers: Optional[List[Keypair]] = None,
    ) -> str:
        """
        Sign and submit a transaction made of the given instructions.

        Args:
            instructions: Instructions to include, in order
            extra_signers: Keypairs besides the fee payer required by the instructions

        Returns:
            Transaction signature (base-58)

        Raises:
            TransactionSubmitError: If the node rejects the transaction
            TransportError: If the call itself fails
        """
        if not self.signer.is_loaded:
            raise RuntimeError("No signing key loaded")

        blockhash = await self.get_latest_blockhash()
        message = Message.new_with_blockhash(list(instructions), self.signer.pubkey, blockhash)
        tx = self.signer.sign_message(message, blockhash, extra_signers)

        opts: Dict[str, Any] = {
            "encoding": "base64",
            "skipPreflight": self.skip_preflight,
        }
        if self.commitment is not None:
            opts["preflightCommitment"] = Commitment(self.commitment).value

        encoded = base64.b64encode(bytes(tx)).decode("ascii")
        signature = await self._call("sendTransaction", [encoded, opts])

        logger.info("tx_submitted", signature=signature, instructions=len(instructions))
        return signature


# Global provider instance
_provider: Optional[Provider] = None


def get_provider() -> Provider:
    """Get the global provider; raises if none was set."""
    if _provider is None:
        raise RuntimeError("No provider configured; call set_provider() first")
    return _provider


def set_provider(provider: Provider) -> None:
    """Set the global provider instance."""
    global _provider
    _provider = provider
