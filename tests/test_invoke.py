"""
Test suite for transaction signing and single program invocation.
"""

import base64
import json

import pytest
from solders.instruction import AccountMeta
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction

from solbatch.core.types import Commitment
from solbatch.node.interface import TransactionSubmitError
from solbatch.tx import provider as provider_module
from solbatch.tx.address import translate_address
from solbatch.tx.invoke import invoke
from solbatch.tx.provider import Provider, get_provider, set_provider
from solbatch.tx.signer import TransactionSigner, generate_test_key

from tests.conftest import MockTransport


def node_for_sending(recent_blockhash) -> MockTransport:
    """Mock transport answering getLatestBlockhash and sendTransaction."""
    transport = MockTransport()
    transport.responses["getLatestBlockhash"] = {
        "jsonrpc": "2.0",
        "id": 1,
        "result": {
            "context": {"slot": 1},
            "value": {"blockhash": str(recent_blockhash), "lastValidBlockHeight": 100},
        },
    }
    transport.responses["sendTransaction"] = {
        "jsonrpc": "2.0",
        "id": 2,
        "result": str(Signature.default()),
    }
    return transport


def sent_transaction(transport: MockTransport) -> Transaction:
    """Decode the transaction passed to sendTransaction."""
    [params] = [p for m, p in transport.calls if m == "sendTransaction"]
    return Transaction.from_bytes(base64.b64decode(params[0]))


@pytest.fixture(autouse=True)
def reset_global_provider():
    """Keep the global provider from leaking between tests."""
    yield
    provider_module._provider = None


# ============================================================================
# Test Address Translation
# ============================================================================

class TestTranslateAddress:
    """Tests for address normalization."""

    def test_pubkey_passthrough(self):
        key = Pubkey.new_unique()
        assert translate_address(key) is key

    def test_from_string(self):
        key = Pubkey.new_unique()
        assert translate_address(str(key)) == key

    def test_invalid_string(self):
        with pytest.raises(ValueError):
            translate_address("definitely not base58 0OIl")


# ============================================================================
# Test Transaction Signer
# ============================================================================

class TestTransactionSigner:
    """Tests for keypair loading."""

    def test_generate_test_key(self):
        """Test generating a random test key."""
        signer = generate_test_key()

        assert signer.is_loaded is True
        assert signer.pubkey is not None

    def test_load_key_from_file(self, tmp_path, test_config):
        """Test loading a Solana CLI keypair file."""
        keypair = Keypair()
        path = tmp_path / "id.json"
        path.write_text(json.dumps(list(bytes(keypair))))

        signer = TransactionSigner(test_config)
        signer.load_key_from_file(str(path))

        assert signer.pubkey == keypair.pubkey()

    def test_missing_key_file(self, tmp_path, test_config):
        """Test that a missing keypair file is reported."""
        signer = TransactionSigner(test_config)

        with pytest.raises(FileNotFoundError):
            signer.load_key_from_file(str(tmp_path / "nope.json"))

    def test_no_key_configured(self, test_config):
        """Test loading from config without a keypair path."""
        with pytest.raises(ValueError, match="No keypair configured"):
            TransactionSigner(test_config).load_from_config()

    def test_signer_not_loaded(self, test_config):
        """Test that signing without a key fails."""
        signer = TransactionSigner(test_config)

        assert signer.is_loaded is False
        assert signer.pubkey is None


# ============================================================================
# Test Provider and Invoke
# ============================================================================

class TestInvoke:
    """Tests for sending a single instruction."""

    @pytest.mark.asyncio
    async def test_invoke_builds_single_instruction(self, recent_blockhash):
        """Test that invoke sends one signed instruction to the program."""
        transport = node_for_sending(recent_blockhash)
        signer = generate_test_key()
        provider = Provider(transport, signer)
        program_id = Pubkey.new_unique()
        writable = Pubkey.new_unique()
        readonly = Pubkey.new_unique()

        signature = await invoke(
            program_id,
            [AccountMeta(writable, False, True), AccountMeta(readonly, False, False)],
            b"\x01\x02\x03",
            provider,
        )

        assert signature == str(Signature.default())

        tx = sent_transaction(transport)
        message = tx.message
        assert message.account_keys[0] == signer.pubkey
        assert message.recent_blockhash == recent_blockhash
        assert len(message.instructions) == 1

        ix = message.instructions[0]
        assert message.account_keys[ix.program_id_index] == program_id
        assert bytes(ix.data) == b"\x01\x02\x03"
        assert [message.account_keys[i] for i in ix.accounts] == [writable, readonly]
        tx.verify()

    @pytest.mark.asyncio
    async def test_invoke_accepts_string_program_id(self, recent_blockhash):
        """Test that the program id may be given as base-58."""
        transport = node_for_sending(recent_blockhash)
        provider = Provider(transport, generate_test_key())
        program_id = Pubkey.new_unique()

        await invoke(str(program_id), provider=provider)

        ix = sent_transaction(transport).message.instructions[0]
        assert sent_transaction(transport).message.account_keys[ix.program_id_index] == program_id
        assert bytes(ix.data) == b""

    @pytest.mark.asyncio
    async def test_invoke_uses_global_provider(self, recent_blockhash):
        """Test fallback to the globally configured provider."""
        transport = node_for_sending(recent_blockhash)
        set_provider(Provider(transport, generate_test_key()))

        await invoke(Pubkey.new_unique())

        assert get_provider().transport is transport
        assert [m for m, _ in transport.calls] == ["getLatestBlockhash", "sendTransaction"]

    @pytest.mark.asyncio
    async def test_invoke_without_provider(self):
        """Test that invoking with no provider anywhere fails clearly."""
        with pytest.raises(RuntimeError, match="No provider configured"):
            await invoke(Pubkey.new_unique())

    @pytest.mark.asyncio
    async def test_send_options(self, recent_blockhash):
        """Test commitment and preflight options on the wire."""
        transport = node_for_sending(recent_blockhash)
        provider = Provider(
            transport,
            generate_test_key(),
            commitment=Commitment.CONFIRMED,
            skip_preflight=True,
        )

        await invoke(Pubkey.new_unique(), provider=provider)

        calls = dict(transport.calls)
        assert calls["getLatestBlockhash"] == [{"commitment": "confirmed"}]
        assert calls["sendTransaction"][1] == {
            "encoding": "base64",
            "skipPreflight": True,
            "preflightCommitment": "confirmed",
        }

    @pytest.mark.asyncio
    async def test_send_rejected(self, recent_blockhash):
        """Test that a node rejection raises TransactionSubmitError."""
        transport = node_for_sending(recent_blockhash)
        transport.responses["sendTransaction"] = {
            "jsonrpc": "2.0",
            "id": 2,
            "error": {"code": -32002, "message": "Transaction simulation failed"},
        }
        provider = Provider(transport, generate_test_key())

        with pytest.raises(TransactionSubmitError, match="simulation failed") as exc_info:
            await invoke(Pubkey.new_unique(), provider=provider)

        assert exc_info.value.error_code == -32002

    @pytest.mark.asyncio
    async def test_send_without_key(self, recent_blockhash, test_config):
        """Test that sending requires a loaded keypair."""
        transport = node_for_sending(recent_blockhash)
        provider = Provider(transport, TransactionSigner(test_config))

        with pytest.raises(RuntimeError, match="No signing key loaded"):
            await invoke(Pubkey.new_unique(), provider=provider)

        assert transport.calls == []
