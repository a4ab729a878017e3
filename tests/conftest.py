"""
Pytest configuration and shared fixtures for the test suite.
"""

import asyncio
import base64
from typing import Any, Dict, List, Optional, Tuple

import pytest
from solders.hash import Hash
from solders.pubkey import Pubkey

from solbatch.config import SolbatchConfig
from solbatch.core.types import Commitment
from solbatch.node.interface import RpcTransport, TransportError


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def test_config() -> SolbatchConfig:
    """Create a test configuration."""
    return SolbatchConfig(
        rpc_url="http://rpc.test",
        commitment=None,
        request_timeout_seconds=5,
        log_level="DEBUG",
    )


# ============================================================================
# Test Data Generators
# ============================================================================

def generate_test_keys(count: int) -> List[Pubkey]:
    """Generate distinct public keys."""
    return [Pubkey.new_unique() for _ in range(count)]


def raw_account(
    data: bytes = b"",
    owner: Optional[Pubkey] = None,
    lamports: int = 1_000_000,
    executable: bool = False,
    encoding: str = "base64",
    **extra: Any,
) -> Dict[str, Any]:
    """Build a wire-format account entry as the node returns it."""
    entry = {
        "data": [base64.b64encode(data).decode("ascii"), encoding],
        "owner": str(owner or Pubkey.default()),
        "executable": executable,
        "lamports": lamports,
        "rentEpoch": 361,
        "space": len(data),
    }
    entry.update(extra)
    return entry


# ============================================================================
# Mock Transport
# ============================================================================

class MockTransport(RpcTransport):
    """In-memory transport serving getMultipleAccounts from a dict."""

    def __init__(self, commitment: Optional[Commitment] = None):
        self._commitment = commitment
        self.accounts: Dict[str, Optional[Dict[str, Any]]] = {}
        self.errors: Dict[str, Dict[str, Any]] = {}
        self.failing_keys: Dict[str, Exception] = {}
        self.responses: Dict[str, Any] = {}
        self.calls: List[Tuple[str, List[Any]]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._connected = False

    @property
    def commitment(self) -> Optional[Commitment]:
        return self._commitment

    async def connect(self) -> None:
        self._connected = True

    async def disconnect(self) -> None:
        self._connected = False

    async def raw_call(self, method: str, params: List[Any]) -> Dict[str, Any]:
        self.calls.append((method, params))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            # Yield so concurrent callers overlap
            await asyncio.sleep(0)

            if method != "getMultipleAccounts":
                return self.responses[method]

            keys = params[0]
            for key in keys:
                if key in self.failing_keys:
                    raise self.failing_keys[key]
                if key in self.errors:
                    return {"jsonrpc": "2.0", "id": len(self.calls), "error": self.errors[key]}

            return {
                "jsonrpc": "2.0",
                "id": len(self.calls),
                "result": {
                    "context": {"slot": 250_000_000},
                    "value": [self.accounts.get(key) for key in keys],
                },
            }
        finally:
            self.in_flight -= 1

    def add_account(self, key: Pubkey, entry: Optional[Dict[str, Any]]) -> None:
        """Serve ``entry`` for ``key``."""
        self.accounts[str(key)] = entry

    def fail_chunk_with(self, key: Pubkey, message: str, code: int = -32602) -> None:
        """Make any request containing ``key`` return an RPC error."""
        self.errors[str(key)] = {"code": code, "message": message}

    def break_transport_for(self, key: Pubkey) -> None:
        """Make any request containing ``key`` raise a TransportError."""
        self.failing_keys[str(key)] = TransportError("connection reset")

    @property
    def account_calls(self) -> List[List[str]]:
        """Keys sent in each getMultipleAccounts call."""
        return [params[0] for method, params in self.calls if method == "getMultipleAccounts"]


@pytest.fixture
def mock_transport() -> MockTransport:
    """Create a mock transport with no accounts."""
    return MockTransport()


@pytest.fixture
def populated_transport(mock_transport) -> Tuple[MockTransport, List[Pubkey]]:
    """Create a mock transport with five keys, the third one missing."""
    keys = generate_test_keys(5)
    for i, key in enumerate(keys):
        if i == 2:
            mock_transport.add_account(key, None)
        else:
            mock_transport.add_account(
                key,
                raw_account(data=bytes([i]) * 8, lamports=(i + 1) * 1_000_000),
            )
    return mock_transport, keys


@pytest.fixture
def recent_blockhash() -> Hash:
    """A blockhash for transaction tests."""
    return Hash.new_unique()
