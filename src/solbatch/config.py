"""
Configuration management for solbatch.

Supports configuration via environment variables and .env files.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from solbatch.core.types import Commitment


class SolbatchConfig(BaseSettings):
    """
    Configuration settings for solbatch.

    All settings can be configured via environment variables with the SOLBATCH_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="SOLBATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # RPC settings
    rpc_url: str = Field(
        default="http://127.0.0.1:8899",
        description="Solana JSON-RPC endpoint"
    )
    commitment: Optional[Commitment] = Field(
        default=None,
        description="Default commitment for reads; omitted from requests when unset"
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for a single RPC request"
    )
    max_connections: int = Field(
        default=64,
        ge=1,
        description="Maximum concurrent HTTP connections to the RPC node"
    )

    # Wallet settings
    keypair_path: Optional[str] = Field(
        default=None,
        description="Path to a Solana CLI keypair JSON file used to sign transactions"
    )
    skip_preflight: bool = Field(
        default=False,
        description="Skip the node's preflight simulation when sending transactions"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format"
    )


# Global config instance
_config: Optional[SolbatchConfig] = None


def get_config() -> SolbatchConfig:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = SolbatchConfig()
    return _config


def set_config(config: SolbatchConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
