"""
Command-line interface for solbatch.

Provides commands for fetching accounts and invoking programs.
"""

import argparse
import asyncio
import base64
import json
import sys
from typing import Any, Dict, List, Optional

import structlog
from solders.instruction import AccountMeta

from solbatch import __version__
from solbatch.config import SolbatchConfig, set_config
from solbatch.core.fetcher import get_multiple_accounts
from solbatch.core.types import Commitment, ResultSlot
from solbatch.node.http import HttpRpcTransport
from solbatch.tx.address import translate_address
from solbatch.tx.invoke import invoke
from solbatch.tx.provider import Provider
from solbatch.tx.signer import TransactionSigner


def setup_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Configure structured logging."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if json_format
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    import logging
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper()),
        stream=sys.stderr,
    )


def parse_account_meta(value: str) -> AccountMeta:
    """
    Parse ``PUBKEY[:s][:w]`` into an AccountMeta.

    ``s`` marks the account as signer, ``w`` as writable.
    """
    pubkey, *flags = value.split(":")
    unknown = set(flags) - {"s", "w"}
    if unknown:
        raise argparse.ArgumentTypeError(f"Unknown account flags: {', '.join(sorted(unknown))}")
    return AccountMeta(translate_address(pubkey), "s" in flags, "w" in flags)


def slot_to_json(slot: ResultSlot) -> Optional[Dict[str, Any]]:
    """Render a result slot as a JSON-friendly dict."""
    if slot is None:
        return None
    account = slot.account
    return {
        "pubkey": str(slot.public_key),
        "owner": str(account.owner),
        "lamports": account.lamports,
        "executable": account.executable,
        "rentEpoch": account.rent_epoch,
        "data": base64.b64encode(account.data).decode("ascii"),
    }


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--rpc-url",
        help="Solana JSON-RPC endpoint (default: SOLBATCH_RPC_URL or localhost)",
    )
    parser.add_argument(
        "--commitment",
        choices=[c.value for c in Commitment],
        help="Commitment level (default: node default)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Output logs in JSON format",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="solbatch",
        description="Batched Solana account lookups and program invocation",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Fetch command
    fetch_parser = subparsers.add_parser("fetch", help="Fetch accounts by public key")
    fetch_parser.add_argument(
        "pubkeys",
        nargs="+",
        help="Base-58 public keys to fetch",
    )
    add_common_arguments(fetch_parser)

    # Invoke command
    invoke_parser = subparsers.add_parser("invoke", help="Send one instruction to a program")
    invoke_parser.add_argument(
        "--program-id",
        required=True,
        help="Program to invoke",
    )
    invoke_parser.add_argument(
        "--keypair",
        help="Path to fee payer keypair file (default: SOLBATCH_KEYPAIR_PATH)",
    )
    invoke_parser.add_argument(
        "--account",
        action="append",
        default=[],
        type=parse_account_meta,
        help="Account as PUBKEY[:s][:w]; repeat in instruction order",
    )
    invoke_parser.add_argument(
        "--data-hex",
        default="",
        help="Instruction data as hex",
    )
    invoke_parser.add_argument(
        "--skip-preflight",
        action="store_true",
        help="Skip preflight simulation",
    )
    add_common_arguments(invoke_parser)

    return parser


def build_config(args: argparse.Namespace) -> SolbatchConfig:
    """Build configuration from environment overlaid with CLI flags."""
    overrides: Dict[str, Any] = {
        "log_level": args.log_level,
        "log_json": args.log_json,
    }
    if args.rpc_url:
        overrides["rpc_url"] = args.rpc_url
    if args.commitment:
        overrides["commitment"] = Commitment(args.commitment)
    if getattr(args, "keypair", None):
        overrides["keypair_path"] = args.keypair
    if getattr(args, "skip_preflight", False):
        overrides["skip_preflight"] = True
    config = SolbatchConfig(**overrides)
    set_config(config)
    return config


async def fetch_accounts(args: argparse.Namespace) -> List[Optional[Dict[str, Any]]]:
    """Fetch accounts and return them as JSON-friendly dicts."""
    config = build_config(args)
    keys = [translate_address(k) for k in args.pubkeys]

    async with HttpRpcTransport(config) as transport:
        results = await get_multiple_accounts(transport, keys)

    return [slot_to_json(slot) for slot in results]


async def invoke_program(args: argparse.Namespace) -> str:
    """Send one instruction and return the signature."""
    config = build_config(args)

    signer = TransactionSigner(config)
    signer.load_from_config()

    async with HttpRpcTransport(config) as transport:
        provider = Provider(
            transport,
            signer,
            commitment=config.commitment,
            skip_preflight=config.skip_preflight,
        )
        return await invoke(
            args.program_id,
            args.account,
            bytes.fromhex(args.data_hex),
            provider,
        )


def main() -> None:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    # Setup logging
    setup_logging(args.log_level, args.log_json)

    # Run appropriate command
    if args.command == "fetch":
        results = asyncio.run(fetch_accounts(args))
        print(json.dumps(results, indent=2))
    elif args.command == "invoke":
        signature = asyncio.run(invoke_program(args))
        print(signature)


if __name__ == "__main__":
    main()
