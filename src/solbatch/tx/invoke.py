"""
Single program invocation.
"""

from typing import Optional, Sequence

from solders.instruction import AccountMeta, Instruction

from solbatch.tx.address import Address, translate_address
from solbatch.tx.provider import Provider, get_provider


async def invoke(
    program_id: Address,
    accounts: Optional[Sequence[AccountMeta]] = None,
    data: Optional[bytes] = None,
    provider: Optional[Provider] = None,
) -> str:
    """
    Send a transaction with one instruction to a program.

    Args:
        program_id: Program to invoke
        accounts: Account metas in the order the program expects
        data: Instruction data
        provider: Provider to send through. Uses the global provider if not provided.

    Returns:
        Transaction signature
    """
    program_id = translate_address(program_id)
    if provider is None:
        provider = get_provider()

    instruction = Instruction(program_id, data or b"", list(accounts or []))
    return await provider.send([instruction])
