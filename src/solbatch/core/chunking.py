"""Chunking utilities for batched RPC requests."""

from typing import List, Sequence, TypeVar

T = TypeVar("T")


def chunks(items: Sequence[T], size: int) -> List[List[T]]:
    """
    Split a sequence into ordered groups of at most ``size`` items.

    Args:
        items: The sequence to split
        size: Maximum items per group

    Returns:
        List of non-empty groups whose concatenation equals ``items``.
        An empty input yields an empty list.

    Raises:
        ValueError: If size is not positive
    """
    if size < 1:
        raise ValueError(f"Chunk size must be positive, got {size}")
    return [list(items[i:i + size]) for i in range(0, len(items), size)]
