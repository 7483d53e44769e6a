"""
Task id allocation.

Ids are sequential integers. Tasks are never physically deleted (archived
tasks stay in the index), so ``max + 1`` never hands out an id that was
used before.
"""

from collections.abc import Iterable


def next_id(existing_ids: Iterable[int]) -> int:
    """
    Return the next free task id.

    Args:
        existing_ids: Every id currently in the store, archived included

    Returns:
        ``1 + max(existing_ids)``, or 1 for an empty store

    Example:
        >>> next_id([1, 2, 5])
        6
        >>> next_id([])
        1
    """
    return max(existing_ids, default=0) + 1
