"""Set reconciliation helpers for join-table syncs"""

from typing import Iterable, List, Tuple, TypeVar

T = TypeVar("T")


def diff_ids(current: Iterable[T], requested: Iterable[T]) -> Tuple[List[T], List[T]]:
    """
    Compute the links to add and to remove to turn ``current`` into
    ``requested``. Duplicates in ``requested`` collapse; order of first
    appearance is kept so inserts are deterministic.

    Returns:
        (to_add, to_remove)
    """
    current_set = set(current)
    seen = set()
    wanted: List[T] = []
    for item in requested:
        if item not in seen:
            seen.add(item)
            wanted.append(item)
    to_add = [item for item in wanted if item not in current_set]
    to_remove = sorted((item for item in current_set if item not in seen), key=str)
    return to_add, to_remove
