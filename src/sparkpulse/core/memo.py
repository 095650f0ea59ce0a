"""Identity-preserving memoization for derived values.

Every derived value written into the state tree goes through ``memoize``.
When a recomputed value is structurally equal to the one already in the
tree, the old object is kept, so consumers can use ``is`` to detect that
nothing changed.
"""

from __future__ import annotations

import operator
from typing import Callable, TypeVar

T = TypeVar("T")


def memoize(
    previous: T | None,
    next_value: T,
    equals: Callable[[T, T], bool] = operator.eq,
) -> T:
    """
    Return ``previous`` if it is structurally equal to ``next_value``.

    Args:
        previous: Value currently in the tree, or None if there is none yet.
        next_value: Freshly computed value.
        equals: Structural equality; dataclass ``__eq__`` by default, which
            compares all fields recursively (sequences by order, mappings
            by content).

    Returns:
        ``previous`` when the values are equal, otherwise ``next_value``.
    """
    if previous is None:
        return next_value
    if previous is next_value or equals(previous, next_value):
        return previous
    return next_value
