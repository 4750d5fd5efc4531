# solver/estimator.py
"""Single-pass feasibility estimate built from counting bounds.

The pass keeps two kinds of counters:

* code counters ``ac, ad, bc, bd``: how many items contain each code;
* pool counters ``a, b, c, d``: how many items could let one unit of that
  pool stand in for two of the item's codes (the item holds both codes of
  the pool).  Each bump saturates at the pool's capacity, since no more than
  that many items can actually draw on the pool.

After every item a battery of inequalities is checked.  Each is a necessary
condition for feasibility, so a ``False`` verdict is always confirmed by the
exact search; a ``True`` verdict may still be wrong.
"""
from __future__ import annotations

from typing import Callable, List, Optional, Sequence, Tuple

from models import AC, AD, BC, BD, Capacities, Item

# (pool index, the two codes that share it)
_SHARED = (
    (0, AC, AD),  # RowA
    (1, BC, BD),  # RowB
    (2, AC, BC),  # ColC
    (3, AD, BD),  # ColD
)

_Counters = Tuple[int, int, int, int, int, int, int, int]  # ac ad bc bd a b c d
_Check = Tuple[str, Callable[[_Counters, Tuple[int, int, int, int]], bool]]


# each predicate returns True when the bound is violated
CHECKS: List[_Check] = [
    # every item holding a code draws on that code's row or column
    ("AC", lambda n, k: n[0] > k[0] + k[2]),
    ("AD", lambda n, k: n[1] > k[0] + k[3]),
    ("BC", lambda n, k: n[2] > k[1] + k[2]),
    ("BD", lambda n, k: n[3] > k[1] + k[3]),
    # items touching a row's codes draw on that row or on the columns
    ("RowA", lambda n, k: n[0] + n[1] - n[4] > k[0] + k[2] + k[3]),
    ("RowB", lambda n, k: n[2] + n[3] - n[5] > k[1] + k[2] + k[3]),
    # items touching a column's codes draw on that column or on the rows
    ("ColC", lambda n, k: n[0] + n[2] - n[6] > k[0] + k[1] + k[2]),
    ("ColD", lambda n, k: n[1] + n[3] - n[7] > k[0] + k[1] + k[3]),
    # total units needed against the grand total
    ("Total", lambda n, k: n[0] + n[1] + n[2] + n[3] - n[4] - n[5] - n[6] - n[7]
        > k[0] + k[1] + k[2] + k[3]),
]


def first_violation(
    items: Sequence[Item],
    capacities: Optional[Capacities] = None,
) -> Optional[Tuple[int, str]]:
    """Return ``(item_index, check_name)`` of the first tripped bound, or None."""

    caps = capacities if capacities is not None else Capacities.from_cfg()
    k = caps.as_tuple()
    code_counts = {AC: 0, AD: 0, BC: 0, BD: 0}
    pools = [0, 0, 0, 0]

    for idx, item in enumerate(items):
        codes = item.codes
        for code in codes:
            code_counts[code] += 1
        for pool, first, second in _SHARED:
            if first in codes and second in codes and pools[pool] < k[pool]:
                pools[pool] += 1

        counters: _Counters = (
            code_counts[AC], code_counts[AD], code_counts[BC], code_counts[BD],
            pools[0], pools[1], pools[2], pools[3],
        )
        for name, violated in CHECKS:
            if violated(counters, k):
                return idx, name
    return None


def estimate(items: Sequence[Item], capacities: Optional[Capacities] = None) -> bool:
    return first_violation(items, capacities) is None


def estimate_code_total(items: Sequence[Item], limit: int = 46) -> bool:
    """Crude estimate: the case fits when its total number of codes is at most ``limit``.

    Not a necessary condition; kept for comparison runs only.
    """
    return sum(len(item.codes) for item in items) <= int(limit)


__all__ = ["CHECKS", "first_violation", "estimate", "estimate_code_total"]
