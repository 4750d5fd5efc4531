# solver/backtrack.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Set, Tuple

from models import (
    Capacities,
    CountState,
    IncrementVector,
    Item,
    ZERO_STATE,
    add_vectors,
    within,
)
from solver.catalog import Menu, options_for

log = logging.getLogger(__name__)


class SearchExhausted(RuntimeError):
    """The search hit a caller-imposed node or memo budget before deciding."""

    def __init__(self, limit: str, value: int, stats: Optional["SearchStats"] = None):
        super().__init__(f"Search budget exhausted: {limit} limit {value:,} reached")
        self.limit = limit
        self.value = value
        self.stats = stats


@dataclass
class SearchStats:
    nodes: int = 0
    fails: int = 0          # capacity prunes + memo hits
    memo_hits: int = 0
    dead_states: int = 0

    def as_dict(self) -> dict:
        return {
            "nodes": self.nodes,
            "fails": self.fails,
            "memo_hits": self.memo_hits,
            "dead_states": self.dead_states,
        }


def _depth_first(
    items: Sequence[Item],
    capacities: Optional[Capacities],
    *,
    use_memo: bool,
    stats: Optional[SearchStats],
    node_limit: Optional[int],
    memo_limit: Optional[int],
) -> Optional[List[IncrementVector]]:
    """Depth-first search over the item sequence.

    Runs on an explicit stack so the sequence length is not bounded by the
    interpreter's recursion limit.  Each frame is ``[state, next_option]``;
    the frame at stack position ``d`` resolves ``items[d]``.  A node that
    exhausts its options is recorded as ``(state, remaining)`` in ``dead``,
    which is sound because the outcome of a suffix depends only on the counts
    on entry and on how many items remain.
    """

    caps = capacities if capacities is not None else Capacities.from_cfg()
    limits = caps.as_tuple()
    menus: List[Menu] = [options_for(item) for item in items]
    total = len(menus)
    st = stats if stats is not None else SearchStats()
    dead: Set[Tuple[CountState, int]] = set()

    def _enter(state: CountState, depth: int) -> bool:
        # True when the node deserves expansion (or is a leaf success)
        st.nodes += 1
        if node_limit is not None and st.nodes > node_limit:
            raise SearchExhausted("node", node_limit, st)
        if not within(state, limits):
            st.fails += 1
            return False
        if use_memo and (state, total - depth) in dead:
            st.fails += 1
            st.memo_hits += 1
            return False
        return True

    if not _enter(ZERO_STATE, 0):
        return None

    stack: List[list] = [[ZERO_STATE, 0]]
    while stack:
        depth = len(stack) - 1
        if depth == total:
            # every item resolved; frame option cursors are one past the choice
            return [menus[d][stack[d][1] - 1] for d in range(total)]

        frame = stack[-1]
        state, cursor = frame
        menu = menus[depth]
        if cursor < len(menu):
            frame[1] = cursor + 1
            child = add_vectors(state, menu[cursor])
            if _enter(child, depth + 1):
                stack.append([child, 0])
            continue

        if use_memo:
            dead.add((state, total - depth))
            st.dead_states = len(dead)
            if memo_limit is not None and len(dead) > memo_limit:
                raise SearchExhausted("memo", memo_limit, st)
        stack.pop()

    return None


def solve(
    items: Sequence[Item],
    capacities: Optional[Capacities] = None,
    *,
    use_memo: bool = True,
    stats: Optional[SearchStats] = None,
    node_limit: Optional[int] = None,
    memo_limit: Optional[int] = None,
) -> bool:
    """Return True iff one increment per item keeps every prefix within capacity.

    ``stats`` is filled in place when given.  ``node_limit``/``memo_limit`` are
    optional budgets; exceeding one raises :class:`SearchExhausted` rather
    than returning a verdict.
    """
    path = _depth_first(
        items,
        capacities,
        use_memo=use_memo,
        stats=stats,
        node_limit=node_limit,
        memo_limit=memo_limit,
    )
    if stats is not None:
        log.debug(
            "exact search: items=%d feasible=%s %s",
            len(items), path is not None, stats.as_dict(),
        )
    return path is not None


def find_witness(
    items: Sequence[Item],
    capacities: Optional[Capacities] = None,
    *,
    use_memo: bool = True,
    stats: Optional[SearchStats] = None,
    node_limit: Optional[int] = None,
    memo_limit: Optional[int] = None,
) -> Optional[List[IncrementVector]]:
    """Same search as :func:`solve`, returning the chosen increments (or None)."""
    return _depth_first(
        items,
        capacities,
        use_memo=use_memo,
        stats=stats,
        node_limit=node_limit,
        memo_limit=memo_limit,
    )


def replay(path: Sequence[IncrementVector]) -> List[CountState]:
    """CountState after each prefix of ``path``."""
    states: List[CountState] = []
    state = ZERO_STATE
    for delta in path:
        state = add_vectors(state, delta)
        states.append(state)
    return states


__all__ = ["SearchExhausted", "SearchStats", "solve", "find_witness", "replay"]
