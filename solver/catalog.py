# solver/catalog.py
"""Fixed menu of admissible capacity increments for every item shape.

Vectors are ordered (RowA, RowB, ColC, ColD).  Each option consumes at least
one unit of a pool carried by every code in the item; options that would be
dominated by a cheaper one are not listed.
"""
from typing import Dict, FrozenSet, Iterable, Tuple, Union

from models import AC, AD, BC, BD, IncrementVector, InvalidItem, Item

_A = (1, 0, 0, 0)
_B = (0, 1, 0, 0)
_C = (0, 0, 1, 0)
_D = (0, 0, 0, 1)
_AB = (1, 1, 0, 0)
_AC = (1, 0, 1, 0)
_AD = (1, 0, 0, 1)
_BC = (0, 1, 1, 0)
_BD = (0, 1, 0, 1)
_CD = (0, 0, 1, 1)

Menu = Tuple[IncrementVector, ...]

TRANSITIONS: Dict[FrozenSet[str], Menu] = {
    # one code: its row or its column
    frozenset({AC}): (_A, _C),
    frozenset({AD}): (_A, _D),
    frozenset({BC}): (_B, _C),
    frozenset({BD}): (_B, _D),
    # shared row: the row, or both columns
    frozenset({AC, AD}): (_A, _CD),
    frozenset({BC, BD}): (_B, _CD),
    # shared column: the column, or both rows
    frozenset({AC, BC}): (_C, _AB),
    frozenset({AD, BD}): (_D, _AB),
    # diagonal pairs
    frozenset({AC, BD}): (_AB, _AD, _BC, _CD),
    frozenset({AD, BC}): (_AB, _AC, _BD, _CD),
    # three codes: row pair, column pair, or the row+column of the code
    # opposite the missing one
    frozenset({AC, AD, BC}): (_AB, _AC, _CD),
    frozenset({AC, AD, BD}): (_AB, _AD, _CD),
    frozenset({AC, BC, BD}): (_AB, _BC, _CD),
    frozenset({AD, BC, BD}): (_AB, _BD, _CD),
    # all four
    frozenset({AC, AD, BC, BD}): (_AB, _CD),
}

MAX_MENU = max(len(menu) for menu in TRANSITIONS.values())


def options_for(item: Union[Item, Iterable[str]]) -> Menu:
    """Return the menu of increments for ``item`` (an Item or a set of code names)."""
    key = item.codes if isinstance(item, Item) else frozenset(item)
    try:
        return TRANSITIONS[key]
    except KeyError:
        raise InvalidItem(f"No transitions for code-set {sorted(map(str, key))}") from None


__all__ = ["TRANSITIONS", "MAX_MENU", "Menu", "options_for"]
