from dataclasses import dataclass
from typing import FrozenSet, Iterable, Tuple, Union

from config import CFG

# Pool order used by every IncrementVector / CountState tuple.
POOLS: Tuple[str, ...] = ("RowA", "RowB", "ColC", "ColD")
ROW_A, ROW_B, COL_C, COL_D = range(4)

CODES: Tuple[str, ...] = ("AC", "AD", "BC", "BD")
AC, AD, BC, BD = CODES

# (row pool, column pool) carried by each code
CODE_POOLS = {
    AC: (ROW_A, COL_C),
    AD: (ROW_A, COL_D),
    BC: (ROW_B, COL_C),
    BD: (ROW_B, COL_D),
}

IncrementVector = Tuple[int, int, int, int]
CountState = Tuple[int, int, int, int]

RawCode = Union[int, str]


class InvalidItem(ValueError):
    """An item with no codes, or with a code outside AC/AD/BC/BD."""


def _coerce_code(raw: RawCode) -> str:
    # bool is an int subclass; True/False are never valid codes
    if isinstance(raw, bool):
        raise InvalidItem(f"Not a code: {raw!r}")
    if isinstance(raw, int):
        if 0 <= raw < len(CODES):
            return CODES[raw]
        raise InvalidItem(f"Code index out of range: {raw!r}")
    if isinstance(raw, str):
        name = raw.strip().upper()
        if name in CODE_POOLS:
            return name
    raise InvalidItem(f"Not a code: {raw!r}")


@dataclass(frozen=True)
class Item:
    codes: FrozenSet[str]

    def __post_init__(self):
        if not self.codes:
            raise InvalidItem("Item has an empty code-set")
        unknown = [c for c in self.codes if c not in CODE_POOLS]
        if unknown:
            raise InvalidItem(f"Unknown codes: {sorted(map(str, unknown))}")

    @classmethod
    def of(cls, raw: Iterable[RawCode]) -> "Item":
        """Build an item from codes given as names ("AC") or corpus indices (0..3)."""
        if isinstance(raw, (str, bytes)):
            raise InvalidItem(f"Expected a collection of codes, got {raw!r}")
        try:
            codes = frozenset(_coerce_code(c) for c in raw)
        except TypeError:
            raise InvalidItem(f"Expected a collection of codes, got {raw!r}") from None
        return cls(codes)

    def sorted_codes(self) -> Tuple[str, ...]:
        return tuple(c for c in CODES if c in self.codes)

    def __str__(self) -> str:
        return "{" + ",".join(self.sorted_codes()) + "}"


def make_items(raw_items: Iterable[Iterable[RawCode]]) -> Tuple[Item, ...]:
    return tuple(Item.of(raw) for raw in raw_items)


@dataclass(frozen=True)
class Capacities:
    row_a: int = CFG.CAP_ROW_A
    row_b: int = CFG.CAP_ROW_B
    col_c: int = CFG.CAP_COL_C
    col_d: int = CFG.CAP_COL_D

    def __post_init__(self):
        for pool, value in zip(POOLS, self.as_tuple()):
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"Bad capacity for {pool}: {value!r}")

    @classmethod
    def from_cfg(cls, cfg=CFG) -> "Capacities":
        return cls(
            int(cfg.CAP_ROW_A),
            int(cfg.CAP_ROW_B),
            int(cfg.CAP_COL_C),
            int(cfg.CAP_COL_D),
        )

    @classmethod
    def uniform(cls, value: int) -> "Capacities":
        return cls(value, value, value, value)

    def as_tuple(self) -> CountState:
        return (self.row_a, self.row_b, self.col_c, self.col_d)

    @property
    def total(self) -> int:
        return sum(self.as_tuple())

    def label(self) -> str:
        return " ".join(f"{p}={v}" for p, v in zip(POOLS, self.as_tuple()))


def within(state: CountState, limits: CountState) -> bool:
    return (
        state[0] <= limits[0]
        and state[1] <= limits[1]
        and state[2] <= limits[2]
        and state[3] <= limits[3]
    )


def add_vectors(state: CountState, delta: IncrementVector) -> CountState:
    return (
        state[0] + delta[0],
        state[1] + delta[1],
        state[2] + delta[2],
        state[3] + delta[3],
    )


ZERO_STATE: CountState = (0, 0, 0, 0)
