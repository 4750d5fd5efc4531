import itertools
import random
from typing import List, Optional, Sequence, Tuple

from models import CODES, Capacities, Item, ZERO_STATE, add_vectors, within
from solver.catalog import options_for

# every admissible code-set, in a stable order
ALL_CODE_SETS: List[Tuple[str, ...]] = [
    combo
    for size in range(1, len(CODES) + 1)
    for combo in itertools.combinations(CODES, size)
]

TWOS = Capacities.uniform(2)


def items(*code_sets: Sequence[str]) -> Tuple[Item, ...]:
    return tuple(Item.of(codes) for codes in code_sets)


def random_case(rng: random.Random, max_len: int) -> Tuple[Item, ...]:
    n = rng.randint(0, max_len)
    return tuple(Item.of(rng.choice(ALL_CODE_SETS)) for _ in range(n))


def random_capacities(rng: random.Random, high: int = 3) -> Capacities:
    return Capacities(*(rng.randint(0, high) for _ in range(4)))


def brute_force(case: Sequence[Item], caps: Capacities) -> bool:
    """Enumerate every choice sequence and check each prefix."""
    limits = caps.as_tuple()
    menus = [options_for(item) for item in case]
    for choice in itertools.product(*menus):
        state = ZERO_STATE
        ok = True
        for delta in choice:
            state = add_vectors(state, delta)
            if not within(state, limits):
                ok = False
                break
        if ok:
            return True
    return False


def seeded(seed: Optional[int] = None) -> random.Random:
    return random.Random(20240611 if seed is None else seed)
