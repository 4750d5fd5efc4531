import pytest

from models import AC, AD, BC, BD, CODE_POOLS, InvalidItem, Item
from solver.catalog import MAX_MENU, TRANSITIONS, options_for
from tests.data import ALL_CODE_SETS


def test_catalog_covers_every_nonempty_code_set():
    assert len(TRANSITIONS) == 15
    assert set(TRANSITIONS) == {frozenset(c) for c in ALL_CODE_SETS}


def test_menu_sizes_follow_item_shape():
    sizes = {key: len(menu) for key, menu in TRANSITIONS.items()}
    for key, size in sizes.items():
        if len(key) == 1:
            assert size == 2
        elif len(key) == 3:
            assert size == 3
        elif len(key) == 4:
            assert size == 2
    assert sizes[frozenset({AC, AD})] == 2
    assert sizes[frozenset({AC, BC})] == 2
    assert sizes[frozenset({AC, BD})] == 4
    assert sizes[frozenset({AD, BC})] == 4
    assert MAX_MENU == 4


def test_single_code_takes_row_or_column():
    assert options_for(Item.of([AC])) == ((1, 0, 0, 0), (0, 0, 1, 0))
    assert options_for(Item.of([BD])) == ((0, 1, 0, 0), (0, 0, 0, 1))


def test_shared_row_and_shared_column_pairs():
    assert options_for(Item.of([AC, AD])) == ((1, 0, 0, 0), (0, 0, 1, 1))
    assert options_for(Item.of([AD, BD])) == ((0, 0, 0, 1), (1, 1, 0, 0))


def test_every_option_serves_every_code():
    # each code must draw a unit from its own row or its own column
    for key, menu in TRANSITIONS.items():
        for vec in menu:
            assert all(v >= 0 for v in vec)
            for code in key:
                row, col = CODE_POOLS[code]
                assert vec[row] or vec[col], (key, vec, code)


def test_options_are_distinct_and_not_dominated():
    for key, menu in TRANSITIONS.items():
        assert len(set(menu)) == len(menu)
        for a in menu:
            for b in menu:
                if a != b:
                    assert not all(x <= y for x, y in zip(a, b)), (key, a, b)


def test_options_for_accepts_plain_code_sets():
    assert options_for({BC, BD}) == options_for(Item.of(["BC", "BD"]))


def test_options_for_rejects_unknown_sets():
    with pytest.raises(InvalidItem):
        options_for(set())
    with pytest.raises(InvalidItem):
        options_for({"AC", "XX"})
