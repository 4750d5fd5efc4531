import pytest

from models import Capacities, within
from solver.backtrack import SearchExhausted, SearchStats, find_witness, replay, solve
from solver.catalog import options_for
from tests.data import TWOS, brute_force, items, random_capacities, random_case, seeded


def test_empty_sequence_is_feasible():
    assert solve((), TWOS)
    assert solve((), Capacities.uniform(0))
    assert find_witness((), TWOS) == []


def test_disjoint_pools_are_feasible():
    assert solve(items(["AC"], ["BD"]), TWOS)


def test_repeated_single_code_fits_row_plus_column():
    # {AC} may use RowA or ColC, so capacity 2 + 2 absorbs up to four of them
    assert solve(items(*[["AC"]] * 3), TWOS)
    assert solve(items(*[["AC"]] * 4), TWOS)
    assert not solve(items(*[["AC"]] * 5), TWOS)


def test_all_four_codes_need_both_rows_or_both_columns():
    quad = items(["AC", "AD", "BC", "BD"])
    assert solve(quad, Capacities.uniform(1))
    assert solve(quad, Capacities(1, 1, 0, 0))
    assert solve(quad, Capacities(0, 0, 1, 1))
    assert not solve(quad, Capacities(1, 0, 1, 0))


def test_zero_capacity_rejects_any_item():
    assert not solve(items(["AC"]), Capacities.uniform(0))


def test_default_capacities_come_from_config(monkeypatch):
    from config import CFG

    monkeypatch.setattr(CFG, "CAP_ROW_A", 0)
    monkeypatch.setattr(CFG, "CAP_COL_C", 0)
    assert not solve(items(["AC"]))
    monkeypatch.setattr(CFG, "CAP_COL_C", 1)
    assert solve(items(["AC"]))


def test_memo_does_not_change_verdicts():
    rng = seeded(1)
    for _ in range(80):
        caps = random_capacities(rng)
        case = random_case(rng, 8)
        with_memo = solve(case, caps)
        without_memo = solve(case, caps, use_memo=False)
        assert with_memo == without_memo, (case, caps)


def test_verdicts_match_exhaustive_enumeration():
    rng = seeded(2)
    for _ in range(120):
        caps = random_capacities(rng)
        case = random_case(rng, 6)
        assert solve(case, caps) == brute_force(case, caps), (case, caps)


def test_infeasible_prefix_stays_infeasible():
    rng = seeded(3)
    checked = 0
    while checked < 30:
        caps = random_capacities(rng, high=2)
        prefix = random_case(rng, 8)
        if solve(prefix, caps):
            continue
        checked += 1
        for _ in range(3):
            longer = prefix + random_case(rng, 4)
            assert not solve(longer, caps)


def test_witness_respects_capacity_at_every_prefix():
    rng = seeded(4)
    found = 0
    for _ in range(100):
        caps = random_capacities(rng, high=4)
        case = random_case(rng, 10)
        path = find_witness(case, caps)
        if path is None:
            assert not solve(case, caps)
            continue
        found += 1
        assert len(path) == len(case)
        for item, vec in zip(case, path):
            assert vec in options_for(item)
        for state in replay(path):
            assert within(state, caps.as_tuple())
    assert found > 0


def test_solver_is_idempotent():
    case = items(["AC", "BD"], ["AD", "BC"], ["AC"], ["BD"], ["AC", "AD", "BC"])
    caps = Capacities(2, 2, 2, 1)
    first = solve(case, caps)
    assert all(solve(case, caps) == first for _ in range(3))


def test_memo_prunes_repeated_states():
    # six diagonal items need twelve units but only eight exist; many
    # branches meet at the same counts
    case = items(*[["AC", "BD"]] * 6)
    memo_stats = SearchStats()
    bare_stats = SearchStats()

    assert not solve(case, TWOS, stats=memo_stats)
    assert not solve(case, TWOS, stats=bare_stats, use_memo=False)

    assert memo_stats.memo_hits > 0
    assert memo_stats.dead_states > 0
    assert memo_stats.nodes < bare_stats.nodes
    assert bare_stats.memo_hits == 0
    assert memo_stats.fails >= memo_stats.memo_hits


def test_node_limit_raises_instead_of_guessing():
    case = items(*[["AC", "BD"]] * 6)
    stats = SearchStats()
    with pytest.raises(SearchExhausted) as exc:
        solve(case, TWOS, stats=stats, node_limit=10)
    assert exc.value.limit == "node"
    assert exc.value.stats is stats
    assert stats.nodes == 11


def test_memo_limit_raises_instead_of_guessing():
    case = items(*[["AC", "BD"]] * 6)
    with pytest.raises(SearchExhausted) as exc:
        solve(case, TWOS, memo_limit=1)
    assert exc.value.limit == "memo"


def test_generous_limits_do_not_interfere():
    case = items(["AC"], ["BD"], ["AC", "AD"])
    assert solve(case, TWOS, node_limit=1000, memo_limit=1000)


def test_long_sequences_do_not_recurse():
    case = items(*[["AC"]] * 5000)
    caps = Capacities(2500, 0, 2500, 0)
    path = find_witness(case, caps)
    assert path is not None
    assert replay(path)[-1] == (2500, 0, 2500, 0)
