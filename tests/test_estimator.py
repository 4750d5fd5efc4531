from models import Capacities
from solver.backtrack import solve
from solver.estimator import CHECKS, estimate, estimate_code_total, first_violation
from tests.data import TWOS, brute_force, items, random_capacities, random_case, seeded


def test_check_names_are_stable():
    assert [name for name, _ in CHECKS] == [
        "AC", "AD", "BC", "BD", "RowA", "RowB", "ColC", "ColD", "Total",
    ]


def test_empty_sequence_passes():
    assert estimate((), Capacities.uniform(0))
    assert first_violation((), TWOS) is None


def test_code_overflow_is_reported_at_the_offending_item():
    case = items(*[["AC"]] * 5)
    assert first_violation(case, TWOS) == (4, "AC")
    assert first_violation(case[:4], TWOS) is None


def test_total_bound_catches_diagonal_pairs():
    case = items(["AC", "BD"], ["AD", "BC"], ["AC", "BD"], ["AD", "BC"], ["AC", "BD"])
    assert first_violation(case, TWOS) == (4, "Total")
    assert not solve(case, TWOS)


def test_shared_pool_counts_once_per_item():
    caps = Capacities(5, 0, 0, 0)
    case = items(*[["AC", "AD"]] * 5)
    assert estimate(case, caps)
    assert solve(case, caps)
    assert first_violation(case + items(["AC", "AD"]), caps) == (5, "AC")


def test_quad_item_without_a_full_row_or_column():
    quad = items(["AC", "AD", "BC", "BD"])
    assert first_violation(quad, Capacities(1, 0, 1, 0)) == (0, "BD")
    assert estimate(quad, Capacities.uniform(1))


def test_estimator_rejections_are_always_confirmed():
    rng = seeded(11)
    rejected = 0
    for _ in range(300):
        caps = random_capacities(rng)
        case = random_case(rng, 7)
        if not estimate(case, caps):
            rejected += 1
            assert not brute_force(case, caps), (case, caps)
    assert rejected > 0


def test_estimator_rejections_hold_on_longer_cases():
    rng = seeded(12)
    for _ in range(60):
        caps = random_capacities(rng, high=6)
        case = random_case(rng, 20)
        if not estimate(case, caps):
            assert not solve(case, caps), (case, caps)


def test_violation_index_is_the_first_failing_prefix():
    rng = seeded(13)
    for _ in range(100):
        caps = random_capacities(rng)
        case = random_case(rng, 10)
        hit = first_violation(case, caps)
        if hit is None:
            continue
        idx, _name = hit
        assert first_violation(case[:idx], caps) is None
        assert first_violation(case[: idx + 1], caps) == hit


def test_code_total_counts_codes_not_items():
    assert estimate_code_total(items(["AC", "AD"], ["BC"]), limit=3)
    assert not estimate_code_total(items(["AC", "AD"], ["BC", "BD"]), limit=3)
    assert estimate_code_total((), limit=0)


def test_code_total_can_reject_feasible_cases():
    # twelve all-code items: eleven take both rows and one takes both columns
    case = items(*[["AC", "AD", "BC", "BD"]] * 12)
    caps = Capacities(11, 12, 13, 10)
    assert solve(case, caps)
    assert not estimate_code_total(case, limit=46)
    assert estimate(case, caps)
