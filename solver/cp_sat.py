from typing import List, Optional, Sequence, Tuple

from ortools.sat.python import cp_model as _cp

from models import POOLS, Capacities, Item
from config import CFG
from solver.catalog import options_for

# ---------------- helpers ----------------

REASON_INFEASIBLE = "Proven infeasible under current constraints"
REASON_TIMEBOX = "Stopped before solution (timebox)"


def _choice_vars(m: "_cp.CpModel", items: Sequence[Item]) -> List[List[Tuple["_cp.IntVar", tuple]]]:
    choices = []
    for i, item in enumerate(items):
        row = []
        for k, vec in enumerate(options_for(item)):
            row.append((m.NewBoolVar(f"x_{i}_{k}"), vec))
        m.AddExactlyOne([v for v, _ in row])
        choices.append(row)
    return choices


def solve_cp_sat(
    items: Sequence[Item],
    capacities: Optional[Capacities] = None,
    *,
    max_seconds: Optional[float] = None,
    workers: Optional[int] = None,
) -> Tuple[Optional[bool], Optional[str]]:
    """Decide feasibility with CP-SAT as an independent cross-check.

    Returns ``(verdict, reason)``; ``verdict`` is ``None`` when the time box
    ran out before CP-SAT could prove either way.
    """

    caps = capacities if capacities is not None else Capacities.from_cfg()
    if not items:
        return True, None

    m = _cp.CpModel()
    choices = _choice_vars(m, items)

    # Increments are non-negative, so the final totals bound every prefix.
    for pool, limit in enumerate(caps.as_tuple()):
        terms = [vec[pool] * var for row in choices for var, vec in row if vec[pool]]
        if terms:
            m.Add(sum(terms) <= limit)

    solver = _cp.CpSolver()
    seconds = CFG.CP_SAT_SECONDS if max_seconds is None else max_seconds
    solver.parameters.max_time_in_seconds = float(seconds)
    solver.parameters.num_search_workers = max(1, int(CFG.CP_SAT_WORKERS if workers is None else workers))

    status = solver.Solve(m)
    if status in (_cp.OPTIMAL, _cp.FEASIBLE):
        return True, None
    if status == _cp.INFEASIBLE:
        return False, REASON_INFEASIBLE
    if status == _cp.MODEL_INVALID:
        return None, f"Model invalid over pools {', '.join(POOLS)}"
    return None, REASON_TIMEBOX


__all__ = ["solve_cp_sat", "REASON_INFEASIBLE", "REASON_TIMEBOX"]
