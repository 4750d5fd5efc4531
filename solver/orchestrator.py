# Orchestrator: estimator vs. exact search over a case corpus
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from models import Capacities, Item
from cases import with_sentinels
from config import CFG, limit_or_none
from progress import (
    reset as progress_reset, start_timer, set_total, set_phase, set_case,
    advance, set_done, log_event,
)
from solver.backtrack import SearchExhausted, SearchStats, solve
from solver.estimator import estimate, estimate_code_total, first_violation

ESTIMATORS = ("bounds", "code_total")


# ---------- results ----------

@dataclass
class CaseOutcome:
    index: int
    estimate: bool
    exact: Optional[bool]               # None when the search budget ran out
    cp_sat: Optional[bool] = None
    violation: Optional[str] = None     # first tripped bound, "item:check"
    nodes: int = 0
    elapsed: float = 0.0

    @property
    def agrees(self) -> Optional[bool]:
        if self.exact is None:
            return None
        return self.estimate == self.exact

    def describe(self) -> str:
        if self.exact is None:
            return f"case {self.index}: exact search exhausted its budget"
        if self.exact:
            return f"disagreement on case {self.index}, backtracker says it should have worked"
        return f"disagreement on case {self.index}, backtracker says it should have failed"


@dataclass
class ComparisonSummary:
    estimator: str
    capacities: Capacities
    agree_fail: int = 0
    agree_success: int = 0
    should_have_failed: int = 0      # estimator said yes, exact said no
    should_have_succeeded: int = 0   # estimator said no, exact said yes
    exhausted: List[int] = field(default_factory=list)
    disagreements: List[CaseOutcome] = field(default_factory=list)
    oracle_conflicts: List[int] = field(default_factory=list)
    elapsed: float = 0.0

    @property
    def agreements(self) -> int:
        return self.agree_fail + self.agree_success

    @property
    def disagreement_count(self) -> int:
        return self.should_have_failed + self.should_have_succeeded

    @property
    def cases(self) -> int:
        return self.agreements + self.disagreement_count + len(self.exhausted)

    def record(self, outcome: CaseOutcome) -> None:
        if outcome.exact is None:
            self.exhausted.append(outcome.index)
        elif outcome.estimate == outcome.exact:
            if outcome.exact:
                self.agree_success += 1
            else:
                self.agree_fail += 1
        else:
            if outcome.exact:
                self.should_have_succeeded += 1
            else:
                self.should_have_failed += 1
            self.disagreements.append(outcome)

    def as_dict(self) -> Dict[str, object]:
        return {
            "estimator": self.estimator,
            "capacities": dict(zip(("RowA", "RowB", "ColC", "ColD"), self.capacities.as_tuple())),
            "agreements": self.agreements,
            "agree_fail": self.agree_fail,
            "agree_success": self.agree_success,
            "disagreements": self.disagreement_count,
            "should_have_failed": self.should_have_failed,
            "should_have_succeeded": self.should_have_succeeded,
            "disagreement_cases": [d.index for d in self.disagreements],
            "exhausted_cases": list(self.exhausted),
            "oracle_conflicts": list(self.oracle_conflicts),
            "elapsed": round(self.elapsed, 3),
        }


# ---------- helpers ----------

def _pick_estimator(name: str, capacities: Capacities) -> Callable[[Sequence[Item]], bool]:
    if name == "bounds":
        return lambda items: estimate(items, capacities)
    if name == "code_total":
        limit = int(CFG.CODE_TOTAL_LIMIT)
        return lambda items: estimate_code_total(items, limit)
    raise ValueError(f"Unknown estimator {name!r}; expected one of {', '.join(ESTIMATORS)}")


def _cross_check(items: Sequence[Item], capacities: Capacities) -> Optional[bool]:
    if CFG.CP_SAT_ISOLATE:
        from solver.cp_isolate import run_cp_sat_isolated
        verdict, reason, crash = run_cp_sat_isolated(items, capacities, CFG.CP_SAT_SECONDS)
        if crash:
            log_event("CP-SAT child failed", level=logging.WARNING, note=crash, reason=reason)
        return verdict
    from solver.cp_sat import solve_cp_sat
    verdict, _reason = solve_cp_sat(items, capacities)
    return verdict


def check_case(
    index: int,
    items: Sequence[Item],
    capacities: Capacities,
    *,
    estimator: str = "bounds",
    cross_check: bool = False,
    node_limit: Optional[int] = None,
    memo_limit: Optional[int] = None,
) -> CaseOutcome:
    """Run one case through the estimator, the exact search and optionally CP-SAT."""

    t0 = time.time()
    set_phase("estimate")
    est = _pick_estimator(estimator, capacities)(items)
    violation = None
    if estimator == "bounds" and not est:
        hit = first_violation(items, capacities)
        if hit is not None:
            violation = f"{hit[0]}:{hit[1]}"

    set_phase("exact")
    stats = SearchStats()
    try:
        exact: Optional[bool] = solve(
            items, capacities, stats=stats, node_limit=node_limit, memo_limit=memo_limit,
        )
    except SearchExhausted as e:
        log_event("Exact search exhausted", level=logging.WARNING, case=index,
                  limit=e.limit, nodes=stats.nodes, dead_states=stats.dead_states)
        exact = None

    oracle = None
    if cross_check:
        set_phase("cross-check")
        oracle = _cross_check(items, capacities)

    return CaseOutcome(
        index=index,
        estimate=est,
        exact=exact,
        cp_sat=oracle,
        violation=violation,
        nodes=stats.nodes,
        elapsed=time.time() - t0,
    )


def run_comparison(
    cases: Sequence[Sequence[Item]],
    capacities: Optional[Capacities] = None,
    *,
    append_sentinels: Optional[bool] = None,
    estimator: Optional[str] = None,
    cross_check: Optional[bool] = None,
    node_limit: Optional[int] = None,
    memo_limit: Optional[int] = None,
    on_outcome: Optional[Callable[[CaseOutcome], None]] = None,
) -> ComparisonSummary:
    """
    Feed every case to the estimator and the exact search and tally the
    verdicts.  Unset options fall back to :mod:`config`.
    ``on_outcome`` is called after each case (the CLI prints disagreements
    from it).
    """
    caps = capacities if capacities is not None else Capacities.from_cfg()
    sentinels = CFG.APPEND_SENTINELS if append_sentinels is None else bool(append_sentinels)
    est_name = CFG.ESTIMATOR if estimator is None else estimator
    do_cross = CFG.CROSS_CHECK if cross_check is None else bool(cross_check)
    nodes_cap = limit_or_none(CFG.NODE_LIMIT) if node_limit is None else limit_or_none(node_limit)
    memo_cap = limit_or_none(CFG.MEMO_LIMIT) if memo_limit is None else limit_or_none(memo_limit)

    if est_name not in ESTIMATORS:
        raise ValueError(f"Unknown estimator {est_name!r}; expected one of {', '.join(ESTIMATORS)}")

    summary = ComparisonSummary(estimator=est_name, capacities=caps)
    progress_reset()
    set_total(len(cases))
    start_timer()
    log_event("Comparison configured", cases=len(cases), estimator=est_name,
              sentinels=sentinels, cross_check=do_cross, capacities=caps.label())

    t0 = time.time()
    try:
        for index, case in enumerate(cases):
            set_case(index)
            items = with_sentinels(case) if sentinels else tuple(case)
            outcome = check_case(
                index, items, caps,
                estimator=est_name, cross_check=do_cross,
                node_limit=nodes_cap, memo_limit=memo_cap,
            )
            summary.record(outcome)

            if outcome.agrees is False:
                log_event("Disagreement", case=index, estimate=outcome.estimate,
                          exact=outcome.exact, violation=outcome.violation, nodes=outcome.nodes)
            if (
                outcome.cp_sat is not None
                and outcome.exact is not None
                and outcome.cp_sat != outcome.exact
            ):
                summary.oracle_conflicts.append(index)
                log_event("CP-SAT contradicts exact search", level=logging.ERROR,
                          case=index, exact=outcome.exact, cp_sat=outcome.cp_sat)

            advance(agreed=outcome.agrees, exhausted=outcome.exact is None)
            if on_outcome is not None:
                on_outcome(outcome)
    except Exception as e:
        set_done(False, message=f"{type(e).__name__}: {e}")
        raise

    summary.elapsed = time.time() - t0
    set_done(True)
    return summary


__all__ = ["ESTIMATORS", "CaseOutcome", "ComparisonSummary", "check_case", "run_comparison"]
