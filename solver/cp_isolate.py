# solver/cp_isolate.py
import multiprocessing as mp
from typing import Optional, Sequence, Tuple
import traceback

from models import Capacities, Item


# Worker must be top-level (picklable under spawn)
def _solve_worker(q, items, capacities, max_seconds: float):
    try:
        from solver.cp_sat import solve_cp_sat  # import inside child
        verdict, reason = solve_cp_sat(items, capacities, max_seconds=max_seconds)
        q.put(("ok", verdict, reason))
    except MemoryError:
        q.put(("err", None, "Child ran out of memory"))
    except Exception as e:
        q.put(("exc", None, f"{e}\n{traceback.format_exc()}"))


def run_cp_sat_isolated(
    items: Sequence[Item],
    capacities: Optional[Capacities],
    max_seconds: float,
) -> Tuple[Optional[bool], Optional[str], Optional[str]]:
    """
    Returns (verdict, reason, crash_note).
    crash_note is non-empty only if the child crashed/was killed/timed out.
    """
    ctx = mp.get_context("spawn")
    q = ctx.Queue()
    p = ctx.Process(target=_solve_worker, args=(q, list(items), capacities, float(max_seconds)))
    p.daemon = True
    p.start()

    # Allow a small buffer beyond model time for teardown
    timeout = float(max_seconds) + 5.0
    p.join(timeout=timeout)

    if p.is_alive():
        p.terminate()
        p.join(2.0)
        return None, "Stopped before solution (timebox)", "killed: timeout"

    if p.exitcode not in (0, None):
        return None, f"Stopped before solution (child exit {p.exitcode})", "child crashed"

    try:
        tag, verdict, reason = q.get(timeout=1.0)
    except Exception:
        return None, "No result from child process", "no-result"

    if tag == "ok":
        return verdict, reason, None
    return None, reason, None
