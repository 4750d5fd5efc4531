# config.py
import os
from typing import Optional

# ======= Pool capacities (RowA, RowB, ColC, ColD) =======
CAP_ROW_A = int(os.getenv("PF_CAP_ROW_A", "11"))
CAP_ROW_B = int(os.getenv("PF_CAP_ROW_B", "12"))
CAP_COL_C = int(os.getenv("PF_CAP_COL_C", "13"))
CAP_COL_D = int(os.getenv("PF_CAP_COL_D", "10"))

# ======= Exact search budgets =======
# A non-positive value disables the corresponding limit.
NODE_LIMIT = int(os.getenv("PF_NODE_LIMIT", "5000000"))
MEMO_LIMIT = int(os.getenv("PF_MEMO_LIMIT", "2000000"))

# ======= Comparison run =======
APPEND_SENTINELS = int(os.getenv("PF_APPEND_SENTINELS", "1")) != 0
ESTIMATOR        = os.getenv("PF_ESTIMATOR", "bounds")       # bounds | code_total
CODE_TOTAL_LIMIT = int(os.getenv("PF_CODE_TOTAL_LIMIT", "46"))

# ======= CP-SAT cross-check =======
CROSS_CHECK    = int(os.getenv("PF_CROSS_CHECK", "0")) != 0
CP_SAT_SECONDS = float(os.getenv("PF_CP_SAT_SECONDS", "10"))
CP_SAT_WORKERS = int(os.getenv("PF_CP_SAT_WORKERS", "1"))
CP_SAT_ISOLATE = int(os.getenv("PF_CP_SAT_ISOLATE", "0")) != 0

# ======= Inputs / outputs =======
CASES_PATH = os.getenv("PF_CASES_PATH", "cases.txt")
REPORT_OUT = os.getenv("PF_REPORT_OUT", "comparison_report.txt")


class CFG:
    CAP_ROW_A = CAP_ROW_A
    CAP_ROW_B = CAP_ROW_B
    CAP_COL_C = CAP_COL_C
    CAP_COL_D = CAP_COL_D

    NODE_LIMIT = NODE_LIMIT
    MEMO_LIMIT = MEMO_LIMIT

    APPEND_SENTINELS = APPEND_SENTINELS
    ESTIMATOR        = ESTIMATOR
    CODE_TOTAL_LIMIT = CODE_TOTAL_LIMIT

    CROSS_CHECK    = CROSS_CHECK
    CP_SAT_SECONDS = CP_SAT_SECONDS
    CP_SAT_WORKERS = CP_SAT_WORKERS
    CP_SAT_ISOLATE = CP_SAT_ISOLATE

    CASES_PATH = CASES_PATH
    REPORT_OUT = REPORT_OUT


def limit_or_none(value) -> Optional[int]:
    """Map a configured budget to ``None`` when it is disabled (<= 0)."""
    try:
        ivalue = int(value)
    except (TypeError, ValueError):
        return None
    return ivalue if ivalue > 0 else None


__all__ = ["CFG", "limit_or_none"]
