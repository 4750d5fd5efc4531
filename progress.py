from __future__ import annotations

import logging
import os
import time
import threading
from pathlib import Path
from typing import Any, Dict, Optional

# ------------------------------
# Thread-safe global progress state
# ------------------------------

PROGRESS_LOCK = threading.Lock()


def _log_file_path() -> Path:
    configured = os.environ.get("PROGRESS_LOG_FILE")
    if configured:
        return Path(configured)
    return Path(__file__).resolve().parent / "logs" / "comparison_runs.log"


def _init_logger() -> logging.Logger:
    logger = logging.getLogger("pool_feasibility.run_log")
    if logger.handlers:
        return logger

    log_path = _log_file_path()
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path, encoding="utf-8")
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    except OSError:
        # No log file (read-only checkout); progress tracking carries on.
        logger.handlers.clear()
    return logger


RUN_LOGGER = _init_logger()


def _fmt_seconds(seconds: Optional[float]) -> Optional[str]:
    if seconds is None:
        return None
    try:
        return f"{float(seconds):.2f}s"
    except (TypeError, ValueError):
        return None


def log_event(event: str, *, level: int = logging.INFO, **fields: Any) -> None:
    """Write ``event | key=value ...`` to the run log; empty values are skipped."""
    if not RUN_LOGGER.handlers:
        return
    extras = [
        f"{key}={value}"
        for key, value in fields.items()
        if value is not None and value != ""
    ]
    if extras:
        RUN_LOGGER.log(level, "%s | %s", event, " ".join(extras))
    else:
        RUN_LOGGER.log(level, "%s", event)


# Single source of truth for the run view
PROGRESS: Dict[str, Any] = {
    "status": "Idle",          # Idle | Running | Finished | Error
    "phase": "",               # estimate | exact | cross-check
    "case": "",                # index of the case in flight
    "total": 0,                # cases in the corpus
    "processed": 0,            # cases finished
    "percent": 0.0,            # 0..100 float
    "agreements": 0,
    "disagreements": 0,
    "exhausted": 0,
    "elapsed_start": None,     # t0 (float) when the run started
    "elapsed": 0.0,            # seconds snapshot
    "message": "",
    "done": False,
    "ok": None,
    "run_id": 0,               # monotonically increasing identifier
}

LOG_STATE: Dict[str, Any] = {"run_start": None}

# ------------------------------
# Helpers
# ------------------------------

def _now() -> float:
    return time.time()

def _fmt_elapsed(seconds: float) -> str:
    seconds = max(0.0, float(seconds))
    if seconds < 60:
        return f"{int(seconds)}s"
    m, s = divmod(int(seconds), 60)
    if m < 60:
        return f"{m}m {s}s"
    h, m = divmod(m, 60)
    return f"{h}h {m}m"

def _touch_elapsed_locked() -> None:
    t0 = PROGRESS.get("elapsed_start")
    if t0 is not None:
        PROGRESS["elapsed"] = _now() - float(t0)

def _recompute_percent_locked() -> None:
    total = int(PROGRESS.get("total") or 0)
    if total <= 0:
        PROGRESS["percent"] = 0.0
        return
    PROGRESS["percent"] = max(0.0, min(100.0, 100.0 * int(PROGRESS["processed"]) / total))

def reset() -> None:
    with PROGRESS_LOCK:
        new_run_id = int(PROGRESS.get("run_id", 0)) + 1
        PROGRESS.update({
            "status": "Idle",
            "phase": "",
            "case": "",
            "total": 0,
            "processed": 0,
            "percent": 0.0,
            "agreements": 0,
            "disagreements": 0,
            "exhausted": 0,
            "elapsed_start": None,
            "elapsed": 0.0,
            "message": "",
            "done": False,
            "ok": None,
            "run_id": new_run_id,
        })
        LOG_STATE["run_start"] = None
        log_event("Progress reset", run_id=new_run_id)

def start_timer() -> None:
    with PROGRESS_LOCK:
        now = _now()
        PROGRESS["elapsed_start"] = now
        PROGRESS["elapsed"] = 0.0
        PROGRESS["status"] = "Running"
        LOG_STATE["run_start"] = now
        log_event("Run started", run_id=PROGRESS["run_id"], total=PROGRESS["total"])

# ------------------------------
# Setters
# ------------------------------

def set_status(v: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS["status"] = str(v)

def set_phase(v: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS["phase"] = "" if v is None else str(v)

def set_case(index: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS["case"] = "" if index is None else str(index)

def set_total(n: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS["total"] = max(0, int(n))
        _recompute_percent_locked()

def set_message(msg: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS["message"] = "" if msg is None else str(msg)

def advance(*, agreed: Optional[bool] = None, exhausted: bool = False) -> None:
    """Count one finished case; ``agreed`` is None when there was no verdict."""
    with PROGRESS_LOCK:
        PROGRESS["processed"] = int(PROGRESS["processed"]) + 1
        if exhausted:
            PROGRESS["exhausted"] = int(PROGRESS["exhausted"]) + 1
        elif agreed is True:
            PROGRESS["agreements"] = int(PROGRESS["agreements"]) + 1
        elif agreed is False:
            PROGRESS["disagreements"] = int(PROGRESS["disagreements"]) + 1
        _recompute_percent_locked()
        _touch_elapsed_locked()

def set_done(ok: bool = True, *, message: Any = None) -> None:
    with PROGRESS_LOCK:
        _touch_elapsed_locked()
        now = _now()
        PROGRESS["status"] = "Finished" if ok else "Error"
        PROGRESS["ok"] = bool(ok)
        PROGRESS["done"] = True
        PROGRESS["phase"] = ""
        PROGRESS["case"] = ""
        if ok:
            PROGRESS["percent"] = 100.0
        if message is not None:
            PROGRESS["message"] = str(message)
        run_start = LOG_STATE.get("run_start")
        total = max(0.0, now - float(run_start)) if isinstance(run_start, (int, float)) else None
        LOG_STATE["run_start"] = None
        log_event(
            "Run finished",
            level=logging.INFO if ok else logging.ERROR,
            status=PROGRESS["status"],
            processed=PROGRESS["processed"],
            agreements=PROGRESS["agreements"],
            disagreements=PROGRESS["disagreements"],
            exhausted=PROGRESS["exhausted"] or None,
            duration=_fmt_seconds(total),
            message=PROGRESS["message"],
        )

# ------------------------------
# Snapshots for the UI
# ------------------------------

def snapshot() -> Dict[str, Any]:
    with PROGRESS_LOCK:
        _touch_elapsed_locked()
        snap = {k: v for k, v in PROGRESS.items() if k != "elapsed_start"}
        snap["elapsed_str"] = _fmt_elapsed(PROGRESS["elapsed"])
        return snap

def as_json() -> Dict[str, Any]:
    # Alias used by /progress3
    return snapshot()
