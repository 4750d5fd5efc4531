# app.py: feasibility checks and corpus runs over HTTP
from __future__ import annotations

import json
import os
import threading
from typing import Any, Dict, Optional, Tuple

from flask import Flask, request, jsonify, send_from_directory

from cases import load_cases, parse_cases, with_sentinels
from config import CFG, limit_or_none
from io_files import write_report, write_summary_json
from models import Capacities, InvalidItem, make_items
from progress import as_json as progress_json
from render import format_summary
from solver.backtrack import SearchExhausted, SearchStats, solve
from solver.estimator import estimate, first_violation
from solver.orchestrator import ESTIMATORS, run_comparison

BASE_DIR = os.path.dirname(os.path.abspath(__file__))


def _resolve_output_paths(configured: str, fallback: str) -> Tuple[str, str, str]:
    name = (configured or "").strip() or fallback
    if os.path.isabs(name):
        full_path = name
    else:
        full_path = os.path.abspath(os.path.join(BASE_DIR, name))
    directory = os.path.dirname(full_path) or BASE_DIR
    filename = os.path.basename(full_path) or fallback
    return full_path, directory, filename


_REPORT_FULL_PATH, REPORT_DIR, REPORT_FILENAME = _resolve_output_paths(
    CFG.REPORT_OUT, "comparison_report.txt"
)

# one corpus run at a time; /check is stateless
RUN_LOCK = threading.Lock()

LAST_RESULT: Dict[str, Any] = {
    "ok": False,
    "summary": None,
    "line": "",
    "report_filename": REPORT_FILENAME,
}

app = Flask(__name__)


@app.after_request
def _no_cache_progress(resp):
    if request.path == "/progress3":
        resp.headers["Cache-Control"] = "no-store, max-age=0"
        resp.headers["Pragma"] = "no-cache"
        resp.headers["Expires"] = "0"
    return resp


def _bad_request(reason: str):
    return jsonify({"ok": False, "error": reason}), 400


def _capacities_from_payload(p: Dict[str, Any]) -> Capacities:
    raw = p.get("capacities")
    if raw is None:
        return Capacities.from_cfg()
    if isinstance(raw, dict):
        base = Capacities.from_cfg()
        return Capacities(
            row_a=raw.get("RowA", base.row_a),
            row_b=raw.get("RowB", base.row_b),
            col_c=raw.get("ColC", base.col_c),
            col_d=raw.get("ColD", base.col_d),
        )
    if isinstance(raw, (list, tuple)) and len(raw) == 4:
        return Capacities(*raw)
    raise ValueError("Bad capacities: expected [RowA, RowB, ColC, ColD] or a mapping by pool name")


def _optional_bool(p: Dict[str, Any], key: str) -> Optional[bool]:
    value = p.get(key)
    return None if value is None else bool(value)


@app.route("/")
def index():
    return jsonify({
        "endpoints": ["/check", "/run", "/result/latest", "/progress3", "/download/report"],
        "capacities": Capacities.from_cfg().label(),
        "estimators": list(ESTIMATORS),
    })


@app.route("/check", methods=["POST"])
def check():
    """Verdicts for a single item sequence: {"items": [[codes...], ...]}."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict) or not isinstance(payload.get("items"), list):
        return _bad_request("expected a JSON object with an 'items' list")

    try:
        items = make_items(payload["items"])
        caps = _capacities_from_payload(payload)
    except (InvalidItem, ValueError) as e:
        return _bad_request(str(e))

    if payload.get("sentinels"):
        items = with_sentinels(items)

    stats = SearchStats()
    try:
        exact: Optional[bool] = solve(items, caps, stats=stats,
                                      node_limit=limit_or_none(CFG.NODE_LIMIT),
                                      memo_limit=limit_or_none(CFG.MEMO_LIMIT))
        exhausted = None
    except SearchExhausted as e:
        exact = None
        exhausted = str(e)

    est = estimate(items, caps)
    hit = first_violation(items, caps)
    body: Dict[str, Any] = {
        "ok": True,
        "items": len(items),
        "capacities": caps.label(),
        "exact": exact,
        "estimate": est,
        "agree": None if exact is None else exact == est,
        "violation": None if hit is None else {"item": hit[0], "check": hit[1]},
        "stats": stats.as_dict(),
    }
    if exhausted:
        body["exhausted"] = exhausted
    if payload.get("cross_check"):
        from solver.cp_sat import solve_cp_sat
        body["cp_sat"], body["cp_sat_reason"] = solve_cp_sat(items, caps)
    return jsonify(body)


@app.route("/run", methods=["POST"])
def run():
    """Run a corpus comparison on posted {"cases": [...]} or the configured cases file."""
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return _bad_request("expected a JSON object")

    try:
        if "cases" in payload:
            raw = payload["cases"]
            cases = parse_cases(raw if isinstance(raw, str) else json.dumps(raw))
        else:
            cases = load_cases(os.path.join(BASE_DIR, CFG.CASES_PATH)
                               if not os.path.isabs(CFG.CASES_PATH) else CFG.CASES_PATH)
        caps = _capacities_from_payload(payload)
    except FileNotFoundError as e:
        return _bad_request(f"cases file not found: {e.filename}")
    except (InvalidItem, ValueError) as e:
        return _bad_request(str(e))

    estimator = payload.get("estimator")
    if estimator is not None and estimator not in ESTIMATORS:
        return _bad_request(f"unknown estimator {estimator!r}")

    if not RUN_LOCK.acquire(blocking=False):
        return jsonify({"ok": False, "error": "a comparison run is already in progress"}), 409
    try:
        summary = run_comparison(
            cases,
            caps,
            append_sentinels=_optional_bool(payload, "sentinels"),
            estimator=estimator,
            cross_check=_optional_bool(payload, "cross_check"),
        )
    finally:
        RUN_LOCK.release()

    report_name = REPORT_FILENAME
    if payload.get("write_report"):
        report_path = write_report(summary, BASE_DIR)
        write_summary_json(summary, BASE_DIR)
        report_name = os.path.basename(report_path)

    LAST_RESULT.update({
        "ok": True,
        "summary": summary.as_dict(),
        "line": format_summary(summary),
        "report_filename": report_name,
    })
    return jsonify(LAST_RESULT)


@app.route("/result/latest")
def result_latest():
    return jsonify(LAST_RESULT)


@app.route("/download/report")
def download_report():
    return send_from_directory(REPORT_DIR, REPORT_FILENAME, as_attachment=True)


@app.route("/progress3")
def progress3():
    return jsonify(progress_json())


if __name__ == "__main__":
    app.run(debug=False)
