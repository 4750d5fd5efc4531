"""Helpers for writing comparison results to disk."""

from __future__ import annotations

import json
import os

from config import CFG
from render import report_lines
from solver.orchestrator import ComparisonSummary


def _resolve_output_path(base_dir: str, configured_name: str, fallback: str) -> str:
    """Return the absolute path where an output artifact should be written."""

    name = (configured_name or "").strip() or fallback
    if os.path.isabs(name):
        return name
    return os.path.join(base_dir, name)


def write_report(summary: ComparisonSummary, base_dir: str) -> str:
    """Write the summary and every disagreement to the configured text file."""

    path = _resolve_output_path(base_dir, CFG.REPORT_OUT, "comparison_report.txt")
    os.makedirs(os.path.dirname(path), exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        f.write("\n".join(report_lines(summary)))
        f.write("\n")
    return path


def write_summary_json(summary: ComparisonSummary, base_dir: str) -> str:
    """Write the machine-readable summary beside the text report."""

    report_path = _resolve_output_path(base_dir, CFG.REPORT_OUT, "comparison_report.txt")
    path = os.path.splitext(report_path)[0] + ".json"
    os.makedirs(os.path.dirname(path), exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(summary.as_dict(), f, indent=2)
    return path


__all__ = ["write_report", "write_summary_json"]
