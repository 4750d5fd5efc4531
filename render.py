from typing import List

from solver.orchestrator import CaseOutcome, ComparisonSummary


def format_summary(summary: ComparisonSummary) -> str:
    line = (
        f"agreements: {summary.agreements} "
        f"({summary.agree_fail} fail, {summary.agree_success} succeed), "
        f"disagreements: {summary.disagreement_count} "
        f"({summary.should_have_failed} should have failed, "
        f"{summary.should_have_succeeded} should have succeeded)"
    )
    if summary.exhausted:
        line += f", exhausted: {len(summary.exhausted)}"
    return line


def format_outcome(outcome: CaseOutcome) -> str:
    text = outcome.describe()
    if outcome.violation:
        text += f" [bound {outcome.violation}]"
    return text


def report_lines(summary: ComparisonSummary) -> List[str]:
    lines = [
        f"estimator: {summary.estimator}",
        f"capacities: {summary.capacities.label()}",
        f"cases: {summary.cases}",
        format_summary(summary),
    ]
    if summary.disagreements:
        lines.append("")
        lines.extend(format_outcome(o) for o in summary.disagreements)
    if summary.exhausted:
        lines.append("")
        lines.append("exhausted cases: " + ", ".join(str(i) for i in summary.exhausted))
    if summary.oracle_conflicts:
        lines.append("")
        lines.append("CP-SAT conflicts: " + ", ".join(str(i) for i in summary.oracle_conflicts))
    return lines
