from __future__ import annotations

from prsentry_core.models import CoverageReport, DecisionInputs, IssueReport


def aggregate(
    issue_report: IssueReport,
    coverage_report: CoverageReport | None,
    threshold: int,
    can_approve: bool,
) -> DecisionInputs:
    """Merge issue and coverage counts into the inputs of every decision of a run.

    Lowered-coverage findings count as issues. A missing coverage report is the
    empty one: nothing lowered, evolution 0.0.
    """
    if coverage_report is None:
        coverage_report = CoverageReport.empty()
    return DecisionInputs(
        issue_number=issue_report.count_issues() + coverage_report.count_lowered_issues(),
        coverage_evolution=coverage_report.evolution,
        threshold=threshold,
        can_approve=can_approve,
    )
