"""Inline annotation planning.

The planner has two states. NORMAL plans one inline comment per finding that
is visible in the diff; SUPPRESSED (finding count at or over the threshold)
plans none, leaving the overview comment as the only report.
"""

from __future__ import annotations

import logging

from prsentry_core.diff import locate
from prsentry_core.formatting import format_coverage_comment, format_issue_comment
from prsentry_core.models import (
    AnnotationPlan,
    CoverageReport,
    DecisionInputs,
    DiffReport,
    IssueReport,
    PlannedComment,
    PlannerState,
)

logger = logging.getLogger(__name__)


def planner_state(inputs: DecisionInputs) -> PlannerState:
    if inputs.issue_number >= inputs.threshold:
        return PlannerState.SUPPRESSED
    return PlannerState.NORMAL


def plan_annotations(
    inputs: DecisionInputs,
    issue_report: IssueReport,
    coverage_report: CoverageReport,
    diff_report: DiffReport,
    analysis_url: str | None = None,
) -> AnnotationPlan:
    state = planner_state(inputs)

    if state is PlannerState.SUPPRESSED:
        logger.warning(
            "Too many issues detected (%d/%d): issues cannot be displayed in the diff view",
            inputs.issue_number,
            inputs.threshold,
        )
        return AnnotationPlan(state=state)

    issue_comments = []
    coverage_comments = []
    not_visible = []

    for issue in issue_report.issues:
        position = locate(issue.file, issue.line, diff_report)
        if position is None:
            logger.debug("Issue at %s:%s is not in the diff", issue.file, issue.line)
            not_visible.append(issue)
            continue
        issue_comments.append(PlannedComment(position, format_issue_comment(issue, analysis_url), issue))

    for finding in coverage_report.lowered_findings():
        position = locate(finding.file, finding.line, diff_report)
        if position is None:
            logger.debug("Lowered coverage of %s is not in the diff", finding.file)
            not_visible.append(finding)
            continue
        coverage_comments.append(PlannedComment(position, format_coverage_comment(finding), finding))

    return AnnotationPlan(
        state=state,
        issue_comments=tuple(issue_comments),
        coverage_comments=tuple(coverage_comments),
        not_visible=tuple(not_visible),
    )
