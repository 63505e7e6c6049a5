"""Publication of one analysis run on one pull request.

    run_publication()
        → resolve reviewer identity          (missing → MISSING_REVIEWER)
        → fetch diff report                  (missing → MISSING_DIFF_REPORT)
        → read issue + coverage reports
        → build_action_plan()                aggregate → plan_annotations → build_overview → reconcile
        → apply_action_plan()                reset → add reviewer → inline → overview → approval

Everything is read and decided before the first write, and writes are applied
one at a time in the order above: a comment reset must never run after the
new comments are posted. A TransportError from the client aborts the run where
it happens; writes already made are not undone.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from prsentry_core.aggregator import aggregate
from prsentry_core.formatting import build_overview
from prsentry_core.models import (
    ActionPlan,
    ApprovalAction,
    CoverageReport,
    DecisionInputs,
    DiffReport,
    IssueReport,
    PullRequestRef,
    ReviewerIdentity,
    RunResult,
    RunStatus,
)
from prsentry_core.planner import plan_annotations
from prsentry_core.reconciler import plan_pre_steps, reconcile

if TYPE_CHECKING:
    from prsentry_core.analysis.base import AnalysisSource
    from prsentry_core.config import Settings
    from prsentry_core.gh.base import ReviewPlatformClient

logger = logging.getLogger(__name__)


def build_action_plan(
    settings: Settings,
    inputs: DecisionInputs,
    issue_report: IssueReport,
    coverage_report: CoverageReport,
    diff_report: DiffReport,
) -> ActionPlan:
    annotations = plan_annotations(inputs, issue_report, coverage_report, diff_report, settings.analysis_url)
    overview = build_overview(
        inputs,
        issue_report,
        coverage_report,
        suppressed=annotations.suppressed,
        not_visible=annotations.not_visible,
        analysis_url=settings.analysis_url,
    )
    pre_steps = plan_pre_steps(settings)
    return ActionPlan(
        reset_comments=pre_steps.reset_comments,
        add_reviewer=pre_steps.add_reviewer,
        issue_comments=annotations.issue_comments,
        coverage_comments=annotations.coverage_comments,
        overview=overview,
        approval=reconcile(inputs),
    )


def apply_action_plan(
    plan: ActionPlan,
    client: ReviewPlatformClient,
    pull_request: PullRequestRef,
    identity: ReviewerIdentity,
) -> None:
    if plan.reset_comments:
        client.reset_comments(pull_request, identity)

    if plan.add_reviewer:
        client.add_reviewer(pull_request, identity.login)

    for comment in plan.issue_comments:
        client.post_comment(pull_request, comment.position, comment.body)
    for comment in plan.coverage_comments:
        client.post_comment(pull_request, comment.position, comment.body)
    if plan.issue_comments or plan.coverage_comments:
        logger.info(
            "Posted %d issue and %d coverage comment(s) on %s",
            len(plan.issue_comments),
            len(plan.coverage_comments),
            pull_request,
        )

    client.post_overview_comment(pull_request, plan.overview)

    if plan.approval is ApprovalAction.APPROVE:
        client.approve(pull_request, identity.login)
        logger.info("Approved %s as %s", pull_request, identity.login)
    elif plan.approval is ApprovalAction.RESET_APPROVAL:
        client.reset_approval(pull_request, identity.login)


def run_publication(
    settings: Settings,
    source: AnalysisSource,
    client: ReviewPlatformClient,
    pull_request: PullRequestRef,
    shadow: bool = False,
) -> RunResult:
    """Publish one analysis run on one pull request and return what happened.

    Missing preconditions come back as RunStatus variants with nothing posted.
    With ``shadow=True`` the plan is computed and returned but not applied.
    """
    if not settings.notify:
        logger.info("Notification disabled, nothing published on %s", pull_request)
        return RunResult(status=RunStatus.DISABLED, message="Notification is disabled.")

    identity = client.resolve_reviewer(settings.reviewer_login)
    if identity is None:
        message = "No reviewer identified to publish the analysis"
        logger.error("Process stopped: %s", message)
        return RunResult(status=RunStatus.MISSING_REVIEWER, message=message)

    diff_report = client.get_diff_report(pull_request)
    if diff_report is None:
        message = f"No diff available for {pull_request}"
        logger.error("Process stopped: %s", message)
        return RunResult(status=RunStatus.MISSING_DIFF_REPORT, message=message)

    issue_report = source.get_issue_report()
    if settings.coverage_enabled:
        coverage_report = source.get_coverage_report(settings.coverage_severity)
    else:
        coverage_report = CoverageReport.empty()

    inputs = aggregate(issue_report, coverage_report, settings.issue_threshold, settings.can_approve)
    plan = build_action_plan(settings, inputs, issue_report, coverage_report, diff_report)

    if shadow:
        return RunResult(status=RunStatus.COMPLETED, plan=plan, inputs=inputs, message="Shadow run, nothing posted.")

    apply_action_plan(plan, client, pull_request, identity)
    return RunResult(status=RunStatus.COMPLETED, plan=plan, inputs=inputs, applied=True)
