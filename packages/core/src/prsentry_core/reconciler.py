"""Review-state decisions: approval, comment reset, reviewer addition."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from prsentry_core.models import ApprovalAction, DecisionInputs

if TYPE_CHECKING:
    from prsentry_core.config import Settings


@dataclass(frozen=True)
class PreSteps:
    reset_comments: bool
    add_reviewer: bool


def reconcile(inputs: DecisionInputs) -> ApprovalAction:
    """Approval state as a function of this run's counts alone.

    | issues | coverage evolution | action         |
    |--------|--------------------|----------------|
    | 0      | >= 0               | APPROVE        |
    | 0      | < 0                | RESET_APPROVAL |
    | > 0    | any                | RESET_APPROVAL |

    NONE whenever approvals are not managed.
    """
    if not inputs.can_approve:
        return ApprovalAction.NONE
    if inputs.issue_number == 0 and inputs.coverage_evolution >= 0:
        return ApprovalAction.APPROVE
    return ApprovalAction.RESET_APPROVAL


def plan_pre_steps(settings: Settings) -> PreSteps:
    return PreSteps(reset_comments=settings.reset_comments, add_reviewer=settings.add_reviewer)
