"""Data models shared by every stage of a publication run.

Everything here is immutable: a run builds these once from the analysis
source and the platform, then only reads them.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from typing import Mapping

SEVERITY_NONE = "NONE"
SEVERITIES = ("INFO", "MINOR", "MAJOR", "CRITICAL", "BLOCKER")
SEVERITY_RANK = {severity: rank for rank, severity in enumerate(SEVERITIES)}


@dataclass(frozen=True)
class Issue:
    file: str
    line: int | None
    severity: str
    message: str
    rule: str | None = None


@dataclass(frozen=True)
class IssueReport:
    issues: tuple[Issue, ...] = ()

    def count_issues(self) -> int:
        return len(self.issues)

    def count_by_severity(self) -> dict[str, int]:
        """Issue count per severity, every known severity present (zero included)."""
        counts = Counter(issue.severity for issue in self.issues)
        return {severity: counts.get(severity, 0) for severity in SEVERITIES}


@dataclass(frozen=True)
class CoverageFinding:
    """Coverage measured on one file (or one line of it) against the base branch."""

    file: str
    line: int | None
    severity: str
    coverage: float
    previous_coverage: float

    @property
    def is_lowered(self) -> bool:
        return self.coverage < self.previous_coverage


@dataclass(frozen=True)
class CoverageReport:
    findings: tuple[CoverageFinding, ...] = ()
    coverage: float | None = None
    previous_coverage: float | None = None

    @classmethod
    def empty(cls) -> CoverageReport:
        return cls()

    @property
    def evolution(self) -> float:
        """Project coverage delta; 0.0 when either side was not measured."""
        if self.coverage is None or self.previous_coverage is None:
            return 0.0
        return self.coverage - self.previous_coverage

    def lowered_findings(self) -> list[CoverageFinding]:
        return [f for f in self.findings if f.is_lowered]

    def count_lowered_issues(self) -> int:
        return len(self.lowered_findings())


@dataclass(frozen=True)
class DiffPosition:
    path: str
    line: int
    position: int


@dataclass(frozen=True)
class DiffReport:
    """Lines visible in a pull request diff, keyed by (path, new-file line)."""

    positions: Mapping[tuple[str, int], int] = field(default_factory=dict)
    head_sha: str | None = None

    @cached_property
    def path_set(self) -> frozenset[str]:
        return frozenset(path for path, _ in self.positions)

    def paths(self) -> list[str]:
        return sorted(self.path_set)


@dataclass(frozen=True)
class ReviewerIdentity:
    login: str
    name: str | None = None


@dataclass(frozen=True)
class PullRequestRef:
    project: str  # GitHub owner
    repository: str
    number: int

    @property
    def full_name(self) -> str:
        return f"{self.project}/{self.repository}"

    def __str__(self) -> str:
        return f"{self.full_name}#{self.number}"


@dataclass(frozen=True)
class DecisionInputs:
    """Counts every decision of a run is taken on. Computed once by aggregate()."""

    issue_number: int
    coverage_evolution: float
    threshold: int
    can_approve: bool


class PlannerState(str, Enum):
    NORMAL = "normal"
    SUPPRESSED = "suppressed"


class ApprovalAction(str, Enum):
    APPROVE = "approve"
    RESET_APPROVAL = "reset_approval"
    NONE = "none"


@dataclass(frozen=True)
class PlannedComment:
    position: DiffPosition
    body: str
    finding: Issue | CoverageFinding


@dataclass(frozen=True)
class AnnotationPlan:
    state: PlannerState
    issue_comments: tuple[PlannedComment, ...] = ()
    coverage_comments: tuple[PlannedComment, ...] = ()
    not_visible: tuple[Issue | CoverageFinding, ...] = ()

    @property
    def suppressed(self) -> bool:
        return self.state is PlannerState.SUPPRESSED


@dataclass(frozen=True)
class ActionPlan:
    """Remote side effects of one run, in the order they are applied."""

    reset_comments: bool
    add_reviewer: bool
    issue_comments: tuple[PlannedComment, ...]
    coverage_comments: tuple[PlannedComment, ...]
    overview: str
    approval: ApprovalAction

    def count_writes(self) -> int:
        """Number of platform write calls applying this plan takes."""
        return (
            int(self.reset_comments)
            + int(self.add_reviewer)
            + len(self.issue_comments)
            + len(self.coverage_comments)
            + 1
            + int(self.approval is not ApprovalAction.NONE)
        )


class RunStatus(str, Enum):
    COMPLETED = "completed"
    DISABLED = "disabled"
    MISSING_REVIEWER = "missing_reviewer"
    MISSING_DIFF_REPORT = "missing_diff_report"


@dataclass(frozen=True)
class RunResult:
    status: RunStatus
    plan: ActionPlan | None = None
    inputs: DecisionInputs | None = None
    message: str = ""
    applied: bool = False

    @property
    def ok(self) -> bool:
        return self.status in (RunStatus.COMPLETED, RunStatus.DISABLED)
