"""Abstract review platform interface.

The orchestrator only talks to a ReviewPlatformClient, never to PyGithub
directly, so the GitHub adapter can be swapped (or faked in tests) without
touching the decision logic.

Every method is a blocking remote call and may raise TransportError.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prsentry_core.models import DiffPosition, DiffReport, PullRequestRef, ReviewerIdentity


class ReviewPlatformClient(ABC):
    # ------------------------------------------------------------------ #
    # Reads                                                               #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def resolve_reviewer(self, login: str | None) -> ReviewerIdentity | None:
        """Return the account prsentry acts as, or None if it does not exist.

        ``login=None`` means the account owning the credentials.
        """

    @abstractmethod
    def get_diff_report(self, pull_request: PullRequestRef) -> DiffReport | None:
        """Return the lines visible in the pull request diff, or None if unavailable."""

    # ------------------------------------------------------------------ #
    # Writes                                                              #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def reset_comments(self, pull_request: PullRequestRef, identity: ReviewerIdentity) -> int:
        """Delete comments ``identity`` left on the pull request. Returns how many."""

    @abstractmethod
    def add_reviewer(self, pull_request: PullRequestRef, login: str) -> None:
        """Make ``login`` a reviewer of the pull request."""

    @abstractmethod
    def post_comment(self, pull_request: PullRequestRef, position: DiffPosition, text: str) -> None:
        """Post an inline comment anchored at ``position``."""

    @abstractmethod
    def post_overview_comment(self, pull_request: PullRequestRef, text: str) -> None:
        """Post a comment on the pull request conversation."""

    @abstractmethod
    def approve(self, pull_request: PullRequestRef, login: str) -> None:
        """Approve the pull request as ``login``."""

    @abstractmethod
    def reset_approval(self, pull_request: PullRequestRef, login: str) -> None:
        """Withdraw any approval ``login`` gave the pull request."""
