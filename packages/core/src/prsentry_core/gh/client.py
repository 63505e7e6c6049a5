"""ReviewPlatformClient backed by the GitHub REST API (PyGithub)."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

from github import Auth, Github, GithubException, UnknownObjectException

from prsentry_core.diff import build_diff_report
from prsentry_core.errors import TransportError
from prsentry_core.formatting import FINDING_MARKER, OVERVIEW_MARKER
from prsentry_core.gh.base import ReviewPlatformClient
from prsentry_core.models import DiffPosition, DiffReport, PullRequestRef, ReviewerIdentity

if TYPE_CHECKING:
    from prsentry_core.config import Settings

logger = logging.getLogger(__name__)

RESET_APPROVAL_MESSAGE = "Approval withdrawn: the latest analysis reports new findings."
APPROVE_MESSAGE = "No new issues and no coverage regression."


def get_github(token: str, base_url: str = "https://api.github.com", timeout: int = 15) -> Github:
    return Github(auth=Auth.Token(token), base_url=base_url, timeout=timeout)


@contextmanager
def _transport(operation: str):
    try:
        yield
    except GithubException as e:
        raise TransportError(operation, f"HTTP {e.status}: {e.data}") from e


def _posted_by(comment, identity: ReviewerIdentity, marker: str) -> bool:
    """True for a comment this tool wrote: authored by identity and carrying marker."""
    return bool(comment.user and comment.user.login == identity.login and marker in (comment.body or ""))


class GitHubReviewClient(ReviewPlatformClient):
    def __init__(self, github: Github):
        self.github = github

    @classmethod
    def from_settings(cls, settings: Settings) -> GitHubReviewClient:
        return cls(get_github(settings.github_token, base_url=settings.github_url, timeout=settings.timeout))

    def _pull(self, pull_request: PullRequestRef):
        repo = self.github.get_repo(pull_request.full_name, lazy=True)
        return repo.get_pull(pull_request.number)

    def resolve_reviewer(self, login: str | None) -> ReviewerIdentity | None:
        with _transport("resolve reviewer"):
            try:
                user = self.github.get_user(login) if login else self.github.get_user()
                return ReviewerIdentity(login=user.login, name=user.name)
            except UnknownObjectException:
                logger.debug("GitHub user %s not found", login)
                return None

    def get_diff_report(self, pull_request: PullRequestRef) -> DiffReport | None:
        with _transport("fetch diff"):
            try:
                pr = self._pull(pull_request)
            except UnknownObjectException:
                logger.debug("Pull request %s not found", pull_request)
                return None
            return build_diff_report(pr.get_files(), head_sha=pr.head.sha)

    def reset_comments(self, pull_request: PullRequestRef, identity: ReviewerIdentity) -> int:
        deleted = 0
        with _transport("reset comments"):
            pr = self._pull(pull_request)
            # Materialise both listings before deleting so pagination is not disturbed
            review_comments = [c for c in pr.get_review_comments() if _posted_by(c, identity, FINDING_MARKER)]
            issue_comments = [c for c in pr.get_issue_comments() if _posted_by(c, identity, OVERVIEW_MARKER)]
            for comment in review_comments + issue_comments:
                comment.delete()
                deleted += 1
        logger.info("Deleted %d comment(s) by %s on %s", deleted, identity.login, pull_request)
        return deleted

    def add_reviewer(self, pull_request: PullRequestRef, login: str) -> None:
        with _transport("add reviewer"):
            pr = self._pull(pull_request)
            requested, _ = pr.get_review_requests()
            if any(user.login == login for user in requested):
                logger.debug("%s is already a reviewer of %s", login, pull_request)
                return
            pr.create_review_request(reviewers=[login])

    def post_comment(self, pull_request: PullRequestRef, position: DiffPosition, text: str) -> None:
        with _transport("post comment"):
            pr = self._pull(pull_request)
            pr.create_review(
                body="",
                event="COMMENT",
                comments=[{"path": position.path, "position": position.position, "body": text}],
            )

    def post_overview_comment(self, pull_request: PullRequestRef, text: str) -> None:
        with _transport("post overview"):
            self._pull(pull_request).create_issue_comment(text)

    def approve(self, pull_request: PullRequestRef, login: str) -> None:
        with _transport("approve"):
            self._pull(pull_request).create_review(body=APPROVE_MESSAGE, event="APPROVE")

    def reset_approval(self, pull_request: PullRequestRef, login: str) -> None:
        with _transport("reset approval"):
            pr = self._pull(pull_request)
            approvals = [r for r in pr.get_reviews() if r.state == "APPROVED" and r.user and r.user.login == login]
            for review in approvals:
                review.dismiss(RESET_APPROVAL_MESSAGE)
        if approvals:
            logger.info("Dismissed %d approval(s) by %s on %s", len(approvals), login, pull_request)
