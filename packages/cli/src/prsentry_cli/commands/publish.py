"""publish command — publish an analysis report on a pull request."""

from __future__ import annotations

import logging

import click
from rich.console import Console

from prsentry_core.analysis.report_file import ReportFileSource
from prsentry_core.errors import ConfigurationError, ReportError, TransportError
from prsentry_core.gh.client import GitHubReviewClient
from prsentry_core.models import ActionPlan, ApprovalAction, PullRequestRef, RunResult, RunStatus
from prsentry_core.orchestrator import run_publication

console = Console()
logger = logging.getLogger(__name__)

_APPROVAL_LABEL = {
    ApprovalAction.APPROVE: "[green]approve[/green]",
    ApprovalAction.RESET_APPROVAL: "[yellow]reset approval[/yellow]",
    ApprovalAction.NONE: "[dim]unchanged[/dim]",
}


def _parse_repo(repo: str) -> tuple[str, str]:
    owner, _, name = repo.partition("/")
    if not owner or not name or "/" in name:
        raise click.BadParameter("expected owner/name", param_hint="--repo")
    return owner, name


def print_plan(plan: ActionPlan) -> None:
    """Print an action plan to the terminal without touching GitHub."""
    console.print(f"\n[bold]Shadow run — {plan.count_writes()} write(s) would be made[/bold]\n")
    if plan.reset_comments:
        console.print("  reset previous comments")
    if plan.add_reviewer:
        console.print("  add reviewer")
    for comment in plan.issue_comments + plan.coverage_comments:
        console.print(
            f"[bold cyan]{comment.position.path}[/bold cyan]  line [bold]{comment.position.line}[/bold]  "
            f"[dim](position {comment.position.position})[/dim]"
        )
        console.print(f"  {comment.body}", markup=False)
    console.print("\n[bold]Overview comment:[/bold]")
    console.print(plan.overview, markup=False)
    console.print(f"\nApproval: {_APPROVAL_LABEL[plan.approval]}")


def _report_result(result: RunResult, pull_request: PullRequestRef) -> None:
    if result.status is RunStatus.DISABLED:
        console.print("[yellow]Notification disabled (notify: false). Nothing published.[/yellow]")
        return
    if result.status is not RunStatus.COMPLETED:
        console.print(f"[red]Process stopped: {result.message}[/red]")
        return

    plan = result.plan
    if not result.applied:
        print_plan(plan)
        return
    inline = len(plan.issue_comments) + len(plan.coverage_comments)
    console.print(f"\n[green]Published on {pull_request}[/green]")
    console.print(
        f"  findings: {result.inputs.issue_number} · inline comments: {inline} · "
        f"approval: {_APPROVAL_LABEL[plan.approval]}"
    )


@click.command("publish")
@click.option("--repo", required=True, help="GitHub repository in owner/name format.")
@click.option("--pr", "pr_number", type=int, required=True, help="Pull request number.")
@click.option(
    "--report",
    "report_path",
    required=True,
    type=click.Path(dir_okay=False),
    help="Analysis report (YAML or JSON) to publish.",
)
@click.option("--threshold", type=int, default=None, help="Issue threshold. Overrides config file.")
@click.option(
    "--approve/--no-approve",
    "can_approve",
    default=None,
    help="Approve or reset approval from the analysis. Overrides config file.",
)
@click.option(
    "--reset-comments/--keep-comments",
    "reset_comments",
    default=None,
    help="Delete previous comments before publishing. Overrides config file.",
)
@click.option(
    "--shadow",
    "-s",
    is_flag=True,
    help="Dry-run mode: print what would be published without writing to GitHub.",
)
@click.pass_context
def publish_cmd(
    ctx,
    repo: str,
    pr_number: int,
    report_path: str,
    threshold: int | None,
    can_approve: bool | None,
    reset_comments: bool | None,
    shadow: bool,
):
    """Publish a static-analysis report on a pull request.

    Posts findings on the changed lines, an overview comment, and (with
    can_approve) approves the pull request or withdraws its approval.

    \b
    Required environment variables:
      GITHUB_TOKEN         GitHub token (or use gh CLI)
    """
    from prsentry_core.config import build_settings, load_config
    from prsentry_cli.auth import resolve_github_token

    owner, name = _parse_repo(repo)
    pull_request = PullRequestRef(project=owner, repository=name, number=pr_number)
    config_path = ctx.obj.get("config_path", ".prsentry.yml") if ctx.obj else ".prsentry.yml"

    try:
        config = load_config(
            config_path,
            cli_overrides={
                "issue_threshold": threshold,
                "can_approve": can_approve,
                "reset_comments": reset_comments,
            },
        )
        config["github_token"] = resolve_github_token()
        settings = build_settings(config)
        source = ReportFileSource(report_path, min_severity=settings.issue_severity)
        client = GitHubReviewClient.from_settings(settings)
        result = run_publication(settings, source, client, pull_request, shadow=shadow)
    except (ConfigurationError, ReportError, TransportError) as e:
        logger.error("Unable to publish analysis report: %s", e)
        logger.debug("Exception stack trace", exc_info=True)
        ctx.exit(1)

    _report_result(result, pull_request)
    if not result.ok:
        ctx.exit(1)
