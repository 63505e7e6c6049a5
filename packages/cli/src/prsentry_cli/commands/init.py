"""init command — write a starter .prsentry.yml and, optionally, a CI workflow."""

from __future__ import annotations

import subprocess
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

import click
import yaml
from rich.console import Console

from prsentry_core.models import SEVERITIES, SEVERITY_NONE

console = Console()

ACTIONS_BOT_LOGIN = "github-actions[bot]"

_WORKFLOW_TEMPLATE = """\
name: Static analysis report

on:
  pull_request:
    types: [opened, synchronize, reopened]

jobs:
  analysis:
    runs-on: ubuntu-latest
    permissions:
      contents: read
      pull-requests: write

    steps:
      - uses: actions/checkout@v4

      - name: Set up Python
        uses: actions/setup-python@v5
        with:
          python-version: "3.12"

      # Produce {report} with your analyser here.

      - name: Install prsentry
        run: pip install "prsentry=={version}"

      - name: Publish analysis
        env:
          GITHUB_TOKEN: ${{{{ secrets.GITHUB_TOKEN }}}}
        run: |
          prsentry publish \\
            --repo ${{{{ github.repository }}}} \\
            --pr ${{{{ github.event.pull_request.number }}}} \\
            --report {report}
"""


@click.command("init")
@click.option("--repo", default=None, help="GitHub repository (owner/name). Auto-detected from git remote.")
def init_cmd(repo: str | None):
    """Set up prsentry for a repository.

    Creates .prsentry.yml and optionally a GitHub Actions workflow that
    publishes the analysis report on every pull request.
    """
    console.print("\n[bold cyan]prsentry init[/bold cyan] — repository setup\n")

    if repo is None:
        repo = _detect_repo_from_git()
        if repo:
            console.print(f"[dim]Detected repository: {repo}[/dim]")
        else:
            repo = click.prompt("GitHub repository (owner/name)")

    threshold = click.prompt("Issue threshold (no inline comments at or above it)", type=int, default=100)
    can_approve = click.confirm("Approve pull requests without new findings?", default=False)
    reset_comments = click.confirm("Delete previous analysis comments on each run?", default=True)
    coverage_severity = click.prompt(
        "Severity of lowered-coverage findings",
        type=click.Choice((SEVERITY_NONE,) + SEVERITIES, case_sensitive=False),
        default=SEVERITY_NONE,
    ).upper()

    config = {
        "issue_threshold": threshold,
        "can_approve": can_approve,
        "reset_comments": reset_comments,
        "coverage_severity": coverage_severity,
    }

    report = None
    if click.confirm("\nGenerate .github/workflows/prsentry.yml for GitHub Actions?", default=True):
        report = click.prompt("Path of the analysis report in CI", default="analysis-report.json")
        # The Actions token cannot read GET /user and its bot cannot be requested as a reviewer
        config["reviewer_login"] = ACTIONS_BOT_LOGIN
        config["add_reviewer"] = False

    _write_config(config)
    console.print("[green]Created .prsentry.yml[/green]")

    if report is not None:
        _write_workflow(report)
        console.print("[green]Created .github/workflows/prsentry.yml[/green]")

    console.print("\n[bold green]Setup complete![/bold green]")
    console.print(
        f"Publish a report with: [bold]prsentry publish --repo {repo} --pr <number> --report <file>[/bold]"
    )


def _detect_repo_from_git() -> str | None:
    """Try to detect the GitHub repo slug from the git remote URL."""
    try:
        result = subprocess.run(
            ["git", "remote", "get-url", "origin"],
            capture_output=True,
            text=True,
            timeout=5,
        )
        if result.returncode != 0:
            return None
        url = result.stdout.strip()
        # https://github.com/owner/repo.git  →  owner/repo
        # git@github.com:owner/repo.git      →  owner/repo
        if "github.com" not in url:
            return None
        slug = url.split("github.com")[-1].lstrip("/:").removesuffix(".git")
        return slug if "/" in slug else None
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None


def _write_config(config: dict) -> None:
    """Write or update .prsentry.yml, preserving any existing keys."""
    path = Path(".prsentry.yml")
    existing: dict = {}
    if path.exists():
        existing = yaml.safe_load(path.read_text()) or {}
    existing.update(config)
    path.write_text(yaml.dump(existing, default_flow_style=False, sort_keys=False))


def _get_version() -> str:
    try:
        return version("prsentry")
    except PackageNotFoundError:
        return "0.1.0"


def _write_workflow(report: str) -> None:
    workflow_dir = Path(".github/workflows")
    workflow_dir.mkdir(parents=True, exist_ok=True)
    (workflow_dir / "prsentry.yml").write_text(_WORKFLOW_TEMPLATE.format(report=report, version=_get_version()))
