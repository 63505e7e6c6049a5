"""Markdown bodies of the comments posted on the pull request."""

from __future__ import annotations

from urllib.parse import quote

from prsentry_core.models import (
    SEVERITIES,
    CoverageFinding,
    CoverageReport,
    DecisionInputs,
    Issue,
    IssueReport,
)

OVERVIEW_MARKER = "<!-- prsentry-overview -->"
FINDING_MARKER = "<!-- prsentry-finding -->"
MAX_LISTED_FINDINGS = 20


def rule_url(analysis_url: str | None, rule: str | None) -> str | None:
    if not analysis_url or not rule:
        return None
    return f"{analysis_url.rstrip('/')}/coding_rules#rule_key={quote(rule, safe='')}"


def format_issue_comment(issue: Issue, analysis_url: str | None = None) -> str:
    body = f"**[{issue.severity}]** {issue.message}"
    url = rule_url(analysis_url, issue.rule)
    if url:
        body += f"\n\n[Rule `{issue.rule}`]({url})"
    elif issue.rule:
        body += f"\n\nRule `{issue.rule}`"
    return f"{body}\n{FINDING_MARKER}"


def format_coverage_comment(finding: CoverageFinding) -> str:
    return (
        f"**[{finding.severity}]** Code coverage of `{finding.file}` lowered from "
        f"{finding.previous_coverage:.1f}% to {finding.coverage:.1f}%."
        f"\n{FINDING_MARKER}"
    )


def _location(finding: Issue | CoverageFinding) -> str:
    if finding.line is None:
        return f"`{finding.file}`"
    return f"`{finding.file}:{finding.line}`"


def _describe(finding: Issue | CoverageFinding) -> str:
    if isinstance(finding, Issue):
        return f"{_location(finding)} **[{finding.severity}]** {finding.message}"
    return (
        f"{_location(finding)} **[{finding.severity}]** coverage lowered from "
        f"{finding.previous_coverage:.1f}% to {finding.coverage:.1f}%"
    )


def build_overview(
    inputs: DecisionInputs,
    issue_report: IssueReport,
    coverage_report: CoverageReport,
    suppressed: bool,
    not_visible: tuple = (),
    analysis_url: str | None = None,
) -> str:
    """Build the overview comment. Counts are always the real ones, suppressed or not."""
    counts = issue_report.count_by_severity()
    lowered = coverage_report.count_lowered_issues()

    lines = ["## Static analysis overview\n"]

    if inputs.issue_number == 0 and inputs.coverage_evolution >= 0:
        verdict = "No new issues and no coverage regression."
    else:
        parts = []
        if issue_report.count_issues():
            parts.append(f"{issue_report.count_issues()} issue(s)")
        if lowered:
            parts.append(f"{lowered} file(s) with lowered coverage")
        if inputs.coverage_evolution < 0:
            parts.append("project coverage decreased")
        verdict = ", ".join(parts) + "."
        verdict = verdict[0].upper() + verdict[1:]
    lines.append(f"> {verdict}\n")

    lines.append(f"**{inputs.issue_number}** finding(s) in total · threshold **{inputs.threshold}**\n")

    lines.append("| Severity | Issues |")
    lines.append("|----------|:------:|")
    for severity in reversed(SEVERITIES):
        lines.append(f"| {severity} | {counts[severity] or '—'} |")

    if coverage_report.coverage is not None:
        coverage_line = f"\n**Coverage:** {coverage_report.coverage:.1f}%"
        if coverage_report.previous_coverage is not None:
            coverage_line += f" ({coverage_report.evolution:+.1f}%)"
        lines.append(coverage_line)
    if lowered:
        lines.append(f"\n**{lowered}** file(s) with lowered coverage.")

    if suppressed:
        lines.append(
            f"\n**Too many issues detected ({inputs.issue_number}/{inputs.threshold}):** "
            "findings are not displayed in the diff view."
        )

    if not_visible:
        lines.append(f"\n**{len(not_visible)}** finding(s) outside the diff:")
        for finding in not_visible[:MAX_LISTED_FINDINGS]:
            lines.append(f"- {_describe(finding)}")
        if len(not_visible) > MAX_LISTED_FINDINGS:
            lines.append(f"- _… and {len(not_visible) - MAX_LISTED_FINDINGS} more._")

    if analysis_url:
        lines.append(f"\n[Full analysis]({analysis_url})")

    return "\n".join(lines) + f"\n{OVERVIEW_MARKER}"
