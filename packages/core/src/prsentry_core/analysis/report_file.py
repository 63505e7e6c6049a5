"""Analysis source reading a report document exported by the CI job.

The document is YAML (or JSON, which YAML reads as well):

    issues:
      - {file: src/app.py, line: 12, severity: MAJOR, message: "...", rule: "python:S1481"}
    coverage:
      previous: 81.0
      current: 79.5
      files:
        - {file: src/app.py, line: 10, previous: 90.0, current: 70.0}

The file is read once, on first use, and kept for the lifetime of the source.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from prsentry_core.analysis.base import AnalysisSource
from prsentry_core.errors import ReportError
from prsentry_core.models import (
    SEVERITIES,
    SEVERITY_RANK,
    CoverageFinding,
    CoverageReport,
    Issue,
    IssueReport,
)

logger = logging.getLogger(__name__)


def _number(value, what: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ReportError(f"{what} must be a number, got {value!r}")
    return float(value)


def _line(entry: dict, what: str) -> int | None:
    line = entry.get("line")
    if line is None:
        return None
    if isinstance(line, bool) or not isinstance(line, int) or line < 1:
        raise ReportError(f"{what}: line must be a positive integer, got {line!r}")
    return line


def _file(entry, what: str) -> str:
    if not isinstance(entry, dict):
        raise ReportError(f"{what} must be a mapping, got {entry!r}")
    file = entry.get("file")
    if not file or not isinstance(file, str):
        raise ReportError(f"{what} has no file")
    return file


class ReportFileSource(AnalysisSource):
    def __init__(self, path: str, min_severity: str = "INFO"):
        if min_severity not in SEVERITY_RANK:
            raise ValueError(f"Unknown severity: {min_severity!r}")
        self.path = Path(path)
        self.min_severity = min_severity
        self._document: dict | None = None

    def _load(self) -> dict:
        if self._document is not None:
            return self._document
        if not self.path.exists():
            raise ReportError(f"Analysis report not found: {self.path}")
        try:
            document = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ReportError(f"Cannot parse analysis report {self.path}: {e}") from e
        if not isinstance(document, dict):
            raise ReportError(f"Analysis report {self.path} must contain a mapping")
        self._document = document
        return document

    def get_issue_report(self) -> IssueReport:
        entries = self._load().get("issues") or []
        if not isinstance(entries, list):
            raise ReportError("'issues' must be a list")

        issues = []
        for i, entry in enumerate(entries):
            what = f"issues[{i}]"
            file = _file(entry, what)
            severity = str(entry.get("severity", "")).upper()
            if severity not in SEVERITY_RANK:
                raise ReportError(f"{what}: severity must be one of {', '.join(SEVERITIES)}")
            if SEVERITY_RANK[severity] < SEVERITY_RANK[self.min_severity]:
                continue
            issues.append(
                Issue(
                    file=file,
                    line=_line(entry, what),
                    severity=severity,
                    message=str(entry.get("message", "")).strip(),
                    rule=entry.get("rule"),
                )
            )

        skipped = len(entries) - len(issues)
        if skipped:
            logger.info("Ignored %d issue(s) below %s severity", skipped, self.min_severity)
        return IssueReport(issues=tuple(issues))

    def get_coverage_report(self, severity: str) -> CoverageReport:
        section = self._load().get("coverage")
        if not section:
            return CoverageReport.empty()
        if not isinstance(section, dict):
            raise ReportError("'coverage' must be a mapping")

        findings = []
        for i, entry in enumerate(section.get("files") or []):
            what = f"coverage.files[{i}]"
            file = _file(entry, what)
            findings.append(
                CoverageFinding(
                    file=file,
                    line=_line(entry, what),
                    severity=severity,
                    coverage=_number(entry.get("current"), f"{what}.current"),
                    previous_coverage=_number(entry.get("previous"), f"{what}.previous"),
                )
            )

        current = section.get("current")
        previous = section.get("previous")
        return CoverageReport(
            findings=tuple(findings),
            coverage=None if current is None else _number(current, "coverage.current"),
            previous_coverage=None if previous is None else _number(previous, "coverage.previous"),
        )
