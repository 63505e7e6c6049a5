"""Tests for the report-file analysis source."""

import json

import pytest
import yaml

from prsentry_core.analysis.report_file import ReportFileSource
from prsentry_core.errors import ReportError

REPORT = """\
issues:
  - {file: src/app.py, line: 12, severity: major, message: "Remove unused variable", rule: "python:S1481"}
  - {file: src/app.py, line: 30, severity: INFO, message: "Add a docstring"}
  - {file: src/db.py, severity: BLOCKER, message: "Hard-coded password"}
coverage:
  previous: 81.0
  current: 79.5
  files:
    - {file: src/app.py, line: 10, previous: 90.0, current: 70.0}
    - {file: src/db.py, previous: 50.0, current: 55.0}
"""


def write(tmp_path, text, name="report.yml"):
    path = tmp_path / name
    path.write_text(text)
    return str(path)


class TestIssues:
    def test_issues_read_in_order(self, tmp_path):
        report = ReportFileSource(write(tmp_path, REPORT)).get_issue_report()
        assert report.count_issues() == 3
        first = report.issues[0]
        assert (first.file, first.line, first.severity, first.rule) == ("src/app.py", 12, "MAJOR", "python:S1481")
        assert report.issues[2].line is None

    def test_issues_below_min_severity_dropped(self, tmp_path):
        report = ReportFileSource(write(tmp_path, REPORT), min_severity="MAJOR").get_issue_report()
        assert [i.severity for i in report.issues] == ["MAJOR", "BLOCKER"]

    def test_json_document(self, tmp_path):
        document = {"issues": [{"file": "a.py", "line": 1, "severity": "MINOR", "message": "x"}]}
        path = write(tmp_path, json.dumps(document), name="report.json")
        assert ReportFileSource(path).get_issue_report().count_issues() == 1

    def test_empty_document(self, tmp_path):
        source = ReportFileSource(write(tmp_path, ""))
        assert source.get_issue_report().count_issues() == 0
        assert source.get_coverage_report("MAJOR").count_lowered_issues() == 0

    def test_unknown_severity_raises(self, tmp_path):
        path = write(tmp_path, "issues:\n  - {file: a.py, line: 1, severity: HIGH, message: x}\n")
        with pytest.raises(ReportError, match="severity"):
            ReportFileSource(path).get_issue_report()

    def test_issue_without_file_raises(self, tmp_path):
        path = write(tmp_path, "issues:\n  - {line: 1, severity: MAJOR, message: x}\n")
        with pytest.raises(ReportError, match="no file"):
            ReportFileSource(path).get_issue_report()

    @pytest.mark.parametrize("line", ["0", "-1", "'12'", "true"])
    def test_invalid_line_raises(self, tmp_path, line):
        path = write(tmp_path, f"issues:\n  - {{file: a.py, line: {line}, severity: MAJOR, message: x}}\n")
        with pytest.raises(ReportError, match="line"):
            ReportFileSource(path).get_issue_report()

    def test_issues_must_be_a_list(self, tmp_path):
        with pytest.raises(ReportError):
            ReportFileSource(write(tmp_path, "issues: nope\n")).get_issue_report()

    def test_unknown_min_severity_rejected(self, tmp_path):
        with pytest.raises(ValueError):
            ReportFileSource(write(tmp_path, REPORT), min_severity="NONE")


class TestCoverage:
    def test_findings_take_configured_severity(self, tmp_path):
        coverage = ReportFileSource(write(tmp_path, REPORT)).get_coverage_report("CRITICAL")
        assert [f.severity for f in coverage.findings] == ["CRITICAL", "CRITICAL"]
        assert coverage.count_lowered_issues() == 1
        assert coverage.lowered_findings()[0].line == 10
        assert coverage.evolution == -1.5

    def test_no_coverage_section_is_empty_report(self, tmp_path):
        coverage = ReportFileSource(write(tmp_path, "issues: []\n")).get_coverage_report("MAJOR")
        assert coverage.findings == ()
        assert coverage.evolution == 0.0

    def test_non_numeric_coverage_raises(self, tmp_path):
        path = write(tmp_path, "coverage:\n  files:\n    - {file: a.py, previous: high, current: 1}\n")
        with pytest.raises(ReportError, match="previous"):
            ReportFileSource(path).get_coverage_report("MAJOR")


class TestDocument:
    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(ReportError, match="not found"):
            ReportFileSource(str(tmp_path / "missing.yml")).get_issue_report()

    def test_malformed_yaml_raises(self, tmp_path):
        with pytest.raises(ReportError, match="Cannot parse"):
            ReportFileSource(write(tmp_path, "issues: [unclosed\n")).get_issue_report()

    def test_non_mapping_document_raises(self, tmp_path):
        with pytest.raises(ReportError, match="mapping"):
            ReportFileSource(write(tmp_path, "- 1\n- 2\n")).get_issue_report()

    def test_document_read_once(self, tmp_path, mocker):
        source = ReportFileSource(write(tmp_path, REPORT))
        safe_load = mocker.patch.object(yaml, "safe_load", wraps=yaml.safe_load)
        source.get_issue_report()
        source.get_coverage_report("MAJOR")
        assert safe_load.call_count == 1
