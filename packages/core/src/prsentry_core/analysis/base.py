"""Abstract analysis source.

A source hands the orchestrator the findings of one analysis run. How they
were produced (and in which native format) is the source's business.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prsentry_core.models import CoverageReport, IssueReport


class AnalysisSource(ABC):
    @abstractmethod
    def get_issue_report(self) -> IssueReport:
        """Return the issues found by the analysis."""

    @abstractmethod
    def get_coverage_report(self, severity: str) -> CoverageReport:
        """Return coverage findings, each tagged with ``severity``.

        Only called when coverage reporting is enabled (severity is not NONE).
        """
