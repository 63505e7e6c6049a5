"""Exceptions raised by prsentry.

Missing platform preconditions (no reviewer identity, no diff) are not
exceptions — they come back as RunStatus variants from run_publication.
"""

from __future__ import annotations


class PrsentryError(Exception):
    """Base class for every error raised by prsentry."""


class ConfigurationError(PrsentryError):
    """Mandatory configuration is missing or malformed."""


class ReportError(PrsentryError):
    """The analysis report document cannot be read or is malformed."""


class TransportError(PrsentryError):
    """A call to the review platform failed.

    The original exception (usually a GithubException) is kept as __cause__.
    """

    def __init__(self, operation: str, detail: str):
        super().__init__(f"{operation} failed: {detail}")
        self.operation = operation
        self.detail = detail
