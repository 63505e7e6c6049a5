"""Mapping analysis findings onto the pull request diff."""

from __future__ import annotations

import logging
from typing import Iterable

from prsentry_core.models import DiffPosition, DiffReport

logger = logging.getLogger(__name__)


def _hunk_start(header: str) -> int | None:
    """New-file start line of a `@@ -a,b +c,d @@` header, or None if unparseable."""
    try:
        new_file_range = header.split("+")[1].split(" ")[0]
        return int(new_file_range.split(",")[0])
    except (IndexError, ValueError):
        return None


def get_diff_positions(patch_text: str) -> dict[int, int]:
    """
    Maps added new-file line numbers to their cumulative GitHub diff positions.

    Positions are cumulative across the whole patch, not reset per hunk. The @@
    header line is NOT counted: position 1 is the first line below the first
    header. Only added lines are mapped; context and removed lines are not
    places a finding can be commented on.
    """
    positions: dict[int, int] = {}
    diff_position = 0
    file_line: int | None = None

    # GitHub file patches carry no ---/+++ headers, so the first character decides.
    for line in patch_text.splitlines():
        if line.startswith("@@"):
            file_line = _hunk_start(line)
            continue
        if line.startswith("\\"):
            continue  # "\ No newline at end of file"

        diff_position += 1

        if line.startswith("+"):
            if file_line is not None:
                positions[file_line] = diff_position
                file_line += 1
        elif line.startswith("-"):
            pass  # removed line, no new-file line number
        elif file_line is not None:
            file_line += 1

    return positions


def build_diff_report(files: Iterable, head_sha: str | None = None) -> DiffReport:
    """Build a DiffReport from the changed files of a pull request.

    ``files`` are objects with ``filename``, ``status`` and ``patch`` attributes
    (PyGithub ``File``). Removed files and files without a patch (binaries,
    oversized diffs) contribute no visible line.
    """
    positions: dict[tuple[str, int], int] = {}
    for f in files:
        if f.status == "removed" or not f.patch:
            continue
        for line, position in get_diff_positions(f.patch).items():
            positions[(f.filename, line)] = position
    return DiffReport(positions=positions, head_sha=head_sha)


def normalize_path(path: str) -> str:
    path = path.replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    return path.lstrip("/")


def _match_path(path: str, diff_report: DiffReport) -> str | None:
    """Return the diff path a finding path refers to, or None.

    Analysers sometimes report absolute or prefixed paths; those match the diff
    path they end with. An ambiguous suffix (two diff files match) is no match.
    """
    known = diff_report.path_set
    normalized = normalize_path(path)
    if normalized in known:
        return normalized
    candidates = sorted(p for p in known if normalized.endswith("/" + p))
    if len(candidates) == 1:
        return candidates[0]
    if len(candidates) > 1:
        logger.debug("Ambiguous path %s matches %s in diff", path, candidates)
    return None


def locate(file: str, line: int | None, diff_report: DiffReport) -> DiffPosition | None:
    """Return where a finding at file:line can be commented, or None if not in the diff."""
    if not file or line is None:
        return None

    position = diff_report.positions.get((file, line))
    if position is not None:
        return DiffPosition(path=file, line=line, position=position)

    path = _match_path(file, diff_report)
    if path is None:
        return None
    position = diff_report.positions.get((path, line))
    if position is None:
        return None
    return DiffPosition(path=path, line=line, position=position)
