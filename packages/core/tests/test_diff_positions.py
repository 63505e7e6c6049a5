"""Tests for diff position calculation and finding location."""

import types

from prsentry_core.diff import build_diff_report, get_diff_positions, locate, normalize_path
from prsentry_core.models import DiffPosition, DiffReport


def test_single_hunk():
    patch = """\
@@ -1,3 +1,4 @@
 line one
+line two added
 line three
 line four"""
    positions = get_diff_positions(patch)
    # @@ is not counted; " line one" = pos 1, "+line two added" = pos 2
    assert positions == {2: 2}


def test_position_is_cumulative_across_hunks():
    """diff_position must NOT reset between hunks."""
    patch = """\
@@ -1,2 +1,3 @@
 context a
+added in hunk 1
 context b
@@ -10,2 +11,3 @@
 context c
+added in hunk 2
 context d"""
    positions = get_diff_positions(patch)
    assert positions[2] == 2
    # pos 3=" context b", pos 4=" context c", pos 5="+added in hunk 2" → file line 12
    assert positions[12] == 5


def test_removed_lines_do_not_increment_new_file_line():
    patch = """\
@@ -1,3 +1,2 @@
 context
-removed line
+added line"""
    positions = get_diff_positions(patch)
    assert positions[2] == 3


def test_context_lines_are_not_visible():
    patch = "@@ -1,2 +1,3 @@\n context\n+added\n context2"
    assert 1 not in get_diff_positions(patch)
    assert 3 not in get_diff_positions(patch)


def test_empty_patch():
    assert get_diff_positions("") == {}


def test_malformed_hunk_header_does_not_raise():
    patch = "@@ bad header @@\n+line one"
    assert get_diff_positions(patch) == {}


def test_removed_line_starting_with_dashes_is_still_removed():
    # "--- old" is the removed text "-- old", not a file header
    patch = "@@ -1,2 +1,2 @@\n keep\n--- old\n+new"
    assert get_diff_positions(patch) == {2: 3}


def test_added_line_starting_with_pluses_is_mapped():
    patch = "@@ -1,1 +1,2 @@\n a\n+++i;"
    assert get_diff_positions(patch) == {2: 2}


def test_no_newline_marker_moves_neither_line_nor_position():
    patch = "@@ -1,1 +1,3 @@\n a\n\\ No newline at end of file\n+b\n+c"
    assert get_diff_positions(patch) == {2: 2, 3: 3}


def test_no_newline_marker_after_rewritten_last_line():
    patch = "@@ -1 +1,2 @@\n-a\n\\ No newline at end of file\n+a\n+b"
    assert get_diff_positions(patch) == {1: 2, 2: 3}


def _file(filename, patch, status="modified"):
    return types.SimpleNamespace(filename=filename, patch=patch, status=status)


class TestBuildDiffReport:
    def test_positions_keyed_by_path_and_line(self):
        report = build_diff_report(
            [
                _file("src/a.py", "@@ -1,1 +1,2 @@\n a\n+b"),
                _file("src/b.py", "@@ -0,0 +1,1 @@\n+new"),
            ],
            head_sha="abc",
        )
        assert report.positions == {("src/a.py", 2): 2, ("src/b.py", 1): 1}
        assert report.head_sha == "abc"
        assert report.paths() == ["src/a.py", "src/b.py"]

    def test_removed_and_binary_files_contribute_nothing(self):
        report = build_diff_report(
            [
                _file("gone.py", "@@ -1,1 +0,0 @@\n-x", status="removed"),
                _file("logo.png", None, status="added"),
            ]
        )
        assert report.positions == {}

    def test_no_files_is_an_empty_report(self):
        assert build_diff_report([]).positions == {}


class TestLocate:
    REPORT = DiffReport(positions={("src/app.py", 12): 4, ("lib/app.py", 3): 1})

    def test_exact_match(self):
        assert locate("src/app.py", 12, self.REPORT) == DiffPosition("src/app.py", 12, 4)

    def test_line_not_in_diff(self):
        assert locate("src/app.py", 13, self.REPORT) is None

    def test_file_not_in_diff(self):
        assert locate("src/other.py", 12, self.REPORT) is None

    def test_finding_without_line_is_not_visible(self):
        assert locate("src/app.py", None, self.REPORT) is None

    def test_relative_prefix_is_normalized(self):
        assert locate("./src/app.py", 12, self.REPORT) == DiffPosition("src/app.py", 12, 4)

    def test_windows_separators_are_normalized(self):
        assert locate("src\\app.py", 12, self.REPORT) == DiffPosition("src/app.py", 12, 4)

    def test_absolute_path_matches_by_suffix(self):
        assert locate("/home/ci/work/repo/src/app.py", 12, self.REPORT) == DiffPosition("src/app.py", 12, 4)

    def test_ambiguous_suffix_is_not_visible(self):
        report = DiffReport(positions={("a/app.py", 1): 1, ("b/a/app.py", 1): 2})
        # "/ws/b/a/app.py" ends with both "/a/app.py" and "/b/a/app.py"
        assert locate("/ws/b/a/app.py", 1, report) is None

    def test_empty_report(self):
        assert locate("src/app.py", 12, DiffReport()) is None


def test_normalize_path():
    assert normalize_path("./././x/y.py") == "x/y.py"
    assert normalize_path("/abs/x.py") == "abs/x.py"
    assert normalize_path("x\\y.py") == "x/y.py"


def test_path_set_is_computed_once():
    report = DiffReport(positions={("src/app.py", 1): 1, ("lib/app.py", 2): 2})
    assert report.path_set == frozenset({"src/app.py", "lib/app.py"})
    assert report.path_set is report.path_set
    assert locate("/ws/src/app.py", 1, report) == DiffPosition("src/app.py", 1, 1)
