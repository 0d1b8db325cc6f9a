"""
Unit tests for LineDiff.

Tests diff records, line numbering, stats and change navigation.
"""

import pytest

from loadout_library.tracking import DiffType
from loadout_library.tracking import LineDiff


def reconstruct(diff: LineDiff) -> tuple[list[str], list[str]]:
    old = [line.content for line in diff if line.type is not DiffType.ADDED]
    new = [line.content for line in diff if line.type is not DiffType.REMOVED]
    return old, new


@pytest.mark.unit
class TestLineDiff:
    """Test diff records."""

    def test_single_line_replacement(self) -> None:
        """Test a replaced line shows as removed then added."""
        diff = LineDiff("a\nb\nc", "a\nB\nc")

        assert [(d.type, d.content) for d in diff] == [
            (DiffType.UNCHANGED, "a"),
            (DiffType.REMOVED, "b"),
            (DiffType.ADDED, "B"),
            (DiffType.UNCHANGED, "c"),
        ]

    def test_identical_texts_have_no_changes(self) -> None:
        diff = LineDiff("x\ny\n", "x\ny\n")

        assert not diff.has_changes
        assert all(line.type is DiffType.UNCHANGED for line in diff)

    def test_empty_previous_is_all_added(self) -> None:
        diff = LineDiff("", "one\ntwo")

        assert [line.type for line in diff] == [DiffType.ADDED, DiffType.ADDED]

    def test_empty_current_is_all_removed(self) -> None:
        diff = LineDiff("one\ntwo", "")

        assert [line.type for line in diff] == [DiffType.REMOVED, DiffType.REMOVED]

    @pytest.mark.parametrize(
        ("previous", "current"),
        [
            ("a\nb\nc\nd", "a\nc\nd\ne"),
            ("x\ny\nz", "z\ny\nx"),
            ("same\nsame\nsame", "same\nother\nsame"),
            ("", "only"),
            ("1\n2\n3\n4\n5", "0\n1\n3\n5\n6"),
        ],
    )
    def test_unchanged_and_removed_rebuild_old_text(self, previous: str, current: str) -> None:
        """Test dropping added lines yields the old text and dropping removed lines the new text."""
        old, new = reconstruct(LineDiff(previous, current))

        assert old == previous.splitlines()
        assert new == current.splitlines()

    def test_iteration_is_restartable(self) -> None:
        diff = LineDiff("a\nb", "a\nc")

        assert list(diff) == list(diff)


@pytest.mark.unit
class TestLineNumbers:
    """Test 1-based line numbers on diff records."""

    def test_unchanged_lines_carry_both_numbers(self) -> None:
        diff = list(LineDiff("keep\nold\ntail", "new\nkeep\ntail"))

        keep = next(line for line in diff if line.content == "keep")
        tail = next(line for line in diff if line.content == "tail")
        assert (keep.old_line, keep.new_line) == (1, 2)
        assert (tail.old_line, tail.new_line) == (3, 3)

    def test_added_and_removed_carry_one_number(self) -> None:
        diff = list(LineDiff("a\nb\nc", "a\nB\nc"))

        removed = next(line for line in diff if line.type is DiffType.REMOVED)
        added = next(line for line in diff if line.type is DiffType.ADDED)
        assert (removed.old_line, removed.new_line) == (2, None)
        assert (added.old_line, added.new_line) == (None, 2)


@pytest.mark.unit
class TestStatsAndNavigation:
    """Test stats and change_starts."""

    def test_stats_counts_each_type(self) -> None:
        stats = LineDiff("a\nb\nc", "a\nB\nc\nd").stats()

        assert stats.added == 2
        assert stats.removed == 1
        assert stats.unchanged == 2

    def test_change_starts_marks_each_run(self) -> None:
        """Test change_starts returns the first index of each run of changes."""
        diff = LineDiff("a\nb\nc\nd\ne", "a\nB\nc\nd\nE")

        # a, -b, +B, c, d, -e, +E
        assert list(diff.change_starts()) == [1, 5]

    def test_change_starts_empty_without_changes(self) -> None:
        assert list(LineDiff("a", "a").change_starts()) == []
