"""Line-level diff between two script texts.

Contract:
- Inputs: Previous and current text
- Outputs: Lazy, restartable sequence of DiffLine records
- Side Effects: None
"""

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum


class DiffType(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class DiffLine:
    """One line of a diff.

    Unchanged lines carry both line numbers, added lines only ``new_line``
    and removed lines only ``old_line``. Line numbers are 1-based.
    """

    type: DiffType
    content: str
    old_line: int | None = None
    new_line: int | None = None

    @property
    def is_change(self) -> bool:
        return self.type is not DiffType.UNCHANGED


@dataclass(frozen=True)
class DiffStats:
    added: int
    removed: int
    unchanged: int


class LineDiff:
    """LCS-based line diff of ``previous`` against ``current``.

    Iterating computes the diff lazily; every iteration starts over and
    yields the same records.

    Example:
        >>> diff = LineDiff("a\\nb\\nc", "a\\nB\\nc")
        >>> [(d.type.value, d.content) for d in diff]
        [('unchanged', 'a'), ('removed', 'b'), ('added', 'B'), ('unchanged', 'c')]
    """

    def __init__(self, previous: str, current: str) -> None:
        self.old_lines = previous.splitlines()
        self.new_lines = current.splitlines()

    def __iter__(self) -> Iterator[DiffLine]:
        old, new = self.old_lines, self.new_lines

        # Common prefix and suffix never need the LCS table
        prefix = 0
        while prefix < len(old) and prefix < len(new) and old[prefix] == new[prefix]:
            prefix += 1
        suffix = 0
        while (
            suffix < len(old) - prefix
            and suffix < len(new) - prefix
            and old[len(old) - 1 - suffix] == new[len(new) - 1 - suffix]
        ):
            suffix += 1

        for i in range(prefix):
            yield DiffLine(DiffType.UNCHANGED, old[i], old_line=i + 1, new_line=i + 1)

        yield from self._diff_middle(prefix, len(old) - suffix, prefix, len(new) - suffix)

        for k in range(suffix, 0, -1):
            i, j = len(old) - k, len(new) - k
            yield DiffLine(DiffType.UNCHANGED, old[i], old_line=i + 1, new_line=j + 1)

    def _diff_middle(self, old_start: int, old_end: int, new_start: int, new_end: int) -> Iterator[DiffLine]:
        a = self.old_lines[old_start:old_end]
        b = self.new_lines[new_start:new_end]
        n, m = len(a), len(b)

        # lcs[i][j] = length of the LCS of a[i:] and b[j:]
        lcs = [[0] * (m + 1) for _ in range(n + 1)]
        for i in range(n - 1, -1, -1):
            for j in range(m - 1, -1, -1):
                if a[i] == b[j]:
                    lcs[i][j] = lcs[i + 1][j + 1] + 1
                else:
                    lcs[i][j] = max(lcs[i + 1][j], lcs[i][j + 1])

        i = j = 0
        while i < n or j < m:
            if i < n and j < m and a[i] == b[j]:
                yield DiffLine(DiffType.UNCHANGED, a[i], old_line=old_start + i + 1, new_line=new_start + j + 1)
                i += 1
                j += 1
            elif j >= m or (i < n and lcs[i + 1][j] >= lcs[i][j + 1]):
                yield DiffLine(DiffType.REMOVED, a[i], old_line=old_start + i + 1)
                i += 1
            else:
                yield DiffLine(DiffType.ADDED, b[j], new_line=new_start + j + 1)
                j += 1

    def change_starts(self) -> Iterator[int]:
        """Indices of the first record of each run of changes.

        Drives "jump to next change" navigation.
        """
        in_change = False
        for index, line in enumerate(self):
            if line.is_change and not in_change:
                yield index
            in_change = line.is_change

    def stats(self) -> DiffStats:
        counts = {diff_type: 0 for diff_type in DiffType}
        for line in self:
            counts[line.type] += 1
        return DiffStats(
            added=counts[DiffType.ADDED],
            removed=counts[DiffType.REMOVED],
            unchanged=counts[DiffType.UNCHANGED],
        )

    @property
    def has_changes(self) -> bool:
        return any(line.is_change for line in self)
