"""Line-based change summaries between two page bodies."""

import difflib

from .models import ChangeSet
from .models import DiffSegment


def _lines(text: str) -> list[str]:
    # Only "\n" separates lines; "\r" and other terminators stay in the line.
    if not text:
        return []
    return text.split("\n")


def summarize(old_body: str, new_body: str) -> ChangeSet:
    """Diff two bodies line by line and count added and removed lines.

    A replaced run of lines counts as a removed segment followed by an added
    segment. Identical inputs always produce an empty change set, and any
    difference at all, line endings included, is a change.

    >>> summarize("line1\\nline2\\nline3", "line1\\nlineX\\nline3\\nline4").summary
    '+2 -1 lines'
    """
    old_lines = _lines(old_body)
    new_lines = _lines(new_body)

    segments: list[DiffSegment] = []
    matcher = difflib.SequenceMatcher(None, old_lines, new_lines, autojunk=False)
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            segments.append(DiffSegment(kind="unchanged", line_count=i2 - i1))
            continue
        if tag in ("delete", "replace"):
            segments.append(DiffSegment(kind="removed", line_count=i2 - i1))
        if tag in ("insert", "replace"):
            segments.append(DiffSegment(kind="added", line_count=j2 - j1))

    added = sum(s.line_count for s in segments if s.kind == "added")
    removed = sum(s.line_count for s in segments if s.kind == "removed")
    return ChangeSet(
        has_changes=old_body != new_body,
        added_lines=added,
        removed_lines=removed,
        segments=segments,
    )

