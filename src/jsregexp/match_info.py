"""
Last-match record.

A MatchInfo holds the capture offsets produced by one successful match in a
fixed layout::

    [capture_count, subject, input, start0, end0, start1, end1, ...]

``capture_count`` counts offsets, not groups, so a pattern with ``n``
capturing groups yields ``2 * (n + 1)``. An offset of ``-1`` means the group
did not participate in the match.

Every builtin exec produces a fresh record; nothing here is shared between
unrelated matches.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

from .values import UNDEFINED, JSValue

CAPTURE_COUNT_INDEX = 0
SUBJECT_INDEX = 1
INPUT_INDEX = 2
FIRST_CAPTURE_INDEX = 3

NOT_MATCHED = -1


class MatchInfo:
    """Capture offsets into a subject string."""

    def __init__(
        self,
        subject: str,
        captures: Sequence[int],
        input: JSValue = UNDEFINED,
        group_names: Optional[Dict[str, int]] = None,
    ):
        self._fields: List[Any] = [len(captures), subject, input]
        self._fields.extend(captures)
        self.group_names: Dict[str, int] = dict(group_names or {})

    @classmethod
    def empty(cls) -> "MatchInfo":
        """Record describing an empty match of the empty string."""
        return cls("", [0, 0], "")

    def get_field(self, index: int) -> Any:
        return self._fields[index]

    def set_field(self, index: int, value: Any) -> None:
        if index >= len(self._fields):
            self._fields.extend([NOT_MATCHED] * (index + 1 - len(self._fields)))
        self._fields[index] = value

    @property
    def capture_count(self) -> int:
        return self._fields[CAPTURE_COUNT_INDEX]

    @property
    def subject(self) -> str:
        return self._fields[SUBJECT_INDEX]

    @property
    def input(self) -> JSValue:
        return self._fields[INPUT_INDEX]

    @property
    def captures(self) -> List[int]:
        start = FIRST_CAPTURE_INDEX
        return self._fields[start:start + self.capture_count]

    @property
    def group_count(self) -> int:
        """Number of groups, whole match included."""
        return self.capture_count // 2

    def __repr__(self) -> str:
        return f"MatchInfo({self.subject!r}, {self.captures!r})"


def get_last_match_field(match_info: MatchInfo, index: int) -> Any:
    return match_info.get_field(index)


def set_last_match_field(match_info: MatchInfo, index: int, value: Any) -> None:
    match_info.set_field(index, value)


def number_of_captures(match_info: MatchInfo) -> int:
    return get_last_match_field(match_info, CAPTURE_COUNT_INDEX)


def last_subject(match_info: MatchInfo) -> str:
    return get_last_match_field(match_info, SUBJECT_INDEX)


def last_input(match_info: MatchInfo) -> JSValue:
    return get_last_match_field(match_info, INPUT_INDEX)


def last_capture(match_info: MatchInfo, i: int) -> int:
    return get_last_match_field(match_info, FIRST_CAPTURE_INDEX + i)


def capture_string(match_info: MatchInfo, capture: int) -> Tuple[str, bool]:
    """Substring captured by group ``capture``.

    Returns ``("", False)`` both when the group does not exist (negative or
    past the last group) and when it
    did not participate in the match, so callers can render either as
    undefined. A group that matched the empty string returns ``("", True)``.
    """
    index = capture * 2
    if index < 0 or index >= number_of_captures(match_info):
        return "", False

    match_start = last_capture(match_info, index)
    match_end = last_capture(match_info, index + 1)
    if match_start == NOT_MATCHED or match_end == NOT_MATCHED:
        return "", False

    return last_subject(match_info)[match_start:match_end], True


def named_capture_string(match_info: MatchInfo, name: str) -> Tuple[str, bool]:
    """Substring captured by the named group ``name``."""
    capture = match_info.group_names.get(name)
    if capture is None:
        return "", False
    return capture_string(match_info, capture)
