"""
Matching engine adapter.

Translates JavaScript patterns into Python ``re`` patterns and runs them
against UTF-16 subject strings. The engine's whole contract with the rest of
the package is ``CompiledPattern.exec(subject, start, sticky)``, which returns
a populated MatchInfo or None.

Known differences from a full JavaScript engine:
- ``\\b``, ``\\B`` and the negated classes inside ``[...]`` use Python's
  Unicode word/digit/space definitions
- lookbehind must be fixed width
- Unicode property escapes (``\\p{...}``) are rejected
"""

import logging
import re
from typing import Dict, List, Optional, Set

from .match_info import MatchInfo
from .utf16 import (
    code_point_offsets,
    from_js_string,
    to_js_string,
    utf16_to_codepoint_index,
    HIGH_SURROGATE_START,
    HIGH_SURROGATE_END,
    LOW_SURROGATE_START,
    LOW_SURROGATE_END,
)

logger = logging.getLogger(__name__)


class RegExpError(Exception):
    """Exception raised for patterns the engine cannot compile."""
    pass


_SPACE_CHARS = (
    "\\t\\n\\v\\f\\r \\u00a0\\u1680\\u2000-\\u200a"
    "\\u2028\\u2029\\u202f\\u205f\\u3000\\ufeff"
)
_LINE_TERMINATORS = "\\n\\r\\u2028\\u2029"

# Escapes usable both inside and outside a class
_CLASS_SHORTHANDS = {
    "d": "0-9",
    "w": "a-zA-Z0-9_",
    "s": _SPACE_CHARS,
}
_NEGATED_SHORTHANDS = {"D": "d", "W": "w", "S": "s"}
_CONTROL_ESCAPES = {"f", "n", "r", "t", "v"}

_DOT = f"[^{_LINE_TERMINATORS}]"
_DOT_ALL = "(?s:.)"
_LINE_START_M = f"(?:\\A|(?<=[{_LINE_TERMINATORS}]))"
_LINE_END = "\\Z"
_LINE_END_M = f"(?=[{_LINE_TERMINATORS}]|\\Z)"
_NEVER = "(?!)"

_HEX = "0123456789abcdefABCDEF"
_DIGITS = "0123456789"
_OCTAL_DIGITS = "01234567"


def _scan_groups(source: str) -> List[Optional[str]]:
    """Names of the capturing groups in order (None for unnamed groups)."""
    groups: List[Optional[str]] = []
    i = 0
    in_class = False
    while i < len(source):
        ch = source[i]
        if ch == "\\":
            i += 2
            continue
        if in_class:
            if ch == "]":
                in_class = False
        elif ch == "[":
            in_class = True
        elif ch == "(":
            if source.startswith("(?<", i) and source[i + 3:i + 4] not in ("=", "!"):
                end = source.find(">", i + 3)
                groups.append(source[i + 3:end] if end != -1 else None)
            elif not source.startswith("(?", i):
                groups.append(None)
        i += 1
    return groups


class PatternTranslator:
    """Rewrites one JavaScript pattern into Python ``re`` syntax."""

    def __init__(self, source: str, flags: str = ""):
        self.unicode = "u" in flags
        self.multiline = "m" in flags
        self.dotall = "s" in flags
        self.source = from_js_string(source) if self.unicode else source
        self.pos = 0
        self.groups = _scan_groups(self.source)
        self._open: List[int] = []
        self._closed: Set[int] = set()
        self._group_number = 0
        # JS group name -> group number; Python only ever sees numbered groups
        self.group_names: Dict[str, int] = {}

    def translate(self) -> str:
        out: List[str] = []
        while self.pos < len(self.source):
            ch = self._advance()
            if ch == "\\":
                out.append(self._escape(in_class=False))
            elif ch == "[":
                out.append(self._char_class())
            elif ch == "(":
                out.append(self._group_open())
            elif ch == ")":
                if self._open:
                    self._closed.add(self._open.pop())
                out.append(")")
            elif ch == ".":
                out.append(_DOT_ALL if self.dotall else _DOT)
            elif ch == "^":
                out.append(_LINE_START_M if self.multiline else "^")
            elif ch == "$":
                out.append(_LINE_END_M if self.multiline else _LINE_END)
            else:
                out.append(ch)
        return "".join(out)

    def _peek(self, offset: int = 0) -> str:
        idx = self.pos + offset
        return self.source[idx] if idx < len(self.source) else ""

    def _advance(self) -> str:
        ch = self.source[self.pos]
        self.pos += 1
        return ch

    def _group_open(self) -> str:
        if self._peek() != "?":
            self._group_number += 1
            self._open.append(self._group_number)
            return "("
        if self._peek(1) == "<" and self._peek(2) not in ("=", "!"):
            end = self.source.find(">", self.pos)
            if end == -1:
                raise RegExpError("Invalid capture group name")
            name = to_js_string(self.source[self.pos + 2:end])
            if not name or name[0].isdigit() or name in self.group_names:
                raise RegExpError(f"Invalid capture group name '{name}'")
            self.pos = end + 1
            self._group_number += 1
            self._open.append(self._group_number)
            self.group_names[name] = self._group_number
            return "("
        # Non-capturing and lookaround groups close without a number
        self._open.append(0)
        return "("

    def _backref(self, number: int) -> str:
        # A reference to a group that has not closed yet matches empty
        if number not in self._closed:
            return ""
        return f"(?:(?({number})\\{number}))"

    def _hex_digits(self, count: int) -> Optional[int]:
        digits = self.source[self.pos:self.pos + count]
        if len(digits) == count and all(c in _HEX for c in digits):
            self.pos += count
            return int(digits, 16)
        return None

    def _literal(self, cp: int) -> str:
        if cp > 0xFFFF:
            return f"\\U{cp:08x}"
        return f"\\u{cp:04x}"

    def _unicode_escape(self) -> Optional[int]:
        if self.unicode and self._peek() == "{":
            end = self.source.find("}", self.pos)
            digits = self.source[self.pos + 1:end] if end != -1 else ""
            if not digits or any(c not in _HEX for c in digits):
                raise RegExpError("Invalid Unicode escape")
            cp = int(digits, 16)
            if cp > 0x10FFFF:
                raise RegExpError("Invalid Unicode escape")
            self.pos = end + 1
            return cp
        cp = self._hex_digits(4)
        if cp is None:
            return None
        if (
            self.unicode
            and HIGH_SURROGATE_START <= cp <= HIGH_SURROGATE_END
            and self.source.startswith("\\u", self.pos)
        ):
            saved = self.pos
            self.pos += 2
            low = self._hex_digits(4)
            if low is not None and LOW_SURROGATE_START <= low <= LOW_SURROGATE_END:
                return 0x10000 + ((cp - HIGH_SURROGATE_START) << 10) + (low - LOW_SURROGATE_START)
            self.pos = saved
        return cp

    def _is_next(self, chars: str) -> bool:
        ch = self._peek()
        return ch != "" and ch in chars

    def _decimal_escape(self, first: str, in_class: bool) -> str:
        start = self.pos
        digits = first
        while self._is_next(_DIGITS):
            digits += self._advance()
        number = int(digits)
        if not in_class and first != "0" and number <= len(self.groups):
            return self._backref(number)
        if self.unicode:
            raise RegExpError("Invalid escape")

        # Legacy octal escape, digits past it are literal
        self.pos = start
        if first in "89":
            return first
        octal = first
        while len(octal) < 3 and self._is_next(_OCTAL_DIGITS):
            if int(octal + self._peek(), 8) > 0o377:
                break
            octal += self._advance()
        return self._literal(int(octal, 8))

    def _escape(self, in_class: bool) -> str:
        if self.pos >= len(self.source):
            raise RegExpError("\\ at end of pattern")
        ch = self._advance()

        if ch in _CLASS_SHORTHANDS:
            body = _CLASS_SHORTHANDS[ch]
            return body if in_class else f"[{body}]"
        if ch in _NEGATED_SHORTHANDS:
            if in_class:
                return f"\\{ch}"
            return f"[^{_CLASS_SHORTHANDS[_NEGATED_SHORTHANDS[ch]]}]"
        if ch in _CONTROL_ESCAPES:
            return f"\\{ch}"
        if ch in ("b", "B"):
            if in_class:
                return "\\x08" if ch == "b" else "B"
            return f"\\{ch}"
        if ch == "0" and not self._peek().isdigit():
            return "\\x00"
        if ch.isdigit() and ch.isascii():
            return self._decimal_escape(ch, in_class)
        if ch == "x":
            cp = self._hex_digits(2)
            return "x" if cp is None else self._literal(cp)
        if ch == "u":
            cp = self._unicode_escape()
            return "u" if cp is None else self._literal(cp)
        if ch == "c":
            letter = self._peek()
            if letter.isascii() and letter.isalpha():
                self.pos += 1
                return self._literal(ord(letter) % 32)
            return "\\\\c"
        if ch == "k" and self._peek() == "<" and not in_class:
            end = self.source.find(">", self.pos)
            name = self.source[self.pos + 1:end] if end != -1 else None
            if name is None or name not in self.groups:
                if self.unicode or any(self.groups):
                    raise RegExpError("Invalid named reference")
                return "k"
            self.pos = end + 1
            return self._backref(self.groups.index(name) + 1)
        if ch in ("p", "P") and self.unicode:
            raise RegExpError("Unicode property escapes are not supported")
        return re.escape(ch)

    def _char_class(self) -> str:
        negated = False
        if self._peek() == "^":
            negated = True
            self.pos += 1
        parts: List[str] = []
        while True:
            if self.pos >= len(self.source):
                raise RegExpError("Unterminated character class")
            ch = self._advance()
            if ch == "]":
                break
            if ch == "\\":
                parts.append(self._escape(in_class=True))
            elif ch in "[&~|":
                parts.append("\\" + ch)
            elif ch == "-" and self._peek() == "-":
                parts.append("\\-")
            else:
                parts.append(ch)
        if not parts:
            return "[\\s\\S]" if negated else _NEVER
        return ("[^" if negated else "[") + "".join(parts) + "]"


class CompiledPattern:
    """A compiled pattern bound to its JavaScript flags."""

    def __init__(
        self,
        source: str,
        flags: str,
        regex: "re.Pattern[str]",
        group_names: Optional[Dict[str, int]] = None,
    ):
        self.source = source
        self.flags = flags
        self.unicode = "u" in flags
        self._regex = regex
        self.group_names: Dict[str, int] = dict(group_names or {})

    @property
    def capture_count(self) -> int:
        """Number of capture offsets a match records, whole match included."""
        return (self._regex.groups + 1) * 2

    def exec(self, subject: str, start: int, sticky: bool = False) -> Optional[MatchInfo]:
        """
        Match ``subject`` from UTF-16 offset ``start``.

        Args:
            subject: The subject string (UTF-16 code units)
            start: Offset to start matching at
            sticky: Only try a match at ``start``

        Returns:
            MatchInfo with UTF-16 offsets, or None if there is no match
        """
        if self.unicode:
            offsets = code_point_offsets(subject)
            text = from_js_string(subject)
            pos = utf16_to_codepoint_index(offsets, start)
        else:
            offsets = None
            text = subject
            pos = start

        m = self._regex.match(text, pos) if sticky else self._regex.search(text, pos)
        if m is None:
            return None

        captures: List[int] = []
        for group in range(self._regex.groups + 1):
            begin, end = m.span(group)
            if offsets is not None and begin != -1:
                begin, end = offsets[begin], offsets[end]
            captures.extend((begin, end))
        return MatchInfo(subject, captures, group_names=self.group_names)

    def __repr__(self) -> str:
        return f"CompiledPattern(/{self.source}/{self.flags})"


class PythonRegexEngine:
    """Default engine, backed by the standard ``re`` module."""

    def compile(self, source: str, flags: str) -> CompiledPattern:
        translator = PatternTranslator(source, flags)
        translated = translator.translate()
        re_flags = re.IGNORECASE if "i" in flags else 0
        try:
            regex = re.compile(translated, re_flags)
        except re.error as e:
            logger.debug("re rejected /%s/%s as %r: %s", source, flags, translated, e)
            raise RegExpError(str(e)) from e
        return CompiledPattern(source, flags, regex, translator.group_names)
