"""
UTF-16 helpers.

JavaScript strings are sequences of UTF-16 code units. They are represented
here as Python strings whose characters are code units: a character above
U+FFFF is stored as a surrogate pair, and lone surrogates are kept as-is.
"""

from typing import List

HIGH_SURROGATE_START = 0xD800
HIGH_SURROGATE_END = 0xDBFF
LOW_SURROGATE_START = 0xDC00
LOW_SURROGATE_END = 0xDFFF


def is_high_surrogate(unit: str) -> bool:
    return HIGH_SURROGATE_START <= ord(unit) <= HIGH_SURROGATE_END


def is_low_surrogate(unit: str) -> bool:
    return LOW_SURROGATE_START <= ord(unit) <= LOW_SURROGATE_END


def to_js_string(text: str) -> str:
    """Split characters above U+FFFF into surrogate pairs."""
    if all(ord(ch) <= 0xFFFF for ch in text):
        return text
    units = []
    for ch in text:
        cp = ord(ch)
        if cp > 0xFFFF:
            cp -= 0x10000
            units.append(chr(HIGH_SURROGATE_START + (cp >> 10)))
            units.append(chr(LOW_SURROGATE_START + (cp & 0x3FF)))
        else:
            units.append(ch)
    return "".join(units)


def from_js_string(s: str) -> str:
    """Join surrogate pairs back into single characters."""
    chars = []
    i = 0
    length = len(s)
    while i < length:
        ch = s[i]
        if is_high_surrogate(ch) and i + 1 < length and is_low_surrogate(s[i + 1]):
            cp = 0x10000 + ((ord(ch) - HIGH_SURROGATE_START) << 10)
            cp += ord(s[i + 1]) - LOW_SURROGATE_START
            chars.append(chr(cp))
            i += 2
        else:
            chars.append(ch)
            i += 1
    return "".join(chars)


def code_point_offsets(s: str) -> List[int]:
    """UTF-16 offset of every code point of ``s``, plus the total length.

    ``offsets[i]`` is where code point ``i`` of ``from_js_string(s)`` starts.
    """
    offsets = []
    i = 0
    length = len(s)
    while i < length:
        offsets.append(i)
        if is_high_surrogate(s[i]) and i + 1 < length and is_low_surrogate(s[i + 1]):
            i += 2
        else:
            i += 1
    offsets.append(length)
    return offsets


def utf16_to_codepoint_index(offsets: List[int], utf16_idx: int) -> int:
    """Convert a UTF-16 index to a code point index.

    An index pointing at the second half of a surrogate pair maps to the
    code point of the whole pair.
    """
    lo, hi = 0, len(offsets) - 1
    while lo < hi:
        mid = (lo + hi + 1) // 2
        if offsets[mid] <= utf16_idx:
            lo = mid
        else:
            hi = mid - 1
    return lo
