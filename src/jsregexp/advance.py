"""AdvanceStringIndex and the lastIndex update built on it."""

from typing import TYPE_CHECKING

from .last_index import get_last_index, set_last_index
from .utf16 import is_high_surrogate, is_low_surrogate
from .values import JSValue, to_length

if TYPE_CHECKING:
    from .realm import Realm


def advance_string_index(string: str, index: int, unicode: bool) -> int:
    """
    Distance from ``index`` to the next scan position.

    Always 1, except in unicode mode when ``index`` starts a surrogate pair,
    where the whole pair is skipped and the result is 2. Lone surrogates are
    never combined.
    """
    if isinstance(index, bool) or not isinstance(index, int) or index < 0:
        raise ValueError(f"index must be a non-negative integer, got {index!r}")

    if not unicode or index + 1 >= len(string):
        return 1
    if is_high_surrogate(string[index]) and is_low_surrogate(string[index + 1]):
        return 2
    return 1


def set_advanced_string_index(
    realm: "Realm", regexp: JSValue, string: str, unicode: bool
) -> JSValue:
    """Move lastIndex past the current position, keeping surrogate pairs whole.

    Used after an empty match so global iteration always makes progress.
    """
    last_index = to_length(get_last_index(realm, regexp))
    new_last_index = last_index + advance_string_index(string, last_index, unicode)
    return set_last_index(realm, regexp, new_last_index)
