"""
Legacy RegExp statics: RegExp.$1-$9, lastMatch, lastParen, leftContext,
rightContext and input.

They read the realm's most recent match record. Groups that do not exist or
did not participate read as the empty string.
"""

from typing import TYPE_CHECKING, Callable

from .match_info import (
    MatchInfo,
    capture_string,
    last_capture,
    last_input,
    last_subject,
    number_of_captures,
)
from .values import UNDEFINED, JSFunction, JSValue, to_string

if TYPE_CHECKING:
    from .realm import Realm

LEGACY_CAPTURE_COUNT = 9


def last_match(match_info: MatchInfo) -> str:
    return capture_string(match_info, 0)[0]


def last_paren(match_info: MatchInfo) -> str:
    group = number_of_captures(match_info) // 2 - 1
    if group <= 0:
        return ""
    return capture_string(match_info, group)[0]


def left_context(match_info: MatchInfo) -> str:
    return last_subject(match_info)[:last_capture(match_info, 0)]


def right_context(match_info: MatchInfo) -> str:
    return last_subject(match_info)[last_capture(match_info, 1):]


def legacy_input(match_info: MatchInfo) -> str:
    value = last_input(match_info)
    return "" if value is UNDEFINED else to_string(value)


def _getter(realm: "Realm", name: str, read: Callable[[MatchInfo], str]) -> JSFunction:
    def getter(this: JSValue, *args: JSValue) -> str:
        return read(realm.last_match_info)

    return JSFunction(f"get {name}", getter)


def install_legacy_statics(realm: "Realm") -> None:
    ctor = realm.regexp_constructor
    for n in range(1, LEGACY_CAPTURE_COUNT + 1):
        ctor.define_getter(
            f"${n}",
            _getter(realm, f"${n}", lambda info, n=n: capture_string(info, n)[0]),
        )

    aliases = (
        ("lastMatch", "$&", last_match),
        ("lastParen", "$+", last_paren),
        ("leftContext", "$`", left_context),
        ("rightContext", "$'", right_context),
        ("input", "$_", legacy_input),
    )
    for name, alias, read in aliases:
        ctor.define_getter(name, _getter(realm, name, read))
        ctor.define_getter(alias, _getter(realm, alias, read))
