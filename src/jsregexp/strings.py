"""
String.prototype methods that hand off to RegExp.

match, search, replace and split look up the well-known symbol method on
their argument, so any object can take over; includes, startsWith and
endsWith refuse regex-like arguments.
"""

from typing import TYPE_CHECKING, List

from .builtins import MAX_SPLIT_LIMIT, get_substitution
from .dispatch import is_regexp
from .errors import JSTypeError
from .values import (
    UNDEFINED,
    NULL,
    SYMBOL_MATCH,
    SYMBOL_REPLACE,
    SYMBOL_SEARCH,
    SYMBOL_SPLIT,
    JSArray,
    JSSymbol,
    JSValue,
    call,
    get_method,
    get_property,
    is_callable,
    require_object_coercible,
    to_integer_or_infinity,
    to_string,
    to_uint32,
)

if TYPE_CHECKING:
    from .realm import Realm


def _delegate(value: JSValue, symbol: JSSymbol) -> JSValue:
    if value is UNDEFINED or value is NULL:
        return UNDEFINED
    return get_method(value, symbol)


def _invoke_created(realm: "Realm", regexp: JSValue, symbol: JSSymbol, s: str) -> JSValue:
    rx = realm.regexp_create(regexp, UNDEFINED)
    return call(get_property(rx, symbol), rx, s)


def string_match(realm: "Realm", this: JSValue, regexp: JSValue) -> JSValue:
    """String.prototype.match"""
    require_object_coercible(this, "String.prototype.match")
    matcher = _delegate(regexp, SYMBOL_MATCH)
    if matcher is not UNDEFINED:
        return call(matcher, regexp, this)
    return _invoke_created(realm, regexp, SYMBOL_MATCH, to_string(this))


def string_search(realm: "Realm", this: JSValue, regexp: JSValue) -> JSValue:
    """String.prototype.search"""
    require_object_coercible(this, "String.prototype.search")
    searcher = _delegate(regexp, SYMBOL_SEARCH)
    if searcher is not UNDEFINED:
        return call(searcher, regexp, this)
    return _invoke_created(realm, regexp, SYMBOL_SEARCH, to_string(this))


def string_replace(
    realm: "Realm", this: JSValue, search_value: JSValue, replace_value: JSValue
) -> JSValue:
    """String.prototype.replace; plain string search replaces the first hit."""
    require_object_coercible(this, "String.prototype.replace")
    replacer = _delegate(search_value, SYMBOL_REPLACE)
    if replacer is not UNDEFINED:
        return call(replacer, search_value, this, replace_value)

    s = to_string(this)
    search_string = to_string(search_value)
    functional = is_callable(replace_value)
    if not functional:
        replace_value = to_string(replace_value)

    position = s.find(search_string)
    if position == -1:
        return s
    if functional:
        replacement = to_string(call(replace_value, UNDEFINED, search_string, position, s))
    else:
        replacement = get_substitution(
            search_string, s, position, [], UNDEFINED, replace_value
        )
    return s[:position] + replacement + s[position + len(search_string):]


def string_split(
    realm: "Realm", this: JSValue, separator: JSValue, limit: JSValue = UNDEFINED
) -> JSValue:
    """String.prototype.split"""
    require_object_coercible(this, "String.prototype.split")
    splitter = _delegate(separator, SYMBOL_SPLIT)
    if splitter is not UNDEFINED:
        return call(splitter, separator, this, limit)

    s = to_string(this)
    lim = MAX_SPLIT_LIMIT if limit is UNDEFINED else to_uint32(limit)
    r = to_string(separator)
    parts = JSArray()
    if lim == 0:
        return parts
    if separator is UNDEFINED:
        parts.push(s)
        return parts

    if r == "":
        pieces: List[str] = list(s)
    elif s == "":
        pieces = [s]
    else:
        pieces = s.split(r)
    for piece in pieces[:lim]:
        parts.push(piece)
    return parts


def _reject_regexp(realm: "Realm", value: JSValue, method: str) -> None:
    if is_regexp(realm, value):
        raise JSTypeError(
            f"First argument to String.prototype.{method} must not be a regular expression"
        )


def _position(value: JSValue, default: int, length: int) -> int:
    if value is UNDEFINED:
        return default
    return int(min(max(to_integer_or_infinity(value), 0), length))


def string_includes(
    realm: "Realm", this: JSValue, search: JSValue, position: JSValue = UNDEFINED
) -> bool:
    require_object_coercible(this, "String.prototype.includes")
    s = to_string(this)
    _reject_regexp(realm, search, "includes")
    search_string = to_string(search)
    return search_string in s[_position(position, 0, len(s)):]


def string_starts_with(
    realm: "Realm", this: JSValue, search: JSValue, position: JSValue = UNDEFINED
) -> bool:
    require_object_coercible(this, "String.prototype.startsWith")
    s = to_string(this)
    _reject_regexp(realm, search, "startsWith")
    search_string = to_string(search)
    return s.startswith(search_string, _position(position, 0, len(s)))


def string_ends_with(
    realm: "Realm", this: JSValue, search: JSValue, end_position: JSValue = UNDEFINED
) -> bool:
    require_object_coercible(this, "String.prototype.endsWith")
    s = to_string(this)
    _reject_regexp(realm, search, "endsWith")
    search_string = to_string(search)
    end = _position(end_position, len(s), len(s))
    return s[:end].endswith(search_string)
