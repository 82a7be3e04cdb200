"""
jsregexp - the ECMAScript RegExp abstract operations in pure Python.

Sits between RegExp-like objects and a pattern matching engine: dispatches
exec (user override or builtin), keeps lastIndex up to date, decodes capture
offsets from the last match and advances through strings one code point at a
time in unicode mode.
"""

__version__ = "0.1.0"

from .advance import advance_string_index, set_advanced_string_index
from .dispatch import BuiltinId, is_builtin_exec, is_regexp, regexp_exec
from .errors import (
    IncompatibleReceiverError,
    InvalidExecResultError,
    JSError,
    JSRangeError,
    JSSyntaxError,
    JSTypeError,
)
from .last_index import ReceiverKind, get_last_index, set_last_index
from .match_info import MatchInfo, capture_string, named_capture_string
from .realm import Realm
from .strings import (
    string_ends_with,
    string_includes,
    string_match,
    string_replace,
    string_search,
    string_split,
    string_starts_with,
)
from .utf16 import from_js_string, to_js_string
from .values import (
    NULL,
    UNDEFINED,
    SYMBOL_MATCH,
    SYMBOL_REPLACE,
    SYMBOL_SEARCH,
    SYMBOL_SPLIT,
    JSArray,
    JSFunction,
    JSObject,
    JSRegExp,
)

__all__ = [
    "Realm",
    "MatchInfo",
    "capture_string",
    "named_capture_string",
    "get_last_index",
    "set_last_index",
    "ReceiverKind",
    "regexp_exec",
    "is_builtin_exec",
    "is_regexp",
    "BuiltinId",
    "advance_string_index",
    "set_advanced_string_index",
    "string_match",
    "string_search",
    "string_replace",
    "string_split",
    "string_includes",
    "string_starts_with",
    "string_ends_with",
    "to_js_string",
    "from_js_string",
    "JSError",
    "JSTypeError",
    "JSRangeError",
    "JSSyntaxError",
    "InvalidExecResultError",
    "IncompatibleReceiverError",
    "JSObject",
    "JSArray",
    "JSFunction",
    "JSRegExp",
    "UNDEFINED",
    "NULL",
    "SYMBOL_MATCH",
    "SYMBOL_REPLACE",
    "SYMBOL_SEARCH",
    "SYMBOL_SPLIT",
]
