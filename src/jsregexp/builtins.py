"""
RegExp.prototype builtins.

Everything here accepts any object as receiver and reaches the matcher only
through ``regexp_exec``, so user overrides of exec, lastIndex and the flag
getters are observed the way the language requires. Canonical receivers
whose exec is still the builtin skip the per-iteration exec lookup.
"""

from typing import TYPE_CHECKING, List

from .advance import advance_string_index, set_advanced_string_index
from .dispatch import BuiltinId, is_builtin_exec, regexp_exec
from .errors import IncompatibleReceiverError, JSTypeError
from .last_index import get_last_index, set_last_index
from .match_info import (
    INPUT_INDEX,
    MatchInfo,
    capture_string,
    last_capture,
    named_capture_string,
)
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
    JSValue,
    call,
    get_property,
    is_callable,
    is_object,
    same_value,
    to_boolean,
    to_integer_or_infinity,
    to_length,
    to_string,
    to_uint32,
)

if TYPE_CHECKING:
    from .realm import Realm

# (property, flag) in the order the flags getter emits them
FLAG_PROPERTIES = (
    ("global", "g"),
    ("ignoreCase", "i"),
    ("multiline", "m"),
    ("dotAll", "s"),
    ("unicode", "u"),
    ("sticky", "y"),
)

MAX_SPLIT_LIMIT = 2**32 - 1


def regexp_builtin_exec(realm: "Realm", regexp: JSValue, string: str) -> JSValue:
    """ES RegExpBuiltinExec(R, S)."""
    if not isinstance(regexp, JSRegExp):
        raise IncompatibleReceiverError(BuiltinId.REGEXP_PROTOTYPE_EXEC.value, regexp)

    last_index = to_length(get_last_index(realm, regexp))
    flags = regexp.original_flags
    global_ = "g" in flags
    sticky = "y" in flags
    if not global_ and not sticky:
        last_index = 0

    if last_index > len(string):
        if global_ or sticky:
            set_last_index(realm, regexp, 0)
        return NULL

    match_info = regexp.matcher.exec(string, last_index, sticky)
    if match_info is None:
        if global_ or sticky:
            set_last_index(realm, regexp, 0)
        return NULL

    match_info.set_field(INPUT_INDEX, string)
    if global_ or sticky:
        set_last_index(realm, regexp, last_capture(match_info, 1))
    realm.last_match_info = match_info
    return build_match_result(match_info)


def build_match_result(match_info: MatchInfo) -> JSArray:
    """The array exec returns: captures plus index, input and groups."""
    result = JSArray()
    for group in range(match_info.group_count):
        value, ok = capture_string(match_info, group)
        result.push(value if ok else UNDEFINED)
    result.set("index", last_capture(match_info, 0))
    result.set("input", match_info.input)

    groups: JSValue = UNDEFINED
    if match_info.group_names:
        groups = JSObject()
        for name in match_info.group_names:
            value, ok = named_capture_string(match_info, name)
            groups.set(name, value if ok else UNDEFINED)
    result.set("groups", groups)
    return result


def _uses_builtin_exec(realm: "Realm", regexp: JSValue) -> bool:
    return realm.has_initial_regexp_shape(regexp) and is_builtin_exec(
        get_property(regexp, "exec")
    )


def _exec_step(realm: "Realm", regexp: JSValue, string: str, fast: bool) -> JSValue:
    if fast:
        return regexp_builtin_exec(realm, regexp, string)
    return regexp_exec(realm, regexp, string)


def _require_object(value: JSValue, method: str) -> JSObject:
    if not is_object(value):
        raise JSTypeError(f"{method} called on non-object")
    return value


def escape_regexp_pattern(source: str) -> str:
    """The ``source`` form of a pattern: parseable back inside ``/.../``."""
    if source == "":
        return "(?:)"
    escapes = {
        "\n": "\\n",
        "\r": "\\r",
        "\u2028": "\\u2028",
        "\u2029": "\\u2029",
    }
    out: List[str] = []
    in_class = False
    i = 0
    while i < len(source):
        ch = source[i]
        if ch == "\\" and i + 1 < len(source):
            nxt = source[i + 1]
            out.append(escapes.get(nxt, "\\" + nxt))
            i += 2
            continue
        if ch == "/" and not in_class:
            out.append("\\/")
        elif ch in escapes:
            out.append(escapes[ch])
        else:
            if ch == "[":
                in_class = True
            elif ch == "]":
                in_class = False
            out.append(ch)
        i += 1
    return "".join(out)


def get_substitution(
    matched: str,
    string: str,
    position: int,
    captures: List[JSValue],
    named_captures: JSValue,
    replacement: str,
) -> str:
    """
    ES GetSubstitution: expand ``$`` patterns in a replacement template.

    Supports ``$$``, ``$&``, ``$```, ``$'``, ``$n``, ``$nn`` and ``$<name>``.
    Anything else is copied literally.
    """
    result: List[str] = []
    tail_pos = min(position + len(matched), len(string))
    m = len(captures)
    i = 0
    length = len(replacement)
    while i < length:
        ch = replacement[i]
        if ch != "$" or i + 1 >= length:
            result.append(ch)
            i += 1
            continue

        nxt = replacement[i + 1]
        if nxt == "$":
            result.append("$")
            i += 2
        elif nxt == "&":
            result.append(matched)
            i += 2
        elif nxt == "`":
            result.append(string[:position])
            i += 2
        elif nxt == "'":
            result.append(string[tail_pos:])
            i += 2
        elif nxt in "0123456789":
            # Prefer a two digit group reference when it is in range
            if i + 2 < length and replacement[i + 2] in "0123456789":
                nn = int(replacement[i + 1:i + 3])
                if 1 <= nn <= m:
                    capture = captures[nn - 1]
                    result.append("" if capture is UNDEFINED else capture)
                    i += 3
                    continue
            n = int(nxt)
            if 1 <= n <= m:
                capture = captures[n - 1]
                result.append("" if capture is UNDEFINED else capture)
            else:
                result.append("$" + nxt)
            i += 2
        elif nxt == "<":
            close = replacement.find(">", i + 2)
            if named_captures is UNDEFINED or close == -1:
                result.append("$<")
                i += 2
                continue
            group_name = replacement[i + 2:close]
            capture = get_property(named_captures, group_name)
            if capture is not UNDEFINED:
                result.append(to_string(capture))
            i = close + 1
        else:
            result.append("$")
            i += 1
    return "".join(result)


def regexp_test(realm: "Realm", regexp: JSValue, string: JSValue) -> bool:
    _require_object(regexp, "RegExp.prototype.test")
    return regexp_exec(realm, regexp, to_string(string)) is not NULL


def regexp_to_string(regexp: JSValue) -> str:
    _require_object(regexp, "RegExp.prototype.toString")
    pattern = to_string(get_property(regexp, "source"))
    flags = to_string(get_property(regexp, "flags"))
    return f"/{pattern}/{flags}"


def regexp_flags(regexp: JSValue) -> str:
    _require_object(regexp, "RegExp.prototype.flags getter")
    return "".join(
        flag for name, flag in FLAG_PROPERTIES if to_boolean(get_property(regexp, name))
    )


def regexp_match(realm: "Realm", regexp: JSValue, string: JSValue) -> JSValue:
    """RegExp.prototype[@@match]."""
    rx = _require_object(regexp, "RegExp.prototype[Symbol.match]")
    s = to_string(string)

    if not to_boolean(get_property(rx, "global")):
        return regexp_exec(realm, rx, s)

    full_unicode = to_boolean(get_property(rx, "unicode"))
    set_last_index(realm, rx, 0)
    fast = _uses_builtin_exec(realm, rx)
    matches = JSArray()
    while True:
        result = _exec_step(realm, rx, s, fast)
        if result is NULL:
            return matches if matches.length else NULL
        match_str = to_string(get_property(result, "0"))
        matches.push(match_str)
        if match_str == "":
            set_advanced_string_index(realm, rx, s, full_unicode)


def regexp_search(realm: "Realm", regexp: JSValue, string: JSValue) -> JSValue:
    """RegExp.prototype[@@search]. lastIndex is restored afterwards."""
    rx = _require_object(regexp, "RegExp.prototype[Symbol.search]")
    s = to_string(string)

    previous_last_index = get_last_index(realm, rx)
    if not same_value(previous_last_index, 0):
        set_last_index(realm, rx, 0)
    result = regexp_exec(realm, rx, s)
    current_last_index = get_last_index(realm, rx)
    if not same_value(current_last_index, previous_last_index):
        set_last_index(realm, rx, previous_last_index)

    if result is NULL:
        return -1
    return get_property(result, "index")


def regexp_replace(
    realm: "Realm", regexp: JSValue, string: JSValue, replace_value: JSValue
) -> str:
    """RegExp.prototype[@@replace]."""
    rx = _require_object(regexp, "RegExp.prototype[Symbol.replace]")
    s = to_string(string)
    length_s = len(s)

    functional = is_callable(replace_value)
    if not functional:
        replace_value = to_string(replace_value)

    global_ = to_boolean(get_property(rx, "global"))
    full_unicode = False
    if global_:
        full_unicode = to_boolean(get_property(rx, "unicode"))
        set_last_index(realm, rx, 0)

    fast = _uses_builtin_exec(realm, rx)
    results = []
    while True:
        result = _exec_step(realm, rx, s, fast)
        if result is NULL:
            break
        results.append(result)
        if not global_:
            break
        match_str = to_string(get_property(result, "0"))
        if match_str == "":
            set_advanced_string_index(realm, rx, s, full_unicode)

    accumulated: List[str] = []
    next_source_position = 0
    for result in results:
        n_captures = max(to_length(get_property(result, "length")) - 1, 0)
        matched = to_string(get_property(result, "0"))
        position = to_integer_or_infinity(get_property(result, "index"))
        position = int(max(min(position, length_s), 0))

        captures: List[JSValue] = []
        for n in range(1, n_captures + 1):
            capture = get_property(result, n)
            if capture is not UNDEFINED:
                capture = to_string(capture)
            captures.append(capture)
        named_captures = get_property(result, "groups")

        if functional:
            args: List[JSValue] = [matched, *captures, position, s]
            if named_captures is not UNDEFINED:
                args.append(named_captures)
            replacement = to_string(call(replace_value, UNDEFINED, *args))
        else:
            if named_captures is not UNDEFINED and not is_object(named_captures):
                raise JSTypeError("Cannot convert undefined or null to object")
            replacement = get_substitution(
                matched, s, position, captures, named_captures, replace_value
            )

        # Results that overlap an earlier match are skipped
        if position >= next_source_position:
            accumulated.append(s[next_source_position:position])
            accumulated.append(replacement)
            next_source_position = position + len(matched)

    if next_source_position >= length_s:
        return "".join(accumulated)
    return "".join(accumulated) + s[next_source_position:]


def regexp_split(
    realm: "Realm", regexp: JSValue, string: JSValue, limit: JSValue = UNDEFINED
) -> JSArray:
    """RegExp.prototype[@@split], driven by a sticky copy of the receiver."""
    rx = _require_object(regexp, "RegExp.prototype[Symbol.split]")
    s = to_string(string)

    flags = to_string(get_property(rx, "flags"))
    unicode_matching = "u" in flags
    new_flags = flags if "y" in flags else flags + "y"
    splitter = realm.construct(rx, new_flags)

    parts = JSArray()
    lim = MAX_SPLIT_LIMIT if limit is UNDEFINED else to_uint32(limit)
    if lim == 0:
        return parts

    size = len(s)
    fast = _uses_builtin_exec(realm, splitter)
    if size == 0:
        if _exec_step(realm, splitter, s, fast) is NULL:
            parts.push(s)
        return parts

    p = 0
    q = p
    while q < size:
        set_last_index(realm, splitter, q)
        z = _exec_step(realm, splitter, s, fast)
        if z is NULL:
            q += advance_string_index(s, q, unicode_matching)
            continue
        e = min(to_length(get_last_index(realm, splitter)), size)
        if e == p:
            q += advance_string_index(s, q, unicode_matching)
            continue

        parts.push(s[p:q])
        if parts.length == lim:
            return parts
        p = e
        n_captures = max(to_length(get_property(z, "length")) - 1, 0)
        for i in range(1, n_captures + 1):
            parts.push(get_property(z, i))
            if parts.length == lim:
                return parts
        q = p

    parts.push(s[p:size])
    return parts


def _arg(args: tuple, index: int) -> JSValue:
    return args[index] if len(args) > index else UNDEFINED


def _flag_getter(realm: "Realm", name: str, flag: str) -> JSFunction:
    def getter(this: JSValue, *args: JSValue) -> JSValue:
        if isinstance(this, JSRegExp):
            return flag in this.original_flags
        if this is realm.regexp_prototype:
            return UNDEFINED
        raise JSTypeError(f"RegExp.prototype.{name} getter called on non-RegExp object")

    return JSFunction(f"get {name}", getter)


def install_regexp_prototype(realm: "Realm") -> None:
    """Populate realm.regexp_prototype with the builtin methods and getters."""
    proto = realm.regexp_prototype

    def exec_fn(this, *args):
        if not isinstance(this, JSRegExp):
            raise IncompatibleReceiverError(BuiltinId.REGEXP_PROTOTYPE_EXEC.value, this)
        return regexp_builtin_exec(realm, this, to_string(_arg(args, 0)))

    def source_getter(this, *args):
        if isinstance(this, JSRegExp):
            return escape_regexp_pattern(this.original_source)
        if this is proto:
            return "(?:)"
        raise JSTypeError("RegExp.prototype.source getter called on non-RegExp object")

    proto.set("exec", JSFunction("exec", exec_fn, builtin_id=BuiltinId.REGEXP_PROTOTYPE_EXEC))
    proto.set("test", JSFunction("test", lambda this, *args: regexp_test(realm, this, _arg(args, 0))))
    proto.set("toString", JSFunction("toString", lambda this, *args: regexp_to_string(this)))

    for name, flag in FLAG_PROPERTIES:
        proto.define_getter(name, _flag_getter(realm, name, flag))
    proto.define_getter("flags", JSFunction("get flags", lambda this, *args: regexp_flags(this)))
    proto.define_getter("source", JSFunction("get source", source_getter))

    proto.set(
        SYMBOL_MATCH,
        JSFunction("[Symbol.match]", lambda this, *args: regexp_match(realm, this, _arg(args, 0))),
    )
    proto.set(
        SYMBOL_SEARCH,
        JSFunction("[Symbol.search]", lambda this, *args: regexp_search(realm, this, _arg(args, 0))),
    )
    proto.set(
        SYMBOL_REPLACE,
        JSFunction(
            "[Symbol.replace]",
            lambda this, *args: regexp_replace(realm, this, _arg(args, 0), _arg(args, 1)),
        ),
    )
    proto.set(
        SYMBOL_SPLIT,
        JSFunction(
            "[Symbol.split]",
            lambda this, *args: regexp_split(realm, this, _arg(args, 0), _arg(args, 1)),
        ),
    )
