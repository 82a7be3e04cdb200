"""Test the RegExp.prototype builtins."""

import pytest
from jsregexp import (
    NULL,
    SYMBOL_MATCH,
    SYMBOL_REPLACE,
    SYMBOL_SEARCH,
    SYMBOL_SPLIT,
    UNDEFINED,
    IncompatibleReceiverError,
    JSArray,
    JSFunction,
    JSObject,
    JSSyntaxError,
    JSTypeError,
    get_last_index,
    set_last_index,
    to_js_string,
)
from jsregexp.builtins import (
    escape_regexp_pattern,
    get_substitution,
    regexp_flags,
    regexp_match,
    regexp_replace,
    regexp_search,
    regexp_split,
)
from jsregexp.values import call, get_property, to_string

PAIR = to_js_string("\U0001F600")


def invoke(obj, key, *args):
    """Look up ``key`` on ``obj`` and call it with ``obj`` as receiver."""
    return call(get_property(obj, key), obj, *args)


def as_list(array):
    return array.elements


class TestExec:
    """Test RegExp.prototype.exec."""

    def test_result_shape(self, realm):
        """The result carries captures, index, input and groups."""
        rx = realm.regexp_create("(\\d+)-(\\d+)")
        result = invoke(rx, "exec", "x12-34y")
        assert isinstance(result, JSArray)
        assert as_list(result) == ["12-34", "12", "34"]
        assert get_property(result, "index") == 1
        assert get_property(result, "input") == "x12-34y"
        assert get_property(result, "groups") is UNDEFINED
        assert get_property(result, "length") == 3

    def test_unmatched_group_is_undefined(self, realm):
        """Groups that did not participate are undefined."""
        rx = realm.regexp_create("a(b)?")
        result = invoke(rx, "exec", "a")
        assert as_list(result) == ["a", UNDEFINED]

    def test_named_groups(self, realm):
        """Named groups appear on the groups object."""
        rx = realm.regexp_create("(?<year>\\d{4})-(?<month>\\d\\d)?")
        result = invoke(rx, "exec", "in 2024-")
        groups = get_property(result, "groups")
        assert get_property(groups, "year") == "2024"
        assert get_property(groups, "month") is UNDEFINED

    def test_no_match(self, realm):
        """exec returns null when nothing matches."""
        rx = realm.regexp_create("z")
        assert invoke(rx, "exec", "abc") is NULL

    def test_argument_coerced_to_string(self, realm):
        """The subject goes through ToString."""
        rx = realm.regexp_create("1")
        result = invoke(rx, "exec", 123)
        assert get_property(result, "index") == 0
        assert get_property(result, "input") == "123"

    def test_generic_receiver_rejected(self, realm):
        """The builtin exec only works on RegExp instances."""
        with pytest.raises(IncompatibleReceiverError):
            call(realm.regexp_exec_function, JSObject(), "abc")


class TestLastIndexSemantics:
    """Test how exec reads and writes lastIndex."""

    def test_global_advances(self, realm):
        """Global regexps resume from lastIndex and reset on failure."""
        rx = realm.regexp_create("a", "g")
        first = invoke(rx, "exec", "aXa")
        assert get_property(first, "index") == 0
        assert get_last_index(realm, rx) == 1
        second = invoke(rx, "exec", "aXa")
        assert get_property(second, "index") == 2
        assert get_last_index(realm, rx) == 3
        assert invoke(rx, "exec", "aXa") is NULL
        assert get_last_index(realm, rx) == 0

    def test_non_global_ignores_last_index(self, realm):
        """Without g or y, lastIndex is neither read nor written."""
        rx = realm.regexp_create("a")
        set_last_index(realm, rx, 2)
        result = invoke(rx, "exec", "aXa")
        assert get_property(result, "index") == 0
        assert get_last_index(realm, rx) == 2

    def test_last_index_past_end(self, realm):
        """A lastIndex beyond the subject fails and resets."""
        rx = realm.regexp_create("a", "g")
        set_last_index(realm, rx, 10)
        assert invoke(rx, "exec", "aaa") is NULL
        assert get_last_index(realm, rx) == 0

    def test_last_index_coerced(self, realm):
        """lastIndex is converted with ToLength."""
        rx = realm.regexp_create("a", "g")
        set_last_index(realm, rx, "1")
        result = invoke(rx, "exec", "aXa")
        assert get_property(result, "index") == 2

    def test_sticky_matches_only_at_last_index(self, realm):
        """Sticky regexps do not search forward."""
        rx = realm.regexp_create("a", "y")
        assert invoke(rx, "exec", "ba") is NULL
        assert get_last_index(realm, rx) == 0
        set_last_index(realm, rx, 1)
        result = invoke(rx, "exec", "ba")
        assert get_property(result, "index") == 1
        assert get_last_index(realm, rx) == 2

    def test_read_only_last_index_failure(self, realm):
        """Resetting a read-only lastIndex after a failed match throws."""
        rx = realm.regexp_create("z", "g")
        rx.define_property("lastIndex", 0, writable=False)
        with pytest.raises(JSTypeError):
            invoke(rx, "exec", "abc")

    def test_unicode_offsets(self, realm):
        """Unicode matches report UTF-16 offsets."""
        rx = realm.regexp_create(".", "gu")
        result = invoke(rx, "exec", PAIR + "b")
        assert get_property(result, 0) == PAIR
        assert get_last_index(realm, rx) == 2
        result = invoke(rx, "exec", PAIR + "b")
        assert get_property(result, 0) == "b"
        assert get_property(result, "index") == 2

    def test_unicode_last_index_inside_pair(self, realm):
        """A lastIndex on a trail surrogate starts at the whole pair."""
        rx = realm.regexp_create(".", "gu")
        set_last_index(realm, rx, 1)
        result = invoke(rx, "exec", PAIR + "b")
        assert get_property(result, "index") == 0
        assert get_last_index(realm, rx) == 2

    def test_non_unicode_splits_pair(self, realm):
        """Without u, a dot matches one code unit."""
        rx = realm.regexp_create(".", "g")
        result = invoke(rx, "exec", PAIR)
        assert get_property(result, 0) == PAIR[0]
        assert get_last_index(realm, rx) == 1


class TestAccessors:
    """Test flags, source and toString."""

    def test_flags_in_canonical_order(self, realm):
        """flags lists every flag in gimsuy order."""
        rx = realm.regexp_create("a", "yumgsi")
        assert get_property(rx, "flags") == "gimsuy"

    @pytest.mark.parametrize(
        "name,flag",
        [
            ("global", "g"),
            ("ignoreCase", "i"),
            ("multiline", "m"),
            ("dotAll", "s"),
            ("unicode", "u"),
            ("sticky", "y"),
        ],
    )
    def test_flag_getters(self, realm, name, flag):
        """Each flag getter reports its own flag."""
        assert get_property(realm.regexp_create("a", flag), name) is True
        assert get_property(realm.regexp_create("a"), name) is False

    def test_flag_getter_on_prototype(self, realm):
        """Flag getters on RegExp.prototype itself are undefined."""
        assert get_property(realm.regexp_prototype, "global") is UNDEFINED
        assert get_property(realm.regexp_prototype, "flags") == ""
        assert get_property(realm.regexp_prototype, "source") == "(?:)"

    def test_flag_getter_on_plain_object(self, realm):
        """Flag getters reject other receivers."""
        getter = realm.regexp_prototype.own_getter("global")
        with pytest.raises(JSTypeError):
            call(getter, JSObject())

    def test_flags_on_generic_object(self, realm):
        """flags reads the individual flag properties."""
        obj = JSObject()
        obj.set("sticky", True)
        obj.set("global", 1)
        obj.set("unicode", 0)
        assert regexp_flags(obj) == "gy"

    def test_source_escaping(self, realm):
        """source is re-parseable between slashes."""
        assert get_property(realm.regexp_create("a/b"), "source") == "a\\/b"
        assert get_property(realm.regexp_create("[/]"), "source") == "[/]"
        assert get_property(realm.regexp_create("\n"), "source") == "\\n"
        assert get_property(realm.regexp_create(""), "source") == "(?:)"
        assert escape_regexp_pattern("\\/") == "\\/"

    def test_to_string(self, realm):
        """toString combines source and flags."""
        rx = realm.regexp_create("a/b", "gi")
        assert invoke(rx, "toString") == "/a\\/b/gi"
        assert to_string(rx) == "/a\\/b/gi"

    def test_to_string_generic(self, realm):
        """toString works on any object with source and flags."""
        obj = JSObject()
        obj.set("source", "x")
        obj.set("flags", "q")
        assert call(get_property(realm.regexp_prototype, "toString"), obj) == "/x/q"


class TestRegExpCreate:
    """Test creating RegExp instances."""

    @pytest.mark.parametrize("flags", ["x", "gg", "G", "gig"])
    def test_invalid_flags(self, realm, flags):
        """Unknown or repeated flags are syntax errors."""
        with pytest.raises(JSSyntaxError):
            realm.regexp_create("a", flags)

    @pytest.mark.parametrize("pattern", ["(", "[a", "a)", "*"])
    def test_invalid_patterns(self, realm, pattern):
        """Patterns the engine rejects are syntax errors."""
        with pytest.raises(JSSyntaxError):
            realm.regexp_create(pattern)

    def test_undefined_pattern(self, realm):
        """An undefined pattern is the empty pattern."""
        rx = realm.regexp_create()
        assert rx.original_source == ""
        assert get_property(invoke(rx, "exec", "abc"), 0) == ""

    def test_construct_from_regexp(self, realm):
        """new RegExp(re) copies source and flags unless overridden."""
        rx = realm.regexp_create("a+", "gi")
        copy = realm.construct(rx)
        assert copy is not rx
        assert copy.original_source == "a+"
        assert copy.original_flags == "gi"
        assert realm.construct(rx, "y").original_flags == "y"

    def test_construct_from_regexp_like(self, realm):
        """Objects that claim to be regexps supply source and flags."""
        obj = JSObject()
        obj.set(SYMBOL_MATCH, True)
        obj.set("source", "b+")
        obj.set("flags", "g")
        rx = realm.construct(obj)
        assert rx.original_source == "b+"
        assert rx.original_flags == "g"

    def test_constructor_function(self, realm):
        """The RegExp constructor is callable."""
        rx = call(realm.regexp_constructor, UNDEFINED, "a", "g")
        assert rx.original_flags == "g"
        assert get_property(rx, "constructor") is realm.regexp_constructor


class TestTest:
    """Test RegExp.prototype.test."""

    def test_basic(self, realm):
        """test reports whether exec found something."""
        rx = realm.regexp_create("b")
        assert invoke(rx, "test", "abc") is True
        assert invoke(rx, "test", "xyz") is False

    def test_global_is_stateful(self, realm):
        """Global test calls move lastIndex."""
        rx = realm.regexp_create("a", "g")
        assert invoke(rx, "test", "a") is True
        assert invoke(rx, "test", "a") is False
        assert invoke(rx, "test", "a") is True

    def test_uses_exec_override(self, realm):
        """test goes through the receiver's exec."""
        obj = JSObject()
        obj.set("exec", JSFunction("exec", lambda this, s: JSObject()))
        assert call(get_property(realm.regexp_prototype, "test"), obj, "x") is True

    def test_rejects_primitive(self, realm):
        """test needs an object receiver."""
        with pytest.raises(JSTypeError):
            call(get_property(realm.regexp_prototype, "test"), "abc", "x")


class TestSymbolMatch:
    """Test RegExp.prototype[@@match]."""

    def test_non_global(self, realm):
        """Non-global match is a single exec."""
        rx = realm.regexp_create("(b)")
        result = invoke(rx, SYMBOL_MATCH, "abc")
        assert as_list(result) == ["b", "b"]

    def test_global(self, realm):
        """Global match collects every whole match."""
        rx = realm.regexp_create("\\d+", "g")
        assert as_list(invoke(rx, SYMBOL_MATCH, "a1b22c333")) == ["1", "22", "333"]
        assert get_last_index(realm, rx) == 0

    def test_global_no_match(self, realm):
        """Global match with no hits is null."""
        rx = realm.regexp_create("z", "g")
        assert invoke(rx, SYMBOL_MATCH, "abc") is NULL

    def test_empty_matches_advance(self, realm):
        """Empty matches step forward instead of looping."""
        rx = realm.regexp_create("", "g")
        assert as_list(invoke(rx, SYMBOL_MATCH, "ab")) == ["", "", ""]

    def test_empty_matches_unicode(self, realm):
        """In unicode mode empty matches step over whole pairs."""
        rx = realm.regexp_create("", "gu")
        assert as_list(invoke(rx, SYMBOL_MATCH, PAIR)) == ["", ""]
        rx = realm.regexp_create("", "g")
        assert as_list(invoke(rx, SYMBOL_MATCH, PAIR)) == ["", "", ""]

    def test_generic_receiver(self, realm):
        """A user exec drives a global match on a plain object."""
        results = [NULL, "b", "a"]

        def exec_fn(this, s):
            value = results.pop()
            if value is NULL:
                return NULL
            arr = JSArray()
            arr.push(value)
            return arr

        obj = JSObject()
        obj.set("global", True)
        obj.set("exec", JSFunction("exec", exec_fn))
        assert as_list(regexp_match(realm, obj, "xyz")) == ["a", "b"]
        assert obj.get("lastIndex") == 0

    def test_exec_override_after_creation(self, realm):
        """An exec installed on an instance is honoured by global match."""
        rx = realm.regexp_create("a", "g")
        calls = []

        def exec_fn(this, s):
            calls.append(s)
            return NULL

        rx.set("exec", JSFunction("exec", exec_fn))
        assert regexp_match(realm, rx, "aaa") is NULL
        assert calls == ["aaa"]


class TestSymbolSearch:
    """Test RegExp.prototype[@@search]."""

    def test_index(self, realm):
        """search returns the match index or -1."""
        rx = realm.regexp_create("c")
        assert invoke(rx, SYMBOL_SEARCH, "abc") == 2
        assert invoke(rx, SYMBOL_SEARCH, "xyz") == -1

    def test_last_index_restored(self, realm):
        """search leaves lastIndex as it found it."""
        rx = realm.regexp_create("b", "g")
        set_last_index(realm, rx, 5)
        assert regexp_search(realm, rx, "abc") == 1
        assert get_last_index(realm, rx) == 5

    def test_last_index_restored_on_failure(self, realm):
        """lastIndex is restored after a failed search too."""
        rx = realm.regexp_create("z", "y")
        set_last_index(realm, rx, 2)
        assert regexp_search(realm, rx, "abc") == -1
        assert get_last_index(realm, rx) == 2


class TestSymbolReplace:
    """Test RegExp.prototype[@@replace]."""

    def test_first_only(self, realm):
        """Non-global replace touches the first match."""
        rx = realm.regexp_create("a")
        assert invoke(rx, SYMBOL_REPLACE, "banana", "o") == "bonana"

    def test_global(self, realm):
        """Global replace touches every match."""
        rx = realm.regexp_create("a", "g")
        assert invoke(rx, SYMBOL_REPLACE, "banana", "o") == "bonono"

    def test_empty_matches(self, realm):
        """Empty global matches insert between every character."""
        rx = realm.regexp_create("x*", "g")
        assert regexp_replace(realm, rx, "ab", "-") == "-a-b-"

    def test_group_references(self, realm):
        """$n refers to numbered groups."""
        rx = realm.regexp_create("(\\w+) (\\w+)")
        assert regexp_replace(realm, rx, "hello world", "$2 $1") == "world hello"

    def test_two_digit_reference_falls_back(self, realm):
        """$10 with one group is $1 followed by 0."""
        rx = realm.regexp_create("(a)")
        assert regexp_replace(realm, rx, "a", "$10") == "a0"

    def test_out_of_range_reference_literal(self, realm):
        """References to missing groups stay literal."""
        rx = realm.regexp_create("(a)")
        assert regexp_replace(realm, rx, "a", "$2") == "$2"

    def test_unmatched_group_reference_empty(self, realm):
        """Groups that did not participate substitute as empty."""
        rx = realm.regexp_create("a(b)?")
        assert regexp_replace(realm, rx, "a", "[$1]") == "[]"

    def test_special_patterns(self, realm):
        """$$, $&, $` and $' expand."""
        rx = realm.regexp_create("b")
        assert regexp_replace(realm, rx, "abc", "[$`|$&|$'|$$]") == "a[a|b|c|$]c"

    def test_named_reference(self, realm):
        """$<name> refers to named groups."""
        rx = realm.regexp_create("(?<y>\\d+)-(?<m>\\d+)")
        assert regexp_replace(realm, rx, "2024-05", "$<m>/$<y>") == "05/2024"

    def test_function_replacement(self, realm):
        """Callable replacements receive match, captures, position and string."""
        seen = []

        def replacer(this, matched, group, position, s):
            seen.append((matched, group, position, s))
            return str(int(matched) * 2)

        rx = realm.regexp_create("(\\d)", "g")
        result = regexp_replace(realm, rx, "a1b2", JSFunction("r", replacer))
        assert result == "a2b4"
        assert seen == [("1", "1", 1, "a1b2"), ("2", "2", 3, "a1b2")]

    def test_function_receives_groups(self, realm):
        """Named groups are passed last to callable replacements."""
        seen = []

        def replacer(this, *args):
            seen.append(args[-1])
            return "x"

        rx = realm.regexp_create("(?<d>\\d)")
        regexp_replace(realm, rx, "a1", JSFunction("r", replacer))
        assert get_property(seen[0], "d") == "1"

    def test_unicode_global_empty(self, realm):
        """Unicode mode keeps surrogate pairs together."""
        rx = realm.regexp_create("", "gu")
        assert regexp_replace(realm, rx, PAIR, "-") == "-" + PAIR + "-"


class TestGetSubstitution:
    """Test replacement template expansion directly."""

    def test_dollar_at_end(self):
        """A trailing $ is literal."""
        assert get_substitution("b", "abc", 1, [], UNDEFINED, "x$") == "x$"

    def test_unknown_dollar(self):
        """Unknown $ sequences are literal."""
        assert get_substitution("b", "abc", 1, [], UNDEFINED, "$x") == "$x"

    def test_named_without_groups(self):
        """$< is literal when there are no named groups."""
        assert get_substitution("b", "abc", 1, [], UNDEFINED, "$<n>") == "$<n>"

    def test_unknown_name_is_empty(self):
        """Unknown names substitute as empty."""
        groups = JSObject()
        assert get_substitution("b", "abc", 1, [], groups, "[$<n>]") == "[]"


class TestSymbolSplit:
    """Test RegExp.prototype[@@split]."""

    def test_basic(self, realm):
        """Split on a pattern."""
        rx = realm.regexp_create(",\\s*")
        assert as_list(invoke(rx, SYMBOL_SPLIT, "a, b,c")) == ["a", "b", "c"]

    def test_captures_included(self, realm):
        """Captured separators are spliced into the result."""
        rx = realm.regexp_create("(\\d)")
        assert as_list(regexp_split(realm, rx, "a1b2c")) == ["a", "1", "b", "2", "c"]

    def test_empty_pattern_splits_characters(self, realm):
        """An empty pattern splits into code units."""
        rx = realm.regexp_create("")
        assert as_list(regexp_split(realm, rx, "abc")) == ["a", "b", "c"]

    def test_unicode_keeps_pairs(self, realm):
        """In unicode mode pairs are not split."""
        rx = realm.regexp_create("", "u")
        assert as_list(regexp_split(realm, rx, PAIR + "b")) == [PAIR, "b"]

    def test_limit(self, realm):
        """The limit caps the number of pieces."""
        rx = realm.regexp_create(",")
        assert as_list(regexp_split(realm, rx, "a,b,c", 2)) == ["a", "b"]
        assert as_list(regexp_split(realm, rx, "a,b,c", 0)) == []

    def test_empty_subject(self, realm):
        """An empty string splits to [''] unless the pattern matches it."""
        assert as_list(regexp_split(realm, realm.regexp_create("x"), "")) == [""]
        assert as_list(regexp_split(realm, realm.regexp_create(""), "")) == []

    def test_unmatched_capture_undefined(self, realm):
        """Captures that did not participate are undefined."""
        rx = realm.regexp_create("-(x)?")
        assert as_list(regexp_split(realm, rx, "a-b")) == ["a", UNDEFINED, "b"]

    def test_receiver_last_index_untouched(self, realm):
        """Splitting works on a copy and leaves the receiver alone."""
        rx = realm.regexp_create(",", "g")
        set_last_index(realm, rx, 3)
        regexp_split(realm, rx, "a,b")
        assert get_last_index(realm, rx) == 3
