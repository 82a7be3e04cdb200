"""JavaScript value types and the generic property protocol."""

from typing import Any, Callable, Dict, List, Optional, Set, Union
import math
import re

from .errors import JSTypeError


class JSUndefined:
    """JavaScript undefined value (singleton)."""

    _instance: Optional["JSUndefined"] = None

    def __new__(cls) -> "JSUndefined":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "undefined"

    def __str__(self) -> str:
        return "undefined"

    def __bool__(self) -> bool:
        return False


class JSNull:
    """JavaScript null value (singleton)."""

    _instance: Optional["JSNull"] = None

    def __new__(cls) -> "JSNull":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "null"

    def __str__(self) -> str:
        return "null"

    def __bool__(self) -> bool:
        return False


# Singleton instances
UNDEFINED = JSUndefined()
NULL = JSNull()


class JSSymbol:
    """JavaScript symbol. Compared by identity, never equal to a string key."""

    def __init__(self, description: str = ""):
        self.description = description

    def __repr__(self) -> str:
        return f"Symbol({self.description})"


# Well-known symbols used by the RegExp protocol
SYMBOL_MATCH = JSSymbol("Symbol.match")
SYMBOL_REPLACE = JSSymbol("Symbol.replace")
SYMBOL_SEARCH = JSSymbol("Symbol.search")
SYMBOL_SPLIT = JSSymbol("Symbol.split")


# Type alias for JavaScript values
JSValue = Union[
    JSUndefined,
    JSNull,
    bool,
    int,
    float,
    str,
    JSSymbol,
    "JSObject",
]

PropertyKey = Union[str, JSSymbol]

MAX_SAFE_INTEGER = 2**53 - 1

_DECIMAL_LITERAL = re.compile(
    r"^[+-]?(?:\d+\.?\d*(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?)$"
)
_JS_WHITESPACE = (
    " \t\n\r\v\f\u00a0\u1680\u2000\u2001\u2002\u2003\u2004\u2005\u2006"
    "\u2007\u2008\u2009\u200a\u2028\u2029\u202f\u205f\u3000\ufeff"
)


class Shape:
    """Layout descriptor of an object.

    Any structural change to an object (new own property, accessor, changed
    attributes, new prototype) moves it to a fresh Shape, and so does storing
    a different value in an existing data property. Comparing two shapes by
    identity tells whether an object is still exactly as it was created.
    RegExp lastIndex writes are the one exception: they live in an inline
    slot and leave the shape alone.
    """

    __slots__ = ("parent",)

    def __init__(self, parent: Optional["Shape"] = None):
        self.parent = parent


class JSObject:
    """JavaScript object."""

    def __init__(
        self,
        prototype: Optional["JSObject"] = None,
        shape: Optional[Shape] = None,
    ):
        self._properties: Dict[PropertyKey, JSValue] = {}
        self._getters: Dict[PropertyKey, Any] = {}  # property name -> getter function
        self._setters: Dict[PropertyKey, Any] = {}  # property name -> setter function
        self._readonly: Set[PropertyKey] = set()
        self._prototype = prototype
        self._shape = shape if shape is not None else Shape()

    @property
    def shape(self) -> Shape:
        return self._shape

    @property
    def prototype(self) -> Optional["JSObject"]:
        return self._prototype

    def set_prototype(self, prototype: Optional["JSObject"]) -> None:
        self._prototype = prototype
        self._transition()

    def _transition(self) -> None:
        self._shape = Shape(self._shape)

    def has_own_data(self, key: PropertyKey) -> bool:
        return key in self._properties

    def get_own(self, key: PropertyKey) -> JSValue:
        return self._properties.get(key, UNDEFINED)

    def has_accessor(self, key: PropertyKey) -> bool:
        return key in self._getters or key in self._setters

    def own_getter(self, key: PropertyKey) -> Optional[Any]:
        return self._getters.get(key)

    def own_setter(self, key: PropertyKey) -> Optional[Any]:
        return self._setters.get(key)

    def is_writable(self, key: PropertyKey) -> bool:
        return key not in self._readonly

    def get(self, key: PropertyKey) -> JSValue:
        """Get a property value (does not invoke getters - use get_property for that)."""
        if self.has_own_data(key):
            return self.get_own(key)
        if self._prototype is not None:
            return self._prototype.get(key)
        return UNDEFINED

    def set(self, key: PropertyKey, value: JSValue) -> None:
        """Create or update an own data property, ignoring attributes."""
        if not self.has_own_data(key):
            self._getters.pop(key, None)
            self._setters.pop(key, None)
            self._transition()
        elif self.get_own(key) is not value:
            # Replacing a value (e.g. a prototype method) is observable too
            self._transition()
        self._properties[key] = value

    def define_property(
        self, key: PropertyKey, value: JSValue = UNDEFINED, writable: bool = True
    ) -> None:
        """Define an own data property with the given writability."""
        self._getters.pop(key, None)
        self._setters.pop(key, None)
        self._properties[key] = value
        if writable:
            self._readonly.discard(key)
        else:
            self._readonly.add(key)
        self._transition()

    def define_getter(self, key: PropertyKey, getter: Any) -> None:
        """Define a getter for a property."""
        self._properties.pop(key, None)
        self._getters[key] = getter
        self._transition()

    def define_setter(self, key: PropertyKey, setter: Any) -> None:
        """Define a setter for a property."""
        self._properties.pop(key, None)
        self._setters[key] = setter
        self._transition()

    def has(self, key: PropertyKey) -> bool:
        """Check if object has own property."""
        return self.has_own_data(key) or self.has_accessor(key)

    def delete(self, key: PropertyKey) -> bool:
        """Delete a property."""
        if not self.has(key):
            return False
        self._properties.pop(key, None)
        self._getters.pop(key, None)
        self._setters.pop(key, None)
        self._readonly.discard(key)
        self._transition()
        return True

    def keys(self) -> List[PropertyKey]:
        """Get own enumerable property keys."""
        return list(self._properties.keys())

    def __repr__(self) -> str:
        return f"JSObject({self._properties})"


def _array_index(key: PropertyKey) -> Optional[int]:
    if not isinstance(key, str) or not (key.isascii() and key.isdigit()):
        return None
    if key == "0" or key[0] != "0":
        return int(key)
    return None


class JSArray(JSObject):
    """JavaScript array."""

    def __init__(self, length: int = 0, prototype: Optional[JSObject] = None):
        super().__init__(prototype)
        self._elements: List[JSValue] = [UNDEFINED] * length

    @property
    def length(self) -> int:
        return len(self._elements)

    @length.setter
    def length(self, value: int) -> None:
        if value < len(self._elements):
            self._elements = self._elements[:value]
        else:
            self._elements.extend([UNDEFINED] * (value - len(self._elements)))

    @property
    def elements(self) -> List[JSValue]:
        return list(self._elements)

    def get_index(self, index: int) -> JSValue:
        if 0 <= index < len(self._elements):
            return self._elements[index]
        return UNDEFINED

    def set_index(self, index: int, value: JSValue) -> None:
        if index < 0:
            raise IndexError("Negative array index")
        if index >= len(self._elements):
            self.length = index + 1
        self._elements[index] = value

    def push(self, value: JSValue) -> int:
        self._elements.append(value)
        return len(self._elements)

    def has_own_data(self, key: PropertyKey) -> bool:
        if key == "length":
            return True
        index = _array_index(key)
        if index is not None:
            return index < len(self._elements)
        return super().has_own_data(key)

    def get_own(self, key: PropertyKey) -> JSValue:
        if key == "length":
            return len(self._elements)
        index = _array_index(key)
        if index is not None:
            return self.get_index(index)
        return super().get_own(key)

    def set(self, key: PropertyKey, value: JSValue) -> None:
        if key == "length":
            self.length = to_length(value)
            return
        index = _array_index(key)
        if index is not None:
            self.set_index(index, value)
            return
        super().set(key, value)

    def keys(self) -> List[PropertyKey]:
        return [str(i) for i in range(len(self._elements))] + super().keys()

    def __repr__(self) -> str:
        return f"JSArray({self._elements})"


class JSFunction(JSObject):
    """JavaScript function backed by a Python callable taking ``this`` first."""

    def __init__(
        self,
        name: str,
        fn: Callable[..., JSValue],
        builtin_id: Any = None,
        prototype: Optional[JSObject] = None,
    ):
        super().__init__(prototype)
        self.name = name
        self._call_fn = fn
        self.builtin_id = builtin_id

    def call(self, this: JSValue, *args: JSValue) -> JSValue:
        return self._call_fn(this, *args)

    def __repr__(self) -> str:
        return f"[Function: {self.name}]" if self.name else "[Function (anonymous)]"


class JSRegExp(JSObject):
    """JavaScript RegExp object.

    ``lastIndex`` is an own data property stored in an inline slot so the
    canonical fast path can read and write it without a property lookup.
    """

    LAST_INDEX = "lastIndex"

    def __init__(
        self,
        source: str,
        flags: str,
        matcher: Any,
        prototype: Optional[JSObject] = None,
        shape: Optional[Shape] = None,
    ):
        super().__init__(prototype, shape)
        self.original_source = source
        self.original_flags = flags
        self.matcher = matcher
        self.last_index: JSValue = 0

    def has_own_data(self, key: PropertyKey) -> bool:
        return key == self.LAST_INDEX or super().has_own_data(key)

    def get_own(self, key: PropertyKey) -> JSValue:
        if key == self.LAST_INDEX:
            return self.last_index
        return super().get_own(key)

    def has_accessor(self, key: PropertyKey) -> bool:
        return key != self.LAST_INDEX and super().has_accessor(key)

    def set(self, key: PropertyKey, value: JSValue) -> None:
        if key == self.LAST_INDEX:
            self.last_index = value
            return
        super().set(key, value)

    def define_property(
        self, key: PropertyKey, value: JSValue = UNDEFINED, writable: bool = True
    ) -> None:
        if key != self.LAST_INDEX:
            super().define_property(key, value, writable)
            return
        # lastIndex is non-configurable: only its value and writability change
        self.last_index = value
        if writable:
            self._readonly.discard(key)
        else:
            self._readonly.add(key)
        self._transition()

    def define_getter(self, key: PropertyKey, getter: Any) -> None:
        if key == self.LAST_INDEX:
            raise JSTypeError("Cannot redefine property: lastIndex")
        super().define_getter(key, getter)

    def define_setter(self, key: PropertyKey, setter: Any) -> None:
        if key == self.LAST_INDEX:
            raise JSTypeError("Cannot redefine property: lastIndex")
        super().define_setter(key, setter)

    def delete(self, key: PropertyKey) -> bool:
        if key == self.LAST_INDEX:
            return False
        return super().delete(key)

    def __repr__(self) -> str:
        return f"/{self.original_source}/{self.original_flags}"


def is_object(value: Any) -> bool:
    """Check if value is a JavaScript object (functions included)."""
    return isinstance(value, JSObject)


def is_callable(value: Any) -> bool:
    return isinstance(value, JSFunction)


def call(fn: JSValue, this: JSValue, *args: JSValue) -> JSValue:
    """Call a JavaScript function with an explicit receiver."""
    if not is_callable(fn):
        raise JSTypeError(f"{display(fn)} is not a function")
    return fn.call(this, *args)


def display(value: Any) -> str:
    """Short rendering of a value for error messages."""
    if isinstance(value, str):
        return repr(value)
    if isinstance(value, JSSymbol):
        return repr(value)
    if isinstance(value, JSObject):
        return repr(value)
    return to_string(value)


def _normalize_key(key: Any) -> PropertyKey:
    if isinstance(key, JSSymbol):
        return key
    if isinstance(key, int) and not isinstance(key, bool):
        return str(key)
    return to_string(key)


def get_property(obj: JSValue, key: Any, receiver: Optional[JSValue] = None) -> JSValue:
    """Read a property, walking the prototype chain and running getters."""
    key = _normalize_key(key)
    if obj is UNDEFINED or obj is NULL:
        raise JSTypeError(f"Cannot read properties of {obj} (reading {display(key)})")
    if isinstance(obj, str):
        if key == "length":
            return len(obj)
        index = _array_index(key)
        if index is not None and index < len(obj):
            return obj[index]
        return UNDEFINED
    if not isinstance(obj, JSObject):
        return UNDEFINED

    if receiver is None:
        receiver = obj
    current: Optional[JSObject] = obj
    while current is not None:
        if current.has_accessor(key):
            getter = current.own_getter(key)
            if getter is None:
                return UNDEFINED
            return call(getter, receiver)
        if current.has_own_data(key):
            return current.get_own(key)
        current = current.prototype
    return UNDEFINED


def set_property(obj: JSValue, key: Any, value: JSValue, strict: bool = True) -> bool:
    """Write a property, running setters and honouring read-only attributes.

    Under strict semantics a rejected write raises ``JSTypeError``; otherwise
    it returns False.
    """
    key = _normalize_key(key)
    if not isinstance(obj, JSObject):
        if strict:
            raise JSTypeError(
                f"Cannot create property {display(key)} on {display(obj)}"
            )
        return False

    current: Optional[JSObject] = obj
    while current is not None:
        if current.has_accessor(key):
            setter = current.own_setter(key)
            if setter is None:
                if strict:
                    raise JSTypeError(
                        f"Cannot set property {display(key)} of {obj!r} which has only a getter"
                    )
                return False
            call(setter, obj, value)
            return True
        if current.has_own_data(key):
            if not current.is_writable(key):
                if strict:
                    raise JSTypeError(
                        f"Cannot assign to read only property {display(key)} of object {obj!r}"
                    )
                return False
            break
        current = current.prototype

    obj.set(key, value)
    return True


def get_method(value: JSValue, key: PropertyKey) -> JSValue:
    """GetMethod: undefined for a missing method, TypeError if not callable."""
    fn = get_property(value, key)
    if fn is UNDEFINED or fn is NULL:
        return UNDEFINED
    if not is_callable(fn):
        raise JSTypeError(f"{display(fn)} is not a function")
    return fn


def is_nan(value: Any) -> bool:
    """Check if value is NaN."""
    return isinstance(value, float) and math.isnan(value)


def same_value(a: JSValue, b: JSValue) -> bool:
    """SameValue comparison (NaN equals NaN, +0 differs from -0)."""
    if isinstance(a, bool) or isinstance(b, bool):
        return a is b
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        if is_nan(a) and is_nan(b):
            return True
        if a == 0 and b == 0:
            return math.copysign(1, a) == math.copysign(1, b)
        return a == b
    if isinstance(a, str) and isinstance(b, str):
        return a == b
    return a is b


def to_boolean(value: JSValue) -> bool:
    """Convert a JavaScript value to boolean."""
    if value is UNDEFINED or value is NULL:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        if is_nan(value) or value == 0:
            return False
        return True
    if isinstance(value, str):
        return len(value) > 0
    # Objects and symbols are always truthy
    return True


def _default_primitive(value: JSObject) -> str:
    if isinstance(value, JSArray):
        return ",".join(
            "" if v is UNDEFINED or v is NULL else to_string(v) for v in value.elements
        )
    if isinstance(value, JSRegExp):
        return repr(value)
    if isinstance(value, JSFunction):
        return f"function {value.name}() {{ [native code] }}"
    return "[object Object]"


def to_primitive(value: JSValue, hint: str = "number") -> JSValue:
    """Convert an object to a primitive through valueOf/toString."""
    if not isinstance(value, JSObject):
        return value
    names = ("valueOf", "toString") if hint == "number" else ("toString", "valueOf")
    found_method = False
    for name in names:
        method = get_property(value, name)
        if is_callable(method):
            found_method = True
            result = call(method, value)
            if not isinstance(result, JSObject):
                return result
    if found_method:
        raise JSTypeError("Cannot convert object to primitive value")
    return _default_primitive(value)


def _string_to_number(value: str) -> Union[int, float]:
    s = value.strip(_JS_WHITESPACE)
    if s == "":
        return 0
    if s in ("Infinity", "+Infinity"):
        return float("inf")
    if s == "-Infinity":
        return float("-inf")
    prefixes = {"0x": 16, "0o": 8, "0b": 2}
    base = prefixes.get(s[:2].lower())
    if base is not None:
        digits = s[2:]
        if not digits or "_" in digits:
            return float("nan")
        try:
            return int(digits, base)
        except ValueError:
            return float("nan")
    if not _DECIMAL_LITERAL.match(s):
        return float("nan")
    if "." in s or "e" in s.lower():
        return float(s)
    return int(s)


def to_number(value: JSValue) -> Union[int, float]:
    """Convert a JavaScript value to number."""
    if value is UNDEFINED:
        return float("nan")
    if value is NULL:
        return 0
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        return _string_to_number(value)
    if isinstance(value, JSSymbol):
        raise JSTypeError("Cannot convert a Symbol value to a number")
    return to_number(to_primitive(value, "number"))


def to_integer_or_infinity(value: JSValue) -> Union[int, float]:
    number = to_number(value)
    if is_nan(number):
        return 0
    if math.isinf(number):
        return number
    return int(number)


def to_length(value: JSValue) -> int:
    """ToLength: clamp to an integer in [0, 2**53 - 1]."""
    length = to_integer_or_infinity(value)
    if length <= 0:
        return 0
    if length > MAX_SAFE_INTEGER:
        return MAX_SAFE_INTEGER
    return int(length)


def to_uint32(value: JSValue) -> int:
    number = to_number(value)
    if is_nan(number) or math.isinf(number):
        return 0
    return int(number) & 0xFFFFFFFF


def to_string(value: JSValue) -> str:
    """Convert a JavaScript value to string."""
    if value is UNDEFINED:
        return "undefined"
    if value is NULL:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if is_nan(value):
            return "NaN"
        if value == float("inf"):
            return "Infinity"
        if value == float("-inf"):
            return "-Infinity"
        # Handle -0
        if value == 0:
            return "0"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    if isinstance(value, str):
        return value
    if isinstance(value, JSSymbol):
        raise JSTypeError("Cannot convert a Symbol value to a string")
    return to_string(to_primitive(value, "string"))


def require_object_coercible(value: JSValue, method: str) -> JSValue:
    if value is UNDEFINED or value is NULL:
        raise JSTypeError(f"{method} called on null or undefined")
    return value
