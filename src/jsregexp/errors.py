"""JavaScript error types raised by the RegExp layer."""

from typing import Any


class JSError(Exception):
    """Base class for all JavaScript errors."""

    def __init__(self, message: str = "", name: str = "Error"):
        self.message = message
        self.name = name
        super().__init__(f"{name}: {message}" if message else name)


class JSSyntaxError(JSError):
    """Invalid regular expression pattern or flags."""

    def __init__(self, message: str = ""):
        super().__init__(message, "SyntaxError")


class JSTypeError(JSError):
    """JavaScript type error."""

    def __init__(self, message: str = ""):
        super().__init__(message, "TypeError")


class JSRangeError(JSError):
    """JavaScript range error."""

    def __init__(self, message: str = ""):
        super().__init__(message, "RangeError")


class InvalidExecResultError(JSTypeError):
    """A user supplied exec returned something other than null or an object."""

    def __init__(self, result: Any = None):
        self.result = result
        super().__init__("Invalid RegExp exec result")


class IncompatibleReceiverError(JSTypeError):
    """A builtin-only method was reached with a receiver it cannot handle."""

    def __init__(self, method: str, receiver: Any = None):
        self.method = method
        self.receiver = receiver
        super().__init__(
            f"Method {method} called on incompatible receiver {receiver!r}"
        )
