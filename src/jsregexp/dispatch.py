"""
RegExpExec dispatch and the IsRegExp predicate.

``regexp_exec`` is the single entry point every higher-level RegExp and
String builtin uses to run a match. It honours a user supplied ``exec``
on the receiver and validates what that function returns; only when no
callable ``exec`` exists does it fall back to the builtin matcher, which
is restricted to genuine RegExp instances.
"""

import logging
from enum import Enum
from typing import TYPE_CHECKING

from .errors import IncompatibleReceiverError, InvalidExecResultError
from .values import (
    NULL,
    UNDEFINED,
    SYMBOL_MATCH,
    JSFunction,
    JSRegExp,
    JSValue,
    call,
    get_property,
    is_callable,
    is_object,
    to_boolean,
)

if TYPE_CHECKING:
    from .realm import Realm

logger = logging.getLogger(__name__)


class BuiltinId(Enum):
    """Identities of builtin functions other code needs to recognise."""

    REGEXP_PROTOTYPE_EXEC = "RegExp.prototype.exec"


def regexp_exec(
    realm: "Realm", regexp: JSValue, string: str, exec_fn: JSValue = UNDEFINED
) -> JSValue:
    """
    ES RegExpExec(R, S).

    Args:
        realm: Realm providing the builtin exec
        regexp: The receiver, any object
        string: The subject string
        exec_fn: ``exec`` if the caller already looked it up

    Returns:
        NULL or the match result object, exactly as produced

    Raises:
        InvalidExecResultError: a callable exec returned a non-object
        IncompatibleReceiverError: no callable exec and not a RegExp
    """
    if exec_fn is UNDEFINED:
        exec_fn = get_property(regexp, "exec")

    if is_callable(exec_fn):
        if not is_builtin_exec(exec_fn):
            logger.debug("RegExpExec calling user exec %r", exec_fn)
        result = call(exec_fn, regexp, string)
        # exec may have run arbitrary code; check the result afterwards
        if result is not NULL and not is_object(result):
            raise InvalidExecResultError(result)
        return result

    if not isinstance(regexp, JSRegExp):
        raise IncompatibleReceiverError(BuiltinId.REGEXP_PROTOTYPE_EXEC.value, regexp)

    logger.debug("RegExpExec falling back to builtin exec on %r", regexp)
    return call(realm.regexp_exec_function, regexp, string)


def is_builtin_exec(exec_fn: JSValue) -> bool:
    """True only for the builtin RegExp.prototype.exec itself."""
    if not isinstance(exec_fn, JSFunction):
        return False
    return exec_fn.builtin_id is BuiltinId.REGEXP_PROTOTYPE_EXEC


def is_regexp(realm: "Realm", value: JSValue) -> bool:
    """ES IsRegExp(argument). Objects opt in or out through @@match."""
    if not is_object(value):
        return False

    if realm.has_initial_regexp_shape(value):
        # Unmodified RegExp instance, @@match is known to be intact
        return True

    matcher = get_property(value, SYMBOL_MATCH)
    if matcher is not UNDEFINED:
        return to_boolean(matcher)
    return isinstance(value, JSRegExp)
