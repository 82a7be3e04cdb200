"""Realm - the RegExp intrinsics of one JavaScript environment."""

import logging
from typing import Any, Optional

from .builtins import install_regexp_prototype
from .dispatch import is_regexp
from .engine import PythonRegexEngine, RegExpError
from .errors import JSSyntaxError
from .last_index import ReceiverKind
from .legacy import install_legacy_statics
from .match_info import MatchInfo
from .values import (
    UNDEFINED,
    JSFunction,
    JSObject,
    JSRegExp,
    JSValue,
    Shape,
    get_property,
    to_string,
)

logger = logging.getLogger(__name__)

VALID_FLAGS = "gimsuy"


class Realm:
    """
    Owns %RegExp%, %RegExp.prototype% and the builtin exec.

    RegExp instances created here start out with ``regexp_initial_shape``.
    An instance keeps that shape until its own layout changes, which is what
    makes it canonical; modifying %RegExp.prototype% revokes the canonical
    status of every instance at once.

    Args:
        engine: Object with ``compile(source, flags)`` returning a pattern
            with an ``exec(subject, start, sticky)`` method. Defaults to
            PythonRegexEngine.
        legacy_statics: Install RegExp.$1-$9 and friends.
    """

    def __init__(self, engine: Optional[Any] = None, legacy_statics: bool = True):
        self.engine = engine if engine is not None else PythonRegexEngine()
        self.regexp_initial_shape = Shape()
        self.regexp_prototype = JSObject()
        # Most recent successful builtin match, read by the legacy statics
        self.last_match_info = MatchInfo.empty()

        install_regexp_prototype(self)
        self.regexp_exec_function: JSFunction = self.regexp_prototype.get("exec")

        self.regexp_constructor = JSFunction("RegExp", self._construct_fn)
        self.regexp_constructor.set("prototype", self.regexp_prototype)
        self.regexp_prototype.set("constructor", self.regexp_constructor)
        if legacy_statics:
            install_legacy_statics(self)

        self._initial_prototype_shape = self.regexp_prototype.shape
        logger.debug(
            "Realm ready with engine %s (legacy statics %s)",
            type(self.engine).__name__,
            "on" if legacy_statics else "off",
        )

    def has_initial_regexp_shape(self, value: JSValue) -> bool:
        return (
            isinstance(value, JSObject)
            and value.shape is self.regexp_initial_shape
            and self.regexp_prototype.shape is self._initial_prototype_shape
        )

    def receiver_kind(self, value: JSValue) -> ReceiverKind:
        if self.has_initial_regexp_shape(value):
            return ReceiverKind.CANONICAL
        return ReceiverKind.GENERIC

    def regexp_create(self, pattern: JSValue = UNDEFINED, flags: JSValue = UNDEFINED) -> JSRegExp:
        """
        ES RegExpCreate(P, F).

        Raises:
            JSSyntaxError: invalid flags, or a pattern the engine rejects
        """
        source = "" if pattern is UNDEFINED else to_string(pattern)
        flag_str = "" if flags is UNDEFINED else to_string(flags)
        for i, flag in enumerate(flag_str):
            if flag not in VALID_FLAGS or flag in flag_str[:i]:
                raise JSSyntaxError(
                    f"Invalid flags supplied to RegExp constructor '{flag_str}'"
                )

        try:
            matcher = self.engine.compile(source, flag_str)
        except RegExpError as e:
            raise JSSyntaxError(f"Invalid regular expression: /{source}/: {e}") from e

        return JSRegExp(
            source,
            flag_str,
            matcher,
            prototype=self.regexp_prototype,
            shape=self.regexp_initial_shape,
        )

    def construct(self, pattern: JSValue = UNDEFINED, flags: JSValue = UNDEFINED) -> JSRegExp:
        """``new RegExp(pattern, flags)``, accepting regex-like patterns."""
        if isinstance(pattern, JSRegExp):
            source: JSValue = pattern.original_source
            if flags is UNDEFINED:
                flags = pattern.original_flags
        elif is_regexp(self, pattern):
            source = get_property(pattern, "source")
            if flags is UNDEFINED:
                flags = get_property(pattern, "flags")
        else:
            source = pattern
        return self.regexp_create(source, flags)

    def _construct_fn(self, this: JSValue, *args: JSValue) -> JSRegExp:
        pattern = args[0] if args else UNDEFINED
        flags = args[1] if len(args) > 1 else UNDEFINED
        return self.construct(pattern, flags)
