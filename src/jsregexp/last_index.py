"""
lastIndex cursor.

Receivers come in two kinds. A canonical receiver is an unmodified RegExp
instance created by the realm: its lastIndex lives in an inline slot and is
read and written directly, without running any user code. Every other
receiver goes through the generic property protocol, which may run getters
and setters and rejects writes to a read-only lastIndex.
"""

from enum import Enum
from typing import TYPE_CHECKING

from .values import JSValue, get_property, set_property

if TYPE_CHECKING:
    from .realm import Realm

LAST_INDEX = "lastIndex"


class ReceiverKind(Enum):
    CANONICAL = "canonical"
    GENERIC = "generic"


def get_last_index(realm: "Realm", regexp: JSValue) -> JSValue:
    if realm.receiver_kind(regexp) is ReceiverKind.CANONICAL:
        return regexp.last_index
    return get_property(regexp, LAST_INDEX)


def set_last_index(realm: "Realm", regexp: JSValue, value: JSValue) -> JSValue:
    """Store ``value`` as lastIndex with strict write semantics.

    Raises JSTypeError when a generic receiver rejects the write.
    """
    if realm.receiver_kind(regexp) is ReceiverKind.CANONICAL:
        regexp.last_index = value
        return regexp
    set_property(regexp, LAST_INDEX, value, strict=True)
    return regexp
