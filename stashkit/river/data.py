"""State data held in the stores that back river variables."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional


class VarType(enum.IntEnum):
    """The kind of value a :class:`VarState` holds."""

    UNKNOWN = 0
    INT = 1
    FLOAT = 2
    STRING = 3
    MAP = 4
    FUNC = 5

    def __str__(self) -> str:
        return _TYPE_NAMES[self]

    def sub_string(self) -> str:
        """Return the state field to subscribe to for changes of this type.

        Raises ValueError for FUNC and UNKNOWN, which cannot be subscribed to.
        """
        if self is VarType.FUNC:
            raise ValueError("Func type found, can't subscribe directly to a Func")
        if self is VarType.UNKNOWN:
            raise ValueError("unknown type found, can't subscribe")
        return _TYPE_FIELDS[self]


_TYPE_NAMES = {
    VarType.UNKNOWN: "unknown",
    VarType.INT: "int64",
    VarType.FLOAT: "float64",
    VarType.STRING: "string",
    VarType.MAP: "Map",
    VarType.FUNC: "Func",
}

_TYPE_FIELDS = {
    VarType.INT: "int_value",
    VarType.FLOAT: "float_value",
    VarType.STRING: "string_value",
    VarType.MAP: "map_value",
}


@dataclass(frozen=True)
class VarState:
    """Immutable snapshot of an exported variable.

    ``no_op`` is bumped to signal that a value inside ``map_value`` changed.
    """

    name: str = ""
    type: VarType = VarType.UNKNOWN
    int_value: int = 0
    float_value: float = 0.0
    map_value: Mapping[str, Any] = field(default_factory=dict)
    no_op: int = 0
    string_value: str = ""
    func: Optional[Callable[[], Any]] = None

    def value(self) -> Any:
        """Return the value matching ``type``, or None when the type is unknown."""
        if self.type is VarType.INT:
            return self.int_value
        if self.type is VarType.FLOAT:
            return self.float_value
        if self.type is VarType.MAP:
            return self.map_value
        if self.type is VarType.STRING:
            return self.string_value
        if self.type is VarType.FUNC:
            return self.func
        return None