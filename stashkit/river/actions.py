"""Actions that describe changes to a variable's state."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Mapping


class ActionType(enum.IntEnum):
    """The kind of change an :class:`Action` makes."""

    NAME_SET = 0
    INT_SET = 1
    INT_ADD = 2
    FLOAT_SET = 3
    FLOAT_ADD = 4
    STRING = 5
    MAP_STORE = 6
    MAP_DELETE = 7
    MAP_REPLACE = 8
    NO_OP = 9


@dataclass(frozen=True)
class Action:
    """A change request: its type and the data it carries."""

    type: ActionType
    update: Any = None


def name_set(name: str) -> Action:
    """Change the variable's name."""
    return Action(ActionType.NAME_SET, name)


def int_set(value: int) -> Action:
    """Set the integer value."""
    return Action(ActionType.INT_SET, value)


def int_add(value: int) -> Action:
    """Add to the integer value."""
    return Action(ActionType.INT_ADD, value)


def float_set(value: float) -> Action:
    """Set the float value."""
    return Action(ActionType.FLOAT_SET, value)


def float_add(value: float) -> Action:
    """Add to the float value."""
    return Action(ActionType.FLOAT_ADD, value)


def string_set(value: str) -> Action:
    """Set the string value."""
    return Action(ActionType.STRING, value)


def store_map(key: str, value: Any) -> Action:
    """Store ``value`` at ``key`` in the map, replacing any existing value."""
    return Action(ActionType.MAP_STORE, (key, value))


def delete_map(key: str) -> Action:
    """Remove ``key`` from the map."""
    return Action(ActionType.MAP_DELETE, key)


def replace_map(mapping: Mapping[str, Any]) -> Action:
    """Replace the whole map."""
    return Action(ActionType.MAP_REPLACE, dict(mapping))


def no_op() -> Action:
    """Bump the change counter to signal that a map value changed."""
    return Action(ActionType.NO_OP)