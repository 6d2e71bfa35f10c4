"""The reducer that applies actions to a variable's state."""

from __future__ import annotations

import logging
from dataclasses import replace

from stashkit.river.actions import Action, ActionType
from stashkit.river.data import VarState, VarType

_log = logging.getLogger(__name__)


def var_state_mod(state: VarState, action: Action) -> VarState:
    """Return a new state with ``action`` applied; ``state`` is left untouched.

    Unknown action types are logged and leave the state unchanged.
    """
    match action.type:
        case ActionType.NAME_SET:
            return replace(state, name=action.update)
        case ActionType.INT_SET:
            return replace(state, type=VarType.INT, int_value=action.update)
        case ActionType.INT_ADD:
            return replace(
                state, type=VarType.INT, int_value=state.int_value + action.update
            )
        case ActionType.FLOAT_SET:
            return replace(state, type=VarType.FLOAT, float_value=action.update)
        case ActionType.FLOAT_ADD:
            return replace(
                state,
                type=VarType.FLOAT,
                float_value=state.float_value + action.update,
            )
        case ActionType.STRING:
            return replace(state, type=VarType.STRING, string_value=action.update)
        case ActionType.MAP_STORE:
            key, value = action.update
            mapping = dict(state.map_value)
            mapping[key] = value
            return replace(state, type=VarType.MAP, map_value=mapping)
        case ActionType.MAP_DELETE:
            mapping = dict(state.map_value)
            mapping.pop(action.update, None)
            return replace(state, type=VarType.MAP, map_value=mapping)
        case ActionType.MAP_REPLACE:
            return replace(state, type=VarType.MAP, map_value=action.update)
        case ActionType.NO_OP:
            return replace(state, type=VarType.MAP, no_op=state.no_op + 1)
        case _:
            _log.error(
                "var_state_mod does not understand the type of action: %r",
                action.type,
            )
            return state