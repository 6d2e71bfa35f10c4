import pytest

from stashkit.river import actions
from stashkit.river.actions import Action, ActionType


@pytest.mark.parametrize(
    "factory, arg, expected_type",
    [
        (actions.name_set, "hello", ActionType.NAME_SET),
        (actions.int_set, 10, ActionType.INT_SET),
        (actions.int_add, 10, ActionType.INT_ADD),
        (actions.float_set, 1.5, ActionType.FLOAT_SET),
        (actions.float_add, 1.5, ActionType.FLOAT_ADD),
        (actions.string_set, "ho", ActionType.STRING),
        (actions.delete_map, "int", ActionType.MAP_DELETE),
    ],
)
def test_single_argument_actions(factory, arg, expected_type):
    action = factory(arg)
    assert action.type is expected_type
    assert action.update == arg


def test_store_map_carries_key_and_value():
    marker = object()
    action = actions.store_map("int", marker)
    assert action.type is ActionType.MAP_STORE
    key, value = action.update
    assert key == "int"
    assert value is marker


def test_replace_map_copies_mapping():
    source = {"a": 1}
    action = actions.replace_map(source)
    source["b"] = 2
    assert action.type is ActionType.MAP_REPLACE
    assert action.update == {"a": 1}


def test_no_op_has_no_update():
    action = actions.no_op()
    assert action == Action(ActionType.NO_OP)
    assert action.update is None


def test_every_factory_makes_a_distinct_action_type():
    made = [
        actions.name_set("n"),
        actions.int_set(1),
        actions.int_add(1),
        actions.float_set(1.0),
        actions.float_add(1.0),
        actions.string_set("s"),
        actions.store_map("k", None),
        actions.delete_map("k"),
        actions.replace_map({}),
        actions.no_op(),
    ]
    types = [action.type for action in made]
    assert len(set(types)) == len(made)
    assert set(types) == set(ActionType)