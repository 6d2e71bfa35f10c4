import ipaddress

import pytest

from stashkit.river.transport import (
    MAX_INTERVAL,
    Drop,
    IdentityVar,
    OpType,
    Operation,
    RiverTransport,
    Source,
    Subscribe,
    Var,
    WireType,
)


def test_op_type_numbers_select_operation_part():
    assert OpType(0) is OpType.UNKNOWN
    subscribe = Operation(type=OpType(1), subscribe=Subscribe(name="int", interval=1))
    assert subscribe.type is OpType.SUBSCRIBE
    assert subscribe.validate() is None
    drop = Operation(type=OpType(2), drop=Drop(name="int"))
    assert drop.type is OpType.DROP
    assert drop.validate() is None


def test_subscribe_blank_name_rejected():
    with pytest.raises(ValueError, match="blank"):
        Subscribe(name="", interval=1).validate()


def test_subscribe_interval_limit():
    assert Subscribe(name="int", interval=MAX_INTERVAL).validate() is None
    with pytest.raises(ValueError, match="interval"):
        Subscribe(name="int", interval=MAX_INTERVAL + 1).validate()


def test_drop_blank_name_rejected():
    with pytest.raises(ValueError, match="blank"):
        Drop().validate()


def test_operation_validates_matching_part():
    good = Operation(type=OpType.SUBSCRIBE, subscribe=Subscribe(name="int", interval=5))
    assert good.validate() is None
    with pytest.raises(ValueError):
        Operation(type=OpType.DROP, subscribe=Subscribe(name="int")).validate()
    with pytest.raises(ValueError):
        Operation(type=OpType.SUBSCRIBE, drop=Drop(name="int")).validate()


def test_operation_unknown_type_rejected():
    with pytest.raises(ValueError, match="unknown"):
        Operation(type=OpType.UNKNOWN).validate()


def test_operation_response_round_trip():
    op = Operation(type=OpType.DROP, drop=Drop(name="string"))
    error = RuntimeError("boom")
    op.response.put(error)
    assert op.response.get(timeout=1) is error


def test_operations_have_separate_responses():
    first = Operation(type=OpType.DROP)
    second = Operation(type=OpType.DROP)
    first.response.put(None)
    assert second.response.empty()


def test_source_string_and_validation():
    source = Source(app="app", shard="s1", ip="10.0.0.1", port=8080, instance=2)
    source.validate()
    assert source.ip == ipaddress.ip_address("10.0.0.1")
    assert str(source) == "app:s1:10.0.0.1:8080:2"


def test_source_empty_shard_allowed():
    source = Source(app="app", ip="10.0.0.1", port=80)
    source.validate()
    assert str(source).split(":")[1] == ""


@pytest.mark.parametrize(
    "kwargs",
    [
        {"app": "", "ip": "10.0.0.1", "port": 80},
        {"app": "a:b", "ip": "10.0.0.1", "port": 80},
        {"app": "app", "shard": "x:y", "ip": "10.0.0.1", "port": 80},
        {"app": "app", "port": 80},
        {"app": "app", "ip": "10.0.0.1", "port": 0},
    ],
)
def test_source_invalid(kwargs):
    with pytest.raises(ValueError):
        Source(**kwargs).validate()


def test_source_bad_ip_rejected():
    with pytest.raises(ValueError):
        Source(app="app", ip="not-an-ip", port=80)


def test_identity_var_holds_var():
    source = Source(app="app", ip="10.0.0.1", port=80)
    var = Var(name="int", source=source, type=WireType.INT, int_value=3)
    ident = IdentityVar(id="app:0:0", var=var)
    assert ident.var.int_value == 3
    assert ident.var.source is source


def test_river_transport_is_abstract():
    with pytest.raises(TypeError):
        RiverTransport()