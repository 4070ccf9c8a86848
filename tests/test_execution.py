import pytest

from mpcircuit.execution import (
    Party,
    PlainCircuitExecution,
    PlainProtocolExecution,
    circuit_execution,
    plain_execution,
    protocol_execution,
    set_execution,
    use_execution,
)


@pytest.fixture(autouse=True)
def _clean_state():
    set_execution(None, None)
    yield
    set_execution(None, None)


def test_no_circuit_execution_raises():
    with pytest.raises(RuntimeError):
        circuit_execution()


def test_no_protocol_execution_raises():
    with pytest.raises(RuntimeError):
        protocol_execution()


def test_set_execution_installs_pair():
    circ, prot = PlainCircuitExecution(), PlainProtocolExecution()
    set_execution(circ, prot)
    assert circuit_execution() is circ
    assert protocol_execution() is prot


def test_use_execution_restores_previous():
    outer = (PlainCircuitExecution(), PlainProtocolExecution())
    inner = (PlainCircuitExecution(), PlainProtocolExecution())
    set_execution(*outer)
    with use_execution(*inner) as pair:
        assert pair == inner
        assert circuit_execution() is inner[0]
    assert circuit_execution() is outer[0]
    assert protocol_execution() is outer[1]


def test_plain_execution_scope():
    with plain_execution() as (circ, prot):
        assert circuit_execution() is circ
        assert protocol_execution() is prot
    with pytest.raises(RuntimeError):
        circuit_execution()


@pytest.mark.parametrize("value", [False, True])
def test_plain_gates_identities(value):
    circ = PlainCircuitExecution()
    a = circ.public_label(value)
    zero = circ.public_label(False)
    one = circ.public_label(True)
    assert circ.not_gate(circ.not_gate(a)) == a
    assert circ.xor_gate(a, zero) == a
    assert circ.xor_gate(a, a) == zero
    assert circ.and_gate(a, one) == a
    assert circ.and_gate(a, zero) == zero
    assert circ.xor_gate(a, one) == circ.not_gate(a)


def test_plain_feed_reveal_round_trip():
    prot = PlainProtocolExecution()
    values = [True, False, False, True, True]
    labels = prot.feed(Party.ALICE, values)
    assert prot.reveal(Party.PUBLIC, labels) == values


def test_plain_public_label_matches_feed():
    circ, prot = PlainCircuitExecution(), PlainProtocolExecution()
    assert prot.feed(Party.BOB, [True]) == [circ.public_label(True)]


def test_feed_rejects_unknown_party():
    with pytest.raises(ValueError):
        PlainProtocolExecution().feed(7, [True])


def test_reveal_rejects_unknown_party():
    with pytest.raises(ValueError):
        PlainProtocolExecution().reveal(-1, [1])