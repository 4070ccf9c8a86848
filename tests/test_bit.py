import itertools

import pytest

from mpcircuit.bit import Bit, Comparable
from mpcircuit.execution import Party, circuit_execution, plain_execution

PAIRS = list(itertools.product([False, True], repeat=2))


@pytest.fixture(autouse=True)
def _plain():
    with plain_execution():
        yield


class Num(Comparable):
    def __init__(self, v):
        self.v = v

    def geq(self, rhs):
        return Bit(self.v >= rhs.v)

    def equal(self, rhs):
        return Bit(self.v == rhs.v)


@pytest.mark.parametrize("value", [False, True])
def test_public_round_trip(value):
    assert Bit(value).reveal() is value


@pytest.mark.parametrize("value", [False, True])
def test_private_round_trip(value):
    assert Bit(value, Party.ALICE).reveal(Party.BOB) is value


def test_default_is_false():
    assert Bit().reveal() is False


def test_reveal_str():
    assert Bit(True).reveal_str() == "true"
    assert Bit(False).reveal_str() == "false"


def test_from_label_wraps_label():
    label = circuit_execution().public_label(True)
    assert Bit.from_label(label).label == label
    assert Bit.from_label(label).reveal() is True


@pytest.mark.parametrize("a,b", PAIRS)
def test_logic_gates(a, b):
    x, y = Bit(a), Bit(b)
    assert (x & y).reveal() == (a and b)
    assert (x ^ y).reveal() == (a != b)
    assert (x | y).reveal() == (a or b)
    assert (~x).reveal() == (not a)


@pytest.mark.parametrize("a,b", PAIRS)
def test_equal_and_not_equal(a, b):
    assert Bit(a).equal(Bit(b)).reveal() == (a == b)
    assert Bit(a).not_equal(Bit(b)).reveal() == (a != b)


@pytest.mark.parametrize("a,b,s", list(itertools.product([False, True], repeat=3)))
def test_select(a, b, s):
    assert Bit(a).select(Bit(s), Bit(b)).reveal() == (b if s else a)


def test_xor_assign_rebinds():
    x = Bit(True)
    original = x
    x ^= Bit(True)
    assert x.reveal() is False
    assert original.reveal() is True


def test_bit_has_no_truth_value():
    with pytest.raises(TypeError):
        bool(Bit(True))


@pytest.mark.parametrize("a,b", list(itertools.product([1, 2, 3], repeat=2)))
def test_comparable_derived_operators(a, b):
    x, y = Num(a), Num(b)
    assert Comparable.ge(x, y).reveal() == (a >= b)
    assert Comparable.lt(x, y).reveal() == (a < b)
    assert Comparable.le(x, y).reveal() == (a <= b)
    assert Comparable.gt(x, y).reveal() == (a > b)
    assert Comparable.eq(x, y).reveal() == (a == b)
    assert Comparable.ne(x, y).reveal() == (a != b)
    assert (x < y).reveal() == (a < b)
    assert (x >= y).reveal() == (a >= b)
    assert (x <= y).reveal() == (a <= b)
    assert (x > y).reveal() == (a > b)


def test_comparable_requires_geq_and_equal():
    with pytest.raises(TypeError):
        Comparable()