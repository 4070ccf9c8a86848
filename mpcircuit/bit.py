"""A single wire of a boolean circuit, and comparison operators built on ``geq``."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from mpcircuit.execution import Party, circuit_execution, protocol_execution


class Bit:
    """One secret or public bit, held as a wire label of the active execution."""

    __slots__ = ("label",)

    def __init__(self, value: bool = False, party: Party = Party.PUBLIC) -> None:
        if party == Party.PUBLIC:
            self.label = circuit_execution().public_label(bool(value))
        else:
            self.label = protocol_execution().feed(party, [bool(value)])[0]

    @classmethod
    def from_label(cls, label: Any) -> Bit:
        """Wrap an existing wire label."""
        bit = cls.__new__(cls)
        bit.label = label
        return bit

    def reveal(self, party: Party = Party.PUBLIC) -> bool:
        """Open the bit to ``party``."""
        return protocol_execution().reveal(party, [self.label])[0]

    def reveal_str(self, party: Party = Party.PUBLIC) -> str:
        """Open the bit and spell it as ``"true"`` or ``"false"``."""
        return "true" if self.reveal(party) else "false"

    def __and__(self, rhs: Bit) -> Bit:
        return Bit.from_label(circuit_execution().and_gate(self.label, rhs.label))

    def __xor__(self, rhs: Bit) -> Bit:
        return Bit.from_label(circuit_execution().xor_gate(self.label, rhs.label))

    def __or__(self, rhs: Bit) -> Bit:
        return (self ^ rhs) ^ (self & rhs)

    def __invert__(self) -> Bit:
        return Bit.from_label(circuit_execution().not_gate(self.label))

    def equal(self, rhs: Bit) -> Bit:
        """Bit that is set when both bits agree."""
        return ~(self ^ rhs)

    def not_equal(self, rhs: Bit) -> Bit:
        """Bit that is set when the bits differ."""
        return self ^ rhs

    def select(self, sel: Bit, new_value: Bit) -> Bit:
        """Return ``new_value`` if ``sel`` is set, otherwise ``self``."""
        return self ^ ((self ^ new_value) & sel)

    def __bool__(self) -> bool:
        raise TypeError("a circuit Bit has no truth value; call reveal()")

    def __repr__(self) -> str:
        return f"Bit(label={self.label!r})"


class Comparable(ABC):
    """Mixin deriving every comparison from ``geq`` and ``equal``."""

    @abstractmethod
    def geq(self, rhs: Any) -> Bit:
        """Bit set when ``self >= rhs``."""

    @abstractmethod
    def equal(self, rhs: Any) -> Bit:
        """Bit set when ``self == rhs``."""

    def ge(self, rhs: Any) -> Bit:
        return self.geq(rhs)

    def lt(self, rhs: Any) -> Bit:
        return ~self.ge(rhs)

    def le(self, rhs: Any) -> Bit:
        return rhs.ge(self)

    def gt(self, rhs: Any) -> Bit:
        return ~rhs.ge(self)

    def eq(self, rhs: Any) -> Bit:
        return self.equal(rhs)

    def ne(self, rhs: Any) -> Bit:
        return ~self.eq(rhs)

    def __ge__(self, rhs: Any) -> Bit:
        return self.ge(rhs)

    def __lt__(self, rhs: Any) -> Bit:
        return self.lt(rhs)

    def __le__(self, rhs: Any) -> Bit:
        return self.le(rhs)

    def __gt__(self, rhs: Any) -> Bit:
        return self.gt(rhs)