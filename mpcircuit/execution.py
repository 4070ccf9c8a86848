"""Execution back ends that evaluate gates and move values in and out of circuits.

A circuit execution turns gates on wire labels into new labels. A protocol
execution feeds private inputs into labels and reveals labels as plain values.
The active pair is held per context (and so per thread), and every circuit
object looks it up when it builds a gate.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from enum import IntEnum
from typing import Any


class Party(IntEnum):
    """Who owns an input or may see an output."""

    PUBLIC = 0
    ALICE = 1
    BOB = 2


class CircuitExecution(ABC):
    """Evaluates boolean gates on opaque wire labels."""

    @abstractmethod
    def and_gate(self, a: Any, b: Any) -> Any:
        """Return the label of ``a AND b``."""

    @abstractmethod
    def xor_gate(self, a: Any, b: Any) -> Any:
        """Return the label of ``a XOR b``."""

    @abstractmethod
    def not_gate(self, a: Any) -> Any:
        """Return the label of ``NOT a``."""

    @abstractmethod
    def public_label(self, b: bool) -> Any:
        """Return the label of a constant known to everyone."""


class ProtocolExecution(ABC):
    """Moves plain values into and out of wire labels."""

    @abstractmethod
    def feed(self, party: Party, values: Iterable[bool]) -> list[Any]:
        """Turn the inputs of ``party`` into labels."""

    @abstractmethod
    def reveal(self, party: Party, labels: Iterable[Any]) -> list[bool]:
        """Open ``labels`` to ``party`` and return the plain values."""


class PlainCircuitExecution(CircuitExecution):
    """Evaluates gates in the clear: a label is simply 0 or 1."""

    def and_gate(self, a: int, b: int) -> int:
        return a & b

    def xor_gate(self, a: int, b: int) -> int:
        return a ^ b

    def not_gate(self, a: int) -> int:
        return a ^ 1

    def public_label(self, b: bool) -> int:
        return int(bool(b))


class PlainProtocolExecution(ProtocolExecution):
    """Feeds and reveals values in the clear."""

    def feed(self, party: Party, values: Iterable[bool]) -> list[int]:
        Party(party)
        return [int(bool(v)) for v in values]

    def reveal(self, party: Party, labels: Iterable[int]) -> list[bool]:
        Party(party)
        return [bool(label & 1) for label in labels]


_circuit: ContextVar[CircuitExecution | None] = ContextVar("circuit_execution", default=None)
_protocol: ContextVar[ProtocolExecution | None] = ContextVar("protocol_execution", default=None)


def circuit_execution() -> CircuitExecution:
    """Return the active circuit execution."""
    circ = _circuit.get()
    if circ is None:
        raise RuntimeError("no circuit execution is installed")
    return circ


def protocol_execution() -> ProtocolExecution:
    """Return the active protocol execution."""
    prot = _protocol.get()
    if prot is None:
        raise RuntimeError("no protocol execution is installed")
    return prot


def set_execution(circ: CircuitExecution | None, prot: ProtocolExecution | None) -> None:
    """Install ``circ`` and ``prot`` for the current context; ``None`` uninstalls."""
    _circuit.set(circ)
    _protocol.set(prot)


@contextmanager
def use_execution(
    circ: CircuitExecution, prot: ProtocolExecution
) -> Iterator[tuple[CircuitExecution, ProtocolExecution]]:
    """Install an execution pair for the duration of a ``with`` block."""
    circ_token = _circuit.set(circ)
    prot_token = _protocol.set(prot)
    try:
        yield circ, prot
    finally:
        _protocol.reset(prot_token)
        _circuit.reset(circ_token)


@contextmanager
def plain_execution() -> Iterator[tuple[CircuitExecution, ProtocolExecution]]:
    """Evaluate circuits in the clear inside a ``with`` block."""
    with use_execution(PlainCircuitExecution(), PlainProtocolExecution()) as pair:
        yield pair