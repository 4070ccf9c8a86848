"""Boolean circuits in the Bristol and Bristol Fashion text formats."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Any

from mpcircuit.bit import Bit
from mpcircuit.execution import circuit_execution


class GateType(IntEnum):
    """Gate kinds as stored in the fourth slot of a gate tuple."""

    AND = 0
    XOR = 1
    NOT = 2


def execute_circuit(wires: list[Any], gates: Iterable[Sequence[int]]) -> list[Any]:
    """Evaluate ``gates`` over the wire labels in ``wires``, in place.

    Each gate is ``(in1, in2, out, kind)``. A kind other than AND, XOR or NOT
    is evaluated as OR.
    """
    circ = circuit_execution()
    for in1, in2, out, kind in gates:
        if kind == GateType.AND:
            wires[out] = circ.and_gate(wires[in1], wires[in2])
        elif kind == GateType.XOR:
            wires[out] = circ.xor_gate(wires[in1], wires[in2])
        elif kind == GateType.NOT:
            wires[out] = circ.not_gate(wires[in1])
        else:
            a, b = wires[in1], wires[in2]
            wires[out] = circ.xor_gate(circ.xor_gate(a, b), circ.and_gate(a, b))
    return wires


def _next_token(tokens: Iterator[str]) -> str:
    try:
        return next(tokens)
    except StopIteration:
        raise ValueError("unexpected end of circuit description") from None


def _next_int(tokens: Iterator[str]) -> int:
    token = _next_token(tokens)
    try:
        return int(token)
    except ValueError:
        raise ValueError(f"expected an integer, found {token!r}") from None


def _parse_gates(tokens: Iterator[str], num_gate: int) -> list[tuple[int, int, int, int]]:
    gates = []
    for _ in range(num_gate):
        arity = _next_int(tokens)
        if arity == 2:
            _next_int(tokens)
            in1, in2, out = _next_int(tokens), _next_int(tokens), _next_int(tokens)
            name = _next_token(tokens)
            if name.startswith("A"):
                kind = GateType.AND
            elif name.startswith("X"):
                kind = GateType.XOR
            else:
                raise ValueError(f"unsupported two-input gate {name!r}")
            gates.append((in1, in2, out, int(kind)))
        elif arity == 1:
            _next_int(tokens)
            in1, out = _next_int(tokens), _next_int(tokens)
            _next_token(tokens)
            gates.append((in1, 0, out, int(GateType.NOT)))
        else:
            raise ValueError(f"unsupported gate arity {arity}")
    return gates


def _to_labels(values: Iterable[Any]) -> tuple[list[Any], bool]:
    items = list(values)
    as_bits = bool(items) and isinstance(items[0], Bit)
    return [v.label if isinstance(v, Bit) else v for v in items], as_bits


def _wrap(labels: list[Any], as_bits: bool) -> list[Any]:
    return [Bit.from_label(label) for label in labels] if as_bits else labels


def _evaluate(num_wire: int, inputs: list[Any], gates: list[tuple[int, int, int, int]],
              num_output: int) -> list[Any]:
    wires: list[Any] = [None] * num_wire
    wires[: len(inputs)] = inputs
    execute_circuit(wires, gates)
    return wires[num_wire - num_output:]


@dataclass
class BristolFormat:
    """A circuit with two input groups and one output group."""

    num_gate: int
    num_wire: int
    n1: int
    n2: int
    n3: int
    gates: list[tuple[int, int, int, int]] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.gates = [tuple(g) for g in self.gates]
        if len(self.gates) != self.num_gate:
            raise ValueError(f"expected {self.num_gate} gates, got {len(self.gates)}")

    @classmethod
    def parse(cls, text: str) -> BristolFormat:
        """Read a circuit from Bristol-format text."""
        tokens = iter(text.split())
        num_gate, num_wire = _next_int(tokens), _next_int(tokens)
        n1, n2, n3 = _next_int(tokens), _next_int(tokens), _next_int(tokens)
        return cls(num_gate, num_wire, n1, n2, n3, _parse_gates(tokens, num_gate))

    @classmethod
    def from_file(cls, path: str | Path) -> BristolFormat:
        """Read a circuit from a Bristol-format file."""
        return cls.parse(Path(path).read_text())

    def to_file(self, filename: str | Path, prefix: str) -> None:
        """Write the circuit as C array definitions named after ``prefix``."""
        lines = [
            f"int {prefix}_num_gate = {self.num_gate};\n",
            f"int {prefix}_num_wire = {self.num_wire};\n",
            f"int {prefix}_n1 = {self.n1};\n",
            f"int {prefix}_n2 = {self.n2};\n",
            f"int {prefix}_n3 = {self.n3};\n",
            f"int {prefix}_gate_arr [{self.num_gate * 4}] = {{\n",
        ]
        lines.extend("".join(f"{v}, " for v in gate) + "\n" for gate in self.gates)
        lines.append("};\n")
        Path(filename).write_text("".join(lines))

    def compute(self, in1: Sequence[Any], in2: Sequence[Any]) -> list[Any]:
        """Evaluate on two input groups; returns Bits for Bit inputs, labels otherwise."""
        labels1, bits1 = _to_labels(in1)
        labels2, bits2 = _to_labels(in2)
        if len(labels1) < self.n1 or len(labels2) < self.n2:
            raise ValueError(f"circuit takes {self.n1} and {self.n2} input wires")
        inputs = labels1[: self.n1] + labels2[: self.n2]
        out = _evaluate(self.num_wire, inputs, self.gates, self.n3)
        return _wrap(out, bits1 or bits2)


@dataclass
class BristolFashion:
    """A circuit in Bristol Fashion: input and output groups summed to one each."""

    num_gate: int
    num_wire: int
    num_input: int
    num_output: int
    gates: list[tuple[int, int, int, int]] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.gates = [tuple(g) for g in self.gates]
        if len(self.gates) != self.num_gate:
            raise ValueError(f"expected {self.num_gate} gates, got {len(self.gates)}")

    @classmethod
    def parse(cls, text: str) -> BristolFashion:
        """Read a circuit from Bristol Fashion text."""
        tokens = iter(text.split())
        num_gate, num_wire = _next_int(tokens), _next_int(tokens)
        num_input = sum(_next_int(tokens) for _ in range(_next_int(tokens)))
        num_output = sum(_next_int(tokens) for _ in range(_next_int(tokens)))
        return cls(num_gate, num_wire, num_input, num_output, _parse_gates(tokens, num_gate))

    @classmethod
    def from_file(cls, path: str | Path) -> BristolFashion:
        """Read a circuit from a Bristol Fashion file."""
        return cls.parse(Path(path).read_text())

    def compute(self, inputs: Sequence[Any]) -> list[Any]:
        """Evaluate the circuit; returns Bits for Bit inputs, labels otherwise."""
        labels, as_bits = _to_labels(inputs)
        if len(labels) < self.num_input:
            raise ValueError(f"circuit takes {self.num_input} input wires")
        out = _evaluate(self.num_wire, labels[: self.num_input], self.gates, self.num_output)
        return _wrap(out, as_bits)