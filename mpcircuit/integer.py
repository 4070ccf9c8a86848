"""Fixed-width two's-complement integers built from circuit bits.

Bits are stored least significant first. All arithmetic wraps at the width.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from itertools import accumulate

from mpcircuit.bit import Bit, Comparable
from mpcircuit.execution import Party, circuit_execution, protocol_execution


def add_full(
    op1: Sequence[Bit],
    op2: Sequence[Bit],
    carry_in: Bit | None = None,
    carry_out: bool = False,
) -> tuple[list[Bit], Bit | None]:
    """Add ``op1`` and ``op2`` (``len(op1)`` bits).

    Returns the sum and, when ``carry_out`` is true, the carry out of the top
    bit; otherwise the final AND is skipped and ``None`` stands for the carry.
    """
    size = len(op1)
    if size == 0:
        if carry_out:
            return [], carry_in if carry_in is not None else Bit(False)
        return [], None
    carry = carry_in if carry_in is not None else Bit(False)
    full = size if carry_out else size - 1
    dest = []
    for a, b in zip(op1[:full], op2):
        axc = a ^ carry
        bxc = b ^ carry
        dest.append(a ^ bxc)
        carry = carry ^ (axc & bxc)
    if carry_out:
        return dest, carry
    dest.append(carry ^ op2[size - 1] ^ op1[size - 1])
    return dest, None


def sub_full(
    op1: Sequence[Bit],
    op2: Sequence[Bit],
    borrow_in: Bit | None = None,
    borrow_out: bool = False,
) -> tuple[list[Bit], Bit | None]:
    """Subtract ``op2`` from ``op1`` (``len(op1)`` bits); same conventions as ``add_full``."""
    size = len(op1)
    if size == 0:
        if borrow_out:
            return [], borrow_in if borrow_in is not None else Bit(False)
        return [], None
    borrow = borrow_in if borrow_in is not None else Bit(False)
    full = size if borrow_out else size - 1
    dest = []
    for a, b in zip(op1[:full], op2):
        bxa = a ^ b
        bxc = borrow ^ b
        dest.append(bxa ^ borrow)
        borrow = borrow ^ (bxa & bxc)
    if borrow_out:
        return dest, borrow
    dest.append(op1[size - 1] ^ op2[size - 1] ^ borrow)
    return dest, None


def mul_full(op1: Sequence[Bit], op2: Sequence[Bit]) -> list[Bit]:
    """Multiply two equal-width operands, keeping the low ``len(op1)`` bits."""
    size = len(op1)
    total = [Bit(False) for _ in range(size)]
    for i, b in enumerate(op2[:size]):
        partial = [a & b for a in op1[: size - i]]
        total[i:] = add_full(total[i:], partial)[0]
    return total


def if_then_else(tsrc: Sequence[Bit], fsrc: Sequence[Bit], cond: Bit) -> list[Bit]:
    """Pick ``tsrc`` where ``cond`` is set, else ``fsrc``, bit by bit."""
    return [(cond & (t ^ f)) ^ f for t, f in zip(tsrc, fsrc)]


def cond_neg(cond: Bit, src: Sequence[Bit]) -> list[Bit]:
    """Negate ``src`` in two's complement when ``cond`` is set."""
    if not src:
        return []
    carry = cond
    dest = []
    for s in src[:-1]:
        flipped = s ^ cond
        dest.append(flipped ^ carry)
        carry = carry & flipped
    dest.append(cond ^ carry ^ src[-1])
    return dest


def div_full(op1: Sequence[Bit], op2: Sequence[Bit]) -> tuple[list[Bit], list[Bit]]:
    """Unsigned long division; returns ``(quotient, remainder)``."""
    size = len(op1)
    rem = list(op1)
    overflow = [Bit(False)]
    for i in range(1, size):
        overflow.append(overflow[i - 1] | op2[size - i])
    quot: list[Bit] = [Bit(False)] * size
    for i in reversed(range(size)):
        diff, borrow = sub_full(rem[i:], op2, None, True)
        borrow = borrow | overflow[i]
        rem[i:] = if_then_else(rem[i:], diff, borrow)
        quot[i] = ~borrow
    return quot, rem


def _check_same_size(lhs: Integer, rhs: Integer) -> None:
    if len(lhs) != len(rhs):
        raise ValueError(f"operand widths differ: {len(lhs)} and {len(rhs)}")


class Integer(Comparable):
    """A signed fixed-width integer held as a list of bits, least significant first."""

    def __init__(self, bits: Iterable[Bit] = ()) -> None:
        self.bits: list[Bit] = list(bits)

    @classmethod
    def from_bools(cls, bools: Iterable[bool], party: Party = Party.PUBLIC) -> Integer:
        """Build an integer from plain bits owned by ``party``."""
        values = [bool(b) for b in bools]
        if party == Party.PUBLIC:
            circ = circuit_execution()
            one = Bit.from_label(circ.public_label(True))
            zero = Bit.from_label(circ.public_label(False))
            return cls(one if v else zero for v in values)
        labels = protocol_execution().feed(party, values)
        return cls(Bit.from_label(label) for label in labels)

    @classmethod
    def from_int(cls, length: int, value: int, party: Party = Party.PUBLIC) -> Integer:
        """Build a ``length``-bit integer holding ``value`` in two's complement."""
        return cls.from_bools(((value >> i) & 1 for i in range(length)), party)

    @classmethod
    def from_bytes(cls, length: int, data: bytes, party: Party = Party.PUBLIC) -> Integer:
        """Build a ``length``-bit integer from the low bits of little-endian ``data``."""
        if length > 8 * len(data):
            raise ValueError(f"{length} bits requested from {len(data)} bytes")
        value = int.from_bytes(bytes(data), "little")
        return cls.from_bools(((value >> i) & 1 for i in range(length)), party)

    def __len__(self) -> int:
        return len(self.bits)

    def __iter__(self) -> Iterator[Bit]:
        return iter(self.bits)

    def _clamp(self, index: int) -> int:
        return min(index, len(self.bits) - 1)

    def __getitem__(self, index: int) -> Bit:
        """Return a bit; indices past the top read the top (sign) bit."""
        return self.bits[self._clamp(index)]

    def __setitem__(self, index: int, bit: Bit) -> None:
        self.bits[self._clamp(index)] = bit

    def __repr__(self) -> str:
        return f"Integer(width={len(self.bits)})"

    # Comparable
    def geq(self, rhs: Integer) -> Bit:
        _check_same_size(self, rhs)
        width = len(self) + 1
        diff = Integer(self.bits).resize(width) - Integer(rhs.bits).resize(width)
        return ~diff[len(diff) - 1]

    def equal(self, rhs: Integer) -> Bit:
        _check_same_size(self, rhs)
        result = Bit(True)
        for a, b in zip(self.bits, rhs.bits):
            result = result & a.equal(b)
        return result

    def select(self, sel: Bit, rhs: Integer) -> Integer:
        """Return ``rhs`` if ``sel`` is set, otherwise ``self``."""
        _check_same_size(self, rhs)
        return Integer(a.select(sel, b) for a, b in zip(self.bits, rhs.bits))

    # Revealing
    def reveal_bools(self, party: Party = Party.PUBLIC) -> list[bool]:
        """Open every bit to ``party``, least significant first."""
        return protocol_execution().reveal(party, [b.label for b in self.bits])

    def reveal(self, party: Party = Party.PUBLIC) -> int:
        """Open the integer as an unsigned value."""
        return sum(1 << i for i, b in enumerate(self.reveal_bools(party)) if b)

    def reveal_signed(self, party: Party = Party.PUBLIC) -> int:
        """Open the integer as a two's-complement value."""
        bools = self.reveal_bools(party)
        value = sum(1 << i for i, b in enumerate(bools) if b)
        if bools and bools[-1]:
            value -= 1 << len(bools)
        return value

    def reveal_str(self, party: Party = Party.PUBLIC) -> str:
        """Open the bits as a string of ``0`` and ``1``, least significant first."""
        return "".join("1" if b else "0" for b in self.reveal_bools(party))

    def reveal_bytes(self, party: Party = Party.PUBLIC) -> bytes:
        """Open the bits packed little-endian into bytes."""
        return self.reveal(party).to_bytes((len(self) + 7) // 8, "little")

    # Bitwise
    def __xor__(self, rhs: Integer) -> Integer:
        _check_same_size(self, rhs)
        return Integer(a ^ b for a, b in zip(self.bits, rhs.bits))

    def __or__(self, rhs: Integer) -> Integer:
        _check_same_size(self, rhs)
        return Integer(a | b for a, b in zip(self.bits, rhs.bits))

    def __and__(self, rhs: Integer) -> Integer:
        _check_same_size(self, rhs)
        return Integer(a & b for a, b in zip(self.bits, rhs.bits))

    def __lshift__(self, shamt: int | Integer) -> Integer:
        if isinstance(shamt, Integer):
            return self._shift_by(shamt, lambda x, s: x << s)
        if shamt < 0:
            raise ValueError("negative shift amount")
        size = len(self)
        if shamt > size:
            return Integer(Bit(False) for _ in range(size))
        return Integer([Bit(False)] * shamt + self.bits[: size - shamt])

    def __rshift__(self, shamt: int | Integer) -> Integer:
        if isinstance(shamt, Integer):
            return self._shift_by(shamt, lambda x, s: x >> s)
        if shamt < 0:
            raise ValueError("negative shift amount")
        size = len(self)
        if shamt > size:
            return Integer(Bit(False) for _ in range(size))
        return Integer(self.bits[shamt:] + [Bit(False)] * shamt)

    def _shift_by(self, shamt: Integer, shift) -> Integer:
        result = Integer(self.bits)
        if not self.bits:
            return result
        stages = min((len(self) - 1).bit_length(), len(shamt) - 1)
        for i in range(stages):
            result = result.select(shamt[i], shift(result, 1 << i))
        return result

    # Arithmetic
    def __add__(self, rhs: Integer) -> Integer:
        _check_same_size(self, rhs)
        return Integer(add_full(self.bits, rhs.bits)[0])

    def __sub__(self, rhs: Integer) -> Integer:
        _check_same_size(self, rhs)
        return Integer(sub_full(self.bits, rhs.bits)[0])

    def __mul__(self, rhs: Integer) -> Integer:
        _check_same_size(self, rhs)
        return Integer(mul_full(self.bits, rhs.bits))

    def __floordiv__(self, rhs: Integer) -> Integer:
        """Signed quotient, truncated toward zero."""
        _check_same_size(self, rhs)
        sign = self.bits[-1] ^ rhs.bits[-1]
        quot, _ = div_full(self.abs().bits, rhs.abs().bits)
        return Integer(cond_neg(sign, quot))

    def __mod__(self, rhs: Integer) -> Integer:
        """Signed remainder, taking the sign of the dividend."""
        _check_same_size(self, rhs)
        sign = self.bits[-1]
        _, rem = div_full(self.abs().bits, rhs.abs().bits)
        return Integer(cond_neg(sign, rem))

    def __neg__(self) -> Integer:
        return Integer.from_int(len(self), 0) - self

    def abs(self) -> Integer:
        """Absolute value (the most negative value maps to itself)."""
        mask = Integer([self.bits[-1]] * len(self))
        return (self + mask) ^ mask

    def resize(self, length: int, signed_extend: bool = True) -> Integer:
        """Change the width in place, extending with the sign bit or zeros."""
        top = self.bits[-1] if signed_extend else Bit(False)
        if length <= len(self.bits):
            del self.bits[length:]
        else:
            self.bits.extend([top] * (length - len(self.bits)))
        return self

    def mod_exp(self, p: Integer, q: Integer) -> Integer:
        """Compute ``self ** p mod q``; ``q`` should be below half the largest value."""
        base = self
        result = Integer.from_int(len(self), 1)
        for bit in p.bits:
            result = result.select(bit, (result * base) % q)
            base = (base * base) % q
        return result

    def leading_zeros(self) -> Integer:
        """Count the zero bits above the highest set bit."""
        seen = list(accumulate(reversed(self.bits), lambda acc, b: acc | b))
        return Integer(~b for b in reversed(seen)).hamming_weight()

    def hamming_weight(self) -> Integer:
        """Count the set bits."""
        if not self.bits:
            raise ValueError("hamming weight of an empty integer")
        counts = [Integer([b, Bit(False)]) for b in self.bits]
        while len(counts) > 1:
            merged = [counts[i] + counts[i + 1] for i in range(0, len(counts) - 1, 2)]
            if len(counts) % 2:
                merged.append(counts[-1])
            counts = [c.resize(len(c) + 1, False) for c in merged]
        return counts[0]