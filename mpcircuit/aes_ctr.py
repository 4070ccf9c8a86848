"""AES-128 in counter mode, in the clear and inside a circuit."""

from __future__ import annotations

from collections.abc import Sequence

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from mpcircuit.bit import Bit
from mpcircuit.circuit_file import BristolFashion
from mpcircuit.execution import Party
from mpcircuit.integer import Integer

_BLOCK_BITS = 128
_MASK64 = (1 << 64) - 1


def _is_bytes(value: object) -> bool:
    return isinstance(value, (bytes, bytearray, memoryview))


def _advance_iv(iv: bytes, steps: int) -> bytes:
    """Add ``steps`` to the big-endian low 64 bits of ``iv``, wrapping at 64 bits."""
    count = (int.from_bytes(iv[8:], "big") + steps) & _MASK64
    return iv[:8] + count.to_bytes(8, "big")


def aes_128_ctr(
    key: bytes,
    iv: bytes,
    data: bytes | None = None,
    length: int | None = None,
    start_chunk: int = 0,
) -> bytes:
    """Encrypt ``data`` with AES-128-CTR, starting ``start_chunk`` blocks past ``iv``.

    With no ``data``, returns ``length`` bytes of key stream.
    """
    key, iv = bytes(key), bytes(iv)
    if len(key) != 16 or len(iv) != 16:
        raise ValueError("key and iv must both be 16 bytes")
    if data is None:
        if length is None:
            raise ValueError("either data or length must be given")
        data = bytes(length)
    else:
        data = bytes(data)
        if length is not None:
            if length > len(data):
                raise ValueError(f"length {length} exceeds {len(data)} bytes of data")
            data = data[:length]
    if start_chunk:
        iv = _advance_iv(iv, start_chunk)
    encryptor = Cipher(algorithms.AES(key), modes.CTR(iv)).encryptor()
    return encryptor.update(data) + encryptor.finalize()


def reverse_bytes(i: int) -> int:
    """Map bit ``i`` of a 16-byte value to the same bit with the byte order reversed."""
    return 8 * (15 - i // 8) + i % 8


class AES128CTRCalculator:
    """Evaluates AES-128-CTR inside a circuit using a 256-in, 128-out AES circuit.

    The circuit takes the key bits followed by the counter bits. An instance
    keeps the last in-circuit key, so it must not be shared between threads.
    """

    def __init__(self, circuit: BristolFashion) -> None:
        if circuit.num_input != 2 * _BLOCK_BITS or circuit.num_output != _BLOCK_BITS:
            raise ValueError("AES circuit must take 256 input wires and give 128 outputs")
        self.circuit = circuit
        self._key: list[Bit] | None = None

    def encrypt(
        self,
        key: bytes | Sequence[Bit] | None,
        iv: bytes | Sequence[Bit],
        data: Sequence[Bit] | None = None,
        length: int | None = None,
        party: Party = Party.PUBLIC,
        start_chunk: int = 0,
    ) -> list[Bit]:
        """Encrypt ``length`` bits of ``data`` (or produce a blind when ``data`` is None).

        ``key`` and ``iv`` are either 16 public bytes or 128 circuit bits; a
        ``None`` key reuses the last in-circuit key.
        """
        bits = None if data is None else list(data)
        if length is None:
            length = _BLOCK_BITS if bits is None else len(bits)
        if length < 0:
            raise ValueError("length must not be negative")
        if bits is not None and len(bits) < length:
            raise ValueError(f"length {length} exceeds {len(bits)} bits of data")

        if _is_bytes(key):
            if not _is_bytes(iv):
                raise TypeError("a public key needs a public iv")
            return self._encrypt_public(bytes(key), bytes(iv), bits, length, party, start_chunk)

        if key is not None:
            key_bits = list(key)
            if len(key_bits) != _BLOCK_BITS:
                raise ValueError("an in-circuit key must have 128 bits")
            self._key = [key_bits[reverse_bytes(i)] for i in range(_BLOCK_BITS)]
        if self._key is None:
            raise ValueError("no in-circuit key has been given")

        if _is_bytes(iv):
            return self._encrypt_public_iv(bytes(iv), bits, length, party, start_chunk)
        iv_bits = list(iv)
        if len(iv_bits) != _BLOCK_BITS:
            raise ValueError("an in-circuit iv must have 128 bits")
        return self._encrypt_secret_iv(iv_bits, bits, length, party, start_chunk)

    def _chunks(self, length: int):
        for offset in range(0, length, _BLOCK_BITS):
            yield offset, min(_BLOCK_BITS, length - offset)

    def _block(
        self,
        iv: list[Bit],
        data: list[Bit] | None,
        count: int,
        party: Party,
        start_chunk: int,
    ) -> list[Bit]:
        reordered = [iv[reverse_bytes(i)] for i in range(_BLOCK_BITS)]
        if start_chunk:
            step = (start_chunk & _MASK64).to_bytes(16, "little")
            reordered = (Integer(reordered) + Integer.from_bytes(_BLOCK_BITS, step, party)).bits
        blind = self.circuit.compute(self._key + reordered)
        picked = [blind[reverse_bytes(i)] for i in range(count)]
        if data is None:
            return picked
        return [d ^ b for d, b in zip(data, picked)]

    def _encrypt_secret_iv(
        self, iv: list[Bit], data: list[Bit] | None, length: int, party: Party, start_chunk: int
    ) -> list[Bit]:
        out: list[Bit] = []
        for index, (offset, count) in enumerate(self._chunks(length)):
            chunk = None if data is None else data[offset:offset + count]
            out.extend(self._block(iv, chunk, count, party, start_chunk + index))
        return out

    def _encrypt_public_iv(
        self, iv: bytes, data: list[Bit] | None, length: int, party: Party, start_chunk: int
    ) -> list[Bit]:
        if len(iv) != 16:
            raise ValueError("iv must be 16 bytes")
        out: list[Bit] = []
        for index, (offset, count) in enumerate(self._chunks(length)):
            counter = _advance_iv(iv, start_chunk + index)
            iv_bits = Integer.from_bytes(_BLOCK_BITS, counter, party).bits
            chunk = None if data is None else data[offset:offset + count]
            out.extend(self._block(iv_bits, chunk, count, party, 0))
        return out

    def _encrypt_public(
        self,
        key: bytes,
        iv: bytes,
        data: list[Bit] | None,
        length: int,
        party: Party,
        start_chunk: int,
    ) -> list[Bit]:
        stream = aes_128_ctr(key, iv, None, (length + 7) // 8, start_chunk)
        blind = Integer.from_bytes(length, stream, party).bits
        if data is None:
            return blind
        return [d ^ b for d, b in zip(data[:length], blind)]