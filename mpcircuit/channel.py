"""Byte channels shared by every transport, with block and packed-bool helpers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence

BLOCK_SIZE = 16


def pack_bools(bools: Sequence[bool]) -> bytes:
    """Pack bools for the wire.

    Each full group of eight becomes one byte, with the first bool in the lowest
    bit. Any remaining bools (fewer than eight) follow as one byte each.
    """
    values = [bool(b) for b in bools]
    full = len(values) // 8
    packed = bytearray(
        sum(int(b) << j for j, b in enumerate(values[8 * i:8 * i + 8])) for i in range(full)
    )
    packed.extend(int(b) for b in values[8 * full:])
    return bytes(packed)


def unpack_bools(data: bytes, length: int) -> list[bool]:
    """Undo ``pack_bools`` for ``length`` bools."""
    if length < 0:
        raise ValueError("length must not be negative")
    full, tail = divmod(length, 8)
    data = bytes(data)
    if len(data) != full + tail:
        raise ValueError(f"{length} bools need {full + tail} bytes, got {len(data)}")
    bools = [bool((byte >> j) & 1) for byte in data[:full] for j in range(8)]
    bools.extend(bool(byte) for byte in data[full:])
    return bools


class IOChannel(ABC):
    """A two-way byte channel; ``counter`` tracks the bytes sent through ``send_data``."""

    def __init__(self) -> None:
        self.counter = 0

    @abstractmethod
    def _send_data_internal(self, data: bytes) -> None:
        """Write ``data`` to the transport."""

    @abstractmethod
    def _recv_data_internal(self, nbyte: int) -> bytes:
        """Read exactly ``nbyte`` bytes from the transport."""

    def send_data(self, data: bytes) -> None:
        """Send raw bytes."""
        data = bytes(data)
        self.counter += len(data)
        self._send_data_internal(data)

    def recv_data(self, nbyte: int) -> bytes:
        """Receive exactly ``nbyte`` raw bytes."""
        if nbyte < 0:
            raise ValueError("cannot receive a negative number of bytes")
        return self._recv_data_internal(nbyte)

    def send_block(self, blocks: Iterable[bytes]) -> None:
        """Send 16-byte blocks back to back."""
        payload = bytearray()
        for block in blocks:
            block = bytes(block)
            if len(block) != BLOCK_SIZE:
                raise ValueError(f"a block is {BLOCK_SIZE} bytes, got {len(block)}")
            payload += block
        self.send_data(bytes(payload))

    def recv_block(self, nblock: int) -> list[bytes]:
        """Receive ``nblock`` 16-byte blocks."""
        data = self.recv_data(nblock * BLOCK_SIZE)
        return [data[i:i + BLOCK_SIZE] for i in range(0, len(data), BLOCK_SIZE)]

    def send_bool(self, bools: Sequence[bool]) -> None:
        """Send bools packed eight to a byte."""
        self.send_data(pack_bools(bools))

    def recv_bool(self, length: int) -> list[bool]:
        """Receive ``length`` bools sent with ``send_bool``."""
        if length < 0:
            raise ValueError("length must not be negative")
        full, tail = divmod(length, 8)
        return unpack_bools(self.recv_data(full + tail), length)

    def flush(self) -> None:
        """Push out anything buffered; a no-op for unbuffered channels."""

    def close(self) -> None:
        """Release the channel."""
        self.flush()

    def __enter__(self) -> IOChannel:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()