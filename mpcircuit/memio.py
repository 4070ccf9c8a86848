"""Channels backed by a file or by memory."""

from __future__ import annotations

import os

from mpcircuit.channel import IOChannel


class FileIO(IOChannel):
    """A channel that writes to and reads from one file."""

    def __init__(self, path: str | os.PathLike[str], read: bool) -> None:
        super().__init__()
        self.bytes_sent = 0
        self._file = open(path, "rb+" if read else "wb+")

    def _send_data_internal(self, data: bytes) -> None:
        self.bytes_sent += len(data)
        self._file.write(data)

    def _recv_data_internal(self, nbyte: int) -> bytes:
        parts = []
        remaining = nbyte
        while remaining:
            chunk = self._file.read(remaining)
            if not chunk:
                raise EOFError(f"file ended {remaining} bytes short")
            parts.append(chunk)
            remaining -= len(chunk)
        return b"".join(parts)

    def flush(self) -> None:
        self._file.flush()

    def reset(self) -> None:
        """Go back to the start of the file."""
        self._file.flush()
        self._file.seek(0)

    def close(self) -> None:
        if not self._file.closed:
            self._file.flush()
            self._file.close()


class MemIO(IOChannel):
    """A channel that appends sent bytes to memory and reads them back in order."""

    def __init__(self, data: bytes = b"") -> None:
        super().__init__()
        self.buffer = bytearray(data)
        self.read_pos = 0

    @property
    def size(self) -> int:
        """Number of bytes held."""
        return len(self.buffer)

    def load_from_file(self, fio: FileIO, size: int) -> None:
        """Replace the contents with ``size`` bytes read from ``fio``."""
        self.buffer = bytearray(fio.recv_data(size))
        self.read_pos = 0

    def clear(self) -> None:
        """Drop the stored bytes; the read position is left as it is."""
        self.buffer.clear()

    def _send_data_internal(self, data: bytes) -> None:
        self.buffer += data

    def _recv_data_internal(self, nbyte: int) -> bytes:
        if self.read_pos + nbyte > len(self.buffer):
            raise EOFError(
                f"{nbyte} bytes requested, {len(self.buffer) - self.read_pos} available"
            )
        out = bytes(self.buffer[self.read_pos:self.read_pos + nbyte])
        self.read_pos += nbyte
        return out