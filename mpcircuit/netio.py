"""TCP channels: a plain buffered one, and a two-socket one that sends fixed chunks."""

from __future__ import annotations

import socket
import time
from enum import IntEnum

from mpcircuit.channel import IOChannel

NETWORK_BUFFER_SIZE = 1 << 20
SUBCHANNEL_CHUNK_SIZE = 1 << 15


def _check_port(port: int, what: str) -> None:
    if not 0 <= port <= 65535:
        raise ValueError(f"invalid {what} number: {port}")


def _server_listen(port: int) -> socket.socket:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as listener:
        listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        listener.bind(("", port))
        listener.listen(1)
        conn, _ = listener.accept()
    return conn


def _client_connect(address: str, port: int) -> socket.socket:
    while True:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.connect((address, port))
            return sock
        except OSError:
            sock.close()
            time.sleep(0.001)


def _set_nodelay(sock: socket.socket, enable: bool) -> None:
    sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1 if enable else 0)


def _read_exact(stream, nbyte: int) -> bytes:
    parts = []
    remaining = nbyte
    while remaining:
        chunk = stream.read(remaining)
        if not chunk:
            raise ConnectionError(f"connection closed {remaining} bytes short")
        parts.append(chunk)
        remaining -= len(chunk)
    return b"".join(parts)


class NetIO(IOChannel):
    """A buffered TCP channel; ``address=None`` listens, otherwise connects."""

    def __init__(
        self,
        address: str | None,
        port: int,
        quiet: bool = False,
        buffer_size: int = NETWORK_BUFFER_SIZE,
    ) -> None:
        _check_port(port, "port")
        super().__init__()
        self.port = port
        self.is_server = address is None
        self.addr = address or ""
        self.sock = _server_listen(port) if address is None else _client_connect(address, port)
        self.set_nodelay()
        self._stream = self.sock.makefile("rwb", buffering=buffer_size)
        self.has_sent = False
        self._closed = False
        if not quiet:
            print("connected")

    def sync(self) -> None:
        """Exchange one byte so both ends reach the same point."""
        token = b"\x00"
        if self.is_server:
            self._send_data_internal(token)
            self._recv_data_internal(1)
        else:
            self._recv_data_internal(1)
            self._send_data_internal(token)
            self.flush()

    def set_nodelay(self) -> None:
        """Turn Nagle's algorithm off."""
        _set_nodelay(self.sock, True)

    def set_delay(self) -> None:
        """Turn Nagle's algorithm on."""
        _set_nodelay(self.sock, False)

    def flush(self) -> None:
        self._stream.flush()

    def _send_data_internal(self, data: bytes) -> None:
        self._stream.write(data)
        self.has_sent = True

    def _recv_data_internal(self, nbyte: int) -> bytes:
        if self.has_sent:
            self._stream.flush()
        self.has_sent = False
        return _read_exact(self._stream, nbyte)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self.flush()
        finally:
            self._stream.close()
            self.sock.close()


class _SubChannel:
    def __init__(self, sock: socket.socket, chunk_size: int) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk size must be positive")
        self.sock = sock
        self.chunk_size = chunk_size
        self.counter = 0
        self.flushes = 0
        self._stream = sock.makefile("rwb", buffering=max(chunk_size, NETWORK_BUFFER_SIZE))

    def _close_stream(self) -> None:
        self._stream.close()
        self.sock.close()


class SenderSubChannel(_SubChannel):
    """Sending half of a high-speed channel; every flush pads to a whole chunk."""

    def __init__(self, sock: socket.socket, chunk_size: int = SUBCHANNEL_CHUNK_SIZE) -> None:
        super().__init__(sock, chunk_size)
        self._buf = bytearray()

    def send_data(self, data: bytes) -> None:
        """Queue ``data``; data larger than the room left goes out at once."""
        data = bytes(data)
        if len(data) <= self.chunk_size - len(self._buf):
            self._buf += data
        else:
            self._send_raw(bytes(self._buf))
            self._send_raw(data)
            self._buf.clear()

    def flush(self) -> None:
        """Send the queue and pad the stream to a multiple of the chunk size."""
        self.flushes += 1
        self._send_raw(bytes(self._buf))
        remainder = self.counter % self.chunk_size
        if remainder:
            self._send_raw(bytes(self.chunk_size - remainder))
        self._stream.flush()
        self._buf.clear()

    def close(self) -> None:
        """Close the stream and its socket."""
        self._close_stream()

    def _send_raw(self, data: bytes) -> None:
        self.counter += len(data)
        self._stream.write(data)


class RecverSubChannel(_SubChannel):
    """Receiving half of a high-speed channel; reads whole chunks."""

    def __init__(self, sock: socket.socket, chunk_size: int = SUBCHANNEL_CHUNK_SIZE) -> None:
        super().__init__(sock, chunk_size)
        self._buf = b""
        self._pos = 0

    def flush(self) -> None:
        """Discard the rest of the current chunk."""
        self.flushes += 1
        self._buf = b""
        self._pos = 0

    def recv_data(self, nbyte: int) -> bytes:
        """Return the next ``nbyte`` bytes."""
        available = len(self._buf) - self._pos
        if nbyte <= available:
            out = self._buf[self._pos:self._pos + nbyte]
            self._pos += nbyte
            return out
        parts = [self._buf[self._pos:]]
        remain = nbyte - available
        while True:
            self._buf = self._recv_raw(self.chunk_size)
            if remain <= self.chunk_size:
                parts.append(self._buf[:remain])
                self._pos = remain
                break
            parts.append(self._buf)
            remain -= self.chunk_size
        return b"".join(parts)

    def close(self) -> None:
        """Close the stream and its socket."""
        self._close_stream()

    def _recv_raw(self, nbyte: int) -> bytes:
        self.counter += nbyte
        return _read_exact(self._stream, nbyte)


class _Direction(IntEnum):
    IDLE = 0
    RECEIVING = 1
    SENDING = 2


class HighSpeedNetIO(IOChannel):
    """A channel over two TCP connections, one per direction."""

    def __init__(
        self,
        address: str | None,
        send_port: int,
        recv_port: int,
        quiet: bool = True,
        chunk_size: int = SUBCHANNEL_CHUNK_SIZE,
    ) -> None:
        _check_port(send_port, "send port")
        _check_port(recv_port, "receive port")
        super().__init__()
        self.is_server = address is None
        self.quiet = quiet
        if address is None:
            self.recv_sock = _server_listen(send_port)
            time.sleep(0.002)
            self.send_sock = _server_listen(recv_port)
        else:
            self.send_sock = _client_connect(address, send_port)
            self.recv_sock = _client_connect(address, recv_port)
        self._direction = _Direction.IDLE
        _set_nodelay(self.send_sock, True)
        _set_nodelay(self.recv_sock, True)
        self.schannel = SenderSubChannel(self.send_sock, chunk_size)
        self.rchannel = RecverSubChannel(self.recv_sock, chunk_size)
        self._closed = False
        if not quiet:
            print("connected")

    def sync(self) -> None:
        """Nothing to do: each direction has its own connection."""

    def flush(self) -> None:
        if self.is_server:
            self.schannel.flush()
            self.rchannel.flush()
        else:
            self.rchannel.flush()
            self.schannel.flush()
        self._direction = _Direction.IDLE

    def _send_data_internal(self, data: bytes) -> None:
        if self._direction == _Direction.RECEIVING:
            self.rchannel.flush()
        self.schannel.send_data(data)
        self._direction = _Direction.SENDING

    def _recv_data_internal(self, nbyte: int) -> bytes:
        if self._direction == _Direction.SENDING:
            self.schannel.flush()
        data = self.rchannel.recv_data(nbyte)
        self._direction = _Direction.RECEIVING
        return data

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self.flush()
            if not self.quiet:
                print(f"Data Sent: \t{self.schannel.counter}")
                print(f"Data Received: \t{self.rchannel.counter}")
                print(f"Flushes:\t{self.schannel.flushes}\t{self.rchannel.flushes}")
        finally:
            self.schannel.close()
            self.rchannel.close()