import socket
from asyncio import IncompleteReadError

MAX_FRAME_SIZE = 16 * 1024 * 1024
"""Largest payload accepted by `readframe`, in bytes."""


class SocketStreamReader:
    def __init__(self, sock: socket.socket):
        self._sock = sock

    def readexactly(self, num_bytes: int) -> bytes:
        buf = bytearray(num_bytes)
        pos = 0
        while pos < num_bytes:
            n = self._sock.recv_into(memoryview(buf)[pos:])
            if n == 0:
                raise IncompleteReadError(bytes(buf[:pos]), num_bytes)
            pos += n
        return bytes(buf)

    def readint(self, num_bytes: int = 4) -> int:
        return int.from_bytes(self.readexactly(num_bytes), byteorder="big")

    def readframe(self) -> bytes:
        """Reads one size-prefixed frame and returns its payload."""
        size = self.readint()
        if size > MAX_FRAME_SIZE:
            raise ValueError(
                f"Frame of {size} bytes exceeds limit of {MAX_FRAME_SIZE}."
            )
        return self.readexactly(size)


class SocketStreamWriter:
    def __init__(self, sock: socket.socket):
        self._sock = sock

    def write(self, data: bytes):
        self._sock.sendall(data)

    def writeint(self, num: int, num_bytes: int = 4):
        self.write(num.to_bytes(num_bytes, byteorder="big"))

    def writeframe(self, payload: bytes):
        """Writes payload prefixed by its size in a single send."""
        self.write(len(payload).to_bytes(4, byteorder="big") + payload)


__all__ = [
    "MAX_FRAME_SIZE",
    "SocketStreamReader",
    "SocketStreamWriter",
]
