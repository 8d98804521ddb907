import socket
from asyncio import IncompleteReadError
from contextlib import suppress
from enum import Enum
from typing import Optional

from tcpexchange.packet import Packet

from .sockstream import SocketStreamReader, SocketStreamWriter


class Status(Enum):
    """Completion result of a socket operation."""

    DONE = "done"
    NOT_READY = "not_ready"
    PARTIAL = "partial"
    DISCONNECTED = "disconnected"
    ERROR = "error"


class TcpSocket:
    """Blocking TCP connection exchanging size-prefixed packets.

    Every operation reports its outcome as a `Status` instead of raising.
    Each packet travels as a 4-byte big-endian payload size followed by
    the payload produced by `Packet.to_bytes`.
    """

    def __init__(self, sock: Optional[socket.socket] = None):
        self._sock: Optional[socket.socket] = None
        self._reader: SocketStreamReader
        self._writer: SocketStreamWriter
        if sock is not None:
            self.attach(sock)

    def attach(self, sock: socket.socket):
        """Takes ownership of an already connected socket."""
        self.close()
        sock.settimeout(None)
        self._sock = sock
        self._reader = SocketStreamReader(sock)
        self._writer = SocketStreamWriter(sock)

    def connect(
        self, address: str, port: int, timeout: Optional[float] = None
    ) -> Status:
        try:
            sock = socket.create_connection((address, port), timeout=timeout)
        except socket.timeout:
            return Status.NOT_READY
        except OSError:
            return Status.ERROR
        self.attach(sock)
        return Status.DONE

    def send(self, packet: Packet) -> Status:
        if self._sock is None:
            return Status.DISCONNECTED
        try:
            self._writer.writeframe(packet.to_bytes())
        except (BrokenPipeError, ConnectionResetError):
            return Status.DISCONNECTED
        except OSError:
            return Status.ERROR
        return Status.DONE

    def receive(self, packet: Packet) -> Status:
        """Blocks until a whole packet arrives and loads it into packet."""
        if self._sock is None:
            return Status.DISCONNECTED
        try:
            payload = self._reader.readframe()
        except IncompleteReadError as e:
            if e.partial:
                return Status.PARTIAL
            return Status.DISCONNECTED
        except socket.timeout:
            return Status.NOT_READY
        except ConnectionResetError:
            return Status.DISCONNECTED
        except (OSError, ValueError):
            return Status.ERROR
        packet.load(payload)
        return Status.DONE

    @property
    def remote_address(self) -> Optional[str]:
        if self._sock is None:
            return None
        try:
            return self._sock.getpeername()[0]
        except OSError:
            return None

    @property
    def remote_port(self) -> Optional[int]:
        if self._sock is None:
            return None
        try:
            return self._sock.getpeername()[1]
        except OSError:
            return None

    def close(self):
        sock, self._sock = self._sock, None
        if sock is None:
            return
        # shutdown wakes up any thread blocked in recv on this socket
        with suppress(OSError):
            sock.shutdown(socket.SHUT_RDWR)
        sock.close()


class TcpListener:
    """Listening socket that hands accepted connections to a `TcpSocket`."""

    def __init__(self):
        self._sock: Optional[socket.socket] = None

    def listen(self, port: int, address: str = "0.0.0.0") -> Status:
        self.close()
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((address, port))
            sock.listen(1)
        except OSError:
            sock.close()
            return Status.ERROR
        self._sock = sock
        return Status.DONE

    def accept(self, tcp_socket: TcpSocket) -> Status:
        if self._sock is None:
            return Status.ERROR
        try:
            conn, _ = self._sock.accept()
        except socket.timeout:
            return Status.NOT_READY
        except OSError:
            return Status.ERROR
        tcp_socket.attach(conn)
        return Status.DONE

    @property
    def local_port(self) -> Optional[int]:
        if self._sock is None:
            return None
        return self._sock.getsockname()[1]

    def close(self):
        sock, self._sock = self._sock, None
        if sock is None:
            return
        # shutdown wakes up a thread blocked in accept (on Linux)
        with suppress(OSError):
            sock.shutdown(socket.SHUT_RDWR)
        sock.close()


__all__ = [
    "Status",
    "TcpListener",
    "TcpSocket",
]
