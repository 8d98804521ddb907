import socket
import threading
from queue import Empty, Queue
from typing import Iterable, List, Optional, Tuple

from tcpexchange.network import Status, TcpSocket
from tcpexchange.packet import Packet


class LoopbackMockSocket(socket.socket):
    """Socket whose sent bytes are received back by itself."""

    def __init__(self, blocking: bool = True, wait_all: bool = False):
        self._is_blocking = blocking
        self._is_wait_all = wait_all
        self._recv_buffer = b""
        self._queue = Queue()
        self._is_open = True

    def recv_into(self, buf: memoryview, num_bytes: int = 0) -> int:
        if num_bytes < 0:
            raise ValueError

        if num_bytes > len(buf):
            raise ValueError

        if num_bytes == 0:
            num_bytes = len(buf)

        offset = self._recv_step(buf, num_bytes, self._recv_buffer)

        # Always obtain something if is blocking socket
        if self._is_blocking and offset == 0:
            data = self._queue.get()
            offset += self._recv_step(buf[offset:], num_bytes - offset, data)

        while offset < num_bytes:
            try:
                data = (
                    self._queue.get()
                    if self._is_blocking and self._is_wait_all
                    else self._queue.get_nowait()
                )
            except Empty:
                break

            offset += self._recv_step(buf[offset:], num_bytes - offset, data)

        return offset

    def _recv_step(self, buf: memoryview, num_bytes: int, data: bytes) -> int:
        bytes_read = min(num_bytes, len(data))
        buf[:bytes_read] = data[:bytes_read]
        self._recv_buffer = data[bytes_read:]
        return bytes_read

    def sendall(self, buf: bytes):
        if not self._is_open:
            raise BrokenPipeError
        if len(buf) == 0:
            return
        self._queue.put(buf)

    def hangup(self):
        """Simulates the peer closing its end of the connection."""
        self._queue.put(b"")

    def settimeout(self, value):
        pass

    def getpeername(self) -> Tuple[str, int]:
        return "127.0.0.1", 0

    def shutdown(self, how: int):
        pass

    def close(self):
        self._is_open = False


class ScriptedTcpSocket(TcpSocket):
    """Connected socket whose receive results follow a script.

    Each call to `receive` takes the next status from the script. A `DONE`
    status loads the next payload into the packet. Once the script runs
    out, `receive` keeps returning `fallback`.
    """

    def __init__(
        self,
        statuses: Iterable[Status],
        payloads: Iterable[str] = (),
        fallback: Status = Status.NOT_READY,
    ):
        super().__init__()
        self._statuses: List[Status] = list(statuses)
        self._payloads: List[str] = list(payloads)
        self._fallback = fallback
        self.attempts = 0
        self.attempted = threading.Event()
        self.attempts_before_signal: Optional[int] = None

    def receive(self, packet: Packet) -> Status:
        self.attempts += 1
        if self.attempts_before_signal == self.attempts:
            self.attempted.set()
        status = self._statuses.pop(0) if self._statuses else self._fallback
        if status == Status.DONE:
            packet.load(Packet().append(self._payloads.pop(0)).to_bytes())
        return status
