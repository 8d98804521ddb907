import threading
import time
from dataclasses import dataclass
from typing import Any, Optional, Tuple

import rx
from rx import operators as ops
from rx.subject import ReplaySubject, Subject

from tcpexchange.console import SyncConsole
from tcpexchange.network.tcp import Status, TcpListener, TcpSocket

from .tcp_worker import TcpWorker


@dataclass(frozen=True)
class RetryPolicy:
    """Controls how a failed receive is retried.

    The default retries immediately and forever.
    """

    max_attempts: Optional[int] = None
    backoff: float = 0.0

    def __post_init__(self):
        if self.max_attempts is not None and self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1.")
        if self.backoff < 0:
            raise ValueError("backoff must be non-negative.")

    def should_retry(self, attempts: int) -> bool:
        return self.max_attempts is None or attempts < self.max_attempts


class TcpReceiver(TcpWorker):
    """Accepts one connection and prints every packet received from it."""

    def __init__(
        self,
        address: str,
        port: int,
        console: SyncConsole,
        retry: RetryPolicy = RetryPolicy(),
        sock: Optional[TcpSocket] = None,
    ):
        super().__init__(address, port, console, sock=sock)
        self._listener = TcpListener()
        self._retry = retry
        self._listener_lock = threading.Lock()
        self.listening = ReplaySubject()
        """Emits the bound port once the listener is ready for connections."""
        self.connected = ReplaySubject()
        """Emits the peer's address and port once a connection is accepted."""
        self.received = Subject()
        """Emits each string payload after it is printed."""

    def init(self):
        self._console.writeline(f"Listening on port ({self._port})")

        with self._listener_lock:
            # NOTE an interrupt that came first would not reach the listener
            if not self.is_running:
                self.listening.on_error(
                    RuntimeError("Stopped before listening.")
                )
                return
            status = self._listener.listen(self._port, self._address)
            bound_port = self._listener.local_port

        if status != Status.DONE:
            self._console.writeline(
                f"Could not listen on port ({self._port})"
            )
            self.listening.on_error(
                RuntimeError(f"Could not listen on port {self._port}.")
            )
            self.stop()
            return

        self.listening.on_next(bound_port)

        status = self._listener.accept(self._socket)
        # Only one peer is served
        self._listener.close()

        if status == Status.DONE:
            address = self._socket.remote_address
            port = self._socket.remote_port
            self._console.writeline(
                f"Connection from address ({address}:{port})"
            )
            self.connected.on_next((address, port))
        else:
            if self.is_running:
                self._console.writeline("Connection timed out")
            self.connected.on_error(RuntimeError("No connection accepted."))
            self.stop()

    def frame(self):
        self._packet.clear()

        if not self._receive():
            if self.is_running:
                self._console.writeline("Receive failed")
                self.stop()
            return

        text = self._packet.read_str()

        with self._console:
            self._console.write("Data received:\n")
            self._console.write(f"\t'{text}'\n")

        self.received.on_next(text)

    def interrupt(self):
        with self._listener_lock:
            self._listener.close()
        super().interrupt()

    def wait_listening(self, timeout: Optional[float] = None) -> int:
        """Blocks until the listener is ready and returns its port.

        Raises `RuntimeError` if listening failed, or `TimeoutError` if the
        timeout elapsed first.
        """
        return _wait_first(self.listening, timeout)

    def wait_connected(
        self, timeout: Optional[float] = None
    ) -> Tuple[str, int]:
        """Blocks until a peer is accepted and returns its address."""
        return _wait_first(self.connected, timeout)

    def _receive(self) -> bool:
        """Retries receiving into the packet until a whole packet arrives."""
        attempts = 0
        while self.is_running:
            if self._socket.receive(self._packet) == Status.DONE:
                return True
            attempts += 1
            if not self._retry.should_retry(attempts):
                return False
            if self._retry.backoff > 0:
                time.sleep(self._retry.backoff)
        return False


def _wait_first(signal: rx.Observable, timeout: Optional[float]) -> Any:
    first = signal.pipe(ops.first())
    if timeout is not None:
        expired = rx.throw(TimeoutError(f"Not signalled within {timeout}s."))
        first = first.pipe(ops.timeout(timeout, expired))
    return first.run()


__all__ = [
    "RetryPolicy",
    "TcpReceiver",
]
