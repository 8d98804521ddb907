from typing import Optional

from rx.subject import Subject

from tcpexchange.console import SyncConsole, TokenReader
from tcpexchange.network.tcp import Status

from .tcp_worker import TcpWorker


class TcpSender(TcpWorker):
    """Reads tokens from the console and sends each one as a packet."""

    def __init__(
        self,
        address: str,
        port: int,
        console: SyncConsole,
        reader: Optional[TokenReader] = None,
        connect_timeout: Optional[float] = None,
    ):
        super().__init__(address, port, console)
        self._reader = reader if reader is not None else TokenReader()
        self._connect_timeout = connect_timeout
        self.sent = Subject()
        """Emits each token once it has been sent."""

    def init(self):
        self._console.writeline(
            f"Connecting socket ({self._address}:{self._port})"
        )

        status = self._socket.connect(
            self._address, self._port, timeout=self._connect_timeout
        )
        if status == Status.DONE:
            self._console.writeline(
                f"Connected socket ({self._address}:{self._port})"
            )
        else:
            self._console.writeline("Connection timed out")
            self.stop()

    def frame(self):
        self._console.writeline("Enter data")
        token = self._reader.read_token()
        if token is None:
            self._console.writeline("End of input")
            self.stop()
            return

        self._packet.append(token)

        with self._console:
            status = self._socket.send(self._packet)
            if status == Status.DONE:
                self._console.writeline("Data sent")
            else:
                self._console.writeline(
                    f"Failed to send data ({status.value})"
                )

        self._packet.clear()

        if status == Status.DONE:
            self.sent.on_next(token)


__all__ = [
    "TcpSender",
]
