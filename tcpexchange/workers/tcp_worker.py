from typing import Optional

from tcpexchange.console import SyncConsole
from tcpexchange.network.tcp import TcpSocket
from tcpexchange.packet import Packet

from .worker import Worker


class TcpWorker(Worker):  # pylint: disable=abstract-method
    """Worker that exchanges packets with a single TCP peer.

    Owns a blocking socket and one packet reused across frames. A socket
    that is already connected may be passed in as sock.
    """

    def __init__(
        self,
        address: str,
        port: int,
        console: SyncConsole,
        sock: Optional[TcpSocket] = None,
    ):
        super().__init__()
        self._address = address
        self._port = port
        self._console = console
        self._socket = sock if sock is not None else TcpSocket()
        self._packet = Packet()

    @property
    def address(self) -> str:
        return self._address

    @property
    def port(self) -> int:
        return self._port

    def interrupt(self):
        self._socket.close()


__all__ = [
    "TcpWorker",
]
