from tcpexchange import config
from tcpexchange.console import SyncConsole
from tcpexchange.workers import TcpReceiver, TcpSender


def run(console: SyncConsole):
    """Exchanges console input between a sender and a receiver.

    The receiver listens in the background while the sender runs on the
    calling thread. Returns once the sender stops, after shutting the
    receiver down. If the receiver cannot listen, the sender never runs.
    """
    sender = TcpSender(
        config.HOST,
        config.PORT,
        console,
        connect_timeout=config.CONNECT_TIMEOUT,
    )
    receiver = TcpReceiver(
        config.HOST,
        config.PORT,
        console,
        retry=config.RECEIVE_RETRY,
    )

    with receiver.running():
        if config.WAIT_FOR_LISTENER:
            try:
                receiver.wait_listening(timeout=config.LISTENER_TIMEOUT)
            except RuntimeError:
                # Receiver has already reported why it could not listen
                return
            except TimeoutError:
                console.writeline("Listener is not ready")
                return
        sender.loop()


def main():
    run(SyncConsole())


__all__ = [
    "main",
    "run",
]
