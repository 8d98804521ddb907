from tcpexchange import SyncConsole, TcpSender
from tcpexchange.config import CONNECT_TIMEOUT, HOST, PORT

if __name__ == "__main__":
    sender = TcpSender(
        HOST, PORT, SyncConsole(), connect_timeout=CONNECT_TIMEOUT
    )
    sender.loop()
