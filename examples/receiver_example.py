from tcpexchange import SyncConsole, TcpReceiver
from tcpexchange.config import HOST, PORT, RECEIVE_RETRY

if __name__ == "__main__":
    receiver = TcpReceiver(HOST, PORT, SyncConsole(), retry=RECEIVE_RETRY)
    receiver.loop()
