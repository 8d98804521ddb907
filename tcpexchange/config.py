from tcpexchange.workers.tcp_receiver import RetryPolicy

HOST = "127.0.0.1"
PORT = 4900

CONNECT_TIMEOUT = 3.0
"""Seconds the sender waits for its connection to be accepted."""

WAIT_FOR_LISTENER = True
"""Whether the sender waits for the receiver to start listening.

Without waiting, the sender may attempt to connect before the receiver's
socket is listening, in which case the connection fails and the sender
stops without retrying.
"""

LISTENER_TIMEOUT = 5.0

RECEIVE_RETRY = RetryPolicy(max_attempts=None, backoff=0.01)
"""Retry unboundedly, pausing briefly between failed receives."""


__all__ = [
    "HOST",
    "PORT",
    "CONNECT_TIMEOUT",
    "WAIT_FOR_LISTENER",
    "LISTENER_TIMEOUT",
    "RECEIVE_RETRY",
]
