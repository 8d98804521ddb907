import sys
import threading
from typing import Any, List, Optional, TextIO


class SyncConsole:
    """Text output shared between threads.

    Each `write` is atomic. A caller that needs several writes to appear
    as one block holds the lock around them, either with `lock`/`unlock`
    or with a `with console:` block. The lock is re-entrant, so the writes
    inside such a block may themselves lock.

    ```
    with console:
        console.write("Data received:\\n").write(f"\\t'{text}'\\n")
    ```
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream if stream is not None else sys.stdout
        self._mutex = threading.RLock()

    def lock(self):
        self._mutex.acquire()

    def unlock(self):
        self._stream.flush()
        self._mutex.release()

    def write(self, obj: Any) -> "SyncConsole":
        self.lock()
        try:
            self._stream.write(str(obj))
        finally:
            self.unlock()
        return self

    def writeline(self, obj: Any = "") -> "SyncConsole":
        with self:
            self.write(obj).write("\n")
        return self

    def __enter__(self) -> "SyncConsole":
        self.lock()
        return self

    def __exit__(self, *exc_info):
        self.unlock()


class TokenReader:
    """Reads whitespace-delimited tokens from a text stream."""

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream if stream is not None else sys.stdin
        self._pending: List[str] = []

    def read_token(self) -> Optional[str]:
        """Blocks until a token is available. Returns None at end of input."""
        while not self._pending:
            line = self._stream.readline()
            if line == "":
                return None
            self._pending = line.split()
        return self._pending.pop(0)


__all__ = [
    "SyncConsole",
    "TokenReader",
]
