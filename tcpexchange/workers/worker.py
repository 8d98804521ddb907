import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Optional


class Worker:
    """Repeats a unit of work until stopped.

    Inheriting classes must override:

    1. `init`, which runs exactly once before the first frame.
    2. `frame`, which runs repeatedly while the worker is running.

    Either of them may call `stop` to end the loop after the current
    iteration. There is no other way to end a loop from the inside.

    The loop runs on a dedicated background thread after `start`, or on
    the calling thread with `loop`. Stopping is cooperative: `stop` clears
    the running flag, which is checked between frames, so it cannot
    interrupt a blocking call already in progress. The `interrupt` hook
    exists for subclasses that own a resource able to unblock such a
    call, and is used by `running`.

    Exceptions raised by `init` or `frame` are not handled here. They end
    the background thread, or propagate out of `loop`.
    """

    def __init__(self):
        self._thread: Optional[threading.Thread] = None
        self._continue = threading.Event()

    def init(self):
        """Override this to prepare the worker before the first frame."""
        raise NotImplementedError

    def frame(self):
        """Override this to define one iteration of the worker's loop."""
        raise NotImplementedError

    def interrupt(self):
        """Override this to unblock calls that `stop` cannot reach."""

    @property
    def is_running(self) -> bool:
        return self._continue.is_set()

    def start(self):
        """Runs the loop on a new background thread."""
        self._reap_thread()
        self._continue.set()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def stop(self):
        """Ends the loop and waits for the background thread to exit.

        When called from the worker's own thread, only the running flag is
        cleared. The thread is reaped by a later `start`, `stop` or `join`.
        """
        self._continue.clear()
        self.join()

    def join(self, timeout: Optional[float] = None):
        """Waits for the background thread and releases it once finished."""
        thread = self._thread
        if thread is None or thread is threading.current_thread():
            return
        thread.join(timeout)
        if not thread.is_alive():
            self._thread = None

    def loop(self):
        """Runs the loop on the calling thread until the worker stops."""
        self._reap_thread()
        self._continue.set()
        self._run()

    @contextmanager
    def running(self) -> Iterator["Worker"]:
        """Runs the worker in the background for the duration of a block.

        On leaving the block, by any path, the worker is stopped,
        interrupted and joined, so no background thread outlives it.
        """
        self.start()
        try:
            yield self
        finally:
            self._continue.clear()
            self.interrupt()
            self.stop()

    def _reap_thread(self):
        thread = self._thread
        if thread is None:
            return
        if thread.is_alive() and self.is_running:
            raise RuntimeError("Worker is already running.")
        # Worker stopped itself; wait for its last frame to finish
        self.join()

    def _run(self):
        # NOTE stop may have been called before the thread got scheduled
        if not self.is_running:
            return
        self.init()
        while self.is_running:
            self.frame()


class LambdaWorker(Worker):
    """Worker whose setup and step are given as functions.

    Both functions receive the worker, so they may call `stop` on it.
    """

    def __init__(
        self,
        setup: Callable[[Worker], None],
        step: Callable[[Worker], None],
    ):
        super().__init__()
        self._setup = setup
        self._step = step

    def init(self):
        self._setup(self)

    def frame(self):
        self._step(self)


__all__ = [
    "Worker",
    "LambdaWorker",
]
