import threading
import time

import pytest

from tcpexchange.workers import LambdaWorker, Worker


class CountingWorker(Worker):
    def __init__(self, num_frames: int = -1):
        super().__init__()
        self.num_frames = num_frames
        self.calls = []
        self.interrupts = 0

    def init(self):
        self.calls.append("init")

    def frame(self):
        self.calls.append("frame")
        if self.calls.count("frame") == self.num_frames:
            self.stop()
        time.sleep(0.001)

    def interrupt(self):
        self.interrupts += 1


def test_loop_runs_init_once_then_frames():
    worker = CountingWorker(num_frames=3)

    worker.loop()

    assert worker.calls == ["init", "frame", "frame", "frame"]
    assert not worker.is_running


def test_loop_runs_on_calling_thread():
    threads = []

    def record(w: Worker):
        threads.append(threading.current_thread())
        w.stop()

    worker = LambdaWorker(setup=lambda w: None, step=record)
    worker.loop()

    assert threads == [threading.current_thread()]


def test_start_runs_on_background_thread():
    threads = []
    done = threading.Event()

    def record(w: Worker):
        threads.append(threading.current_thread())
        w.stop()
        done.set()

    worker = LambdaWorker(setup=lambda w: None, step=record)
    worker.start()
    assert done.wait(timeout=5)
    worker.join(timeout=5)

    assert len(threads) == 1
    assert threads[0] is not threading.current_thread()


def test_stop_in_init_skips_frames():
    frames = []
    worker = LambdaWorker(
        setup=lambda w: w.stop(),
        step=lambda w: frames.append(None),
    )

    worker.loop()

    assert not worker.is_running
    assert frames == []


def test_stop_in_init_on_background_thread():
    frames = []
    worker = LambdaWorker(
        setup=lambda w: w.stop(),
        step=lambda w: frames.append(None),
    )

    worker.start()
    worker.join(timeout=5)

    assert not worker.is_running
    assert frames == []


def test_start_then_stop_immediately():
    worker = CountingWorker()

    worker.start()
    worker.stop()

    assert not worker.is_running
    assert worker.calls.count("init") <= 1

    # Nothing is left running after stop returns
    num_calls = len(worker.calls)
    time.sleep(0.05)
    assert len(worker.calls) == num_calls


def test_stop_after_running_for_a_while():
    worker = CountingWorker()

    worker.start()
    time.sleep(0.05)
    worker.stop()

    assert worker.calls[0] == "init"
    assert worker.calls.count("init") == 1
    assert worker.calls.count("frame") > 0


def test_stop_when_idle_is_noop():
    worker = CountingWorker()

    worker.stop()

    assert not worker.is_running
    assert worker.calls == []


def test_start_while_running_raises():
    worker = CountingWorker()

    worker.start()
    try:
        with pytest.raises(RuntimeError):
            worker.start()
    finally:
        worker.stop()


def test_loop_while_running_raises():
    worker = CountingWorker()

    worker.start()
    try:
        with pytest.raises(RuntimeError):
            worker.loop()
    finally:
        worker.stop()

    assert worker.calls.count("init") == 1


def test_loop_after_self_stop():
    worker = CountingWorker(num_frames=2)

    worker.start()
    worker.join(timeout=5)
    worker.num_frames = 3
    worker.loop()

    assert worker.calls == ["init", "frame", "frame", "init", "frame"]


def test_restart_after_self_stop():
    worker = CountingWorker(num_frames=2)

    worker.start()
    worker.join(timeout=5)
    assert worker.calls == ["init", "frame", "frame"]

    worker.num_frames = 4
    worker.start()
    worker.join(timeout=5)

    assert worker.calls == ["init", "frame", "frame"] * 2


def test_running_stops_interrupts_and_joins():
    worker = CountingWorker()

    with worker.running():
        time.sleep(0.02)
        assert worker.is_running

    assert not worker.is_running
    assert worker.interrupts == 1
    num_calls = len(worker.calls)
    time.sleep(0.05)
    assert len(worker.calls) == num_calls


def test_running_stops_on_exception():
    worker = CountingWorker()

    with pytest.raises(KeyError):
        with worker.running():
            raise KeyError

    assert not worker.is_running
    assert worker.interrupts == 1


def test_unimplemented_worker():
    with pytest.raises(NotImplementedError):
        Worker().loop()
