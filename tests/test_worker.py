"""
Tests for the background runner that hands results back via the scheduler.
"""

import threading
import time

from glowback.services.worker import BackgroundRunner


def _pump(scheduler, done, timeout=5.0):
    deadline = time.monotonic() + timeout
    while not done() and time.monotonic() < deadline:
        scheduler.advance(50)
        time.sleep(0.01)


class TestBackgroundRunner:

    def test_result_delivered_on_poll(self, scheduler):
        runner = BackgroundRunner(scheduler)
        results, errors = [], []
        runner(lambda: 41 + 1, results.append, errors.append)
        _pump(scheduler, lambda: results)
        assert results == [42]
        assert errors == []
        assert scheduler.pending == 0

    def test_error_delivered_on_poll(self, scheduler):
        runner = BackgroundRunner(scheduler)
        errors = []

        def boom():
            raise RuntimeError("nope")

        runner(boom, lambda _r: None, errors.append)
        _pump(scheduler, lambda: errors)
        assert isinstance(errors[0], RuntimeError)

    def test_callbacks_wait_for_poll(self, scheduler):
        runner = BackgroundRunner(scheduler)
        gate = threading.Event()
        results = []
        runner(lambda: gate.wait(5) and "done", results.append, lambda e: None)
        scheduler.advance(200)
        assert results == []
        gate.set()
        _pump(scheduler, lambda: results)
        assert results == ["done"]
