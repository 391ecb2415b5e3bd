"""
Tests for scoped periodic tasks and the simulated loading feedback.
"""

import random

from glowback.services.ticker import (LOADING_MESSAGES, MESSAGE_INTERVAL_MS, PROGRESS_CEILING,
                                      PROGRESS_INTERVAL_MS, LoadingFeedback, PeriodicTask)


class TestPeriodicTask:

    def test_repeats_until_stopped(self, scheduler):
        ticks = []
        task = PeriodicTask(scheduler, 100, lambda: ticks.append(scheduler.now))
        task.start()
        scheduler.advance(350)
        assert ticks == [100, 200, 300]

        task.stop()
        assert not task.active
        scheduler.advance(1000)
        assert len(ticks) == 3
        assert scheduler.pending == 0

    def test_returning_false_stops(self, scheduler):
        count = []

        def fn():
            count.append(1)
            return len(count) < 2

        task = PeriodicTask(scheduler, 10, fn)
        task.start()
        scheduler.advance(100)
        assert len(count) == 2
        assert not task.active

    def test_start_twice_keeps_one_timer(self, scheduler):
        task = PeriodicTask(scheduler, 10, lambda: None)
        task.start()
        task.start()
        assert scheduler.pending == 1


class TestLoadingFeedback:

    def _make(self, scheduler):
        progress, messages = [], []
        fb = LoadingFeedback(scheduler, progress.append, messages.append, rng=random.Random(1))
        return fb, progress, messages

    def test_progress_never_reaches_100(self, scheduler):
        fb, progress, _ = self._make(scheduler)
        fb.arm()
        scheduler.advance(PROGRESS_INTERVAL_MS * 50)
        assert progress[-1] == PROGRESS_CEILING
        assert all(5 <= b - a < 15 for a, b in zip([0.0] + progress[:-1], progress[:-1]))
        assert max(progress) <= PROGRESS_CEILING

    def test_messages_cycle(self, scheduler):
        fb, _, messages = self._make(scheduler)
        fb.arm()
        assert fb.message == LOADING_MESSAGES[0]
        scheduler.advance(MESSAGE_INTERVAL_MS * len(LOADING_MESSAGES))
        assert messages == list(LOADING_MESSAGES[1:]) + [LOADING_MESSAGES[0]]

    def test_disarm_cancels_both(self, scheduler):
        fb, progress, messages = self._make(scheduler)
        fb.arm()
        assert fb.armed
        fb.disarm()
        assert not fb.armed
        assert scheduler.pending == 0
        scheduler.advance(10_000)
        assert progress == [] and messages == []

    def test_rearm_restarts_from_zero(self, scheduler):
        fb, _, _ = self._make(scheduler)
        fb.arm()
        scheduler.advance(PROGRESS_INTERVAL_MS * 3)
        assert fb.progress > 0
        fb.arm()
        assert fb.progress == 0.0
        assert scheduler.pending == 2
