# glowback/services/worker.py
from __future__ import annotations
import logging
import queue
import threading
from typing import Any, Callable

from glowback.services.ticker import Scheduler

logger = logging.getLogger(__name__)

POLL_MS = 50


class BackgroundRunner:
    """Выполняет блокирующую работу в потоке-демоне, а колбэки зовёт в потоке Tk.

    Поток кладёт итог в очередь; Tk-поток забирает его опросом через after().
    """
    def __init__(self, scheduler: Scheduler, poll_ms: int = POLL_MS):
        self._scheduler = scheduler
        self._poll_ms = poll_ms
        self._results: "queue.Queue[tuple[Callable[..., None], Any]]" = queue.Queue()
        self._after_id = None
        self._pending = 0

    def __call__(self, work: Callable[[], Any], on_done: Callable[[Any], None],
                 on_error: Callable[[BaseException], None]) -> None:
        def run():
            try:
                result = work()
            except Exception as e:
                self._results.put((on_error, e))
            else:
                self._results.put((on_done, result))

        self._pending += 1
        threading.Thread(target=run, name="glowback-worker", daemon=True).start()
        if self._after_id is None:
            self._after_id = self._scheduler.after(self._poll_ms, self._poll)

    def _poll(self) -> None:
        self._after_id = None
        while True:
            try:
                cb, value = self._results.get_nowait()
            except queue.Empty:
                break
            self._pending -= 1
            cb(value)
        if self._pending > 0:
            self._after_id = self._scheduler.after(self._poll_ms, self._poll)
