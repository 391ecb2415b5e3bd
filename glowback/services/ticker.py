# glowback/services/ticker.py
from __future__ import annotations
import random
from typing import Callable, Optional, Protocol, Sequence

PROGRESS_INTERVAL_MS = 800
MESSAGE_INTERVAL_MS = 2500
PROGRESS_CEILING = 95.0

LOADING_MESSAGES: Sequence[str] = (
    "AI is working its magic...",
    "Analyzing pixels...",
    "Restoring faded colors...",
    "Mending digital tears...",
    "Enhancing fine details...",
    "Almost there, polishing the final image!",
)


class Scheduler(Protocol):
    """То, что умеет tk.Misc: after/after_cancel."""
    def after(self, ms: int, func: Callable[[], None]) -> str: ...
    def after_cancel(self, id: str) -> None: ...


class PeriodicTask:
    """Повторяет fn каждые interval_ms, пока fn не вернёт False или не вызван stop()."""
    def __init__(self, scheduler: Scheduler, interval_ms: int, fn: Callable[[], Optional[bool]]):
        self._scheduler = scheduler
        self.interval_ms = int(interval_ms)
        self._fn = fn
        self._after_id: Optional[str] = None

    @property
    def active(self) -> bool:
        return self._after_id is not None

    def start(self) -> None:
        if self._after_id is None:
            self._after_id = self._scheduler.after(self.interval_ms, self._tick)

    def stop(self) -> None:
        if self._after_id is not None:
            self._scheduler.after_cancel(self._after_id)
            self._after_id = None

    def _tick(self) -> None:
        self._after_id = None
        if self._fn() is False:
            return
        self._after_id = self._scheduler.after(self.interval_ms, self._tick)


class LoadingFeedback:
    """Имитация прогресса и смена подписей на время запроса.

    arm() запускает обе задачи, disarm() гарантированно снимает обе.
    """
    def __init__(self, scheduler: Scheduler, on_progress: Callable[[float], None],
                 on_message: Callable[[str], None], *, rng: random.Random | None = None,
                 messages: Sequence[str] = LOADING_MESSAGES):
        self._on_progress = on_progress
        self._on_message = on_message
        self._rng = rng or random.Random()
        self.messages = tuple(messages)
        self.progress = 0.0
        self._msg_index = 0
        self._progress_task = PeriodicTask(scheduler, PROGRESS_INTERVAL_MS, self._tick_progress)
        self._message_task = PeriodicTask(scheduler, MESSAGE_INTERVAL_MS, self._tick_message)

    @property
    def armed(self) -> bool:
        return self._progress_task.active or self._message_task.active

    @property
    def message(self) -> str:
        return self.messages[self._msg_index]

    def arm(self) -> None:
        self.disarm()
        self.progress = 0.0
        self._msg_index = 0
        self._progress_task.start()
        self._message_task.start()

    def disarm(self) -> None:
        self._progress_task.stop()
        self._message_task.stop()

    def _tick_progress(self) -> bool:
        if self.progress >= PROGRESS_CEILING:
            self.progress = PROGRESS_CEILING
            return False
        increment = self._rng.random() * 10 + 5
        self.progress = min(self.progress + increment, PROGRESS_CEILING)
        self._on_progress(self.progress)
        return True

    def _tick_message(self) -> bool:
        self._msg_index = (self._msg_index + 1) % len(self.messages)
        self._on_message(self.message)
        return True
