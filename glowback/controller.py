# glowback/controller.py
from __future__ import annotations
import logging
import random
from dataclasses import replace
from typing import Any, Callable, List, Optional

from glowback.errors import EncodingError, GlowBackError, RemoteServiceError, ValidationError
from glowback.model import AppState, Error, ImageSelected, Initial, Loading, Model, Restored
from glowback.services.encoder import detect_mime, encode_file, read_file
from glowback.services.gemini import RestorationService
from glowback.services.history import HistoryEntry
from glowback.services.io import ImageRef, SelectedFile, restored_filename, save_bytes
from glowback.services.ticker import LOADING_MESSAGES, LoadingFeedback, Scheduler

logger = logging.getLogger(__name__)

DISPLAY_DELAY_MS = 500
INVALID_FILE_MESSAGE = "Please select a valid image file."
NO_IMAGE_MESSAGE = "The AI model did not return an image. Please try again."
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."

# (work, on_done, on_error) -> None; колбэки должны прийти в потоке Tk
BackgroundRun = Callable[[Callable[[], Any], Callable[[Any], None], Callable[[BaseException], None]], None]


class Controller:
    """Единственное место, где меняется состояние приложения.

    Все переходы идут через _set_state: вход в Loading взводит таймеры
    прогресса, любой выход из него их снимает.
    """
    def __init__(self, model: Model, service: RestorationService, scheduler: Scheduler,
                 run_in_background: BackgroundRun, *, rng: random.Random | None = None):
        self.m = model
        self._service = service
        self._scheduler = scheduler
        self._run = run_in_background
        self._listeners: List[Callable[[AppState], None]] = []
        self._feedback = LoadingFeedback(scheduler, self._on_progress, self._on_message, rng=rng)
        self._display_after: Optional[str] = None

    # ---- подписка ----
    def subscribe(self, cb: Callable[[AppState], None]) -> None:
        self._listeners.append(cb)

    @property
    def state(self) -> AppState:
        return self.m.state

    @property
    def loading_armed(self) -> bool:
        return self._feedback.armed

    def _set_state(self, new: AppState) -> None:
        old = self.m.state
        same_job = isinstance(old, Loading) and isinstance(new, Loading) and old.job_id == new.job_id
        if isinstance(old, Loading) and not same_job:
            self._leave_loading()
        self.m.state = new
        if isinstance(new, Loading) and not same_job:
            self._feedback.arm()
        if type(old) is not type(new):
            logger.debug("State %s -> %s", old.name, new.name)
        for cb in list(self._listeners):
            cb(new)

    def _leave_loading(self) -> None:
        self._feedback.disarm()
        if self._display_after is not None:
            self._scheduler.after_cancel(self._display_after)
            self._display_after = None

    def _is_active(self, job_id: int) -> bool:
        st = self.m.state
        return isinstance(st, Loading) and st.job_id == job_id

    # ---- выбор файла ----
    @staticmethod
    def _validate(f: SelectedFile) -> SelectedFile:
        mime = f.mime_type or detect_mime(f.data) or ""
        if not mime.startswith("image/"):
            raise ValidationError(INVALID_FILE_MESSAGE)
        return replace(f, mime_type=mime)

    def select_file(self, f: SelectedFile) -> bool:
        try:
            f = self._validate(f)
        except ValidationError as e:
            logger.info("Rejected %s (type %r)", f.name, f.mime_type)
            self._set_state(Error(str(e)))
            return False
        self._set_state(ImageSelected(file=f, original=ImageRef.from_file(f)))
        return True

    def open_path(self, path: str) -> bool:
        try:
            f = read_file(path)
        except EncodingError as e:
            self._set_state(Error(str(e)))
            return False
        return self.select_file(f)

    # ---- восстановление ----
    def restore(self) -> bool:
        st = self.m.state
        if not isinstance(st, ImageSelected):
            return False
        self.m.last_job_id += 1
        job_id = self.m.last_job_id
        self._set_state(Loading(file=st.file, original=st.original, job_id=job_id,
                                progress=0.0, message=LOADING_MESSAGES[0]))
        try:
            payload = encode_file(st.file)
        except Exception as e:
            self._fail(job_id, e)
            return True
        self._run(
            lambda: self._service.restore(payload.base64, payload.mime_type),
            lambda result: self._finish(job_id, result),
            lambda exc: self._fail(job_id, exc),
        )
        return True

    def _on_progress(self, value: float) -> None:
        st = self.m.state
        if isinstance(st, Loading):
            self._set_state(replace(st, progress=value))

    def _on_message(self, text: str) -> None:
        st = self.m.state
        if isinstance(st, Loading):
            self._set_state(replace(st, message=text))

    def _finish(self, job_id: int, result: Optional[bytes]) -> None:
        if not self._is_active(job_id):
            logger.debug("Discarding result of stale job %s", job_id)
            return
        if not result:
            self._fail(job_id, RemoteServiceError(NO_IMAGE_MESSAGE))
            return
        self._feedback.disarm()
        st = self.m.state
        self._set_state(replace(st, progress=100.0))
        restored = ImageRef(bytes(result), "image/png")
        self._display_after = self._scheduler.after(
            DISPLAY_DELAY_MS, lambda: self._promote(job_id, restored))

    def _promote(self, job_id: int, restored: ImageRef) -> None:
        self._display_after = None
        if not self._is_active(job_id):
            return
        st = self.m.state
        entry = HistoryEntry(
            id=self.m.history.next_id(),
            original=st.original,
            restored=restored,
            original_file_name=st.file.name,
        )
        self.m.history.append(entry)
        self._set_state(Restored(original=st.original, restored=restored, file_name=st.file.name))

    def _fail(self, job_id: int, exc: BaseException) -> None:
        if not self._is_active(job_id):
            logger.debug("Ignoring failure from stale job %s: %s", job_id, exc)
            return
        if not isinstance(exc, GlowBackError):
            logger.error("Restoration failed: %s", exc, exc_info=exc)
        message = str(exc) or UNKNOWN_ERROR_MESSAGE
        st = self.m.state
        self._set_state(Error(f"Failed to restore image. {message}", original=st.original))

    # ---- прочее ----
    def reset(self) -> None:
        self._set_state(Initial())

    def select_history(self, entry_id: int) -> bool:
        entry = self.m.history.select(entry_id)
        if entry is None:
            return False
        self._set_state(Restored(original=entry.original, restored=entry.restored,
                                 file_name=entry.original_file_name))
        return True

    def _restored_for(self, entry_id: Optional[int]) -> tuple[Optional[ImageRef], Optional[str]]:
        if entry_id is not None:
            entry = self.m.history.select(entry_id)
            return (entry.restored, entry.original_file_name) if entry else (None, None)
        st = self.m.state
        if isinstance(st, Restored):
            return st.restored, st.file_name
        return None, None

    def suggested_download_name(self, entry_id: Optional[int] = None) -> str:
        _, name = self._restored_for(entry_id)
        return restored_filename(name)

    def can_download(self, entry_id: Optional[int] = None) -> bool:
        return self._restored_for(entry_id)[0] is not None

    def download(self, path: str, entry_id: Optional[int] = None) -> bool:
        ref, _ = self._restored_for(entry_id)
        if ref is None:
            return False
        save_bytes(path, ref)
        logger.info("Saved restored image to %s", path)
        return True

    def shutdown(self) -> None:
        """Снять таймеры и забыть историю перед закрытием окна."""
        if isinstance(self.m.state, Loading):
            self._leave_loading()
        self.m.history.clear()
