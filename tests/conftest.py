import io
import random
import struct
import zlib

import pytest
from PIL import Image

from glowback.controller import Controller
from glowback.model import Model
from glowback.services.history import RestorationHistory
from glowback.services.io import SelectedFile


class FakeScheduler:
    """Виртуальное время вместо tk.after: задачи выполняются в advance()."""
    def __init__(self):
        self.now = 0
        self._seq = 0
        self._jobs = {}

    def after(self, ms, func):
        self._seq += 1
        job_id = f"after#{self._seq}"
        self._jobs[job_id] = (self.now + int(ms), self._seq, func)
        return job_id

    def after_cancel(self, job_id):
        self._jobs.pop(job_id, None)

    @property
    def pending(self):
        return len(self._jobs)

    def advance(self, ms):
        target = self.now + ms
        while True:
            due = [(t, seq, jid) for jid, (t, seq, _f) in self._jobs.items() if t <= target]
            if not due:
                break
            t, _seq, jid = min(due)
            _t, _s, func = self._jobs.pop(jid)
            self.now = t
            func()
        self.now = target


class ManualRunner:
    """Фоновый запуск, который тест завершает сам через resolve()."""
    def __init__(self):
        self.calls = []

    def __call__(self, work, on_done, on_error):
        self.calls.append((work, on_done, on_error))

    def resolve(self, index=-1):
        work, on_done, on_error = self.calls[index]
        try:
            result = work()
        except Exception as e:
            on_error(e)
        else:
            on_done(result)


class FakeService:
    def __init__(self, result=None, exc=None):
        self.result = result
        self.exc = exc
        self.calls = []

    def restore(self, base64_data, mime_type):
        self.calls.append((base64_data, mime_type))
        if self.exc is not None:
            raise self.exc
        return self.result


def make_png(size=(8, 6), color=(200, 50, 50)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


def make_oversized_png_header(width=20000, height=20000) -> bytes:
    """Только сигнатура и IHDR: Pillow откроет заголовок и сочтёт его бомбой."""
    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    chunk = b"IHDR" + ihdr
    return (b"\x89PNG\r\n\x1a\n" + struct.pack(">I", len(ihdr)) + chunk
            + struct.pack(">I", zlib.crc32(chunk) & 0xFFFFFFFF))


@pytest.fixture
def png_bytes():
    return make_png()


@pytest.fixture
def photo(png_bytes):
    return SelectedFile(name="photo.jpg", mime_type="image/jpeg", data=png_bytes)


@pytest.fixture
def notes():
    return SelectedFile(name="notes.txt", mime_type="text/plain", data=b"shopping list")


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def runner():
    return ManualRunner()


@pytest.fixture
def service():
    return FakeService(result=make_png(color=(10, 200, 10)))


@pytest.fixture
def make_controller(scheduler, runner):
    def _make(service, history_size=5):
        model = Model(history=RestorationHistory(maxlen=history_size))
        return Controller(model, service, scheduler, runner, rng=random.Random(0))
    return _make
